#!/usr/bin/env python3
"""
Upload task tracker settings to AWS Parameter Store.

Reads ``TASK_TRACKER_*`` variables from a .env file and stores them under
the configured prefix, using SecureString for secrets. The Lambdas read
them back through services.parameter_store.
"""

import sys
from pathlib import Path

import boto3
import click
from botocore.exceptions import ClientError
from dotenv import dotenv_values

from services.parameter_store import DEFAULT_PREFIX, PARAMETER_KEYS, env_var_name


def load_env_file(env_file_path: str = ".env", prefix: str = DEFAULT_PREFIX) -> dict:
    """
    Collect known settings from a .env file.

    Args:
        env_file_path: Path to .env file
        prefix: Parameter prefix the variable names are derived from

    Returns:
        Dictionary of parameter key to value, only for keys that are set
    """
    if not Path(env_file_path).exists():
        click.secho(f"Error: {env_file_path} file not found", fg="red", err=True)
        sys.exit(1)

    values = dotenv_values(env_file_path)

    parameters = {}
    for key in PARAMETER_KEYS:
        value = values.get(env_var_name(f"{prefix}/{key}"))
        if value:
            parameters[key] = value

    if not parameters:
        click.secho("Warning: No task tracker settings found in .env file", fg="yellow")
        click.echo(f"Expected variables like {env_var_name(f'{prefix}/jwt-secret')}")

    return parameters


def parameter_type(key: str) -> str:
    return "SecureString" if "secret" in key.lower() else "String"


def upload_parameters(
    parameters: dict, parameter_prefix: str = DEFAULT_PREFIX, dry_run: bool = False
) -> int:
    """
    Upload parameters to AWS Parameter Store.

    Returns:
        Number of parameters that failed to upload
    """
    if not parameters:
        click.secho("No parameters to upload", fg="yellow")
        return 0

    if dry_run:
        click.secho("DRY RUN - Would upload the following parameters:", fg="blue")
        for key, value in parameters.items():
            shown = "********" if parameter_type(key) == "SecureString" else value
            click.echo(f"  {parameter_prefix}/{key} = {shown}")
        return 0

    ssm = boto3.client("ssm")
    failures = 0

    for key, value in parameters.items():
        full_name = f"{parameter_prefix}/{key}"
        try:
            response = ssm.put_parameter(
                Name=full_name,
                Value=value,
                Type=parameter_type(key),
                Description=f"Task tracker setting: {key}",
                Overwrite=True,
            )
            click.secho(f"Uploaded {full_name} (version {response['Version']})", fg="green")
        except ClientError as e:
            failures += 1
            click.secho(f"Failed to upload {full_name}: {e}", fg="red", err=True)

    return failures


def verify_parameters(parameters: dict, parameter_prefix: str = DEFAULT_PREFIX) -> bool:
    """Check that every uploaded parameter can be read back."""
    click.secho("\nVerifying uploaded parameters...", fg="blue")
    ssm = boto3.client("ssm")
    ok = True

    for key in parameters:
        full_name = f"{parameter_prefix}/{key}"
        try:
            response = ssm.get_parameter(Name=full_name, WithDecryption=True)
            click.secho(
                f"{full_name} exists (version {response['Parameter']['Version']})",
                fg="green",
            )
        except ClientError as e:
            ok = False
            if e.response["Error"]["Code"] == "ParameterNotFound":
                click.secho(f"{full_name} not found", fg="red")
            else:
                click.secho(f"Error checking {full_name}: {e}", fg="red")

    return ok


@click.command()
@click.option("--env-file", default=".env", help="Path to .env file", show_default=True)
@click.option("--prefix", default=DEFAULT_PREFIX, help="Parameter Store prefix", show_default=True)
@click.option("--dry-run", is_flag=True, help="Show what would be uploaded without uploading")
@click.option("--verify", is_flag=True, help="Verify parameters after upload")
def main(env_file: str, prefix: str, dry_run: bool, verify: bool):
    """Upload task tracker settings from a .env file to AWS Parameter Store."""
    parameters = load_env_file(env_file, prefix)

    if not parameters:
        click.secho("No parameters found to upload", fg="red", err=True)
        sys.exit(1)

    click.secho(f"Found {len(parameters)} settings", fg="green")

    failures = upload_parameters(parameters, prefix, dry_run)
    if failures:
        sys.exit(1)

    if dry_run:
        click.secho("\nDry run complete.", fg="blue")
        return

    if verify and not verify_parameters(parameters, prefix):
        sys.exit(1)

    click.secho("\nParameter upload complete!", fg="green")
    click.echo(f"Parameters are now available at prefix: {prefix}")


if __name__ == "__main__":
    main()
