"""
Email transport backed by Amazon SES.

Sending is synchronous; any delivery failure surfaces as
EmailTransportError so callers can abort the surrounding operation.
"""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.errors import EmailTransportError

logger = logging.getLogger(__name__)


class SesEmailSender:
    """Plain text transactional email through SES."""

    def __init__(self, sender: str, client: Optional[Any] = None):
        """
        Args:
            sender: Verified SES identity used as the From address
            client: Optional boto3 SES client to reuse
        """
        self.sender = sender
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("ses")
        return self._client

    def send(self, to_address: str, subject: str, body_text: str) -> str:
        """
        Send one email.

        Returns:
            The SES message id

        Raises:
            EmailTransportError: If SES rejects the message or is unreachable
        """
        try:
            response = self.client.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [to_address]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body_text, "Charset": "UTF-8"}},
                },
            )
        except ClientError as err:
            logger.error(
                "Couldn't send email from %s. Error: %s: %s",
                self.sender,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise EmailTransportError(
                f"Email delivery failed: {err.response['Error']['Code']}"
            ) from err
        except BotoCoreError as err:
            logger.error("Couldn't reach SES: %s", err)
            raise EmailTransportError("Email delivery failed") from err

        message_id = response["MessageId"]
        logger.info("Email sent", extra={"message_id": message_id})
        return message_id
