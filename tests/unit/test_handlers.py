"""
Unit tests for the API Gateway handlers.

Handlers run against moto-backed services through the ``wired_handlers``
fixture; events carry the authorizer context directly.
"""

import base64

import pytest

import main
from handlers import auth, graphql_api, tasks, users

from ..fakes import api_event, lambda_context, response_body

OWNER = "a@x.com"


def _call(handler, **kwargs):
    response = handler(api_event(**kwargs), lambda_context())
    return response["statusCode"], response_body(response)


@pytest.fixture
def create(wired_handlers):
    def _create(note, email=OWNER):
        status, body = _call(tasks.create_task, email=email, body={"note": note}, method="POST")
        assert status == 201
        return body["task"]

    return _create


class TestHealthz:
    def test_healthz(self):
        status, body = _call(main.healthz)

        assert status == 200
        assert body["status"] == "healthy"
        assert body["service"] == "task-tracker-api"


class TestAuthHandlers:
    def test_register_verify_login_logout(self, wired_handlers, mailer):
        status, body = _call(
            auth.register,
            body={"email": "a@x.com", "name": "A", "password": "pw1"},
            method="POST",
        )
        assert status == 201
        assert body["status"] == "pending_verification"

        status, body = _call(auth.verify_email, query={"token": mailer.last_token_for("a@x.com")})
        assert status == 200
        assert body["user"]["isVerified"] is True

        status, body = _call(
            auth.login, body={"email": "a@x.com", "password": "pw1"}, method="POST"
        )
        assert status == 200
        assert body["tokenType"] == "Bearer"
        assert body["accessToken"]

        status, _ = _call(auth.logout, email="a@x.com", method="POST")
        assert status == 200

    def test_register_missing_fields(self, wired_handlers):
        status, body = _call(auth.register, body={"email": "a@x.com"}, method="POST")

        assert status == 400
        assert set(body["details"]["missing_fields"]) == {"name", "password"}

    def test_register_invalid_email(self, wired_handlers):
        status, body = _call(
            auth.register,
            body={"email": "not-an-email", "name": "A", "password": "pw1"},
            method="POST",
        )

        assert status == 400
        assert body["error_code"] == "VALIDATION_ERROR"

    def test_register_verified_email_conflicts(self, wired_handlers, verified_user):
        status, body = _call(
            auth.register,
            body={"email": "a@x.com", "name": "A", "password": "pw2"},
            method="POST",
        )

        assert status == 422
        assert body["success"] is False

    def test_register_transport_failure(self, wired_handlers, mailer):
        mailer.fail = True

        status, _ = _call(
            auth.register,
            body={"email": "a@x.com", "name": "A", "password": "pw1"},
            method="POST",
        )

        assert status == 500

    def test_verify_token_in_body(self, wired_handlers, user_manager, mailer):
        user_manager.register("a@x.com", "A", "pw1")

        status, _ = _call(
            auth.verify_email, body={"token": mailer.last_token_for("a@x.com")}, method="POST"
        )

        assert status == 200

    def test_verify_without_token(self, wired_handlers):
        status, _ = _call(auth.verify_email)

        assert status == 400

    def test_verify_bad_token(self, wired_handlers):
        status, _ = _call(auth.verify_email, query={"token": "garbage"})

        assert status == 401

    def test_login_wrong_password(self, wired_handlers, verified_user):
        status, body = _call(
            auth.login, body={"email": "a@x.com", "password": "wrongpw"}, method="POST"
        )

        assert status == 401
        assert "accessToken" not in body

    def test_login_unverified(self, wired_handlers, user_manager):
        user_manager.register("a@x.com", "A", "pw1")

        status, _ = _call(auth.login, body={"email": "a@x.com", "password": "pw1"}, method="POST")

        assert status == 403

    def test_login_unverified_with_wrong_password(self, wired_handlers, user_manager):
        user_manager.register("a@x.com", "A", "pw1")

        status, body = _call(
            auth.login, body={"email": "a@x.com", "password": "wrongpw"}, method="POST"
        )

        assert status == 403
        assert "accessToken" not in body

    def test_mixed_case_email_domain(self, wired_handlers, mailer):
        status, _ = _call(
            auth.register,
            body={"email": "a@X.com", "name": "A", "password": "pw1"},
            method="POST",
        )
        assert status == 201

        status, _ = _call(auth.verify_email, query={"token": mailer.last_token_for("a@x.com")})
        assert status == 200

        status, body = _call(
            auth.login, body={"email": "a@X.com", "password": "pw1"}, method="POST"
        )
        assert status == 200
        assert body["accessToken"]

    def test_logout_requires_authorizer_context(self, wired_handlers):
        status, body = _call(auth.logout, method="POST")

        assert status == 401
        assert body["error_code"] == "UNAUTHORIZED"


class TestUserHandlers:
    def test_get_current_user(self, wired_handlers, verified_user):
        status, body = _call(users.get_user, email="a@x.com")

        assert status == 200
        assert body["user"]["email"] == "a@x.com"
        assert "password_hash" not in body["user"]

    def test_get_current_user_missing(self, wired_handlers):
        status, _ = _call(users.get_user, email="ghost@x.com")

        assert status == 404


class TestTaskHandlers:
    def test_create_and_get(self, create):
        task = create("buy milk")

        status, body = _call(tasks.get_task, email=OWNER, path_params={"id": task["taskId"]})

        assert status == 200
        assert body["task"]["note"] == "buy milk"
        assert body["task"]["isChecked"] is False

    def test_create_requires_note(self, wired_handlers):
        status, _ = _call(tasks.create_task, email=OWNER, body={}, method="POST")

        assert status == 400

    def test_create_rejects_non_string_note(self, wired_handlers):
        status, _ = _call(tasks.create_task, email=OWNER, body={"note": 5}, method="POST")

        assert status == 400

    def test_create_invalid_json(self, wired_handlers):
        status, body = _call(tasks.create_task, email=OWNER, body="{not json", method="POST")

        assert status == 400
        assert "json_error" in body["details"]

    def test_get_missing_task(self, wired_handlers):
        status, body = _call(tasks.get_task, email=OWNER, path_params={"id": "nope"})

        assert status == 404
        assert body["error_code"] == "RESOURCE_NOT_FOUND"

    def test_get_other_owners_task(self, create):
        task = create("theirs", email="b@x.com")

        status, _ = _call(tasks.get_task, email=OWNER, path_params={"id": task["taskId"]})

        assert status == 404

    def test_list_tasks(self, create):
        create("one")
        create("two")
        create("other", email="b@x.com")

        status, body = _call(tasks.list_tasks, email=OWNER)

        assert status == 200
        assert body["count"] == 2

    def test_update_task(self, create):
        task = create("old")

        status, body = _call(
            tasks.update_task,
            email=OWNER,
            path_params={"id": task["taskId"]},
            body={"isChecked": True},
            method="PUT",
        )

        assert status == 200
        assert body["task"]["isChecked"] is True
        assert body["task"]["note"] == "old"

    def test_update_missing_task(self, wired_handlers, task_repository):
        status, _ = _call(
            tasks.update_task,
            email=OWNER,
            path_params={"id": "nope"},
            body={"note": "x"},
            method="PUT",
        )

        assert status == 404
        assert task_repository.get_by_id(OWNER, "nope") is None

    def test_update_rejects_unknown_fields(self, create):
        task = create("n")

        status, _ = _call(
            tasks.update_task,
            email=OWNER,
            path_params={"id": task["taskId"]},
            body={"owner": "b@x.com"},
            method="PUT",
        )

        assert status == 400

    def test_update_without_changes(self, create):
        task = create("n")

        status, _ = _call(
            tasks.update_task,
            email=OWNER,
            path_params={"id": task["taskId"]},
            body={},
            method="PUT",
        )

        assert status == 400

    def test_delete_is_idempotent(self, create):
        task = create("n")

        for _ in range(2):
            status, body = _call(
                tasks.delete_task, email=OWNER, path_params={"id": task["taskId"]}, method="DELETE"
            )
            assert status == 200
            assert body["taskId"] == task["taskId"]

    def test_search(self, create):
        create("buy milk")
        create("call mom")

        status, body = _call(
            tasks.search_tasks, email=OWNER, query={"isChecked": "false", "note": "milk"}
        )

        assert status == 200
        assert [task["note"] for task in body["tasks"]] == ["buy milk"]

    @pytest.mark.parametrize("query", [None, {"note": "milk"}, {"isChecked": "maybe"}])
    def test_search_requires_checked_flag(self, wired_handlers, query):
        status, _ = _call(tasks.search_tasks, email=OWNER, query=query)

        assert status == 400

    def test_import_text(self, wired_handlers, task_repository):
        status, body = _call(
            tasks.import_tasks,
            email=OWNER,
            body="note one\r\nnote two\r\n",
            headers={"Content-Type": "text/plain; charset=utf-8"},
            method="POST",
        )

        assert status == 201
        assert body["imported"] == 2
        assert len(task_repository.list_all(OWNER)) == 2

    def test_import_base64_body(self, wired_handlers):
        event = api_event(
            email=OWNER,
            body=base64.b64encode(b"a\r\nb").decode(),
            headers={"content-type": "text/plain"},
            method="POST",
        )
        event["isBase64Encoded"] = True

        response = tasks.import_tasks(event, lambda_context())

        assert response["statusCode"] == 201
        assert response_body(response)["imported"] == 2

    def test_import_rejects_json(self, wired_handlers):
        status, body = _call(
            tasks.import_tasks,
            email=OWNER,
            body={"note": "x"},
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        assert status == 400
        assert body["error_code"] == "INVALID_DATA"

    def test_report(self, create):
        first = create("one")
        create("two")
        _call(
            tasks.update_task,
            email=OWNER,
            path_params={"id": first["taskId"]},
            body={"isChecked": True},
            method="PUT",
        )

        status, body = _call(
            tasks.get_report, email=OWNER, path_params={"resource": "tasks", "field": "isChecked"}
        )

        assert status == 200
        assert body["totalCheckedTasks"] == 1
        assert body["totalUncheckedTasks"] == 1

    def test_report_unknown_resource(self, wired_handlers):
        status, _ = _call(
            tasks.get_report, email=OWNER, path_params={"resource": "users", "field": "name"}
        )

        assert status == 400

    def test_task_routes_require_auth(self, wired_handlers):
        status, _ = _call(tasks.list_tasks)

        assert status == 401


class TestGraphQLHandler:
    def test_query_json_body(self, create):
        create("buy milk")

        status, body = _call(
            graphql_api.graphql,
            email=OWNER,
            body={"query": "{ tasks { note } }"},
            method="POST",
        )

        assert status == 200
        assert body["data"] == {"tasks": [{"note": "buy milk"}]}

    def test_raw_query_body(self, wired_handlers):
        status, body = _call(
            graphql_api.graphql,
            email=OWNER,
            body='mutation { createTask(note: "n") { note } }',
            method="POST",
        )

        assert status == 200
        assert body["data"]["createTask"]["note"] == "n"

    def test_resolver_error_uses_its_status(self, wired_handlers):
        status, body = _call(
            graphql_api.graphql,
            email=OWNER,
            body={
                "query": "mutation U($id: String!) { updateTask(taskId: $id, note: \"x\", isChecked: true) { note } }",
                "variables": {"id": "nope"},
            },
            method="POST",
        )

        assert status == 404
        assert body["success"] is False
        assert body["errors"]

    def test_empty_note_is_a_bad_request(self, wired_handlers, task_repository):
        status, body = _call(
            graphql_api.graphql,
            email=OWNER,
            body={"query": 'mutation { createTask(note: "") { taskId } }'},
            method="POST",
        )

        assert status == 400
        assert body["errors"]
        assert task_repository.list_all(OWNER) == []

    def test_invalid_document(self, wired_handlers):
        status, body = _call(
            graphql_api.graphql, email=OWNER, body={"query": "{ nope }"}, method="POST"
        )

        assert status == 400
        assert body["errors"]

    def test_missing_query(self, wired_handlers):
        status, _ = _call(graphql_api.graphql, email=OWNER, body={}, method="POST")

        assert status == 400

    def test_requires_auth(self, wired_handlers):
        status, _ = _call(graphql_api.graphql, body={"query": "{ tasks { note } }"}, method="POST")

        assert status == 401
