"""
Tests for the generic viewset without the users specialization: default
operations, storage faults, lifecycle hooks, actions and operation overrides.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.config.constants import Messages
from shared.infrastructure.db import get_db
from shared.utils.exceptions import ForbiddenError
from shared.utils.schemas import UserCreate, UserOutput, UserUpdate
from rest_api.core.errors import register_exception_handlers
from rest_api.core.middlewares import register_middlewares
from rest_api.models import User
from rest_api.routers._common.response import success
from rest_api.routers.users import USER
from rest_api.services.crud import (
    Action,
    EntityDescriptor,
    GenericViewSet,
    ViewSetHooks,
    ViewSetOperations,
)

PREFIX = "/items"


class RecordingHooks(ViewSetHooks):
    """Collects hook calls as (hook, entity id or name)."""

    def __init__(self):
        self.calls = []

    def perform_create(self, ctx, instance):
        self.calls.append(("create", instance.name))
        instance.phone = "000"

    def perform_update(self, ctx, instance):
        self.calls.append(("update", instance.id))

    def perform_destroy(self, ctx, instance):
        self.calls.append(("destroy", instance.id))


@pytest.fixture
def make_client(override_db):
    """Build a TestClient around a bare app mounting the given viewset."""
    clients = []

    def _make_client(viewset):
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(viewset.build_router(PREFIX, tags=["items"]))
        app.dependency_overrides[get_db] = override_db
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make_client

    for test_client in clients:
        test_client.close()


class TestGenericOperations:

    def test_create_without_precheck_surfaces_storage_error(self, make_client):
        client = make_client(GenericViewSet(USER))
        first = client.post(f"{PREFIX}/", json={"name": "A", "email": "same@x.com"})
        assert first.status_code == 200
        assert first.json()["data"]["status"] == "inactive"

        second = client.post(f"{PREFIX}/", json={"name": "B", "email": "same@x.com"})
        assert second.status_code == 500
        assert second.json()["code"] == 500

        # The session was rolled back and is usable again
        assert client.get(f"{PREFIX}/").json()["pagination"]["total"] == 1

    def test_storage_error_detail_omits_sql_and_values(self, make_client, monkeypatch):
        from shared.config.settings import settings

        monkeypatch.setattr(settings, "debug", True)
        client = make_client(GenericViewSet(USER))
        client.post(f"{PREFIX}/", json={"name": "A", "email": "leak@x.com"})
        body = client.post(f"{PREFIX}/", json={"name": "B", "email": "leak@x.com"}).json()
        assert body["code"] == 500
        assert body["msg"] == "Create User failed: IntegrityError"
        assert "leak@x.com" not in body["msg"]
        assert "INSERT" not in body["msg"]

    def test_crud_cycle(self, make_client):
        client = make_client(GenericViewSet(USER))
        created = client.post(f"{PREFIX}/", json={"name": "A", "email": "a@x.com", "age": 3}).json()["data"]

        updated = client.put(f"{PREFIX}/{created['id']}", json={"name": "B"}).json()["data"]
        assert updated["name"] == "B"
        assert updated["age"] == 3

        assert client.delete(f"{PREFIX}/{created['id']}").status_code == 200
        assert client.get(f"{PREFIX}/{created['id']}").status_code == 404

    def test_keyword_is_a_plain_filter_without_specialization(self, make_client, make_user):
        make_user()
        client = make_client(GenericViewSet(USER))
        assert client.get(f"{PREFIX}/", params={"keyword": "x"}).status_code == 400

    def test_permissive_filters(self, make_client, make_user):
        make_user(status="active")
        make_user(status="inactive")
        client = make_client(GenericViewSet(USER, strict_filter_fields=False))

        body = client.get(f"{PREFIX}/", params={"nickname": "x", "status": "active"}).json()
        assert body["code"] == 0
        assert body["pagination"]["total"] == 1

        body = client.get(f"{PREFIX}/", params={"order_by": "nickname"}).json()
        assert body["pagination"]["total"] == 2


class TestSearchFields:

    def test_search_parameter(self, make_client, make_user):
        make_user(name="Alice", email="alice@x.com")
        make_user(name="Bruno", email="bruno@y.org")
        descriptor = EntityDescriptor(
            model=User,
            create_schema=UserCreate,
            update_schema=UserUpdate,
            output_schema=UserOutput,
            search_fields=("name", "email"),
        )
        client = make_client(GenericViewSet(descriptor))

        body = client.get(f"{PREFIX}/", params={"search": "y.org"}).json()
        assert [u["name"] for u in body["data"]] == ["Bruno"]
        assert body["pagination"]["total"] == 1

    def test_search_is_a_filter_without_search_fields(self, make_client, make_user):
        make_user()
        client = make_client(GenericViewSet(USER))
        assert client.get(f"{PREFIX}/", params={"search": "x"}).status_code == 400


class TestHooks:

    def test_hooks_run_before_each_write(self, make_client):
        hooks = RecordingHooks()
        client = make_client(GenericViewSet(USER, hooks=hooks))

        created = client.post(f"{PREFIX}/", json={"name": "A", "email": "a@x.com"}).json()["data"]
        assert created["phone"] == "000"

        client.put(f"{PREFIX}/{created['id']}", json={"age": 5})
        client.delete(f"{PREFIX}/{created['id']}")

        assert hooks.calls == [
            ("create", "A"),
            ("update", created["id"]),
            ("destroy", created["id"]),
        ]

    def test_hook_can_veto(self, make_client, make_user):
        class NoDelete(ViewSetHooks):
            def perform_destroy(self, ctx, instance):
                raise ForbiddenError("delete users")

        user = make_user()
        client = make_client(GenericViewSet(USER, hooks=NoDelete()))

        response = client.delete(f"{PREFIX}/{user.id}")
        assert response.status_code == 403
        assert response.json() == {"code": 403, "msg": "Not allowed to delete users"}
        assert client.get(f"{PREFIX}/{user.id}").status_code == 200


class TestOverridesAndActions:

    def test_replaced_operation(self, make_client, make_user):
        make_user()

        def list_names(ctx):
            return success([u.name for u in ctx.repo.find_all()])

        client = make_client(GenericViewSet(USER, operations=ViewSetOperations(list=list_names)))
        body = client.get(f"{PREFIX}/").json()
        assert body == {"code": 0, "msg": "success", "data": ["Test User"]}

    def test_unmodified_operations_still_generic(self, make_client, make_user):
        user = make_user()

        def list_names(ctx):
            return success([])

        client = make_client(GenericViewSet(USER, operations=ViewSetOperations(list=list_names)))
        assert client.get(f"{PREFIX}/{user.id}").json()["data"]["id"] == user.id

    def test_action_with_unknown_method_accepts_all(self, make_client, make_user):
        user = make_user()

        def echo(ctx):
            obj = ctx.get_object()
            return success({"id": obj.id, "method": ctx.request.method})

        viewset = GenericViewSet(USER, actions=[Action("ANY", "/{object_id}/echo", echo)])
        client = make_client(viewset)

        for method in ("GET", "POST", "PUT", "DELETE", "PATCH"):
            response = client.request(method, f"{PREFIX}/{user.id}/echo")
            assert response.status_code == 200
            assert response.json()["data"] == {"id": user.id, "method": method}

    def test_static_action_wins_over_object_route(self, make_client):
        def ping(ctx):
            return success({"pong": True})

        viewset = GenericViewSet(USER, actions=[Action("GET", "/ping", ping)])
        client = make_client(viewset)
        assert client.get(f"{PREFIX}/ping").json()["data"] == {"pong": True}

    def test_action_receives_payload(self, make_client):
        def echo_payload(ctx):
            return success(ctx.payload)

        viewset = GenericViewSet(USER, actions=[Action("POST", "/echo", echo_payload)])
        client = make_client(viewset)
        assert client.post(f"{PREFIX}/echo", json={"a": 1}).json()["data"] == {"a": 1}

    def test_route_names(self):
        def ping(ctx):
            return success()

        viewset = GenericViewSet(USER, actions=[Action("GET", "/ping", ping)])
        router = viewset.build_router(PREFIX)
        names = {route.name for route in router.routes}
        assert {"users-list", "users-retrieve", "users-create", "users-update",
                "users-delete"} <= names
        assert "users-ping" in names

    def test_unexpected_action_error_keeps_request_id(self, override_db):
        def explode(ctx):
            raise RuntimeError("boom")

        app = FastAPI()
        register_middlewares(app)
        register_exception_handlers(app)
        viewset = GenericViewSet(USER, actions=[Action("GET", "/explode", explode)])
        app.include_router(viewset.build_router(PREFIX))
        app.dependency_overrides[get_db] = override_db

        with TestClient(app) as client:
            response = client.get(f"{PREFIX}/explode", headers={"X-Request-ID": "req-42"})

        assert response.status_code == 500
        assert response.json() == {"code": 500, "msg": Messages.INTERNAL_ERROR}
        assert response.headers["X-Request-ID"] == "req-42"

    def test_error_responses_documented_with_envelope(self, make_client):
        client = make_client(GenericViewSet(USER))
        schema = client.get("/openapi.json").json()
        retrieve = schema["paths"][f"{PREFIX}/{{object_id}}"]["get"]
        assert {"400", "404", "500"} <= set(retrieve["responses"])
        ref = retrieve["responses"]["404"]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/Envelope")

    def test_get_object_or_404(self, db_session, make_user):
        from shared.utils.exceptions import InvalidIdError, NotFoundError

        user = make_user()
        viewset = GenericViewSet(USER)
        assert viewset.get_object_or_404(db_session, str(user.id)) is user
        with pytest.raises(NotFoundError):
            viewset.get_object_or_404(db_session, "999999")
        with pytest.raises(InvalidIdError):
            viewset.get_object_or_404(db_session, "")
