"""
Tests for the response envelope helpers.
"""

import json
from datetime import datetime, timezone

import pytest

from shared.utils.schemas import PaginationInfo
from rest_api.routers._common import response


def body(resp):
    return json.loads(resp.body)


class TestSuccess:

    def test_success_with_data(self):
        resp = response.success({"id": 1})
        assert resp.status_code == 200
        assert body(resp) == {"code": 0, "msg": "success", "data": {"id": 1}}

    def test_success_without_data_omits_key(self):
        assert body(response.success()) == {"code": 0, "msg": "success"}

    def test_success_with_pagination(self):
        resp = response.success_with_pagination([], PaginationInfo(page=1, page_size=10, total=0))
        assert body(resp) == {
            "code": 0,
            "msg": "success",
            "data": [],
            "pagination": {"page": 1, "page_size": 10, "total": 0},
        }

    def test_data_is_json_encoded(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert body(response.success({"at": moment}))["data"]["at"].startswith("2024-01-02T03:04:05")

    def test_nested_nulls_are_kept(self):
        assert body(response.success({"phone": None}))["data"] == {"phone": None}


class TestErrors:

    def test_error_uses_http_200(self):
        resp = response.error(500, "boom")
        assert resp.status_code == 200
        assert body(resp) == {"code": 500, "msg": "boom"}

    def test_error_with_status(self):
        resp = response.error_with_status(409, 409, "conflict")
        assert resp.status_code == 409
        assert body(resp) == {"code": 409, "msg": "conflict"}

    @pytest.mark.parametrize("helper,status", [
        (response.bad_request, 400),
        (response.unauthorized, 401),
        (response.forbidden, 403),
        (response.not_found, 404),
        (response.internal_server_error, 500),
    ])
    def test_status_matching_helpers(self, helper, status):
        resp = helper("message")
        assert resp.status_code == status
        assert body(resp) == {"code": status, "msg": "message"}
