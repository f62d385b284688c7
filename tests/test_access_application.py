import json
import math
from datetime import datetime, timezone

import pytest
import responses

from flarekit.access_application import AccessApplication, AccessApplications
from flarekit.client import APIError, PaginationOptions, RetryPolicy, new

BASE = "http://api.example.com/client/v4"
ZONE = "01a7362d577a6c3019a474fd6f485823"
APP_ID = "480f4f69-1a28-4fdd-9240-1ed29f0ac1db"
AUD = "737646a56ab1df6ec9bddc7e5ca84eaf3b0768850f3ffb5d74f1534911fe3893"
STAMP = datetime(2014, 1, 1, 5, 20, 0, 123450, tzinfo=timezone.utc)

APP_JSON = {
    "id": APP_ID,
    "created_at": "2014-01-01T05:20:00.12345Z",
    "updated_at": "2014-01-01T05:20:00.12345Z",
    "aud": AUD,
    "name": "Admin Site",
    "domain": "test.example.com/admin",
    "session_duration": "24h",
}

FULL_APP = AccessApplication(
    id=APP_ID,
    created_at=STAMP,
    updated_at=STAMP,
    aud=AUD,
    name="Admin Site",
    domain="test.example.com/admin",
    session_duration="24h",
)


@pytest.fixture
def mock():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def apps():
    api = new(
        "placeholder",
        "user@example.com",
        base_url=BASE,
        rate_limit=math.inf,
        retry_policy=RetryPolicy(0, 0, 0),
    )
    return AccessApplications(api)


def envelope(result, **extra):
    body = {"success": True, "errors": [], "messages": [], "result": result}
    body.update(extra)
    return body


def test_list(mock, apps):
    mock.add(
        responses.GET,
        f"{BASE}/zones/{ZONE}/access/apps",
        json=envelope(
            [APP_JSON],
            result_info={"page": 1, "per_page": 20, "count": 1, "total_count": 2000},
        ),
    )
    actual, info = apps.list(ZONE, PaginationOptions())
    assert actual == [FULL_APP]
    assert info.total == 2000
    assert info.per_page == 20


def test_list_sends_pagination(mock, apps):
    mock.add(responses.GET, f"{BASE}/zones/{ZONE}/access/apps", json=envelope([]))
    actual, _ = apps.list(ZONE, PaginationOptions(page=2, per_page=20))
    assert actual == []
    assert mock.calls[0].request.url.endswith("?page=2&per_page=20")


def test_get(mock, apps):
    mock.add(
        responses.GET, f"{BASE}/zones/{ZONE}/access/apps/{APP_ID}", json=envelope(APP_JSON)
    )
    assert apps.get(ZONE, APP_ID) == FULL_APP


def test_create(mock, apps):
    mock.add(responses.POST, f"{BASE}/zones/{ZONE}/access/apps", json=envelope(APP_JSON))
    actual = apps.create(
        ZONE,
        AccessApplication(
            name="Admin Site", domain="test.example.com/admin", session_duration="24h"
        ),
    )
    assert actual == FULL_APP
    sent = json.loads(mock.calls[0].request.body)
    assert sent == {
        "name": "Admin Site",
        "domain": "test.example.com/admin",
        "session_duration": "24h",
    }


def test_update(mock, apps):
    mock.add(
        responses.PUT, f"{BASE}/zones/{ZONE}/access/apps/{APP_ID}", json=envelope(APP_JSON)
    )
    assert apps.update(ZONE, FULL_APP) == FULL_APP
    sent = json.loads(mock.calls[0].request.body)
    assert sent["created_at"] == "2014-01-01T05:20:00.12345Z"
    assert sent["id"] == APP_ID


def test_update_with_missing_id(apps):
    with pytest.raises(ValueError, match="access application ID cannot be empty"):
        apps.update("d56084adb405e0b7e32c52321bf07be6", AccessApplication())


def test_delete(mock, apps):
    mock.add(
        responses.DELETE,
        f"{BASE}/zones/{ZONE}/access/apps/{APP_ID}",
        json=envelope({"id": "699d98642c564d2e855e9661899b7252"}),
    )
    assert apps.delete(ZONE, APP_ID) is None
    assert len(mock.calls) == 1
    assert mock.calls[0].request.method == "DELETE"


def test_revoke_tokens(mock, apps):
    mock.add(
        responses.POST,
        f"{BASE}/zones/{ZONE}/access/apps/{APP_ID}/revoke-tokens",
        json={"success": True, "errors": [], "messages": []},
    )
    assert apps.revoke_tokens(ZONE, APP_ID) is None
    assert len(mock.calls) == 1
    assert mock.calls[0].request.body is None


def test_bad_json_raises(mock, apps):
    mock.add(responses.GET, f"{BASE}/zones/{ZONE}/access/apps/{APP_ID}", body="not json")
    with pytest.raises(APIError, match="unmarshalling"):
        apps.get(ZONE, APP_ID)


def test_round_trip():
    assert AccessApplication.from_dict(FULL_APP.to_dict()) == FULL_APP


def test_to_dict_omits_empty_optional_fields():
    assert AccessApplication(name="n", domain="d").to_dict() == {"name": "n", "domain": "d"}