import json

import pytest
import responses

from flarekit.client import APIError, Response, RetryPolicy, new
from flarekit.custom_hostname import (
    CustomHostname,
    CustomHostnameResponse,
    CustomHostnames,
    CustomHostnameSSL,
    CustomHostnameSSLSettings,
)

BASE = "https://api.example.com/client/v4"


@pytest.fixture
def hostnames():
    api = new(
        "placeholder",
        "user@example.com",
        base_url=BASE,
        rate_limit=100000,
        retry_policy=RetryPolicy(max_retries=0, min_retry_delay=0, max_retry_delay=0),
    )
    return CustomHostnames(api)


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_delete_custom_hostname(hostnames, mocked):
    mocked.add(responses.DELETE, BASE + "/zones/foo/custom_hostnames/bar", body='{"id": "bar"}')
    result = hostnames.delete("foo", "bar")
    assert result is None
    assert mocked.calls[0].request.method == "DELETE"
    assert mocked.calls[0].request.url == BASE + "/zones/foo/custom_hostnames/bar"


def test_create_custom_hostname(hostnames, mocked):
    mocked.add(
        responses.POST,
        BASE + "/zones/foo/custom_hostnames",
        status=201,
        json={
            "success": True,
            "errors": [],
            "messages": [],
            "result": {
                "id": "0d89c70d-ad9f-4843-b99f-6cc0252067e9",
                "hostname": "app.example.com",
                "ssl": {
                    "status": "pending_validation",
                    "method": "cname",
                    "type": "dv",
                    "cname_target": "dcv.digicert.com",
                    "cname": "810b7d5f01154524b961ba0cd578acc2.app.example.com",
                    "settings": {"http2": "on"},
                },
            },
        },
    )
    response = hostnames.create(
        "foo",
        CustomHostname(hostname="app.example.com", ssl=CustomHostnameSSL(method="cname", type="dv")),
    )
    want = CustomHostnameResponse(
        result=CustomHostname(
            id="0d89c70d-ad9f-4843-b99f-6cc0252067e9",
            hostname="app.example.com",
            ssl=CustomHostnameSSL(
                type="dv",
                method="cname",
                status="pending_validation",
                cname_target="dcv.digicert.com",
                cname_name="810b7d5f01154524b961ba0cd578acc2.app.example.com",
                settings=CustomHostnameSSLSettings(http2="on"),
            ),
        ),
        response=Response(success=True, errors=[], messages=[]),
    )
    assert response == want
    sent = json.loads(mocked.calls[0].request.body)
    assert sent == {
        "hostname": "app.example.com",
        "ssl": {"method": "cname", "type": "dv", "settings": {}},
    }


def test_custom_hostnames_list(hostnames, mocked):
    mocked.add(
        responses.GET,
        BASE + "/zones/foo/custom_hostnames",
        json={
            "success": True,
            "result": [
                {
                    "id": "custom_host_1",
                    "hostname": "custom.host.one",
                    "ssl": {
                        "type": "dv",
                        "method": "cname",
                        "status": "pending_validation",
                        "cname_target": "dcv.digicert.com",
                        "cname": "810b7d5f01154524b961ba0cd578acc2.app.example.com",
                    },
                    "custom_metadata": {"a_random_field": "random field value"},
                }
            ],
            "result_info": {"page": 1, "per_page": 20, "count": 5, "total_count": 5},
        },
    )
    found, info = hostnames.list("foo", 1, CustomHostname())
    want = [
        CustomHostname(
            id="custom_host_1",
            hostname="custom.host.one",
            ssl=CustomHostnameSSL(
                type="dv",
                method="cname",
                status="pending_validation",
                cname_target="dcv.digicert.com",
                cname_name="810b7d5f01154524b961ba0cd578acc2.app.example.com",
            ),
            custom_metadata={"a_random_field": "random field value"},
        )
    ]
    assert found == want
    assert info.total == 5
    assert info.count == 5


def test_list_query_string(hostnames, mocked):
    mocked.add(
        responses.GET,
        BASE + "/zones/foo/custom_hostnames",
        json={"success": True, "result": []},
    )
    found, _ = hostnames.list("foo", 3, CustomHostname(hostname="a.example.com"))
    assert found == []
    assert mocked.calls[0].request.url.endswith(
        "/zones/foo/custom_hostnames?hostname=a.example.com&page=3&per_page=50"
    )


def test_custom_hostname_get(hostnames, mocked):
    mocked.add(
        responses.GET,
        BASE + "/zones/foo/custom_hostnames/bar",
        json={
            "success": True,
            "result": {
                "id": "bar",
                "hostname": "foo.bar.com",
                "ssl": {
                    "type": "dv",
                    "method": "http",
                    "status": "active",
                    "settings": {
                        "ciphers": ["ECDHE-RSA-AES128-GCM-SHA256", "AES128-SHA"],
                        "http2": "on",
                        "min_tls_version": "1.2",
                    },
                },
                "custom_metadata": {"origin": "a.custom.origin"},
            },
        },
    )
    hostname = hostnames.get("foo", "bar")
    want = CustomHostname(
        id="bar",
        hostname="foo.bar.com",
        ssl=CustomHostnameSSL(
            status="active",
            method="http",
            type="dv",
            settings=CustomHostnameSSLSettings(
                http2="on",
                min_tls_version="1.2",
                ciphers=["ECDHE-RSA-AES128-GCM-SHA256", "AES128-SHA"],
            ),
        ),
        custom_metadata={"origin": "a.custom.origin"},
    )
    assert hostname == want


def test_id_by_name_found(hostnames, mocked):
    mocked.add(
        responses.GET,
        BASE + "/zones/foo/custom_hostnames",
        json={
            "success": True,
            "result": [
                {"id": "other", "hostname": "other.example.com"},
                {"id": "wanted", "hostname": "app.example.com"},
            ],
        },
    )
    assert hostnames.id_by_name("foo", "app.example.com") == "wanted"


def test_id_by_name_missing(hostnames, mocked):
    mocked.add(
        responses.GET,
        BASE + "/zones/foo/custom_hostnames",
        json={"success": True, "result": []},
    )
    with pytest.raises(LookupError, match="CustomHostname could not be found"):
        hostnames.id_by_name("foo", "app.example.com")


def test_id_by_name_wraps_request_error(hostnames, mocked):
    mocked.add(responses.GET, BASE + "/zones/foo/custom_hostnames", status=404, body="nope")
    with pytest.raises(APIError, match="CustomHostnames command failed"):
        hostnames.id_by_name("foo", "app.example.com")


def test_to_dict_round_trip():
    original = CustomHostname(
        id="x",
        hostname="h.example.com",
        ssl=CustomHostnameSSL(
            method="http",
            type="dv",
            settings=CustomHostnameSSLSettings(tls13="on", ciphers=["AES128-SHA"]),
        ),
        custom_metadata={"k": "v"},
    )
    assert CustomHostname.from_dict(original.to_dict()) == original