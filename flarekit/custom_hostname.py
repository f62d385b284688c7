"""Custom hostnames (SSL for SaaS) within a zone."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlencode

from flarekit.client import API, APIError, Response, ResultInfo


def _decode(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise APIError(f"error unmarshalling the JSON response: {exc}") from exc


def _decode_object(body: bytes) -> dict[str, Any]:
    data = _decode(body)
    if not isinstance(data, dict):
        raise APIError("error unmarshalling the JSON response: not a JSON object")
    return data


@dataclass
class CustomHostnameSSLSettings:
    """SSL settings for a custom hostname."""

    http2: str = ""
    tls13: str = ""
    min_tls_version: str = ""
    ciphers: list[str] = field(default_factory=list)


@dataclass
class CustomHostnameSSL:
    """The SSL section of a custom hostname."""

    status: str = ""
    method: str = ""
    type: str = ""
    cname_target: str = ""
    cname_name: str = ""
    settings: CustomHostnameSSLSettings = field(default_factory=CustomHostnameSSLSettings)


def _settings_from_dict(data: Mapping[str, Any] | None) -> CustomHostnameSSLSettings:
    data = data or {}
    return CustomHostnameSSLSettings(
        http2=data.get("http2") or "",
        tls13=data.get("tls_1_3") or "",
        min_tls_version=data.get("min_tls_version") or "",
        ciphers=list(data.get("ciphers") or []),
    )


def _settings_to_dict(settings: CustomHostnameSSLSettings) -> dict[str, Any]:
    pairs = [
        ("http2", settings.http2),
        ("tls_1_3", settings.tls13),
        ("min_tls_version", settings.min_tls_version),
    ]
    out: dict[str, Any] = {key: value for key, value in pairs if value}
    if settings.ciphers:
        out["ciphers"] = list(settings.ciphers)
    return out


def _ssl_from_dict(data: Mapping[str, Any] | None) -> CustomHostnameSSL:
    data = data or {}
    return CustomHostnameSSL(
        status=data.get("status") or "",
        method=data.get("method") or "",
        type=data.get("type") or "",
        cname_target=data.get("cname_target") or "",
        cname_name=data.get("cname") or "",
        settings=_settings_from_dict(data.get("settings")),
    )


def _ssl_to_dict(ssl: CustomHostnameSSL) -> dict[str, Any]:
    pairs = [
        ("status", ssl.status),
        ("method", ssl.method),
        ("type", ssl.type),
        ("cname_target", ssl.cname_target),
        ("cname", ssl.cname_name),
    ]
    out: dict[str, Any] = {key: value for key, value in pairs if value}
    out["settings"] = _settings_to_dict(ssl.settings)
    return out


@dataclass
class CustomHostname:
    """A custom hostname in a zone."""

    id: str = ""
    hostname: str = ""
    ssl: CustomHostnameSSL = field(default_factory=CustomHostnameSSL)
    custom_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "CustomHostname":
        data = data or {}
        return cls(
            id=data.get("id") or "",
            hostname=data.get("hostname") or "",
            ssl=_ssl_from_dict(data.get("ssl")),
            custom_metadata=dict(data.get("custom_metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.hostname:
            out["hostname"] = self.hostname
        out["ssl"] = _ssl_to_dict(self.ssl)
        if self.custom_metadata:
            out["custom_metadata"] = dict(self.custom_metadata)
        return out


@dataclass
class CustomHostnameResponse:
    """A single custom hostname with the response envelope."""

    result: CustomHostname = field(default_factory=CustomHostname)
    response: Response = field(default_factory=Response)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "CustomHostnameResponse":
        data = data or {}
        return cls(
            result=CustomHostname.from_dict(data.get("result")),
            response=Response.from_dict(data),
        )


class CustomHostnames:
    """Custom hostname endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def delete(self, zone_id: str, custom_hostname_id: str) -> None:
        """Delete a custom hostname and any SSL certificates issued for it."""
        body = self.api.make_request(
            "DELETE", f"/zones/{zone_id}/custom_hostnames/{custom_hostname_id}"
        )
        _decode(body)

    def create(self, zone_id: str, hostname: CustomHostname) -> CustomHostnameResponse:
        """Create a custom hostname and request an SSL certificate for it."""
        data = _decode_object(
            self.api.make_request("POST", f"/zones/{zone_id}/custom_hostnames", hostname)
        )
        return CustomHostnameResponse.from_dict(data)

    def list(
        self,
        zone_id: str,
        page: int = 1,
        hostname_filter: CustomHostname | None = None,
    ) -> tuple[list[CustomHostname], ResultInfo]:
        """One page of 50 custom hostnames, optionally filtered by hostname."""
        params = {"per_page": "50", "page": str(page)}
        if hostname_filter is not None and hostname_filter.hostname:
            params["hostname"] = hostname_filter.hostname
        uri = f"/zones/{zone_id}/custom_hostnames?" + urlencode(sorted(params.items()))
        data = _decode_object(self.api.make_request("GET", uri))
        hostnames = [CustomHostname.from_dict(h) for h in data.get("result") or []]
        return hostnames, ResultInfo.from_dict(data.get("result_info"))

    def get(self, zone_id: str, custom_hostname_id: str) -> CustomHostname:
        """A single custom hostname by ID."""
        data = _decode_object(
            self.api.make_request(
                "GET", f"/zones/{zone_id}/custom_hostnames/{custom_hostname_id}"
            )
        )
        return CustomHostname.from_dict(data.get("result"))

    def id_by_name(self, zone_id: str, hostname: str) -> str:
        """The ID of the custom hostname with the given name."""
        try:
            found, _ = self.list(zone_id, 1, CustomHostname(hostname=hostname))
        except APIError as exc:
            raise APIError(f"CustomHostnames command failed: {exc}", exc.status_code) from exc
        for candidate in found:
            if candidate.hostname == hostname:
                return candidate.id
        raise LookupError("CustomHostname could not be found")