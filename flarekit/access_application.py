"""Access applications: the sites protected by Access within a zone."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping
from urllib.parse import urlencode

from flarekit.client import (
    API,
    APIError,
    PaginationOptions,
    ResultInfo,
    format_timestamp,
    parse_timestamp,
)


def _decode(body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise APIError(f"error unmarshalling the JSON response: {exc}") from exc
    if not isinstance(data, dict):
        raise APIError("error unmarshalling the JSON response: not a JSON object")
    return data


def _timestamp(value: Any) -> datetime | None:
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise APIError(f"error unmarshalling the JSON response: {exc}") from exc


@dataclass
class AccessApplication:
    """An Access application."""

    id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    aud: str = ""
    name: str = ""
    domain: str = ""
    session_duration: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AccessApplication":
        data = data or {}
        return cls(
            id=data.get("id") or "",
            created_at=_timestamp(data.get("created_at")),
            updated_at=_timestamp(data.get("updated_at")),
            aud=data.get("aud") or "",
            name=data.get("name") or "",
            domain=data.get("domain") or "",
            session_duration=data.get("session_duration") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.created_at is not None:
            out["created_at"] = format_timestamp(self.created_at)
        if self.updated_at is not None:
            out["updated_at"] = format_timestamp(self.updated_at)
        if self.aud:
            out["aud"] = self.aud
        out["name"] = self.name
        out["domain"] = self.domain
        if self.session_duration:
            out["session_duration"] = self.session_duration
        return out


class AccessApplications:
    """Access application endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def list(
        self, zone_id: str, page_opts: PaginationOptions | None = None
    ) -> tuple[list[AccessApplication], ResultInfo]:
        """All applications within a zone."""
        params = (page_opts or PaginationOptions()).to_params()
        uri = f"/zones/{zone_id}/access/apps"
        if params:
            uri += "?" + urlencode(sorted(params.items()))
        data = _decode(self.api.make_request("GET", uri))
        apps = [AccessApplication.from_dict(a) for a in data.get("result") or []]
        return apps, ResultInfo.from_dict(data.get("result_info"))

    def get(self, zone_id: str, application_id: str) -> AccessApplication:
        """A single application by ID."""
        data = _decode(
            self.api.make_request("GET", f"/zones/{zone_id}/access/apps/{application_id}")
        )
        return AccessApplication.from_dict(data.get("result"))

    def create(self, zone_id: str, application: AccessApplication) -> AccessApplication:
        """Create a new application."""
        data = _decode(
            self.api.make_request("POST", f"/zones/{zone_id}/access/apps", application)
        )
        return AccessApplication.from_dict(data.get("result"))

    def update(self, zone_id: str, application: AccessApplication) -> AccessApplication:
        """Update an existing application; its ID must be set."""
        if not application.id:
            raise ValueError("access application ID cannot be empty")
        data = _decode(
            self.api.make_request(
                "PUT", f"/zones/{zone_id}/access/apps/{application.id}", application
            )
        )
        return AccessApplication.from_dict(data.get("result"))

    def delete(self, zone_id: str, application_id: str) -> None:
        """Delete an application."""
        self.api.make_request("DELETE", f"/zones/{zone_id}/access/apps/{application_id}")

    def revoke_tokens(self, zone_id: str, application_id: str) -> None:
        """Revoke the tokens issued for an application."""
        self.api.make_request(
            "POST", f"/zones/{zone_id}/access/apps/{application_id}/revoke-tokens"
        )