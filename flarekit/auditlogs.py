"""Audit logs for users and organizations."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from flarekit.client import API, APIError, Response, ResultInfo, parse_timestamp


@dataclass
class AuditLogAction:
    """The action that was taken."""

    result: bool = False
    type: str = ""


@dataclass
class AuditLogActor:
    """Who performed the action."""

    email: str = ""
    id: str = ""
    ip: str = ""
    type: str = ""


@dataclass
class AuditLogOwner:
    """Who owns the audit log."""

    id: str = ""


@dataclass
class AuditLogResource:
    """What the action was performed on."""

    id: str = ""
    type: str = ""


@dataclass
class AuditLog:
    """A single change recorded in the dashboard."""

    action: AuditLogAction = field(default_factory=AuditLogAction)
    actor: AuditLogActor = field(default_factory=AuditLogActor)
    id: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    new_value: str = ""
    old_value: str = ""
    owner: AuditLogOwner = field(default_factory=AuditLogOwner)
    resource: AuditLogResource = field(default_factory=AuditLogResource)
    when: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AuditLog":
        data = data or {}
        action = data.get("action") or {}
        actor = data.get("actor") or {}
        owner = data.get("owner") or {}
        resource = data.get("resource") or {}
        try:
            when = parse_timestamp(data.get("when"))
        except ValueError as exc:
            raise APIError(f"error unmarshalling the JSON response: {exc}") from exc
        return cls(
            action=AuditLogAction(
                result=bool(action.get("result", False)), type=action.get("type") or ""
            ),
            actor=AuditLogActor(
                email=actor.get("email") or "",
                id=actor.get("id") or "",
                ip=actor.get("ip") or "",
                type=actor.get("type") or "",
            ),
            id=data.get("id") or "",
            metadata=dict(data.get("metadata") or {}),
            new_value=data.get("newValue") or "",
            old_value=data.get("oldValue") or "",
            owner=AuditLogOwner(id=owner.get("id") or ""),
            resource=AuditLogResource(
                id=resource.get("id") or "", type=resource.get("type") or ""
            ),
            when=when,
        )


@dataclass
class AuditLogResponse:
    """A page of audit logs with its envelope and paging data."""

    response: Response = field(default_factory=Response)
    result: list[AuditLog] = field(default_factory=list)
    result_info: ResultInfo = field(default_factory=ResultInfo)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AuditLogResponse":
        data = data or {}
        return cls(
            response=Response.from_dict(data),
            result=[AuditLog.from_dict(entry) for entry in data.get("result") or []],
            result_info=ResultInfo.from_dict(data.get("result_info")),
        )


@dataclass
class AuditLogFilter:
    """Filters for an audit log query; empty members are left out."""

    id: str = ""
    actor_ip: str = ""
    actor_email: str = ""
    direction: str = ""
    zone_name: str = ""
    since: str = ""
    before: str = ""
    per_page: int = 0
    page: int = 0

    def query_string(self) -> str:
        """The filter as a query string beginning with '?'."""
        pairs = [
            ("id", self.id),
            ("actor.ip", self.actor_ip),
            ("actor.email", self.actor_email),
            ("zone.name", self.zone_name),
            ("direction", self.direction),
            ("since", self.since),
            ("before", self.before),
        ]
        params = "?" + "".join(f"&{key}={value}" for key, value in pairs if value)
        if self.per_page > 0:
            params += f"&per_page={self.per_page}"
        if self.page > 0:
            params += f"&page={self.page}"
        return params

    def __str__(self) -> str:
        return self.query_string()


def _unmarshal(body: bytes) -> AuditLogResponse:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise APIError(f"error unmarshalling the JSON response: {exc}") from exc
    if not isinstance(data, dict):
        raise APIError("error unmarshalling the JSON response: not a JSON object")
    return AuditLogResponse.from_dict(data)


def _decode_raw_base64(body: bytes) -> bytes:
    text = body.strip() if False else body
    if b"=" in text:
        raise APIError("illegal base64 data: unexpected padding")
    try:
        return base64.b64decode(text + b"=" * (-len(text) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise APIError(f"illegal base64 data: {exc}") from exc


class AuditLogs:
    """Audit log endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def organization_logs(
        self, organization_id: str, log_filter: AuditLogFilter | None = None
    ) -> AuditLogResponse:
        """Audit logs of an organization; the body arrives base64 encoded without padding."""
        query = (log_filter or AuditLogFilter()).query_string()
        uri = f"/organizations/{organization_id}/audit_logs{query}"
        body = self.api.make_request("GET", uri)
        return _unmarshal(_decode_raw_base64(body))

    def user_logs(self, log_filter: AuditLogFilter | None = None) -> AuditLogResponse:
        """Audit logs of the authenticated user."""
        query = (log_filter or AuditLogFilter()).query_string()
        return _unmarshal(self.api.make_request("GET", "/user/audit_logs" + query))