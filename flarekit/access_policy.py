"""Access policies: who may reach an Access application."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
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


def email_rule(email: str) -> dict[str, Any]:
    """Rule matching a single e-mail address."""
    return {"email": {"email": email}}


def email_domain_rule(domain: str) -> dict[str, Any]:
    """Rule matching every address in an e-mail domain."""
    return {"email_domain": {"domain": domain}}


def ip_rule(ip: str) -> dict[str, Any]:
    """Rule matching an IP address or CIDR range."""
    return {"ip": {"ip": ip}}


def everyone_rule() -> dict[str, Any]:
    """Rule matching everyone."""
    return {"everyone": {}}


def group_rule(group_id: str) -> dict[str, Any]:
    """Rule matching members of an access group."""
    return {"group": {"id": group_id}}


@dataclass
class AccessPolicy:
    """Allows or denies access to Access applications.

    ``include`` rules act as OR, ``exclude`` as NOT and ``require`` as AND.
    """

    id: str = ""
    precedence: int = 0
    decision: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str = ""
    include: list[Any] = field(default_factory=list)
    exclude: list[Any] = field(default_factory=list)
    require: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AccessPolicy":
        data = data or {}
        return cls(
            id=data.get("id") or "",
            precedence=int(data.get("precedence") or 0),
            decision=data.get("decision") or "",
            created_at=_timestamp(data.get("created_at")),
            updated_at=_timestamp(data.get("updated_at")),
            name=data.get("name") or "",
            include=list(data.get("include") or []),
            exclude=list(data.get("exclude") or []),
            require=list(data.get("require") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        out.update(
            {
                "precedence": self.precedence,
                "decision": self.decision,
                "created_at": format_timestamp(self.created_at),
                "updated_at": format_timestamp(self.updated_at),
                "name": self.name,
                "include": list(self.include),
                "exclude": list(self.exclude),
                "require": list(self.require),
            }
        )
        return out


class AccessPolicies:
    """Access policy endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    @staticmethod
    def _base(zone_id: str, application_id: str) -> str:
        return f"/zones/{zone_id}/access/apps/{application_id}/policies"

    def list(
        self,
        zone_id: str,
        application_id: str,
        page_opts: PaginationOptions | None = None,
    ) -> tuple[list[AccessPolicy], ResultInfo]:
        """All policies of an application."""
        params = (page_opts or PaginationOptions()).to_params()
        uri = self._base(zone_id, application_id)
        if params:
            uri += "?" + urlencode(sorted(params.items()))
        data = _decode(self.api.make_request("GET", uri))
        policies = [AccessPolicy.from_dict(p) for p in data.get("result") or []]
        return policies, ResultInfo.from_dict(data.get("result_info"))

    def get(self, zone_id: str, application_id: str, policy_id: str) -> AccessPolicy:
        """A single policy by ID."""
        uri = f"{self._base(zone_id, application_id)}/{policy_id}"
        data = _decode(self.api.make_request("GET", uri))
        return AccessPolicy.from_dict(data.get("result"))

    def create(self, zone_id: str, application_id: str, policy: AccessPolicy) -> AccessPolicy:
        """Create a new policy."""
        data = _decode(
            self.api.make_request("POST", self._base(zone_id, application_id), policy)
        )
        return AccessPolicy.from_dict(data.get("result"))

    def update(self, zone_id: str, application_id: str, policy: AccessPolicy) -> AccessPolicy:
        """Update an existing policy; its ID must be set."""
        if not policy.id:
            raise ValueError("access policy ID cannot be empty")
        uri = f"{self._base(zone_id, application_id)}/{policy.id}"
        data = _decode(self.api.make_request("PUT", uri, policy))
        return AccessPolicy.from_dict(data.get("result"))

    def delete(self, zone_id: str, application_id: str, policy_id: str) -> None:
        """Delete a policy."""
        uri = f"{self._base(zone_id, application_id)}/{policy_id}"
        self.api.make_request("DELETE", uri)