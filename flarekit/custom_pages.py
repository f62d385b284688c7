"""Custom error and challenge pages for zones and accounts."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from flarekit.client import API, APIError, parse_timestamp


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
class CustomPage:
    """A custom page configuration."""

    created_on: datetime | None = None
    modified_on: datetime | None = None
    url: Any = None
    state: str = ""
    required_tokens: list[str] = field(default_factory=list)
    preview_target: str = ""
    description: str = ""
    id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "CustomPage":
        data = data or {}
        return cls(
            created_on=_timestamp(data.get("created_on")),
            modified_on=_timestamp(data.get("modified_on")),
            url=data.get("url"),
            state=data.get("state") or "",
            required_tokens=list(data.get("required_tokens") or []),
            preview_target=data.get("preview_target") or "",
            description=data.get("description") or "",
            id=data.get("id") or "",
        )


@dataclass
class CustomPageOptions:
    """Selects an account or a zone; exactly one must be set."""

    account_id: str = ""
    zone_id: str = ""


@dataclass
class CustomPageParameters:
    """New values for a custom page."""

    url: Any = None
    state: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "state": self.state}


def _base(options: CustomPageOptions) -> str:
    if not options.account_id and not options.zone_id:
        raise ValueError("either account ID or zone ID must be provided")
    if options.account_id and options.zone_id:
        raise ValueError("account ID and zone ID are mutually exclusive")
    if options.account_id:
        return f"/accounts/{options.account_id}/custom_pages"
    return f"/zones/{options.zone_id}/custom_pages"


class CustomPages:
    """Custom page endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def list(self, options: CustomPageOptions) -> list[CustomPage]:
        """All custom pages of a zone or account."""
        data = _decode(self.api.make_request("GET", _base(options)))
        return [CustomPage.from_dict(p) for p in data.get("result") or []]

    def get(self, options: CustomPageOptions, custom_page_id: str) -> CustomPage:
        """A single custom page by ID."""
        uri = f"{_base(options)}/{custom_page_id}"
        data = _decode(self.api.make_request("GET", uri))
        return CustomPage.from_dict(data.get("result"))

    def update(
        self,
        options: CustomPageOptions,
        custom_page_id: str,
        parameters: CustomPageParameters,
    ) -> CustomPage:
        """Change a custom page's URL and state."""
        uri = f"{_base(options)}/{custom_page_id}"
        data = _decode(self.api.make_request("PUT", uri, parameters))
        return CustomPage.from_dict(data.get("result"))