"""Accounts: listing, details and updates."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlencode

from flarekit.client import API, APIError, PaginationOptions, ResultInfo


def _decode(body: bytes) -> dict[str, Any]:
    """Parse a response body into a JSON object, raising APIError on failure."""
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise APIError(f"error unmarshalling the JSON response: {exc}") from exc
    if not isinstance(data, dict):
        raise APIError("error unmarshalling the JSON response: not a JSON object")
    return data


def _fetch(api: API, method: str, uri: str, params: Any = None) -> dict[str, Any]:
    """Make a request and return the decoded JSON envelope."""
    return _decode(api.make_request(method, uri, params))


def _paged_uri(uri: str, page_opts: PaginationOptions | None) -> str:
    """Append pagination parameters, sorted by key, to a URI."""
    params = (page_opts or PaginationOptions()).to_params()
    if params:
        return uri + "?" + urlencode(sorted(params.items()))
    return uri


@dataclass
class AccountSettings:
    """Options available for an account."""

    enforce_two_factor: bool = False


@dataclass
class Account:
    """The root object that owns resources."""

    id: str = ""
    name: str = ""
    settings: AccountSettings | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Account":
        data = data or {}
        settings = data.get("settings")
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            settings=(
                AccountSettings(enforce_two_factor=bool(settings.get("enforce_twofactor", False)))
                if isinstance(settings, Mapping)
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.name:
            out["name"] = self.name
        out["settings"] = (
            {"enforce_twofactor": self.settings.enforce_two_factor}
            if self.settings is not None
            else None
        )
        return out


class Accounts:
    """Account endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def list(self, page_opts: PaginationOptions | None = None) -> tuple[list[Account], ResultInfo]:
        """All accounts the authenticated user has access to."""
        data = _fetch(self.api, "GET", _paged_uri("/accounts", page_opts))
        accounts = [Account.from_dict(a) for a in data.get("result") or []]
        return accounts, ResultInfo.from_dict(data.get("result_info"))

    def get(self, account_id: str) -> tuple[Account, ResultInfo]:
        """A single account by ID."""
        data = _fetch(self.api, "GET", "/accounts/" + account_id)
        return Account.from_dict(data.get("result")), ResultInfo.from_dict(data.get("result_info"))

    def update(self, account_id: str, account: Account) -> Account:
        """Replace an account's details."""
        data = _fetch(self.api, "PUT", "/accounts/" + account_id, account)
        return Account.from_dict(data.get("result"))