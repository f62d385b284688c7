"""Account roles and their permissions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from flarekit.accounts import _fetch
from flarekit.client import API


@dataclass
class AccountRolePermission:
    """Read and edit rights for one permission area."""

    read: bool = False
    edit: bool = False


@dataclass
class AccountRole:
    """A role that can be attached to an account member."""

    id: str = ""
    name: str = ""
    description: str = ""
    permissions: dict[str, AccountRolePermission] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AccountRole":
        data = data or {}
        permissions = {
            key: AccountRolePermission(
                read=bool((value or {}).get("read", False)),
                edit=bool((value or {}).get("edit", False)),
            )
            for key, value in (data.get("permissions") or {}).items()
        }
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            description=data.get("description") or "",
            permissions=permissions,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AccountRoles:
    """Account role endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def list(self, account_id: str) -> list[AccountRole]:
        """All roles of an account."""
        data = _fetch(self.api, "GET", f"/accounts/{account_id}/roles")
        return [AccountRole.from_dict(r) for r in data.get("result") or []]

    def get(self, account_id: str, role_id: str) -> AccountRole:
        """Details of a single account role."""
        data = _fetch(self.api, "GET", f"/accounts/{account_id}/roles/{role_id}")
        return AccountRole.from_dict(data.get("result"))