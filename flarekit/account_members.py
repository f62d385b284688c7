"""Account members: invitations, updates and removal."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from flarekit.account_roles import AccountRole
from flarekit.accounts import _fetch, _paged_uri
from flarekit.client import API, PaginationOptions, ResultInfo

ERR_MISSING_ACCOUNT_ID = "account ID is required"

_USER_TEXT_FIELDS = ("id", "first_name", "last_name", "email")


def _members_uri(account_id: str, member_id: str | None = None) -> str:
    if not account_id:
        raise ValueError(ERR_MISSING_ACCOUNT_ID)
    uri = f"/accounts/{account_id}/members"
    return f"{uri}/{member_id}" if member_id is not None else uri


@dataclass
class AccountMemberUserDetails:
    """Personal information about a member."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    two_factor_authentication_enabled: bool = False


@dataclass
class AccountMember:
    """A member of an account."""

    id: str = ""
    code: str = ""
    user: AccountMemberUserDetails = field(default_factory=AccountMemberUserDetails)
    status: str = ""
    roles: list[AccountRole] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AccountMember":
        data = data or {}
        user = data.get("user") or {}
        details = AccountMemberUserDetails(
            **{name: user.get(name) or "" for name in _USER_TEXT_FIELDS},
            two_factor_authentication_enabled=bool(
                user.get("two_factor_authentication_enabled", False)
            ),
        )
        return cls(
            id=data.get("id") or "",
            code=data.get("code") or "",
            user=details,
            status=data.get("status") or "",
            roles=[AccountRole.from_dict(r) for r in data.get("roles") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AccountMembers:
    """Account member endpoints."""

    def __init__(self, api: API) -> None:
        self.api = api

    def _member(self, method: str, uri: str, params: Any = None) -> AccountMember:
        return AccountMember.from_dict(_fetch(self.api, method, uri, params).get("result"))

    def list(
        self, account_id: str, page_opts: PaginationOptions | None = None
    ) -> tuple[list[AccountMember], ResultInfo]:
        """All members of an account."""
        data = _fetch(self.api, "GET", _paged_uri(_members_uri(account_id), page_opts))
        members = [AccountMember.from_dict(m) for m in data.get("result") or []]
        return members, ResultInfo.from_dict(data.get("result_info"))

    def create(self, account_id: str, email: str, roles: list[str]) -> AccountMember:
        """Invite a new member to the account."""
        invitation = {"email": email, "roles": list(roles)}
        return self._member("POST", _members_uri(account_id), invitation)

    def delete(self, account_id: str, user_id: str) -> None:
        """Remove a member from the account."""
        self.api.make_request("DELETE", _members_uri(account_id, user_id))

    def update(self, account_id: str, user_id: str, member: AccountMember) -> AccountMember:
        """Modify an existing account member."""
        return self._member("PUT", _members_uri(account_id, user_id), member)

    def get(self, account_id: str, member_id: str) -> AccountMember:
        """Details of a single account member."""
        return self._member("GET", _members_uri(account_id, member_id))