"""
Identity Provider adapters.

WHAT: Supply the acting user and bearer token to the decision controller
WHY: Session bootstrap lives outside this service; we only consume its result
HOW: Protocol plus header-based and static implementations
"""

from typing import Mapping, Protocol

from pydantic import ValidationError

from ..models.identity import ActingUser, EmployeeProfile, IdentityContext, Role
from ..utils.logger import get_logger

logger = get_logger(__name__)

USER_ID_HEADER = "x-user-id"
USER_ROLE_HEADER = "x-user-role"
WAREHOUSE_ID_HEADER = "x-warehouse-id"


class IdentityProvider(Protocol):
    """Read-only source of the current identity."""

    def current(self) -> IdentityContext:
        ...


class StaticIdentityProvider:
    """Identity fixed at construction time."""

    def __init__(self, context: IdentityContext | None = None):
        self._context = context or IdentityContext()

    def current(self) -> IdentityContext:
        return self._context


class HeaderIdentityProvider:
    """
    Identity taken from the frontend's request headers.

    The frontend forwards its stored session: the bearer token in
    Authorization, and the user in X-User-Id / X-User-Role / X-Warehouse-Id.
    Nothing here is verified; the Request Store re-checks every write.
    """

    def __init__(self, headers: Mapping[str, str]):
        self._headers = {key.lower(): value for key, value in headers.items()}

    def _token(self) -> str | None:
        authorization = self._headers.get("authorization", "").strip()
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    def _user(self) -> ActingUser | None:
        user_id = self._headers.get(USER_ID_HEADER)
        role = self._headers.get(USER_ROLE_HEADER)
        if not user_id or not role:
            return None

        try:
            role = Role(role.strip().upper())
        except ValueError:
            logger.info(f"Ignoring user {user_id} with unsupported role {role!r}")
            return None

        warehouse_id = self._headers.get(WAREHOUSE_ID_HEADER)
        employee = None
        if role is Role.EMPLOYEE and warehouse_id:
            employee = EmployeeProfile(warehouse_id=warehouse_id)

        try:
            return ActingUser(id=user_id, role=role, employee=employee)
        except ValidationError as e:
            logger.warning(f"Invalid identity headers: {e}")
            return None

    def current(self) -> IdentityContext:
        return IdentityContext(user=self._user(), token=self._token())
