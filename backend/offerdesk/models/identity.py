"""
Acting user models supplied by the Identity Provider.

WHAT: Who is looking at the page and which warehouse they belong to
WHY: The decision controller needs an authorization context
HOW: Immutable pydantic models; the controller never mutates them
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """User roles known to the marketplace."""

    EMPLOYEE = "EMPLOYEE"
    VENDOR = "VENDOR"
    ADMIN = "ADMIN"


class EmployeeProfile(BaseModel):
    """Employee-only part of a user."""

    model_config = ConfigDict(frozen=True)

    warehouse_id: str


class ActingUser(BaseModel):
    """The current user as reported by the Identity Provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    employee: EmployeeProfile | None = None

    @property
    def is_employee(self) -> bool:
        return self.role is Role.EMPLOYEE

    @property
    def warehouse_id(self) -> str | None:
        if self.role is Role.EMPLOYEE and self.employee is not None:
            return self.employee.warehouse_id
        return None


class IdentityContext(BaseModel):
    """Acting user plus the bearer token forwarded to the warehouse API."""

    model_config = ConfigDict(frozen=True)

    user: ActingUser | None = None
    token: str | None = None
