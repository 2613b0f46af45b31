"""Role capabilities.

Every role-dependent decision in the import pipeline and the shipment views
goes through the predicates below instead of comparing role strings inline.
"""

from dataclasses import dataclass

from shiptrack.db.models.user import Role


@dataclass(frozen=True)
class UserContext:
    """The already-authenticated caller, passed explicitly into services."""

    user_id: int
    role: Role
    department_id: int

    @property
    def is_management(self) -> bool:
        return self.role == Role.management


def is_scoped_to_own_department(role: Role) -> bool:
    return role == Role.department


def can_override_shipment_department(role: Role) -> bool:
    return role == Role.management


def can_filter_by_department(role: Role) -> bool:
    return role == Role.management


def can_read_import_errors(ctx: UserContext, uploaded_by: int) -> bool:
    return ctx.role == Role.management or ctx.user_id == uploaded_by
