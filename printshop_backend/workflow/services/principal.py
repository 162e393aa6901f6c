# workflow/services/principal.py

from __future__ import annotations

from dataclasses import dataclass

from permissions.roles import ALL_ROLES, get_user_role
from workflow.services.exceptions import PermissionError as WorkflowPermissionError


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor performing a workflow operation.

    Built from request.user by the API layer; the engine never looks at the
    Django user object itself.
    """

    id: object
    email: str
    role: str

    def __post_init__(self):
        if self.role not in ALL_ROLES:
            raise ValueError(f"Unknown role: {self.role!r}")

    @classmethod
    def from_user(cls, user) -> "Principal":
        role = get_user_role(user)
        if role is None:
            raise WorkflowPermissionError(
                "Account has no workflow role",
                required_roles=ALL_ROLES,
                role=getattr(user, "role", None),
            )
        return cls(id=user.pk, email=user.email, role=role)
