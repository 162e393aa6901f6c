# workflow/services/transition_guard.py

from __future__ import annotations

from typing import Optional

from permissions.roles import ordered_roles
from workflow.services.exceptions import (
    InvalidTransitionError,
    PermissionError as WorkflowPermissionError,
    SameStateError,
)
from workflow.services.transition_table import TransitionTable


class TransitionGuard:
    """
    Validates a single status change against one TransitionTable.

    Checks run in a fixed order so the same request always fails the same way:
    1. same state
    2. edge not in the graph
    3. role not allowed into the target state
    """

    def __init__(self, table: TransitionTable):
        self.table = table

    def check(self, current: str, requested: str, role: Optional[str]) -> None:
        requested = self.table.normalize(requested)

        if requested == current:
            raise SameStateError(current)

        if requested not in self.table.allowed_from(current):
            raise InvalidTransitionError(
                current,
                requested,
                self.table.ordered_targets(current),
            )

        required = self.table.roles_for(requested)
        if role not in required:
            raise WorkflowPermissionError(
                f"Role {role} may not move a {self.table.kind} to {requested}",
                required_roles=ordered_roles(required),
                role=role,
                target_status=requested,
            )

    def permits(self, current: str, requested: str, role: Optional[str]) -> bool:
        return (
            requested != current
            and requested in self.table.allowed_from(current)
            and role in self.table.roles_for(requested)
        )

    def available_for(self, current: str, role: Optional[str]) -> list[str]:
        return [
            target
            for target in self.table.ordered_targets(current)
            if self.permits(current, target, role)
        ]
