# workflow/services/sanitizer.py

"""
ROLE-BASED RESPONSE SANITIZER

Pure functions over already-serialized payloads (dicts / lists).

- ADMIN:      unchanged (deep copy)
- MODERATOR:  client -> {id, name, email, phone}, center -> {id, name, type}
- USER:       money keys removed at every depth,
              client -> {id, name}, center -> {id, name}

The input is never mutated.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable

from permissions.roles import ALL_ROLES, ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER, ordered_roles
from workflow.services.exceptions import PermissionError as WorkflowPermissionError

MONEY_KEYS = frozenset({"preco_unitario", "preco_total", "valorUnitario", "valorTotal"})

CLIENT_KEYS = {
    ROLE_MODERATOR: ("id", "name", "email", "phone"),
    ROLE_USER: ("id", "name"),
}

CENTER_KEYS = {
    ROLE_MODERATOR: ("id", "name", "type"),
    ROLE_USER: ("id", "name"),
}


def _project(value, keys):
    if not isinstance(value, dict):
        return copy.deepcopy(value)
    return {key: copy.deepcopy(value[key]) for key in keys if key in value}


def _sanitize(value, role: str):
    if isinstance(value, list):
        return [_sanitize(item, role) for item in value]

    if not isinstance(value, dict):
        return copy.deepcopy(value)

    result = {}
    for key, item in value.items():
        if role == ROLE_USER and key in MONEY_KEYS:
            continue
        if key == "client":
            result[key] = _project(item, CLIENT_KEYS[role])
        elif key == "center":
            result[key] = _project(item, CENTER_KEYS[role])
        else:
            result[key] = _sanitize(item, role)
    return result


def sanitize(payload: Any, role: str) -> Any:
    if role not in ALL_ROLES:
        raise WorkflowPermissionError(
            "Unknown role cannot receive workflow data",
            required_roles=ordered_roles(ALL_ROLES),
            role=role,
        )

    if role == ROLE_ADMIN:
        return copy.deepcopy(payload)

    return _sanitize(payload, role)


def sanitize_many(payloads: Iterable[Any], role: str) -> list[Any]:
    return sanitize(list(payloads), role)
