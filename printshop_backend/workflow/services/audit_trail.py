# workflow/services/audit_trail.py

"""
AUDIT TRAIL

The audit log of an entity is a newline-delimited text field
(Budget.observacoes, Order.obs_producao). Lines are only ever appended;
existing text is carried over byte for byte.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import Optional


def format_timestamp(at: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z."""
    if at.tzinfo is None:
        at = at.replace(tzinfo=dt_timezone.utc)
    return (
        at.astimezone(dt_timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def format_entry(
    old_status: str,
    new_status: str,
    email: str,
    reason: Optional[str],
    at: datetime,
) -> str:
    entry = f"[{format_timestamp(at)}] Status changed from {old_status} to {new_status} by {email}"
    if reason and reason.strip():
        entry += f" - Reason: {reason.strip()}"
    return entry


def format_update_entry(entity_label: str, email: str, at: datetime) -> str:
    return f"[{format_timestamp(at)}] {entity_label} updated by {email}"


def append(existing_notes: Optional[str], entry: str) -> str:
    if not existing_notes:
        return entry
    return f"{existing_notes}\n{entry}"
