"""Redundant generator roles and their priority order."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple


class SourceRole(str, Enum):
    CENTRAL = "central"
    COPILOT = "copilot"
    STANDBY = "standby"


DEFAULT_ROLE_ORDER: Tuple[SourceRole, ...] = (SourceRole.CENTRAL, SourceRole.COPILOT)


def parse_roles(names: Iterable[str]) -> Tuple[SourceRole, ...]:
    """Return the roles named in *names*, preserving order.

    Raises :class:`ValueError` on unknown or repeated names.
    """

    roles = []
    for name in names:
        role = SourceRole(str(name).strip().lower())
        if role in roles:
            raise ValueError(f"role '{role.value}' listed more than once")
        roles.append(role)
    if not roles:
        raise ValueError("at least one source role is required")
    return tuple(roles)
