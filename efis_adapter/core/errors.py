"""Exception hierarchy shared by the EFIS adapter core."""

from __future__ import annotations

from typing import Dict, Sequence


class EFISError(Exception):
    """Base class for EFIS adapter errors."""


class ConfigError(EFISError, RuntimeError):
    """Raised when the configuration file or one of its sections is invalid."""


class UnknownCategory(EFISError, LookupError):
    """Raised when a category identifier does not match a configured profile."""

    def __init__(self, category_id: str, available: Sequence[str] = ()) -> None:
        self.category_id = category_id
        self.available = tuple(available)
        message = f"unknown category '{category_id}'"
        if self.available:
            message += f". available: {', '.join(self.available)}"
        super().__init__(message)


class CategoryDisabled(UnknownCategory):
    """Raised when a category is configured but flagged as not valid."""

    def __init__(self, category_id: str) -> None:
        super().__init__(category_id)
        self.args = (f"category '{category_id}' is disabled",)


class SourceReadError(EFISError):
    """Raised by a generator when a role-scoped read fails."""


class AllSourcesFailed(EFISError):
    """Raised when every configured source role errored during one read."""

    def __init__(self, category_id: str, failures: Dict[str, str]) -> None:
        self.category_id = category_id
        self.failures = dict(failures)
        detail = "; ".join(f"{role}: {reason}" for role, reason in self.failures.items())
        super().__init__(f"all sources failed for '{category_id}' ({detail})")


class NavDataUnavailable(EFISError):
    """Raised when no autopilot/navigation state can be produced."""


class SourceStalled(SourceReadError):
    """Raised when a source still has a timed-out read running on its worker."""


class RecordingError(EFISError):
    """Raised when an airframe recording cannot be read or decoded."""
