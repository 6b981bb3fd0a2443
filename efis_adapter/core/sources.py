"""Redundant source reading with ordered failover across generator roles."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, TypeVar

from .airframe import AirframeData
from .categories import Category
from .errors import AllSourcesFailed, SourceReadError, SourceStalled
from .roles import DEFAULT_ROLE_ORDER, SourceRole

log = logging.getLogger(__name__)

# Failures absorbed into the fallback iteration; anything else propagates.
ROLE_READ_ERRORS = (SourceReadError, OSError, asyncio.TimeoutError)

DEFAULT_WORKERS = 4

_T = TypeVar("_T")


class GeneratorRead(Protocol):
    """Role-scoped read from a redundant data generator.

    Implementations return ``None`` when the role has no data for the
    category and raise :class:`SourceReadError` (or :class:`OSError`) when
    the read itself fails. A returned record whose ``role`` is unset, or set
    to another role, reaches callers as a copy stamped with the role that
    served it; records already stamped with the serving role pass through
    unchanged.
    """

    def read(self, role: SourceRole, category: Category) -> Optional[AirframeData]:  # pragma: no cover - protocol signature
        ...


class SourceWorker:
    """Bounded thread pool running the blocking reads of one source.

    A read that outlives its timeout keeps its thread; until that thread
    returns the source is reported as stalled and new reads fail at once
    with :class:`SourceStalled` instead of queueing behind it.
    """

    def __init__(self, name: str, *, max_workers: int = DEFAULT_WORKERS) -> None:
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"efis-{name}")
        self._stalled: Optional[Future] = None

    @property
    def stalled(self) -> bool:
        return self._stalled is not None and not self._stalled.done()

    async def call(self, fn: Callable[..., _T], *args: Any, timeout: float) -> _T:
        if self._stalled is not None:
            if not self._stalled.done():
                raise SourceStalled(f"{self.name} read still pending after timeout")
            log.info("%s source recovered", self.name)
            self._stalled = None
        future = self._executor.submit(fn, *args)
        try:
            return await asyncio.wait_for(asyncio.wrap_future(future), timeout=timeout)
        except asyncio.TimeoutError:
            if not future.done():
                self._stalled = future
            raise

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


class RedundantSourceReader:
    """Read an airframe record from the first role that yields one.

    Roles are attempted strictly one after another in priority order, each
    under its own timeout and on its own :class:`SourceWorker`, so a hung
    role never holds up the threads of the roles behind it.
    """

    def __init__(
        self,
        generator: GeneratorRead,
        roles: Sequence[SourceRole] = DEFAULT_ROLE_ORDER,
        *,
        role_timeout: float = 0.25,
    ) -> None:
        if not roles:
            raise ValueError("at least one source role is required")
        if role_timeout <= 0:
            raise ValueError("role_timeout must be positive")
        self._generator = generator
        self._roles = tuple(roles)
        self._role_timeout = role_timeout
        self._workers = {role: SourceWorker(role.value) for role in self._roles}

    @property
    def roles(self) -> tuple[SourceRole, ...]:
        return self._roles

    @property
    def stalled_roles(self) -> tuple[SourceRole, ...]:
        return tuple(role for role in self._roles if self._workers[role].stalled)

    async def read(self, category: Category) -> Optional[AirframeData]:
        """Return the first available record for *category* or ``None``.

        ``None`` means no role had data. :class:`AllSourcesFailed` is raised
        only when every role errored; a single absent role makes the overall
        result absent. A stalled role counts as errored without being
        queued. Cancellation while a role is in flight stops the iteration.
        """

        failures: Dict[str, str] = {}
        for role in self._roles:
            try:
                data = await self._workers[role].call(
                    self._generator.read, role, category, timeout=self._role_timeout
                )
            except ROLE_READ_ERRORS as exc:
                reason = _describe(exc)
                failures[role.value] = reason
                log.warning("%s read failed for %s: %s", role.value, category.id, reason)
                continue
            if data is None:
                log.debug("%s has no data for %s", role.value, category.id)
                continue
            if role is not self._roles[0]:
                log.debug("%s served %s after fallback", role.value, category.id)
            return data if data.role is role else replace(data, role=role)

        if len(failures) == len(self._roles):
            raise AllSourcesFailed(category.id, failures)
        return None

    def close(self) -> None:
        for worker in self._workers.values():
            worker.close()


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout"
    return str(exc) or type(exc).__name__
