"""Interaction tracking for one form instance.

The tracker is a two-state machine, Untouched and Touched(at). Every field
mutation moves it to Touched(now); ``reset`` returns it to Untouched.
Freshness is evaluated lazily against a timeout when asked, so no timer is
needed to expire it. A save attempt on a form nobody touched recently is
therefore distinguishable from one a user just completed.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, Set

from trialforms.config import DEFAULT_INTERACTION_TIMEOUT_MS
from trialforms.utils.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Milliseconds from a monotonic clock."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class InteractionState:
    """Snapshot of a tracker.

    Attributes:
        touched: Whether any field was mutated since creation or reset
        last_touch_at: Clock reading of the latest mutation, in milliseconds
        touched_fields: Names of all fields mutated so far
    """

    touched: bool = False
    last_touch_at: Optional[float] = None
    touched_fields: FrozenSet[str] = field(default_factory=frozenset)


class InteractionTracker:
    """Tracks whether, and how recently, a user interacted with a form."""

    def __init__(
        self,
        timeout_ms: float = DEFAULT_INTERACTION_TIMEOUT_MS,
        clock: Clock = monotonic_ms,
    ) -> None:
        """Initialize interaction tracker.

        Args:
            timeout_ms: Window during which a touch keeps the form fresh
            clock: Millisecond clock used when callers do not pass ``now``
        """
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._last_touch_at: Optional[float] = None
        self._touched_fields: Set[str] = set()

    @property
    def is_touched(self) -> bool:
        """Whether the tracker is in the Touched state."""
        return self._last_touch_at is not None

    @property
    def last_touch_at(self) -> Optional[float]:
        """Timestamp of the latest touch, or None when untouched."""
        return self._last_touch_at

    @property
    def touched_fields(self) -> FrozenSet[str]:
        """Fields touched since creation or the last reset."""
        return frozenset(self._touched_fields)

    @property
    def state(self) -> InteractionState:
        """Immutable snapshot of the current state."""
        return InteractionState(
            touched=self.is_touched,
            last_touch_at=self._last_touch_at,
            touched_fields=self.touched_fields,
        )

    def now(self) -> float:
        """Current reading of the tracker's clock."""
        return self._clock()

    def touch(self, field_name: str, now: Optional[float] = None) -> InteractionState:
        """Record a mutation of ``field_name``."""
        self._last_touch_at = self._clock() if now is None else now
        self._touched_fields.add(field_name)
        return self.state

    def reset(self) -> None:
        """Return to the Untouched state."""
        self._last_touch_at = None
        self._touched_fields.clear()
        logger.debug("interaction_reset")

    def is_fresh(
        self, now: Optional[float] = None, timeout_ms: Optional[float] = None
    ) -> bool:
        """Whether the latest touch lies within the timeout window.

        Untouched is never fresh. The window is inclusive:
        ``now - last_touch_at <= timeout_ms``.
        """
        if self._last_touch_at is None:
            return False
        current = self._clock() if now is None else now
        window = self.timeout_ms if timeout_ms is None else timeout_ms
        return current - self._last_touch_at <= window
