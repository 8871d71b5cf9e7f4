"""Time-driven volume automation for a sink exposing a dBFS ``volume``.

:func:`fade` is a coroutine: it yields to the event loop every quantum, so
other tasks keep running while a fade is in progress.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import time
from typing import Callable

from pcmcore.curves import Curve, get_curve
from pcmcore.sink import VolumeSink

_LOGGER = logging.getLogger("pcmcore.fade")

FADE_QUANTUM = 0.005


def db_to_linear(db: float) -> float:
    return 10.0 ** (db / 20.0)


def linear_to_db(value: float) -> float:
    """``20 * log10(value)``; zero and negative amplitudes map to ``-inf``."""
    if value <= 0.0:
        return -math.inf
    return 20.0 * math.log10(value)


class FadeState(enum.Enum):
    RUNNING = "running"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class FadeSession:
    """State of one fade invocation."""

    __slots__ = ("start", "target", "duration", "curve", "elapsed", "state", "writes")

    def __init__(self, start: float, target: float, duration: float, curve: Curve):
        self.start = start
        self.target = target
        self.duration = duration
        self.curve = curve
        self.elapsed = 0.0
        self.state = FadeState.RUNNING
        self.writes = 0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 1.0
        return self.elapsed / self.duration

    def value(self) -> float:
        """Interpolated linear amplitude at the current elapsed time."""
        return self.curve(self.start, self.target, self.progress)

    def __repr__(self) -> str:
        return (
            f"FadeSession(state={self.state.value}, elapsed={self.elapsed:.3f}, "
            f"duration={self.duration}, writes={self.writes})"
        )


async def fade(
    sink: VolumeSink,
    target_db: float,
    duration: float,
    curve: str | Curve = "linear",
    *,
    quantum: float = FADE_QUANTUM,
    cancel: asyncio.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> FadeSession:
    """Move ``sink.volume`` towards *target_db* over *duration* seconds.

    Parameters
    ----------
    sink : VolumeSink
        Object whose ``volume`` (dBFS) is read once and then written on
        every iteration.
    target_db : float
        Final volume in dBFS.
    duration : float
        Fade length in seconds.
    curve : str or callable
        ``'linear'``, ``'equal_power'``, ``'exponential'`` or any
        ``(start, end, progress) -> float`` callable, applied to linear
        amplitudes.
    quantum : float
        Seconds to sleep between writes.
    cancel : asyncio.Event or None
        Checked before each write; once set the fade stops.
    clock : callable
        Monotonic time source in seconds.

    The last write is whatever the final iteration computed; the sink is not
    snapped to *target_db* when time runs out.
    """
    session = FadeSession(
        start=db_to_linear(sink.volume),
        target=db_to_linear(target_db),
        duration=duration,
        curve=get_curve(curve),
    )
    _LOGGER.debug(
        "fade start: %.2f dB -> %.2f dB over %ss", sink.volume, target_db, duration
    )
    began = clock()
    while session.elapsed < session.duration:
        if cancel is not None and cancel.is_set():
            session.state = FadeState.CANCELLED
            _LOGGER.info(
                "fade cancelled after %.3fs (%d writes)", session.elapsed, session.writes
            )
            return session
        sink.volume = linear_to_db(session.value())
        session.writes += 1
        await asyncio.sleep(quantum)
        session.elapsed = clock() - began
    session.state = FadeState.COMPLETE
    _LOGGER.debug("fade complete: %r", session)
    return session
