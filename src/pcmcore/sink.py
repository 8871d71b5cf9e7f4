"""Sink capabilities a playback device exposes to the core."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class VolumeSink(Protocol):
    """Anything with a gettable/settable ``volume`` in dBFS."""

    volume: float


@runtime_checkable
class BufferSink(Protocol):
    def push(self, samples: np.ndarray, sample_rate: int, channels: int) -> bool: ...


class MemorySink:
    """In-memory sink recording pushed buffers and every volume write.

    Parameters
    ----------
    volume : float
        Initial volume in dBFS.
    accept : bool
        Value returned from :meth:`push`.
    """

    __slots__ = ("_volume", "accept", "pushed", "volume_history")

    def __init__(self, volume: float = 0.0, accept: bool = True):
        self._volume = float(volume)
        self.accept = accept
        self.pushed: list[tuple[np.ndarray, int, int]] = []
        self.volume_history: list[float] = []

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, db: float) -> None:
        self._volume = float(db)
        self.volume_history.append(self._volume)

    def push(self, samples: np.ndarray, sample_rate: int, channels: int) -> bool:
        if self.accept:
            self.pushed.append((samples, sample_rate, channels))
        return self.accept
