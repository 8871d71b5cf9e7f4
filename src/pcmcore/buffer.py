"""AudioBuffer -- interleaved float32 PCM samples with rate, channel and clip metadata.

Operations that build a new buffer (``mix``, ``concat``, ``repeat``, ``copy``)
never touch their operands.  Operations that mutate in place (``gain``,
``gain_db``, ``normalize``, ``apply_clipping``, ``assign_from``,
``load_bytes``) return ``self`` so calls can be chained.
"""

from __future__ import annotations

import logging

import numpy as np

from pcmcore.clipping import ClipMode, apply_clipping, normalize_samples

_LOGGER = logging.getLogger("pcmcore.buffer")

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 1

# Serialized samples are little-endian IEEE-754 float32, no header.
WIRE_DTYPE = np.dtype("<f4")


class AudioBuffer:
    """A flat, interleaved float32 audio buffer with metadata.

    Parameters
    ----------
    samples : array-like, AudioBuffer or None
        Interleaved samples.  Always copied; *None* creates an empty buffer.
    sample_rate : int
        Sample rate in Hz.
    channels : int
        Number of interleaved channels.
    clip_mode : ClipMode or str
        Policy applied after mixing: ``'unbounded'``, ``'clamp'`` or
        ``'rescale'``.
    """

    __slots__ = ("_samples", "_sample_rate", "_channels", "_clip_mode")

    def __init__(
        self,
        samples=None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        channels: int = DEFAULT_CHANNELS,
        clip_mode: ClipMode | str = ClipMode.UNBOUNDED,
    ):
        if sample_rate < 1:
            raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")
        if channels < 1:
            raise ValueError(f"channels must be >= 1, got {channels}")

        if samples is None:
            arr = np.zeros(0, dtype=np.float32)
        elif isinstance(samples, AudioBuffer):
            arr = samples._samples.copy()
        else:
            arr = np.array(samples, dtype=np.float32).reshape(-1)

        self._samples: np.ndarray = arr
        self._sample_rate: int = int(sample_rate)
        self._channels: int = int(channels)
        self._clip_mode: ClipMode = ClipMode.parse(clip_mode)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def samples(self) -> np.ndarray:
        """Raw 1D interleaved float32 array."""
        return self._samples

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def clip_mode(self) -> ClipMode:
        return self._clip_mode

    @clip_mode.setter
    def clip_mode(self, mode: ClipMode | str) -> None:
        self._clip_mode = ClipMode.parse(mode)

    @property
    def frames(self) -> int:
        """Number of frames; a partial trailing frame is not counted."""
        return self._samples.size // self._channels

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frames / self._sample_rate

    @property
    def duration_ms(self) -> int:
        """Duration in whole milliseconds (truncated)."""
        return self.frames * 1000 // self._sample_rate

    @property
    def peak(self) -> float:
        """Largest absolute sample value, 0.0 for an empty buffer."""
        if self._samples.size == 0:
            return 0.0
        return float(np.max(np.abs(self._samples)))

    def length_samples(self) -> int:
        return self._samples.size

    # ------------------------------------------------------------------
    # Channel access
    # ------------------------------------------------------------------

    def channel(self, i: int) -> np.ndarray:
        """Return a strided 1D view of channel *i*."""
        if i < 0 or i >= self._channels:
            raise IndexError(
                f"Channel {i} out of range for {self._channels}-channel buffer"
            )
        return self._samples[i : self.frames * self._channels : self._channels]

    # ------------------------------------------------------------------
    # Numpy interop
    # ------------------------------------------------------------------

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._samples
        return self._samples.astype(dtype)

    def __len__(self) -> int:
        """Number of samples across all channels."""
        return self._samples.size

    def __eq__(self, other) -> bool:
        if not isinstance(other, AudioBuffer):
            return NotImplemented
        return (
            self._sample_rate == other._sample_rate
            and self._channels == other._channels
            and self._clip_mode is other._clip_mode
            and np.array_equal(self._samples, other._samples)
        )

    __hash__ = None

    def __repr__(self) -> str:
        parts = [
            f"channels={self._channels}",
            f"samples={self._samples.size}",
            f"sr={self._sample_rate}",
        ]
        if self._clip_mode is not ClipMode.UNBOUNDED:
            parts.append(f"clip='{self._clip_mode.value}'")
        return f"AudioBuffer({', '.join(parts)})"

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def zeros(
        cls,
        num_samples: int,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        channels: int = DEFAULT_CHANNELS,
        **kw,
    ) -> AudioBuffer:
        """Pre-sized buffer of *num_samples* zeros."""
        return cls(
            np.zeros(num_samples, dtype=np.float32),
            sample_rate=sample_rate,
            channels=channels,
            **kw,
        )

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        channels: int = DEFAULT_CHANNELS,
        **kw,
    ) -> AudioBuffer:
        """Build a buffer from raw little-endian float32 bytes."""
        return cls(sample_rate=sample_rate, channels=channels, **kw).load_bytes(data)

    def _like(self, samples: np.ndarray) -> AudioBuffer:
        """New buffer with this buffer's metadata, taking ownership of *samples*."""
        out = AudioBuffer(
            sample_rate=self._sample_rate,
            channels=self._channels,
            clip_mode=self._clip_mode,
        )
        out._samples = samples
        return out

    # ------------------------------------------------------------------
    # Combination
    # ------------------------------------------------------------------

    def mix(self, other: AudioBuffer) -> AudioBuffer:
        """Sum two buffers sample by sample into a new buffer.

        The tail of the longer buffer passes through unchanged.  Sample rate,
        channel count and clip mode always come from ``self``; mismatches with
        *other* are not checked.  The clip policy is applied to the result.
        """
        if other._sample_rate != self._sample_rate or other._channels != self._channels:
            _LOGGER.debug(
                "mixing %r into %r with mismatched metadata; keeping receiver's",
                other,
                self,
            )
        if other._samples.size < self._samples.size:
            shortest, longest = other, self
        else:
            shortest, longest = self, other
        out = longest._samples.copy()
        out[: shortest._samples.size] += shortest._samples
        apply_clipping(out, self._clip_mode)
        return self._like(out)

    def concat(self, other: AudioBuffer) -> AudioBuffer:
        """Return ``self`` followed by *other* in a new buffer; no clipping."""
        return self._like(np.concatenate([self._samples, other._samples]))

    def repeat(self, count: int) -> AudioBuffer:
        """Concatenate ``self`` onto an empty buffer *count* times."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        out = self._like(np.zeros(0, dtype=np.float32))
        for _ in range(count):
            out = out.concat(self)
        return out

    def assign_from(self, other: AudioBuffer) -> AudioBuffer:
        """Replace samples and metadata with a copy of *other*'s."""
        self._samples = other._samples.copy()
        self._sample_rate = other._sample_rate
        self._channels = other._channels
        self._clip_mode = other._clip_mode
        return self

    def copy(self) -> AudioBuffer:
        """Deep copy with independent numpy storage."""
        return self._like(self._samples.copy())

    # ------------------------------------------------------------------
    # Level
    # ------------------------------------------------------------------

    def gain(self, factor: float) -> AudioBuffer:
        """Multiply every sample by *factor* in place.  No clipping is applied."""
        self._samples *= np.float32(factor)
        return self

    def gain_db(self, db: float) -> AudioBuffer:
        """In-place gain of ``10**(db/20)``."""
        return self.gain(10.0 ** (db / 20.0))

    def normalize(self, target: float, threshold: float = 0.0) -> AudioBuffer:
        """Scale in place so the loudest sample reaching *threshold* becomes *target*.

        The loudest sample keeps its sign, so a negative peak inverts the
        polarity of the buffer.  A no-op when no sample reaches *threshold*.
        """
        normalize_samples(self._samples, target, threshold)
        return self

    def apply_clipping(self) -> AudioBuffer:
        """Apply this buffer's clip mode in place."""
        apply_clipping(self._samples, self._clip_mode)
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return self._samples.astype(WIRE_DTYPE, copy=False).tobytes()

    def load_bytes(self, data: bytes) -> AudioBuffer:
        """Replace the samples with the whole float32 values found in *data*.

        A trailing partial float is dropped.
        """
        usable = len(data) - len(data) % WIRE_DTYPE.itemsize
        if usable != len(data):
            _LOGGER.debug("discarding %d trailing bytes", len(data) - usable)
        arr = np.frombuffer(bytes(data[:usable]), dtype=WIRE_DTYPE)
        self._samples = arr.astype(np.float32)
        return self

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def push(self, sink) -> bool:
        """Hand a copy of the samples to *sink*; return its success flag."""
        return bool(sink.push(self._samples.copy(), self._sample_rate, self._channels))
