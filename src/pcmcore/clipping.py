"""Clipping policies applied to flat float32 sample arrays."""

from __future__ import annotations

import enum
import logging

import numpy as np

_LOGGER = logging.getLogger("pcmcore.clipping")


class ClipMode(enum.Enum):
    """How out-of-range samples are resolved after a mixing operation."""

    UNBOUNDED = "unbounded"
    CLAMP = "clamp"
    RESCALE = "rescale"

    @classmethod
    def parse(cls, mode: ClipMode | str) -> ClipMode:
        if isinstance(mode, ClipMode):
            return mode
        try:
            return cls(mode.lower())
        except ValueError:
            valid = [m.value for m in cls]
            raise ValueError(f"Unknown clip mode {mode!r}, valid: {valid}") from None


def clamp(samples: np.ndarray) -> np.ndarray:
    """Clamp every sample into ``[-1, 1]`` in place."""
    np.clip(samples, -1.0, 1.0, out=samples)
    return samples


def find_loudest(samples: np.ndarray, threshold: float = 0.0) -> float:
    """Return the signed value of the loudest sample with ``|s| >= threshold``.

    Ties keep the earliest sample. Returns 0.0 when nothing qualifies.
    """
    if samples.size == 0:
        return 0.0
    mags = np.abs(samples)
    candidates = np.nonzero(mags >= threshold)[0]
    if candidates.size == 0:
        return 0.0
    # argmax returns the first occurrence of the maximum
    idx = candidates[np.argmax(mags[candidates])]
    return float(samples[idx])


def normalize_samples(
    samples: np.ndarray,
    target: float,
    threshold: float = 0.0,
) -> np.ndarray:
    """Scale *samples* in place by ``target / loudest``.

    ``loudest`` keeps its sign, so a negative peak inverts polarity. When no
    sample reaches *threshold* the array is left untouched.
    """
    loudest = find_loudest(samples, threshold)
    if loudest == 0.0:
        _LOGGER.debug("normalize skipped: no sample reached threshold %s", threshold)
        return samples
    # scale in double precision; the factor alone may not fit in float32
    samples[:] = samples.astype(np.float64) * (target / loudest)
    return samples


def apply_clipping(samples: np.ndarray, mode: ClipMode) -> np.ndarray:
    """Apply *mode* to *samples* in place and return them."""
    if mode is ClipMode.CLAMP:
        return clamp(samples)
    if mode is ClipMode.RESCALE:
        return normalize_samples(samples, target=1.0, threshold=1.0)
    return samples
