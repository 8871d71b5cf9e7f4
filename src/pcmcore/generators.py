"""Waveform generators returning freshly allocated AudioBuffers.

Every generator takes *duration* in milliseconds.  Sine, sawtooth, silence,
DC offset and white noise truncate the duration to whole seconds before
multiplying by the sample rate, so anything under 1000 ms yields an empty
buffer.  Triangle and pulse use floating point division and keep sub-second
lengths.
"""

from __future__ import annotations

import numpy as np

from pcmcore.buffer import DEFAULT_SAMPLE_RATE, AudioBuffer


# ---------------------------------------------------------------------------
# Length helpers
# ---------------------------------------------------------------------------


def _check_format(duration: float, sample_rate: int) -> None:
    if sample_rate < 1:
        raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")
    if duration < 0:
        raise ValueError(f"duration must be >= 0, got {duration}")


def _whole_second_samples(duration: float, sample_rate: int) -> int:
    _check_format(duration, sample_rate)
    return (int(duration) // 1000) * sample_rate


def _exact_samples(duration: float, sample_rate: int) -> int:
    _check_format(duration, sample_rate)
    return int(duration / 1000.0 * sample_rate)


def _period(freq: float, sample_rate: int) -> float:
    """Period in samples; *freq* must be positive."""
    if freq <= 0:
        raise ValueError(f"freq must be > 0, got {freq}")
    return sample_rate / freq


def _mono(samples: np.ndarray, sample_rate: int) -> AudioBuffer:
    return AudioBuffer(samples, sample_rate=sample_rate)


# ---------------------------------------------------------------------------
# Periodic waveforms
# ---------------------------------------------------------------------------


def sine(
    freq: float = 440.0,
    duration: float = 1000,
    amp: float = 1.0,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    """Sine wave, phase starting at zero."""
    n = _whole_second_samples(duration, sample_rate)
    phase = np.arange(n, dtype=np.float64) * (2.0 * np.pi * freq / sample_rate)
    return _mono(amp * np.sin(phase), sample_rate)


def sawtooth(
    freq: float = 440.0,
    duration: float = 1000,
    amp: float = 1.0,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    """Rising ramp from ``-amp`` towards ``amp`` once per period."""
    n = _whole_second_samples(duration, sample_rate)
    period = _period(freq, sample_rate)
    t = np.arange(n, dtype=np.float64)
    return _mono(amp * (2.0 * np.mod(t, period) / period - 1.0), sample_rate)


def triangle(
    freq: float = 440.0,
    duration: float = 1000.0,
    amp: float = 1.0,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    """Triangle wave rising over the first half period, falling over the second."""
    n = _exact_samples(duration, sample_rate)
    period = _period(freq, sample_rate)
    half = period / 2.0
    pos = np.mod(np.arange(n, dtype=np.float64), period)
    rising = pos < half
    out = np.where(
        rising,
        -amp + 2.0 * amp * pos / half,
        amp - 2.0 * amp * (pos - half) / half,
    )
    return _mono(out, sample_rate)


def pulse(
    freq: float = 440.0,
    duration: float = 1000.0,
    pulse_width: float = 0.5,
    amp: float = 1.0,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    """Unipolar pulse: *amp* for the first ``pulse_width`` of each period, else 0."""
    n = _exact_samples(duration, sample_rate)
    period = _period(freq, sample_rate)
    pos = np.mod(np.arange(n, dtype=np.float64), period)
    return _mono(np.where(pos < period * pulse_width, amp, 0.0), sample_rate)


# ---------------------------------------------------------------------------
# Constant signals
# ---------------------------------------------------------------------------


def silence(
    duration: float = 1000,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    return AudioBuffer.zeros(_whole_second_samples(duration, sample_rate), sample_rate)


def dc_offset(
    value: float = 0.0,
    duration: float = 1000,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> AudioBuffer:
    n = _whole_second_samples(duration, sample_rate)
    return _mono(np.full(n, value, dtype=np.float32), sample_rate)


# ---------------------------------------------------------------------------
# Noise
# ---------------------------------------------------------------------------


def white_noise(
    duration: float = 1000,
    density: float = 1.0,
    amp: float = 1.0,
    channels: int = 1,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    seed: int | None = None,
) -> AudioBuffer:
    """Bernoulli impulse noise.

    *density* is clamped to ``[0, 1]`` and halved; each interleaved sample is
    independently *amp* with that probability and 0 otherwise.
    """
    if channels < 1:
        raise ValueError(f"channels must be >= 1, got {channels}")
    n = _whole_second_samples(duration, sample_rate) * channels
    probability = min(max(density, 0.0), 1.0) / 2.0
    rng = np.random.default_rng(seed)
    hits = rng.random(n) < probability
    return AudioBuffer(
        np.where(hits, amp, 0.0),
        sample_rate=sample_rate,
        channels=channels,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

GENERATORS = {
    "sine": sine,
    "sawtooth": sawtooth,
    "triangle": triangle,
    "pulse": pulse,
    "silence": silence,
    "dc_offset": dc_offset,
    "white_noise": white_noise,
}


def generate(name: str, **params) -> AudioBuffer:
    """Call the generator registered under *name* with *params*."""
    key = name.lower().replace("-", "_")
    if key not in GENERATORS:
        raise ValueError(
            f"Unknown generator {name!r}, valid names: {list(GENERATORS.keys())}"
        )
    return GENERATORS[key](**params)
