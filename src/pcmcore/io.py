"""Raw PCM file I/O for AudioBuffer.

Supported formats (detected by extension):
  .f32 / .raw -- headerless little-endian float32, interleaved

Sample rate and channel count are not stored in the file and must be
supplied when reading.
"""

from __future__ import annotations

from pathlib import Path

from pcmcore.buffer import DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE, AudioBuffer
from pcmcore.clipping import ClipMode


def read_raw(
    path: str | Path,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    channels: int = DEFAULT_CHANNELS,
    clip_mode: ClipMode | str = ClipMode.UNBOUNDED,
) -> AudioBuffer:
    """Read a raw float32 file.  A trailing partial sample is ignored."""
    data = Path(path).read_bytes()
    return AudioBuffer.from_bytes(
        data, sample_rate=sample_rate, channels=channels, clip_mode=clip_mode
    )


def write_raw(path: str | Path, buf: AudioBuffer) -> None:
    Path(path).write_bytes(buf.to_bytes())


_FORMAT_READERS = {
    ".f32": read_raw,
    ".raw": read_raw,
}

_FORMAT_WRITERS = {
    ".f32": write_raw,
    ".raw": write_raw,
}


def read(path: str | Path, **kw) -> AudioBuffer:
    """Read an audio file, dispatching on extension.

    Keyword arguments (``sample_rate``, ``channels``, ``clip_mode``) are
    passed through to the reader.
    """
    path = Path(path)
    ext = path.suffix.lower()
    reader = _FORMAT_READERS.get(ext)
    if reader is None:
        supported = ", ".join(sorted(_FORMAT_READERS))
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: {supported}")
    return reader(path, **kw)


def write(path: str | Path, buf: AudioBuffer) -> None:
    """Write an AudioBuffer, dispatching on extension."""
    path = Path(path)
    ext = path.suffix.lower()
    writer = _FORMAT_WRITERS.get(ext)
    if writer is None:
        supported = ", ".join(sorted(_FORMAT_WRITERS))
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: {supported}")
    writer(path, buf)
