"""
pcmcore - in-memory PCM buffers, waveform generators and volume automation.

Submodules:
    pcmcore.buffer     - AudioBuffer (interleaved float32 samples + metadata)
    pcmcore.clipping   - Clip modes and clipping/normalization helpers
    pcmcore.curves     - Interpolation curves (linear, equal-power, exponential)
    pcmcore.generators - Sine, sawtooth, triangle, pulse, noise, silence, DC
    pcmcore.fade       - Asynchronous volume fades for a sink
    pcmcore.sink       - Sink protocols and an in-memory sink
    pcmcore.io         - Raw float32 file I/O
"""

from pcmcore.buffer import AudioBuffer
from pcmcore.clipping import ClipMode
from pcmcore.fade import FadeSession, FadeState, fade
from pcmcore.sink import BufferSink, MemorySink, VolumeSink
from pcmcore import curves, generators, io

__all__ = [
    "AudioBuffer",
    "ClipMode",
    "FadeSession",
    "FadeState",
    "fade",
    "BufferSink",
    "MemorySink",
    "VolumeSink",
    "curves",
    "generators",
    "io",
]
__version__ = "0.1.0"
