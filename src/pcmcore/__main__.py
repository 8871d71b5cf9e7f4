"""pcmcore CLI -- synthesize, combine, level and inspect raw float32 audio files."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from pcmcore import __version__
from pcmcore.buffer import DEFAULT_SAMPLE_RATE, AudioBuffer
from pcmcore.clipping import ClipMode


# ---------------------------------------------------------------------------
# Verbosity levels
# ---------------------------------------------------------------------------

QUIET = 0
NORMAL = 1
VERBOSE = 2


def _verbosity(args: argparse.Namespace) -> int:
    """Return verbosity level from parsed args."""
    if getattr(args, "quiet", False):
        return QUIET
    if getattr(args, "verbose", False):
        return VERBOSE
    return NORMAL


def _log(args: argparse.Namespace, msg: str, level: int = NORMAL) -> None:
    """Print *msg* if verbosity >= *level*."""
    if _verbosity(args) >= level:
        print(msg)


def _log_verbose(args: argparse.Namespace, msg: str) -> None:
    """Print only when --verbose."""
    _log(args, msg, level=VERBOSE)


def _configure_logging(args: argparse.Namespace) -> None:
    level = {QUIET: logging.ERROR, NORMAL: logging.WARNING, VERBOSE: logging.DEBUG}
    logging.basicConfig(
        level=level[_verbosity(args)],
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_input(path: str, args: argparse.Namespace) -> AudioBuffer:
    """Read a raw audio file, exit on error."""
    from pcmcore.io import read

    _log_verbose(args, f"  Reading {path}")
    try:
        buf = read(
            path,
            sample_rate=args.sample_rate,
            channels=args.channels,
            clip_mode=getattr(args, "clip", None) or ClipMode.UNBOUNDED,
        )
    except (OSError, ValueError) as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        sys.exit(1)
    _log_verbose(
        args,
        f"  Loaded: {buf.channels}ch, {len(buf)} samples, {buf.sample_rate} Hz",
    )
    return buf


def _write_output(path: str, buf: AudioBuffer, args: argparse.Namespace) -> None:
    """Write a raw audio file, exit on error."""
    from pcmcore.io import write

    _log_verbose(args, f"  Writing {path} ({len(buf)} samples)")
    try:
        write(path, buf)
    except (OSError, ValueError) as e:
        print(f"Error writing {path}: {e}", file=sys.stderr)
        sys.exit(1)
    _log(args, f"Wrote {path}")


# ---------------------------------------------------------------------------
# Subcommand: info
# ---------------------------------------------------------------------------


def cmd_info(args: argparse.Namespace) -> None:
    """Print raw file metadata."""
    from pcmcore.fade import linear_to_db

    buf = _read_input(args.file, args)
    peak_db = linear_to_db(buf.peak)
    info = {
        "path": str(args.file),
        "samples": len(buf),
        "frames": buf.frames,
        "channels": buf.channels,
        "sample_rate": buf.sample_rate,
        "duration": f"{buf.duration:.3f}s",
        "peak_db": f"{peak_db:.1f}" if peak_db != float("-inf") else "-inf",
    }
    if args.json:
        print(json.dumps(info, indent=2))
    else:
        for k, v in info.items():
            print(f"  {k}: {v}")


# ---------------------------------------------------------------------------
# Subcommand: synth
# ---------------------------------------------------------------------------

# Generator name -> CLI options it accepts (besides duration/sample_rate)
_SYNTH_PARAMS: dict[str, tuple[str, ...]] = {
    "sine": ("freq", "amp"),
    "sawtooth": ("freq", "amp"),
    "triangle": ("freq", "amp"),
    "pulse": ("freq", "amp", "pulse_width"),
    "silence": (),
    "dc_offset": ("value",),
    "white_noise": ("amp", "density", "channels", "seed"),
}


def cmd_synth(args: argparse.Namespace) -> None:
    """Generate audio and write to file."""
    from pcmcore.generators import generate

    params = {"duration": args.duration, "sample_rate": args.sample_rate}
    for name in _SYNTH_PARAMS[args.synth_type]:
        value = getattr(args, name)
        if value is not None:
            params[name] = value
    _log_verbose(args, f"  {args.synth_type}({params})")
    try:
        buf = generate(args.synth_type, **params)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _write_output(args.output, buf, args)


# ---------------------------------------------------------------------------
# Subcommands: mix / concat / repeat
# ---------------------------------------------------------------------------


def cmd_mix(args: argparse.Namespace) -> None:
    """Mix inputs left to right; the first input's metadata wins."""
    bufs = [_read_input(p, args) for p in args.inputs]
    out = bufs[0]
    for b in bufs[1:]:
        out = out.mix(b)
    _write_output(args.output, out, args)


def cmd_concat(args: argparse.Namespace) -> None:
    bufs = [_read_input(p, args) for p in args.inputs]
    out = bufs[0]
    for b in bufs[1:]:
        out = out.concat(b)
    _write_output(args.output, out, args)


def cmd_repeat(args: argparse.Namespace) -> None:
    if args.count < 0:
        print(f"Error: count must be >= 0, got {args.count}", file=sys.stderr)
        sys.exit(1)
    buf = _read_input(args.file, args)
    _write_output(args.output, buf.repeat(args.count), args)


# ---------------------------------------------------------------------------
# Subcommands: gain / normalize
# ---------------------------------------------------------------------------


def cmd_gain(args: argparse.Namespace) -> None:
    buf = _read_input(args.file, args)
    if args.db:
        buf.gain_db(args.factor)
    else:
        buf.gain(args.factor)
    if args.clip:
        buf.apply_clipping()
    _write_output(args.output, buf, args)


def cmd_normalize(args: argparse.Namespace) -> None:
    buf = _read_input(args.file, args)
    before = buf.peak
    buf.normalize(args.target, threshold=args.threshold)
    _log_verbose(args, f"  Peak {before:.4f} -> {buf.peak:.4f}")
    _write_output(args.output, buf, args)


# ---------------------------------------------------------------------------
# Subcommand: fade
# ---------------------------------------------------------------------------


def cmd_fade(args: argparse.Namespace) -> None:
    """Run a fade against an in-memory sink and print the volume trace."""
    from pcmcore.fade import fade
    from pcmcore.sink import MemorySink

    sink = MemorySink(volume=args.start)
    try:
        session = asyncio.run(
            fade(sink, args.target, args.duration / 1000.0, curve=args.curve)
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    trace = sink.volume_history
    if args.json:
        print(json.dumps({"writes": session.writes, "volume_db": trace}))
    else:
        for db in trace:
            print(f"{db:.2f}")
    _log_verbose(args, f"  {session!r}")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_format_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--sample-rate",
        type=int,
        default=DEFAULT_SAMPLE_RATE,
        help=f"Sample rate in Hz (default: {DEFAULT_SAMPLE_RATE})",
    )
    p.add_argument(
        "--channels",
        type=int,
        default=1,
        help="Interleaved channel count (default: 1)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser."""
    parser = argparse.ArgumentParser(
        prog="pcmcore",
        description="pcmcore - raw float32 PCM toolkit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pcmcore {__version__}",
    )

    # Global verbosity flags (mutually exclusive)
    verb_group = parser.add_mutually_exclusive_group()
    verb_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show details about each step)",
    )
    verb_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all non-essential output",
    )

    sub = parser.add_subparsers(dest="command")
    clip_choices = [m.value for m in ClipMode]

    # --- info ---
    p_info = sub.add_parser("info", help="Show raw file metadata")
    p_info.add_argument("file", help="Input .f32/.raw file")
    p_info.add_argument("--json", action="store_true", help="Output as JSON")
    _add_format_args(p_info)

    # --- synth ---
    p_synth = sub.add_parser("synth", help="Synthesize a waveform")
    p_synth.add_argument("synth_type", choices=sorted(_SYNTH_PARAMS), help="Generator")
    p_synth.add_argument("-o", "--output", required=True, help="Output file")
    p_synth.add_argument(
        "--duration", type=float, default=1000.0, help="Duration in ms (default: 1000)"
    )
    p_synth.add_argument(
        "--sample-rate",
        type=int,
        default=DEFAULT_SAMPLE_RATE,
        help=f"Sample rate in Hz (default: {DEFAULT_SAMPLE_RATE})",
    )
    p_synth.add_argument("--freq", type=float, help="Frequency in Hz")
    p_synth.add_argument("--amp", type=float, help="Amplitude")
    p_synth.add_argument("--pulse-width", type=float, help="Pulse duty cycle (0-1)")
    p_synth.add_argument("--value", type=float, help="DC offset value")
    p_synth.add_argument("--density", type=float, help="Noise density (0-1)")
    p_synth.add_argument("--channels", type=int, help="Noise channel count")
    p_synth.add_argument("--seed", type=int, help="Noise random seed")

    # --- mix ---
    p_mix = sub.add_parser("mix", help="Sum files sample by sample")
    p_mix.add_argument("inputs", nargs="+", help="Input files")
    p_mix.add_argument("-o", "--output", required=True, help="Output file")
    p_mix.add_argument("--clip", choices=clip_choices, help="Clip mode after mixing")
    _add_format_args(p_mix)

    # --- concat ---
    p_cat = sub.add_parser("concat", help="Join files end to end")
    p_cat.add_argument("inputs", nargs="+", help="Input files")
    p_cat.add_argument("-o", "--output", required=True, help="Output file")
    _add_format_args(p_cat)

    # --- repeat ---
    p_rep = sub.add_parser("repeat", help="Repeat a file COUNT times")
    p_rep.add_argument("file", help="Input file")
    p_rep.add_argument("count", type=int, help="Repetitions")
    p_rep.add_argument("-o", "--output", required=True, help="Output file")
    _add_format_args(p_rep)

    # --- gain ---
    p_gain = sub.add_parser("gain", help="Scale samples by a factor")
    p_gain.add_argument("file", help="Input file")
    p_gain.add_argument("factor", type=float, help="Linear factor (or dB with --db)")
    p_gain.add_argument("-o", "--output", required=True, help="Output file")
    p_gain.add_argument("--db", action="store_true", help="Interpret factor as dB")
    p_gain.add_argument("--clip", choices=clip_choices, help="Clip mode applied after gain")
    _add_format_args(p_gain)

    # --- normalize ---
    p_norm = sub.add_parser("normalize", help="Scale the loudest sample to a target")
    p_norm.add_argument("file", help="Input file")
    p_norm.add_argument("-o", "--output", required=True, help="Output file")
    p_norm.add_argument("--target", type=float, default=1.0, help="Target peak (default: 1.0)")
    p_norm.add_argument(
        "--threshold", type=float, default=0.0, help="Minimum magnitude considered"
    )
    _add_format_args(p_norm)

    # --- fade ---
    p_fade = sub.add_parser("fade", help="Print the volume trace of a fade")
    p_fade.add_argument("--start", type=float, default=0.0, help="Start volume in dBFS")
    p_fade.add_argument("--target", type=float, default=-60.0, help="Target volume in dBFS")
    p_fade.add_argument("--duration", type=float, default=100.0, help="Duration in ms")
    p_fade.add_argument(
        "--curve",
        default="linear",
        choices=["linear", "equal_power", "exponential"],
        help="Interpolation curve",
    )
    p_fade.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args)

    dispatch = {
        "info": cmd_info,
        "synth": cmd_synth,
        "mix": cmd_mix,
        "concat": cmd_concat,
        "repeat": cmd_repeat,
        "gain": cmd_gain,
        "normalize": cmd_normalize,
        "fade": cmd_fade,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    handler(args)


if __name__ == "__main__":
    main()
