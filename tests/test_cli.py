"""Tests for the pcmcore CLI."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import numpy.testing as npt
import pytest

from pcmcore.__main__ import build_parser, main
from pcmcore.buffer import AudioBuffer
from pcmcore.io import read_raw, write_raw


# =========================================================================
# Parser
# =========================================================================


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "pcmcore" in capsys.readouterr().out

    def test_verbose_quiet_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-v", "-q", "info", "x.f32"])

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_unknown_synth_type(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["synth", "square", "-o", "x.f32"])


# =========================================================================
# End-to-end CLI tests (using tmp files)
# =========================================================================


class TestCLIEndToEnd:
    @pytest.fixture
    def raw_file(self, tmp_path):
        path = tmp_path / "test.f32"
        write_raw(path, AudioBuffer([0.25, -0.5, 0.125, 0.0]))
        return str(path)

    def test_info(self, raw_file, capsys):
        main(["info", raw_file, "--sample-rate", "8000"])
        out = capsys.readouterr().out
        assert "sample_rate: 8000" in out
        assert "samples: 4" in out

    def test_info_json(self, raw_file, capsys):
        main(["info", raw_file, "--json", "--channels", "2"])
        data = json.loads(capsys.readouterr().out)
        assert data["samples"] == 4
        assert data["frames"] == 2
        assert data["peak_db"] == "-6.0"

    def test_info_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["info", str(tmp_path / "nope.f32")])
        assert exc.value.code == 1
        assert "Error reading" in capsys.readouterr().err

    def test_synth_sine(self, tmp_path):
        out = str(tmp_path / "tone.f32")
        main(["-q", "synth", "sine", "-o", out, "--freq=440", "--sample-rate=8000"])
        assert read_raw(out).length_samples() == 8000

    def test_synth_pulse_sub_second(self, tmp_path):
        out = str(tmp_path / "pulse.f32")
        main(["-q", "synth", "pulse", "-o", out, "--duration=500", "--sample-rate=1000"])
        assert len(read_raw(out)) == 500

    def test_synth_noise_channels(self, tmp_path):
        out = str(tmp_path / "noise.f32")
        main(
            [
                "-q",
                "synth",
                "white_noise",
                "-o",
                out,
                "--sample-rate=100",
                "--channels=2",
                "--seed=1",
                "--amp=0.5",
            ]
        )
        buf = read_raw(out)
        assert len(buf) == 200
        assert set(np.unique(buf.samples)) <= {0.0, 0.5}

    def test_mix_clamp(self, raw_file, tmp_path):
        out = str(tmp_path / "mix.f32")
        main(["-q", "mix", raw_file, raw_file, raw_file, "-o", out, "--clip", "clamp"])
        npt.assert_allclose(read_raw(out).samples, [0.75, -1.0, 0.375, 0.0])

    @pytest.mark.parametrize(
        "argv",
        [
            ["synth", "white_noise", "--channels", "0"],
            ["synth", "sine", "--sample-rate", "0"],
            ["synth", "sawtooth", "--freq", "0"],
            ["synth", "silence", "--duration", "-500"],
        ],
    )
    def test_synth_bad_arguments_exit_cleanly(self, argv, tmp_path, capsys):
        out = tmp_path / "bad.f32"
        with pytest.raises(SystemExit) as exc:
            main(["-q", *argv, "-o", str(out)])
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err
        assert not out.exists()

    def test_concat(self, raw_file, tmp_path):
        out = str(tmp_path / "cat.f32")
        main(["-q", "concat", raw_file, raw_file, "-o", out])
        assert len(read_raw(out)) == 8

    def test_repeat(self, raw_file, tmp_path):
        out = str(tmp_path / "rep.f32")
        main(["-q", "repeat", raw_file, "3", "-o", out])
        assert len(read_raw(out)) == 12

    def test_repeat_negative(self, raw_file, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["-q", "repeat", raw_file, "-1", "-o", str(tmp_path / "r.f32")])
        assert exc.value.code == 1

    def test_gain_then_clamp(self, raw_file, tmp_path):
        out = str(tmp_path / "gain.f32")
        main(["-q", "gain", raw_file, "4", "-o", out, "--clip", "clamp"])
        npt.assert_allclose(read_raw(out).samples, [1.0, -1.0, 0.5, 0.0])

    def test_gain_db(self, raw_file, tmp_path):
        out = str(tmp_path / "gain.f32")
        main(["-q", "gain", raw_file, "-6", "--db", "-o", out])
        assert read_raw(out).peak == pytest.approx(0.5 * 10 ** (-6 / 20), rel=1e-5)

    def test_normalize(self, raw_file, tmp_path):
        out = str(tmp_path / "norm.f32")
        main(["-q", "normalize", raw_file, "-o", out])
        # loudest sample is -0.5, so polarity flips
        npt.assert_allclose(read_raw(out).samples, [-0.5, 1.0, -0.25, 0.0])

    def test_unsupported_output(self, raw_file, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["-q", "concat", raw_file, "-o", str(tmp_path / "x.wav")])
        assert "Error writing" in capsys.readouterr().err

    def test_fade_json(self, capsys):
        main(["fade", "--duration", "20", "--target", "-12", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["writes"] >= 1
        assert data["volume_db"][0] == pytest.approx(0.0)
        assert all(v > -12.0 for v in data["volume_db"])

    def test_wrote_message(self, raw_file, tmp_path, capsys):
        out = str(tmp_path / "cat.f32")
        main(["concat", raw_file, "-o", out])
        assert f"Wrote {out}" in capsys.readouterr().out
        assert Path(out).exists()
