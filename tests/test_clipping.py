"""Tests for pcmcore.clipping."""

import numpy as np
import numpy.testing as npt
import pytest

from pcmcore.clipping import (
    ClipMode,
    apply_clipping,
    clamp,
    find_loudest,
    normalize_samples,
)


class TestClipMode:
    def test_parse_string(self):
        assert ClipMode.parse("CLAMP") is ClipMode.CLAMP

    def test_parse_member(self):
        assert ClipMode.parse(ClipMode.RESCALE) is ClipMode.RESCALE

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="valid"):
            ClipMode.parse("soft")


class TestFindLoudest:
    def test_keeps_sign(self):
        assert find_loudest(np.float32([0.1, -0.8, 0.5])) == pytest.approx(-0.8)

    def test_threshold(self):
        s = np.float32([0.4, 0.6, -0.9])
        assert find_loudest(s, threshold=0.95) == 0.0
        assert find_loudest(s, threshold=0.5) == pytest.approx(-0.9)

    def test_threshold_inclusive(self):
        assert find_loudest(np.float32([1.0, 0.2]), threshold=1.0) == 1.0

    def test_empty(self):
        assert find_loudest(np.zeros(0, dtype=np.float32)) == 0.0


class TestNormalizeSamples:
    def test_target(self):
        s = np.float32([0.2, -0.4])
        normalize_samples(s, 0.8)
        # loudest is -0.4, so the factor is -2 and polarity flips
        npt.assert_allclose(s, [-0.4, 0.8], rtol=1e-6)

    def test_no_qualifying_sample_is_no_op(self):
        s = np.float32([0.2, -0.4])
        normalize_samples(s, 1.0, threshold=1.0)
        npt.assert_allclose(s, [0.2, -0.4])


class TestApplyClipping:
    def test_unbounded(self):
        s = np.float32([4.0, -4.0])
        npt.assert_array_equal(apply_clipping(s, ClipMode.UNBOUNDED), [4.0, -4.0])

    def test_clamp_range(self):
        rng = np.random.default_rng(0)
        s = (rng.standard_normal(1000) * 3).astype(np.float32)
        apply_clipping(s, ClipMode.CLAMP)
        assert s.min() >= -1.0
        assert s.max() <= 1.0

    def test_clamp_in_place(self):
        s = np.float32([2.0, 0.5])
        assert clamp(s) is s
        npt.assert_array_equal(s, [1.0, 0.5])

    def test_rescale_peak(self):
        s = np.float32([0.5, 1.5, -3.0])
        apply_clipping(s, ClipMode.RESCALE)
        assert np.max(np.abs(s)) == pytest.approx(1.0)

    def test_rescale_unchanged_below_one(self):
        s = np.float32([0.5, -0.75])
        apply_clipping(s, ClipMode.RESCALE)
        npt.assert_array_equal(s, np.float32([0.5, -0.75]))


class TestNormalizeLargeFactor:
    def test_factor_beyond_float32_range(self):
        s = np.float32([1e-10, -5e-11])
        with np.errstate(over="raise"):
            normalize_samples(s, 1e30)
        assert np.all(np.isfinite(s))
        npt.assert_allclose(s, [1e30, -5e29], rtol=1e-6)
