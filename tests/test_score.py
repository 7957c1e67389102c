import math

import numpy as np
import pytest

from lokisearch.score import MatchedFilter, generate_width_trials, snr_1d, snr_2d


def _boxcar_pulse(nbins, width, start=0):
    arr = np.zeros(nbins, dtype=np.float32)
    arr[start : start + width] = 1.0
    return arr


def test_width_trials_increasing_and_bounded():
    widths = generate_width_trials(64, 1.5)
    assert widths[0] == 1
    assert all(b > a for a, b in zip(widths, widths[1:]))
    assert widths[-1] <= 64


def test_width_trials_unit_spacing():
    assert generate_width_trials(10, 1.0) == list(range(1, 11))


def test_snr_1d_constant_profile_is_zero():
    out = snr_1d(np.full(32, 3.0, dtype=np.float32), [1, 2, 4, 8])
    np.testing.assert_allclose(out, 0.0, atol=1e-4)


def test_snr_1d_boxcar_pulse_matches_formula():
    n, w = 32, 4
    out = snr_1d(_boxcar_pulse(n, w), [w])
    assert out[0] == pytest.approx(math.sqrt(w * (n - w) / n), rel=1e-5)


def test_snr_1d_roll_invariant_and_stdnoise_scaling():
    arr = _boxcar_pulse(32, 5, start=30)
    widths = [1, 3, 5, 7]
    base = snr_1d(arr, widths)
    np.testing.assert_allclose(snr_1d(np.roll(arr, 7), widths), base, rtol=1e-5)
    np.testing.assert_allclose(snr_1d(arr, widths, 2.0), base / 2, rtol=1e-6)


def test_snr_1d_empty_widths():
    with pytest.raises(ValueError):
        snr_1d(np.ones(8), [])


def test_snr_2d_matches_rows():
    rng = np.random.default_rng(4)
    arr = rng.standard_normal((3, 16)).astype(np.float32)
    widths = [1, 2, 4]
    out = snr_2d(arr.ravel(), 3, widths)
    assert out.shape == (3, 3)
    for row, profile in zip(out, arr):
        np.testing.assert_allclose(row, snr_1d(profile, widths), rtol=1e-6)


@pytest.mark.parametrize("shape", ["boxcar", "gaussian"])
def test_templates_zero_mean_unit_norm(shape):
    mf = MatchedFilter([1, 3, 9], 2, 50, shape)
    assert mf.nbins == 64
    assert mf.templates.shape == (3, 64)
    np.testing.assert_allclose(mf.templates.sum(axis=1), 0.0, atol=1e-5)
    np.testing.assert_allclose(np.linalg.norm(mf.templates, axis=1), 1.0, rtol=1e-5)


def test_gaussian_template_peaks_at_centre():
    mf = MatchedFilter([4], 1, 32, "gaussian")
    assert int(np.argmax(mf.templates[0])) == 16


def test_gaussian_template_truncated_when_wide():
    mf = MatchedFilter([40], 1, 16, "gaussian")
    assert mf.templates.shape == (1, 16)
    assert np.linalg.norm(mf.templates[0]) == pytest.approx(1.0, rel=1e-5)


def test_invalid_shape():
    with pytest.raises(ValueError):
        MatchedFilter([1], 1, 16, "triangle")


def test_compute_size_mismatch():
    mf = MatchedFilter([1, 2], 2, 16)
    with pytest.raises(ValueError):
        mf.compute(np.zeros(16))


def test_boxcar_matched_filter_agrees_with_snr_1d():
    n = 32
    widths = [2, 4, 8]
    arr = np.stack([_boxcar_pulse(n, 4, start=5), _boxcar_pulse(n, 8, start=20)])
    mf = MatchedFilter(widths, 2, n, "boxcar")
    out = mf.compute(arr)
    assert out.shape == (2, 3)
    np.testing.assert_allclose(out, snr_2d(arr, 2, widths), rtol=1e-4, atol=1e-5)