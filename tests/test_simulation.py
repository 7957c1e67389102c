import numpy as np
import pytest

from lokisearch.simulation import generate_folded_profile


def test_length_and_dtype():
    profile = generate_folded_profile(64, 0.2, 0.5)
    assert profile.shape == (64,)
    assert profile.dtype == np.float32


def test_unit_l2_norm():
    profile = generate_folded_profile()
    assert float(np.sqrt(np.sum(profile.astype(np.float64) ** 2))) == pytest.approx(
        1.0, rel=1e-5
    )


def test_peak_at_center():
    profile = generate_folded_profile(100, 0.1, 0.5)
    assert int(np.argmax(profile)) == 50


def test_peak_at_shifted_center():
    profile = generate_folded_profile(100, 0.1, 0.25)
    assert int(np.argmax(profile)) == 25


def test_symmetric_about_center():
    profile = generate_folded_profile(100, 0.1, 0.5)
    for k in range(1, 20):
        assert profile[50 - k] == pytest.approx(profile[50 + k], rel=1e-4)


def test_non_negative_and_wider_with_larger_duty_cycle():
    narrow = generate_folded_profile(128, 0.05, 0.5)
    wide = generate_folded_profile(128, 0.3, 0.5)
    assert np.all(narrow >= 0.0)
    assert np.all(wide >= 0.0)
    assert np.count_nonzero(wide > 0.5 * wide.max()) > np.count_nonzero(
        narrow > 0.5 * narrow.max()
    )