import numpy as np
import pytest

from lokisearch.fold import BruteFold, compute_brute_fold


def random_series(n, seed=0):
    rng = np.random.default_rng(seed)
    return rng.random(n).astype(np.float32), rng.random(n).astype(np.float32)


def test_fold_shape_and_size():
    bf = BruteFold([1.0, 2.0, 3.0], segment_len=16, nbins=8, nsamps=64, tsamp=0.01)
    ts_e, ts_v = random_series(64)
    fold = bf.execute(ts_e, ts_v)
    assert fold.shape == (4, 3, 2, 8)
    assert bf.fold_size == fold.size
    assert fold.dtype == np.float32


def test_each_sample_lands_in_one_bin():
    bf = BruteFold([1.3, 7.7], segment_len=32, nbins=16, nsamps=128, tsamp=0.013)
    ts_e, ts_v = random_series(128, seed=3)
    fold = bf.execute(ts_e, ts_v)
    seg_e = ts_e.reshape(4, 32).sum(axis=1)
    seg_v = ts_v.reshape(4, 32).sum(axis=1)
    for ifreq in range(2):
        np.testing.assert_allclose(fold[:, ifreq, 0, :].sum(axis=1), seg_e, rtol=1e-5)
        np.testing.assert_allclose(fold[:, ifreq, 1, :].sum(axis=1), seg_v, rtol=1e-5)


def test_period_matching_bins_folds_modulo():
    ts_e = np.arange(8, dtype=np.float32)
    ts_v = np.ones(8, dtype=np.float32)
    fold = compute_brute_fold(ts_e, ts_v, [0.25], segment_len=8, nbins=4, tsamp=1.0)
    for ibin in range(4):
        assert fold[0, 0, 0, ibin] == ts_e[ibin] + ts_e[ibin + 4]
        assert fold[0, 0, 1, ibin] == 2.0


def test_compute_matches_class():
    ts_e, ts_v = random_series(64, seed=5)
    freqs = [2.0, 4.5]
    bf = BruteFold(freqs, 32, 8, 64, 0.01, t_ref=0.05)
    expected = bf.execute(ts_e, ts_v)
    got = compute_brute_fold(ts_e, ts_v, freqs, 32, 8, 0.01, t_ref=0.05)
    np.testing.assert_array_equal(got, expected)


def test_execute_is_repeatable():
    bf = BruteFold([3.0], 16, 8, 32, 0.02)
    ts_e, ts_v = random_series(32, seed=7)
    np.testing.assert_array_equal(bf.execute(ts_e, ts_v), bf.execute(ts_e, ts_v))


def test_empty_frequency_array():
    with pytest.raises(ValueError, match="Frequency array is empty"):
        BruteFold([], 16, 8, 32, 0.01)


def test_nsamps_not_multiple_of_segment():
    with pytest.raises(ValueError, match="multiple of segment length"):
        BruteFold([1.0], 10, 8, 32, 0.01)


def test_nonpositive_frequency():
    with pytest.raises(ValueError, match="Frequency must be positive"):
        BruteFold([0.0], 16, 8, 32, 0.01)


def test_wrong_series_length():
    bf = BruteFold([1.0], 16, 8, 32, 0.01)
    ts_e, ts_v = random_series(16)
    with pytest.raises(ValueError, match="ts_e must have size nsamps"):
        bf.execute(ts_e, ts_v)


def test_mismatched_variance_length():
    bf = BruteFold([1.0], 16, 8, 32, 0.01)
    ts_e, _ = random_series(32)
    with pytest.raises(ValueError, match="ts_v must have size nsamps"):
        bf.execute(ts_e, np.ones(31, dtype=np.float32))