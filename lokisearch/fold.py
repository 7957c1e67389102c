"""Brute-force folding of a time series at a set of trial frequencies."""

from __future__ import annotations

import os
from collections.abc import Sequence

import numpy as np


def _phase_indices(
    proper_time: np.ndarray, freq: float, nbins: int
) -> np.ndarray:
    """Nearest phase bin of each time, wrapped into [0, nbins)."""
    if freq <= 0.0:
        raise ValueError(f"Frequency must be positive (got {freq})")
    if nbins <= 0:
        raise ValueError(f"Number of bins must be positive (got {nbins})")
    phase = np.fmod(proper_time * freq, 1.0)
    phase = np.where(phase < 0.0, phase + 1.0, phase) * float(nbins)
    iphase = np.floor(phase + 0.5).astype(np.int64)
    iphase[iphase == nbins] = 0
    return iphase


class BruteFold:
    """Fold a time series segment by segment at each trial frequency.

    The fold has shape ``(nsegments, nfreqs, 2, nbins)``: signal and
    variance folded profiles for every segment and frequency.
    """

    def __init__(
        self,
        freq_arr: Sequence[float] | np.ndarray,
        segment_len: int,
        nbins: int,
        nsamps: int,
        tsamp: float,
        t_ref: float = 0.0,
        nthreads: int = 1,
    ) -> None:
        self.freq_arr = np.asarray(freq_arr, dtype=np.float64).ravel()
        if self.freq_arr.size == 0:
            raise ValueError("BruteFold: Frequency array is empty")
        self.segment_len = int(segment_len)
        self.nbins = int(nbins)
        self.nsamps = int(nsamps)
        self.tsamp = float(tsamp)
        self.t_ref = float(t_ref)
        if self.segment_len <= 0 or self.nsamps % self.segment_len != 0:
            raise ValueError(
                "BruteFold: Number of samples is not a multiple of segment length"
            )
        self.nthreads = min(max(int(nthreads), 1), os.cpu_count() or 1)
        self.nfreqs = self.freq_arr.size
        self.nsegments = self.nsamps // self.segment_len
        proper_time = np.arange(self.segment_len, dtype=np.float64) * self.tsamp - self.t_ref
        self._phase_map = np.stack(
            [_phase_indices(proper_time, freq, self.nbins) for freq in self.freq_arr]
        )

    @property
    def fold_shape(self) -> tuple[int, int, int, int]:
        return (self.nsegments, self.nfreqs, 2, self.nbins)

    @property
    def fold_size(self) -> int:
        return self.nsegments * self.nfreqs * 2 * self.nbins

    def _fold_channel(self, ts: np.ndarray) -> np.ndarray:
        segs = ts.reshape(self.nsegments, 1, self.segment_len)
        seg_offsets = (np.arange(self.nsegments) * self.nfreqs * self.nbins)[:, None, None]
        freq_offsets = (np.arange(self.nfreqs) * self.nbins)[None, :, None]
        index = seg_offsets + freq_offsets + self._phase_map[None, :, :]
        weights = np.broadcast_to(segs, index.shape)
        folded = np.bincount(
            index.ravel(),
            weights=weights.ravel(),
            minlength=self.nsegments * self.nfreqs * self.nbins,
        )
        return folded.reshape(self.nsegments, self.nfreqs, self.nbins)

    def execute(
        self, ts_e: Sequence[float] | np.ndarray, ts_v: Sequence[float] | np.ndarray
    ) -> np.ndarray:
        """Fold signal ``ts_e`` and variance ``ts_v``; both of length ``nsamps``."""
        ts_e_arr = np.asarray(ts_e, dtype=np.float32).ravel()
        ts_v_arr = np.asarray(ts_v, dtype=np.float32).ravel()
        if ts_e_arr.size != self.nsamps:
            raise ValueError(
                f"BruteFold.execute: ts_e must have size nsamps "
                f"(got {ts_e_arr.size} != {self.nsamps})"
            )
        if ts_v_arr.size != ts_e_arr.size:
            raise ValueError(
                f"BruteFold.execute: ts_v must have size nsamps "
                f"(got {ts_v_arr.size} != {ts_e_arr.size})"
            )
        fold = np.empty(self.fold_shape, dtype=np.float32)
        fold[:, :, 0, :] = self._fold_channel(ts_e_arr)
        fold[:, :, 1, :] = self._fold_channel(ts_v_arr)
        return fold


def compute_brute_fold(
    ts_e: Sequence[float] | np.ndarray,
    ts_v: Sequence[float] | np.ndarray,
    freq_arr: Sequence[float] | np.ndarray,
    segment_len: int,
    nbins: int,
    tsamp: float,
    t_ref: float = 0.0,
    nthreads: int = 1,
) -> np.ndarray:
    """Fold a time series with :class:`BruteFold` in one call."""
    nsamps = len(ts_e)
    folder = BruteFold(freq_arr, segment_len, nbins, nsamps, tsamp, t_ref, nthreads)
    return folder.execute(ts_e, ts_v)