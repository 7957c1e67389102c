"""Detection scores: boxcar S/N and matched filtering of folded profiles."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from lokisearch.fft import FFT2D


def _next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (int(n) - 1).bit_length()


def _normalise_l2(arr: np.ndarray) -> np.ndarray:
    """Zero-mean, unit-L2-norm copy of ``arr`` (norm left alone if zero)."""
    if arr.size == 0:
        return arr
    centred = (arr - np.float32(arr.sum(dtype=np.float32) / arr.size)).astype(np.float32)
    norm = np.float32(math.sqrt(float(np.dot(centred, centred))))
    if norm > 0.0:
        centred = (centred * (np.float32(1.0) / norm)).astype(np.float32)
    return centred


def _boxcar_template(width: int, nbins: int) -> np.ndarray:
    template = np.zeros(nbins, dtype=np.float32)
    template[: min(width, nbins)] = 1.0
    return _normalise_l2(template)


def _gaussian_template(width: int, nbins: int) -> np.ndarray:
    template = np.zeros(nbins, dtype=np.float32)
    sigma = np.float32(width) / np.float32(2.0 * math.sqrt(2.0 * math.log(2.0)))
    xmax = int(math.ceil(float(np.float32(3.5) * sigma)))
    gaussian_width = 2 * xmax + 1
    two_sig_sq = np.float32(2.0) * sigma * sigma
    if nbins >= gaussian_width:
        start = nbins // 2 - xmax
        x = np.arange(-xmax, xmax + 1, dtype=np.float32)
        template[start : start + gaussian_width] = np.exp(-x * x / two_sig_sq)
    else:
        x = (np.arange(nbins) - nbins // 2).astype(np.float32)
        template[:] = np.exp(-x * x / two_sig_sq)
    return _normalise_l2(template)


_TEMPLATE_BUILDERS = {
    "boxcar": _boxcar_template,
    "gaussian": _gaussian_template,
}


class MatchedFilter:
    """Matched filter of profiles against boxcar or Gaussian templates.

    Profiles are zero-padded to the next power of two bins.
    """

    def __init__(
        self,
        widths_arr: Sequence[int] | np.ndarray,
        nprofiles: int,
        nbins: int,
        shape: str = "boxcar",
    ) -> None:
        self.widths = [int(w) for w in widths_arr]
        self.nprofiles = int(nprofiles)
        self.nbins_in = int(nbins)
        self.shape = shape
        self.nbins = _next_power_of_two(self.nbins_in)
        self.ntemplates = len(self.widths)
        self._fft2d = FFT2D(self.nprofiles, self.ntemplates, self.nbins)
        try:
            builder = _TEMPLATE_BUILDERS[shape]
        except KeyError:
            raise ValueError(f"Invalid template shape: {shape}") from None
        if self.widths:
            self.templates = np.stack([builder(w, self.nbins) for w in self.widths])
        else:
            self.templates = np.zeros((0, self.nbins), dtype=np.float32)

    def compute(self, arr: Sequence[float] | np.ndarray) -> np.ndarray:
        """Best template response of each profile: shape ``(nprofiles, ntemplates)``."""
        data = np.asarray(arr, dtype=np.float32)
        if data.size != self.nprofiles * self.nbins_in:
            raise ValueError("Input array size does not match")
        padded = np.zeros((self.nprofiles, self.nbins), dtype=np.float32)
        padded[:, : self.nbins_in] = data.reshape(self.nprofiles, self.nbins_in)
        snr = self._fft2d.circular_convolve(padded, self.templates)
        return (snr.max(axis=-1) / np.float32(self.nbins)).astype(np.float32)


def generate_width_trials(nbins_max: int, wtsp: float = 1.5) -> list[int]:
    """Boxcar widths from 1 up to ``nbins_max``, growing by about ``wtsp``."""
    widths = [1]
    while widths[-1] < nbins_max:
        last = widths[-1]
        next_width = max(last + 1, int(np.float32(wtsp) * np.float32(last)))
        if next_width > nbins_max:
            break
        widths.append(next_width)
    return widths


def snr_1d(
    arr: Sequence[float] | np.ndarray,
    widths: Sequence[int] | np.ndarray,
    stdnoise: float = 1.0,
) -> np.ndarray:
    """Boxcar S/N of a single profile for each width."""
    data = np.asarray(arr, dtype=np.float32).ravel()
    width_list = [int(w) for w in widths]
    if not width_list:
        raise ValueError("widths must be non-empty")
    nbins = data.size
    wmax = max(width_list)
    psum = np.cumsum(np.resize(data, nbins + wmax), dtype=np.float32)
    total = psum[nbins - 1]
    out = np.empty(len(width_list), dtype=np.float32)
    with np.errstate(divide="ignore", invalid="ignore"):
        for iw, w in enumerate(width_list):
            h = np.float32(math.sqrt((nbins - w) / (nbins * w))) if w < nbins else np.float32(0.0)
            b = np.float32(w) * h / np.float32(nbins - w)
            dmax = np.max(psum[w : w + nbins] - psum[:nbins])
            out[iw] = ((h + b) * dmax - b * total) / np.float32(stdnoise)
    return out


def snr_2d(
    arr: Sequence[float] | np.ndarray,
    nprofiles: int,
    widths: Sequence[int] | np.ndarray,
    stdnoise: float = 1.0,
) -> np.ndarray:
    """Boxcar S/N of each of ``nprofiles`` profiles: shape ``(nprofiles, nwidths)``."""
    data = np.asarray(arr, dtype=np.float32).ravel()
    nbins = data.size // nprofiles
    profiles = data[: nprofiles * nbins].reshape(nprofiles, nbins)
    return np.stack([snr_1d(profile, widths, stdnoise) for profile in profiles])