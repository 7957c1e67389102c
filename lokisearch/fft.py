"""Batched real FFTs and batched circular convolution."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


class FFT2D:
    """Circular convolution of every row of one batch with every row of another.

    ``n1`` holds ``n1x`` rows and ``n2`` holds ``n2x`` rows, each of length
    ``ny``. The result has shape ``(n1x, n2x, ny)``. Like an unnormalised
    inverse transform, it is scaled by ``ny``.
    """

    def __init__(self, n1x: int, n2x: int, ny: int) -> None:
        self.n1x = int(n1x)
        self.n2x = int(n2x)
        self.ny = int(ny)
        self.fft_size = self.ny // 2 + 1

    def _rows(self, arr: Sequence[float] | np.ndarray, nrows: int, name: str) -> np.ndarray:
        data = np.asarray(arr, dtype=np.float32)
        if data.size != nrows * self.ny:
            raise ValueError(
                f"FFT2D: {name} size does not match "
                f"(got {data.size} != {nrows * self.ny})"
            )
        return data.reshape(nrows, self.ny)

    def circular_convolve(
        self, n1: Sequence[float] | np.ndarray, n2: Sequence[float] | np.ndarray
    ) -> np.ndarray:
        """Convolve each row of ``n1`` with each row of ``n2``."""
        rows1 = self._rows(n1, self.n1x, "n1")
        rows2 = self._rows(n2, self.n2x, "n2")
        spec1 = np.fft.rfft(rows1, axis=-1)
        spec2 = np.fft.rfft(rows2, axis=-1)
        product = spec1[:, np.newaxis, :] * spec2[np.newaxis, :, :]
        out = np.fft.irfft(product, n=self.ny, axis=-1) * self.ny
        return out.astype(np.float32)


def rfft_batch(
    real_input: Sequence[float] | np.ndarray,
    batch_size: int,
    n_real: int,
    nthreads: int = 1,
) -> np.ndarray:
    """Forward real FFT of ``batch_size`` rows of length ``n_real``.

    Returns a complex64 array of shape ``(batch_size, n_real // 2 + 1)``.
    ``nthreads`` is accepted for interface compatibility.
    """
    data = np.asarray(real_input, dtype=np.float32)
    if data.size != batch_size * n_real:
        raise ValueError(
            "RFFT batch: real_input size does not match batch size "
            f"(got {data.size} != {batch_size * n_real})"
        )
    spec = np.fft.rfft(data.reshape(batch_size, n_real), axis=-1)
    return spec.astype(np.complex64)


def irfft_batch(
    complex_input: Sequence[complex] | np.ndarray,
    batch_size: int,
    n_real: int,
    nthreads: int = 1,
) -> np.ndarray:
    """Normalised inverse real FFT of ``batch_size`` spectra.

    Returns a float32 array of shape ``(batch_size, n_real)``.
    ``nthreads`` is accepted for interface compatibility.
    """
    n_complex = n_real // 2 + 1
    data = np.asarray(complex_input, dtype=np.complex64)
    if data.size != batch_size * n_complex:
        raise ValueError(
            "IRFFT batch: complex_input size does not match batch size "
            f"(got {data.size} != {batch_size * n_complex})"
        )
    real = np.fft.irfft(data.reshape(batch_size, n_complex), n=n_real, axis=-1)
    return real.astype(np.float32)