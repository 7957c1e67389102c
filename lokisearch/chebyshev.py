"""Chebyshev polynomial coefficient tables."""

from __future__ import annotations

import math

import numpy as np


def generate_cheb_table(order_max: int, n_derivs: int) -> np.ndarray:
    """Power-series coefficients of Chebyshev polynomials and their derivatives.

    Returns a float32 array of shape ``(n_derivs + 1, order_max + 1, order_max + 1)``
    where ``tab[d, n, k]`` is the coefficient of ``x**k`` in the ``d``-th
    derivative of ``T_n``.
    """
    size = order_max + 1
    tab = np.zeros((n_derivs + 1, size, size), dtype=np.float32)
    tab[0, 0, 0] = 1.0
    if order_max >= 1:
        tab[0, 1, 1] = 1.0
    for jorder in range(2, size):
        prev = tab[0, jorder - 1]
        prev2 = tab[0, jorder - 2]
        tab[0, jorder] = 2.0 * np.roll(prev, 1) - prev2

    factor = np.arange(1, size + 1, dtype=np.float32)
    for ideriv in range(1, n_derivs + 1):
        for jorder in range(1, size):
            rolled = np.roll(tab[ideriv - 1, jorder], -1)
            tab[ideriv, jorder] = rolled * factor
            tab[ideriv, jorder, order_max] = 0.0
    return tab


def generalized_cheb_pols(poly_order: int, t0: float, scale: float) -> np.ndarray:
    """Chebyshev coefficients rescaled by ``scale`` and shifted by ``t0``."""
    size = poly_order + 1
    cheb_pols = generate_cheb_table(poly_order, 0)[0]
    scale_factor = np.power(
        np.float32(1.0 / scale), np.arange(size, dtype=np.float32)
    ).astype(np.float32)
    scaled_pols = (cheb_pols * scale_factor[np.newaxis, :]).astype(np.float32)

    shift = -t0 / scale
    shifted_pols = np.zeros((size, size), dtype=np.float32)
    for iorder in range(size):
        for iterm in range(iorder + 1):
            shifted_pols[iorder, iterm] = math.comb(iorder, iterm) * shift ** (
                iorder - iterm
            )
    return (scaled_pols @ shifted_pols).astype(np.float32)