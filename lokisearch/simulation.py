"""Synthetic pulse profiles."""

from __future__ import annotations

import math

import numpy as np


def generate_folded_profile(
    nbins: int = 100, ducy: float = 0.1, center: float = 0.5
) -> np.ndarray:
    """Gaussian pulse profile of duty cycle ``ducy`` centred at phase ``center``.

    The profile has unit L2 norm and is returned as float32.
    """
    phase = np.arange(nbins, dtype=np.float32) * np.float32(1.0 / nbins)
    sigma = np.float32(ducy / (2.0 * math.sqrt(2.0 * math.log(10.0))))
    wrapped = np.fmod(phase - np.float32(center) + np.float32(0.5), np.float32(1.0))
    wrapped = wrapped - np.float32(0.5)
    profile = np.exp(-(wrapped * wrapped) / (np.float32(2.0) * sigma * sigma))
    profile = profile.astype(np.float32)
    profile /= profile.max()
    profile /= np.sqrt(np.dot(profile, profile))
    return profile.astype(np.float32)