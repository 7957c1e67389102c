"""Pulsar timing helpers: phase indices, Taylor step sizes and parameter shifts."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

C_VAL = 299792458.0
"""Speed of light in m/s."""


def _factorial(n: float) -> float:
    """Factorial of a non-negative integral value, as a float."""
    if n < 0:
        raise ValueError(f"Factorial is not defined for negative values (got {n})")
    return float(math.factorial(int(n)))


def get_phase_idx(
    proper_time: float, freq: float, nbins: int, delay: float = 0.0
) -> float:
    """Fractional phase bin in [0, nbins) of a sample at ``proper_time``."""
    if freq <= 0.0:
        raise ValueError(f"Frequency must be positive (got {freq})")
    if nbins <= 0:
        raise ValueError(f"Number of bins must be positive (got {nbins})")
    phase = math.fmod((proper_time + delay) * freq, 1.0)
    norm_phase = phase + 1.0 if phase < 0.0 else phase
    return norm_phase * float(nbins)


def get_phase_idx_int(
    proper_time: float, freq: float, nbins: int, delay: float = 0.0
) -> int:
    """Nearest integer phase bin, wrapped into [0, nbins)."""
    phase = get_phase_idx(proper_time, freq, nbins, delay)
    iphase = int(math.floor(phase + 0.5))
    if iphase == nbins:
        iphase = 0
    return iphase


def poly_taylor_step_f(
    nparams: int, tobs: float, fold_bins: int, tol_bins: float, t_ref: float = 0.0
) -> np.ndarray:
    """Taylor parameter step sizes in frequency units (highest order first)."""
    dphi = tol_bins / float(fold_bins)
    dt = tobs - t_ref
    dparams_f = np.empty(nparams, dtype=np.float64)
    for i in range(nparams):
        dparams_f[nparams - 1 - i] = dphi * _factorial(i + 1) / dt ** (i + 1)
    return dparams_f


def poly_taylor_step_d(
    nparams: int,
    tobs: float,
    fold_bins: int,
    tol_bins: float,
    f_max: float,
    t_ref: float = 0.0,
) -> np.ndarray:
    """Taylor parameter step sizes in derivative units; the last stays a frequency."""
    dparams_d = poly_taylor_step_f(nparams, tobs, fold_bins, tol_bins, t_ref)
    dparams_d[: nparams - 1] *= C_VAL / f_max
    return dparams_d


def poly_taylor_step_d_vec(
    nparams: int,
    tobs: float,
    fold_bins: int,
    tol_bins: float,
    f_max: Sequence[float] | np.ndarray,
    t_ref: float = 0.0,
) -> np.ndarray:
    """Batched :func:`poly_taylor_step_d` over an array of ``f_max`` values."""
    dparams_f = poly_taylor_step_f(nparams, tobs, fold_bins, tol_bins, t_ref)
    f_max_arr = np.asarray(f_max, dtype=np.float64)
    dparams = np.zeros((f_max_arr.size, nparams), dtype=np.float64)
    for i in range(nparams - 1):
        dparams[:, i] = dparams_f[i] * C_VAL / f_max_arr
    dparams[:, nparams - 1] = dparams_f[nparams - 1]
    return dparams


def split_f(
    df_old: float,
    df_new: float,
    tobs_new: float,
    k: int,
    fold_bins: float,
    tol_bins: float,
    t_ref: float = 0.0,
) -> bool:
    """Whether a step change of order ``k`` smears the profile by more than tol_bins."""
    dt = tobs_new - t_ref
    factor = dt ** (k + 1) * fold_bins / _factorial(k + 1)
    return abs(df_old - df_new) * factor > tol_bins


def poly_taylor_shift_d(
    dparam_old: Sequence[float],
    dparam_new: Sequence[float],
    tobs_new: float,
    fold_bins: int,
    f_cur: float,
    t_ref: float = 0.0,
) -> np.ndarray:
    """Phase-bin shift caused by changing the parameter step sizes."""
    old = np.asarray(dparam_old, dtype=np.float64)
    new = np.asarray(dparam_new, dtype=np.float64)
    nparams = old.size
    dt = tobs_new - t_ref
    shift = np.empty(nparams, dtype=np.float64)
    for i in range(nparams):
        factor = dt ** (i + 1) * float(fold_bins) / _factorial(i + 1)
        if i > 0:
            factor *= f_cur / C_VAL
        shift[nparams - 1 - i] = abs(old[i] - new[i]) * factor
    return shift


def poly_taylor_shift_d_vec(
    dparam_old: np.ndarray,
    dparam_new: np.ndarray,
    tobs_new: float,
    fold_bins: int,
    f_cur: Sequence[float] | np.ndarray,
    t_ref: float = 0.0,
) -> np.ndarray:
    """Batched :func:`poly_taylor_shift_d` over rows of ``(nbatch, nparams)`` arrays."""
    old = np.asarray(dparam_old, dtype=np.float64)
    new = np.asarray(dparam_new, dtype=np.float64)
    f_cur_arr = np.asarray(f_cur, dtype=np.float64)
    nbatch, nparams = old.shape
    dt = tobs_new - t_ref
    result = np.zeros((nbatch, nparams), dtype=np.float64)
    for i in range(nparams):
        k = nparams - 1 - i
        factor = dt ** (i + 1) * float(fold_bins) / _factorial(i + 1)
        diff = np.abs(old[:, i] - new[:, i])
        if i > 0:
            result[:, k] = diff * (factor * f_cur_arr / C_VAL)
        else:
            result[:, k] = diff * factor
    return result


def _transform_matrix(nparams: int, delta_t: float) -> np.ndarray:
    t_mat = np.zeros((nparams, nparams), dtype=np.float64)
    for i in range(nparams):
        for j in range(i + 1):
            power = i - j
            t_mat[i, j] = delta_t**power / _factorial(power)
    return t_mat


def shift_params_d(
    param_vec: Sequence[float], delta_t: float, n_out: int
) -> np.ndarray:
    """Shift a derivative vector by ``delta_t``; return the last ``n_out`` entries."""
    params = np.asarray(param_vec, dtype=np.float64)
    nparams = params.size
    n_out_min = min(n_out, nparams)
    t_mat = _transform_matrix(nparams, delta_t)
    return t_mat[nparams - n_out_min :] @ params


def shift_params_d_batch(
    param_vec_batch: np.ndarray, delta_t: float, n_out: int
) -> np.ndarray:
    """Batched :func:`shift_params_d` over rows of a ``(nbatch, nparams)`` array."""
    batch = np.asarray(param_vec_batch, dtype=np.float64)
    nparams = batch.shape[1]
    n_out_actual = min(n_out, nparams)
    t_mat = _transform_matrix(nparams, delta_t)
    return batch @ t_mat[nparams - n_out_actual :].T


def shift_params(
    param_vec: Sequence[float], delta_t: float
) -> tuple[np.ndarray, float]:
    """Shift Taylor parameters (frequency last) by ``delta_t``.

    Returns the new parameters and the relative delay.
    """
    params = np.asarray(param_vec, dtype=np.float64)
    nparams = params.size
    dvec_cur = np.zeros(nparams + 1, dtype=np.float64)
    if nparams > 1:
        dvec_cur[: nparams - 1] = params[:-1]
    dvec_new = shift_params_d(dvec_cur, delta_t, nparams + 1)
    param_vec_new = params.copy()
    if nparams > 1:
        param_vec_new[: nparams - 1] = dvec_new[:-2]
    param_vec_new[-1] = params[-1] * (1.0 + dvec_new[nparams - 1] / C_VAL)
    delay_rel = float(dvec_new[-1] / C_VAL)
    return param_vec_new, delay_rel


def _apply_shift(
    batch: np.ndarray, dvec_new: np.ndarray, nparams: int
) -> tuple[np.ndarray, np.ndarray]:
    param_vec_new = batch.copy()
    if nparams > 1:
        param_vec_new[:, : nparams - 1, 0] = dvec_new[:, : nparams - 1]
    freq_correction = 1.0 + dvec_new[:, nparams - 1] / C_VAL
    param_vec_new[:, nparams - 1, 0] = batch[:, nparams - 1, 0] * freq_correction
    delay_rel = dvec_new[:, nparams] / C_VAL
    return param_vec_new, delay_rel


def shift_params_batch(
    param_vec_batch: np.ndarray, delta_t: float
) -> tuple[np.ndarray, np.ndarray]:
    """Batched :func:`shift_params` on ``(size, nparams, 2)`` parameter sets."""
    batch = np.asarray(param_vec_batch, dtype=np.float64)
    size, nparams = batch.shape[0], batch.shape[1]
    dvec_cur = np.zeros((size, nparams + 1), dtype=np.float64)
    if nparams > 1:
        dvec_cur[:, : nparams - 1] = batch[:, : nparams - 1, 0]
    dvec_new = shift_params_d_batch(dvec_cur, delta_t, nparams + 1)
    return _apply_shift(batch, dvec_new, nparams)


def shift_params_circular_batch(
    param_vec_batch: np.ndarray, delta_t: float
) -> tuple[np.ndarray, np.ndarray]:
    """Shift (snap, jerk, accel, freq) sets assuming a circular orbit."""
    batch = np.asarray(param_vec_batch, dtype=np.float64)
    size, nparams = batch.shape[0], batch.shape[1]
    if nparams != 4:
        raise ValueError("4 parameters are needed for circular orbit resolve.")

    snap = batch[:, 0, 0]
    jerk = batch[:, 1, 0]
    accel = batch[:, 2, 0]
    minus_omega_sq = snap / accel
    omega = np.sqrt(-minus_omega_sq)
    max_omega = float(np.max(omega))
    required_order = min(int(max_omega * abs(delta_t) * math.e + 10), 100)

    dvec_cur = np.zeros((size, required_order + 1), dtype=np.float64)
    dvec_cur[:, required_order - 4 : required_order - 1] = batch[:, 0:3, 0]
    for power in range(5, required_order + 1):
        col_idx = required_order - power
        if power % 2 == 0:
            dvec_cur[:, col_idx] = minus_omega_sq ** ((power - 2) // 2) * accel
        else:
            dvec_cur[:, col_idx] = minus_omega_sq ** ((power - 3) // 2) * jerk

    dvec_new = shift_params_d_batch(dvec_cur, delta_t, nparams + 1)
    return _apply_shift(batch, dvec_new, nparams)


def convert_taylor_to_circular(param_sets: np.ndarray) -> np.ndarray:
    """Convert (snap, jerk, accel, freq) sets with errors to circular-orbit form.

    Output rows are (omega, freq, x_cos_phi, x_sin_phi), each with an uncertainty.
    """
    sets = np.asarray(param_sets, dtype=np.float64)
    snap, jerk, accel, freq = (sets[:, i, 0] for i in range(4))
    dsnap, djerk, daccel, dfreq = (sets[:, i, 1] for i in range(4))

    omega_sq = -snap / accel
    omega = np.sqrt(omega_sq)
    omega_sq_cubed = omega_sq * omega

    out = np.zeros_like(sets)
    out[:, 0, 0] = omega
    out[:, 1, 0] = freq * (1.0 - (-jerk / omega_sq) / C_VAL)
    out[:, 2, 0] = -accel / (omega_sq * C_VAL)
    out[:, 3, 0] = -jerk / (omega_sq_cubed * C_VAL)

    d_omega_sq = np.sqrt((dsnap / accel) ** 2 + ((snap * daccel) / accel**2) ** 2)
    out[:, 0, 1] = 0.5 * d_omega_sq / omega

    freq_term1 = ((1.0 + jerk / (omega_sq * C_VAL)) * dfreq) ** 2
    freq_term2 = ((freq / (omega_sq * C_VAL)) * djerk) ** 2
    freq_term3 = ((freq * jerk / (omega_sq**2 * C_VAL)) * d_omega_sq) ** 2
    out[:, 1, 1] = np.sqrt(freq_term1 + freq_term2 + freq_term3)

    x_cos_term1 = (daccel / (omega_sq * C_VAL)) ** 2
    x_cos_term2 = ((accel * d_omega_sq) / (omega_sq**2 * C_VAL)) ** 2
    out[:, 2, 1] = np.sqrt(x_cos_term1 + x_cos_term2)

    x_sin_term1 = (djerk / (omega_sq_cubed * C_VAL)) ** 2
    x_sin_term2 = ((1.5 * jerk * d_omega_sq) / (C_VAL * omega_sq**2.5)) ** 2
    out[:, 3, 1] = np.sqrt(x_sin_term1 + x_sin_term2)
    return out


def branch_param(
    param_cur: float,
    dparam_cur: float,
    dparam_new: float,
    param_min: float,
    param_max: float,
) -> tuple[np.ndarray, float]:
    """Split a parameter cell into finer cells; return new values and actual step."""
    if dparam_cur <= 0.0 or dparam_new <= 0.0:
        raise ValueError(
            "Both dparam_cur and dparam_new must be positive "
            f"(got {dparam_cur}, {dparam_new})"
        )
    if param_cur < param_min or param_cur > param_max:
        raise ValueError(
            f"param_cur must be within [param_min, param_max] (got {param_cur})"
        )
    if dparam_new > (param_max - param_min) / 2.0:
        return np.array([param_cur], dtype=np.float64), dparam_new
    n = 2 + int(math.ceil(dparam_cur / dparam_new))
    if n < 3:
        raise ValueError("Invalid input: ensure dparam_cur > dparam_new")

    confidence_const = 0.5 * (1.0 + 1.0 / float(n - 2))
    half_range = confidence_const * dparam_cur
    step = 2.0 * half_range / float(n - 1)
    param_arr_new = param_cur - half_range + step * np.arange(1, n - 1, dtype=np.float64)
    return param_arr_new, dparam_cur / float(n - 2)


def range_param(vmin: float, vmax: float, dv: float) -> np.ndarray:
    """Grid of cell centres covering [vmin, vmax] with spacing about ``dv``."""
    if vmin > vmax:
        raise ValueError(
            f"vmin must be less than or equal to vmax (got {vmin}, {vmax})"
        )
    if dv <= 0:
        raise ValueError(f"dv must be positive (got {dv})")
    if dv > (vmax - vmin) / 2.0:
        return np.array([(vmax + vmin) / 2.0], dtype=np.float64)
    npoints = int((vmax - vmin) / dv)
    return np.linspace(vmin, vmax, npoints + 2)[1:-1]