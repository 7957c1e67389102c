"""Configuration of a pulsar search: sampling, folding and parameter grids."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Sequence

import numpy as np

from lokisearch.psr_utils import poly_taylor_step_d, poly_taylor_step_f

logger = logging.getLogger(__name__)


def _is_pow2_or_zero(value: int) -> bool:
    return (value & (value - 1)) == 0


class PulsarSearchConfig:
    """Validated search configuration with derived segment and FFA settings.

    ``param_limits`` holds one ``(min, max)`` pair per Taylor parameter,
    highest derivative first and frequency last.
    """

    def __init__(
        self,
        nsamps: int,
        tsamp: float,
        nbins: int,
        tol_bins: float,
        param_limits: Sequence[Sequence[float]],
        ducy_max: float = 0.2,
        wtsp: float = 1.5,
        prune_poly_order: int = 3,
        prune_n_derivs: int = 3,
        bseg_brute: int | None = None,
        bseg_ffa: int | None = None,
        use_fft_shifts: bool = True,
        branch_max: int = 16,
        nthreads: int = 1,
    ) -> None:
        if len(param_limits) == 0:
            raise ValueError("coord_limits must be non-empty")
        self.nsamps = int(nsamps)
        self.tsamp = float(tsamp)
        self.nbins = int(nbins)
        self.tol_bins = float(tol_bins)
        self.param_limits: list[tuple[float, float]] = [
            (float(lo), float(hi)) for lo, hi in param_limits
        ]
        self.ducy_max = float(ducy_max)
        self.wtsp = float(wtsp)
        self.prune_poly_order = int(prune_poly_order)
        self.prune_n_derivs = int(prune_n_derivs)
        self.use_fft_shifts = bool(use_fft_shifts)
        self.branch_max = int(branch_max)

        self.nparams = len(self.param_limits)
        self.f_min, self.f_max = self.param_limits[-1]
        self.bseg_brute = (
            int(bseg_brute) if bseg_brute is not None else self._bseg_brute_default()
        )
        self.bseg_ffa = int(bseg_ffa) if bseg_ffa is not None else self.nsamps
        self.nthreads = min(max(int(nthreads), 1), os.cpu_count() or 1)

        self._validate()
        self.tseg_brute = self.bseg_brute * self.tsamp
        self.tseg_ffa = self.bseg_ffa * self.tsamp
        self.niters_ffa = int(math.log2(self.bseg_ffa / self.bseg_brute))

        logger.info(
            "PulsarSearchConfig: nsamps=%s, tsamp=%s, nbins=%s, tol_bins=%s, "
            "ducy_max=%s, wtsp=%s, prune_poly_order=%s, prune_n_derivs=%s, "
            "bseg_brute=%s, bseg_ffa=%s, use_fft_shifts=%s, branch_max=%s, "
            "nthreads=%s",
            self.nsamps, self.tsamp, self.nbins, self.tol_bins, self.ducy_max,
            self.wtsp, self.prune_poly_order, self.prune_n_derivs,
            self.bseg_brute, self.bseg_ffa, self.use_fft_shifts,
            self.branch_max, self.nthreads,
        )

    def _t_ref(self, tseg_cur: float) -> float:
        return 0.0 if self.nparams == 1 else tseg_cur / 2.0

    def get_dparams_f(self, tseg_cur: float) -> np.ndarray:
        """Parameter step sizes in frequency units for a segment of ``tseg_cur``."""
        return poly_taylor_step_f(
            self.nparams, tseg_cur, self.nbins, self.tol_bins, self._t_ref(tseg_cur)
        )

    def get_dparams(self, tseg_cur: float) -> np.ndarray:
        """Parameter step sizes in derivative units for a segment of ``tseg_cur``."""
        return poly_taylor_step_d(
            self.nparams,
            tseg_cur,
            self.nbins,
            self.tol_bins,
            self.f_max,
            self._t_ref(tseg_cur),
        )

    def get_dparams_lim(self, tseg_cur: float) -> np.ndarray:
        """Step sizes capped by the width of each parameter's range."""
        dparams = self.get_dparams(tseg_cur)
        widths = np.array([hi - lo for lo, hi in self.param_limits], dtype=np.float64)
        return np.minimum(dparams, widths)

    def _bseg_brute_default(self) -> int:
        init_levels = 1 if self.nparams == 1 else 5
        levels = int(math.log2(self.nsamps * self.tsamp * self.f_min))
        shift = levels - init_levels
        if shift < 0:
            raise ValueError(
                "observation too short to derive a default bseg_brute "
                f"(levels={levels} < {init_levels})"
            )
        return self.nsamps // (1 << shift)

    def _validate(self) -> None:
        if not _is_pow2_or_zero(self.nsamps):
            raise ValueError(f"nsamps must be power of 2 (got {self.nsamps})")
        if self.tsamp <= 0:
            raise ValueError(f"tsamp must be positive (got {self.tsamp})")
        if self.tol_bins <= 0:
            raise ValueError(f"tol_bins must be positive (got {self.tol_bins})")
        if not _is_pow2_or_zero(self.bseg_brute):
            raise ValueError(f"bseg_brute must be power of 2 (got {self.bseg_brute})")
        if not _is_pow2_or_zero(self.bseg_ffa):
            raise ValueError(f"bseg_ffa must be power of 2 (got {self.bseg_ffa})")
        if self.bseg_brute > self.nsamps:
            raise ValueError(
                "bseg_brute must be less than nsamps "
                f"(got {self.bseg_brute} > {self.nsamps})"
            )
        if self.bseg_ffa > self.nsamps:
            raise ValueError(
                "bseg_ffa must be less than nsamps "
                f"(got {self.bseg_ffa} > {self.nsamps})"
            )
        if self.bseg_ffa <= self.bseg_brute:
            raise ValueError(
                "bseg_ffa must be greater than bseg_brute "
                f"(got {self.bseg_ffa} <= {self.bseg_brute})"
            )
        if self.nparams < 1:
            raise ValueError(f"nparams must be at least 1 (got {self.nparams})")
        for iparam, (lo, hi) in enumerate(self.param_limits):
            if lo >= hi:
                raise ValueError(
                    f"param_limits[{iparam}] must be increasing (got [{lo}, {hi}])"
                )