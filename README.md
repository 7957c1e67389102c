# lokisearch

Building blocks for periodicity searches in pulsar time series, built on numpy.

## Installation

```
pip install .
```

With the test requirements:

```
pip install ".[test]"
```

## Modules

- `lokisearch.psr_utils`
  - `get_phase_idx`, `get_phase_idx_int`: fractional and nearest-integer phase
    bin of a sample, wrapped into `[0, nbins)`.
  - `poly_taylor_step_f`, `poly_taylor_step_d`, `poly_taylor_step_d_vec`:
    Taylor-parameter step sizes for a given tolerance in bins (highest
    derivative first, frequency last).
  - `split_f`, `poly_taylor_shift_d`, `poly_taylor_shift_d_vec`: phase smearing
    caused by changing step sizes.
  - `shift_params_d`, `shift_params_d_batch`, `shift_params`,
    `shift_params_batch`, `shift_params_circular_batch`: move parameter sets to
    a new reference time, returning the new parameters and the relative delay.
  - `convert_taylor_to_circular`: (snap, jerk, accel, freq) sets with
    uncertainties to circular-orbit parameters with uncertainties.
  - `range_param`, `branch_param`: parameter grids and cell refinement.
  - `C_VAL`: speed of light in m/s.
- `lokisearch.chebyshev`
  - `generate_cheb_table`: power-series coefficients of Chebyshev polynomials
    and their derivatives, as a float32 array.
  - `generalized_cheb_pols`: Chebyshev coefficients scaled by `scale` and
    shifted to origin `t0`.
- `lokisearch.configs`
  - `PulsarSearchConfig`: validates a search setup (power-of-two sample and
    segment counts, positive `tsamp` and `tol_bins`, increasing parameter
    limits) and derives `bseg_brute`, `bseg_ffa`, `tseg_brute`, `tseg_ffa`,
    `niters_ffa`, `f_min`, `f_max`. Methods `get_dparams_f`, `get_dparams` and
    `get_dparams_lim` give parameter steps for a segment duration. Invalid
    setups raise `ValueError`.
- `lokisearch.fold`
  - `BruteFold`: folds a signal and its variance into phase bins for each
    trial frequency, segment by segment. `execute` returns a float32 array of
    shape `(nsegments, nfreqs, 2, nbins)`; `fold_shape` and `fold_size` give
    its shape and size.
  - `compute_brute_fold`: the same in one call.
- `lokisearch.simulation`
  - `generate_folded_profile`: a Gaussian pulse profile with unit L2 norm.
- `lokisearch.fft`
  - `rfft_batch`, `irfft_batch`: batched forward and normalised inverse real
    FFTs. Their `nthreads` argument is accepted but has no effect.
  - `FFT2D`: circular convolution of every row of one batch with every row of
    another; the result has shape `(n1x, n2x, ny)` and is scaled by `ny`.
- `lokisearch.score`
  - `snr_1d`, `snr_2d`: boxcar S/N of one or many profiles for a list of widths.
  - `generate_width_trials`: boxcar widths from 1 up to `nbins_max`.
  - `MatchedFilter`: boxcar or Gaussian templates (`templates`), with profiles
    zero-padded to the next power of two bins; `compute` returns the best
    template response, shape `(nprofiles, ntemplates)`.

## Example

```python
import numpy as np
from lokisearch.fold import compute_brute_fold
from lokisearch.score import generate_width_trials, snr_1d
from lokisearch.simulation import generate_folded_profile

profile = generate_folded_profile(64, 0.1, 0.5)
widths = generate_width_trials(16, 1.5)
scores = snr_1d(profile, widths, 1.0)

ts = np.random.default_rng(0).normal(size=1024).astype(np.float32)
fold = compute_brute_fold(ts, np.ones_like(ts), [10.0, 10.5], 256, 32, 1e-3, 0.0, 1)
# fold.shape == (4, 2, 2, 32)
```

## What it does not do

The package supplies the pieces of a search, not a complete search. It does
not run the iterative fast-folding stages that `PulsarSearchConfig`'s
`niters_ffa` and segment settings describe, does not build a plan of parameter
coordinates for them, and has no pruning, dynamic-threshold scheme or
command-line tool. It reads and writes no data files.

## Tests

```
pytest
```