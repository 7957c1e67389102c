"""Pulsar search building blocks: folding, configuration, Taylor utilities and scoring."""

__version__ = "0.0.1"

__all__ = ["chebyshev", "configs", "fft", "fold", "psr_utils", "score", "simulation"]