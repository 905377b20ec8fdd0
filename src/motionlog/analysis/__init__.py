"""Offline helpers for recorded motion logs (currently rate estimation)."""

from .rate import RateEstimator, estimate_rate_hz

__all__ = ["RateEstimator", "estimate_rate_hz"]
