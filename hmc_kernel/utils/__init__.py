"""Utility helpers for :mod:`hmc_kernel`."""

from .logging import setup_logging

__all__ = ["setup_logging"]
