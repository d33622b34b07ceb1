"""consentcalc - Statutory working-day timeframe calculator for resource
consent applications."""

__version__ = "0.1.0"

from consentcalc.cli.app import main

__all__ = ["main"]
