"""Reporting models for UMI-aware duplicate set refinement.

Copyright © 2024 Pixelgen Technologies AB.
"""

from umiaware.report.models import UmiMetrics

__all__ = ["UmiMetrics"]
