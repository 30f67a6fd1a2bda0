"""Utilities for testing umiaware.

Copyright © 2024 Pixelgen Technologies AB.
"""

from umiaware.test_utils.simulation import (
    DuplicateSetSimulator,
    SimulatedRead,
    make_reads,
)

__all__ = ["DuplicateSetSimulator", "SimulatedRead", "make_reads"]
