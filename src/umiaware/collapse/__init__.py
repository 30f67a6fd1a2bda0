"""Copyright © 2024 Pixelgen Technologies AB."""

from umiaware.collapse.iterator import (
    StreamState,
    UmiAwareDuplicateSetIterator,
    refine_duplicate_sets,
)
from umiaware.collapse.process import (
    UmiCluster,
    cluster_umis,
    hamming_distance,
)
from umiaware.collapse.statistics import UmiStatisticsCollector

__all__ = [
    "StreamState",
    "UmiAwareDuplicateSetIterator",
    "UmiCluster",
    "UmiStatisticsCollector",
    "cluster_umis",
    "hamming_distance",
    "refine_duplicate_sets",
]
