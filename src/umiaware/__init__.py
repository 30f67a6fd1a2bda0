"""Top-level package for umiaware.

Copyright © 2024 Pixelgen Technologies AB.
"""

from importlib import metadata

__version__ = "0.0.0"

try:
    __version__ = metadata.version("umiaware")
except metadata.PackageNotFoundError:
    pass


from umiaware.collapse import (  # noqa: E402
    UmiAwareDuplicateSetIterator,
    UmiStatisticsCollector,
    cluster_umis,
    refine_duplicate_sets,
)
from umiaware.config import UmiAwareOptions  # noqa: E402
from umiaware.report.models import UmiMetrics  # noqa: E402
from umiaware.types import DuplicateSet  # noqa: E402

__all__ = [
    "DuplicateSet",
    "UmiAwareDuplicateSetIterator",
    "UmiAwareOptions",
    "UmiMetrics",
    "UmiStatisticsCollector",
    "cluster_umis",
    "refine_duplicate_sets",
]
