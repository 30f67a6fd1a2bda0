"""
This module contains helper typehints and the records shared by the
umiaware package.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterator, Optional, Protocol, Sequence, Tuple, runtime_checkable

# type alias for UMI sequences
Umi = str


@runtime_checkable
class TaggedRead(Protocol):
    """A read carrying tags, e.g. a `pysam.AlignedSegment`.

    Only the tag interface is used; everything else about the read is opaque.
    """

    def has_tag(self, tag: str) -> bool: ...

    def get_tag(self, tag: str) -> Any: ...

    def set_tag(self, tag: str, value: Any) -> None: ...


@dataclasses.dataclass(frozen=True, slots=True)
class DuplicateSet:
    """A refined duplicate set.

    :ivar reads: the reads of the set, in the order of the input set
    :ivar umi: the inferred UMI shared by all reads, or None for the set
               of reads that carry no UMI
    :ivar observed_umis: the distinct observed UMIs merged into this set
    """

    reads: Tuple[TaggedRead, ...]
    umi: Optional[Umi] = None
    observed_umis: Tuple[Umi, ...] = ()

    def __post_init__(self) -> None:
        if not self.reads:
            raise ValueError("A duplicate set must contain at least one read")

    def __len__(self) -> int:
        return len(self.reads)

    def __iter__(self) -> Iterator[TaggedRead]:
        return iter(self.reads)

    @property
    def representative(self) -> TaggedRead:
        """Return the first read of the set."""
        return self.reads[0]


# an input duplicate set, as produced upstream
InputDuplicateSet = Sequence[TaggedRead]
