"""Break duplicate sets up into smaller sets based on the UMIs of their reads.

Copyright © 2024 Pixelgen Technologies AB.
"""

import enum
import logging
from collections import deque
from typing import Any, Deque, Iterable, Iterator, List, Optional, Tuple

from umiaware.collapse.process import cluster_umis, group_reads_by_umi
from umiaware.collapse.statistics import UmiStatisticsCollector
from umiaware.config import UmiAwareOptions
from umiaware.exception import ConfigurationError, ProtocolError
from umiaware.report.models import UmiMetrics
from umiaware.types import DuplicateSet, InputDuplicateSet

logger = logging.getLogger(__name__)

_END_OF_SOURCE = object()


class StreamState(enum.Enum):
    """The states of a :class:`UmiAwareDuplicateSetIterator`."""

    READY = "ready"
    STREAMING = "streaming"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


class UmiAwareDuplicateSetIterator:
    """Iterate over duplicate sets broken up by the UMIs of their reads.

    Wraps an iterable of duplicate sets (sequences of reads sharing an
    alignment position) and yields, for each of them, one
    :class:`DuplicateSet` per cluster of UMIs within
    `max_edit_distance_to_join` of each other. The inferred UMI of each
    cluster is written to the `inferred_umi_key` tag of its reads.

    Statistics about the UMIs are collected as the sets are processed and
    finalized into :class:`UmiMetrics` when the iterator is closed. The
    iterator must be closed exactly once, which also closes the wrapped
    source; using it as a context manager takes care of this.

    >>> with UmiAwareDuplicateSetIterator(sets) as it:  # doctest: +SKIP
    ...     for duplicate_set in it:
    ...         mark_duplicates(duplicate_set)
    >>> it.metrics  # doctest: +SKIP
    """

    def __init__(
        self,
        duplicate_sets: Iterable[InputDuplicateSet],
        options: Optional[UmiAwareOptions] = None,
        collector: Optional[UmiStatisticsCollector] = None,
        **kwargs: Any,
    ) -> None:
        """Create a UmiAwareDuplicateSetIterator.

        :param duplicate_sets: the source of duplicate sets to break up
        :param options: the options to use, defaults are used if None
        :param collector: the collector to feed statistics to, a new one is
            created if None
        :param kwargs: overrides of individual fields of `options`
        :raises ConfigurationError: if `collector` joins UMIs at another
            distance than `options`
        """
        if options is None:
            options = UmiAwareOptions()
        if kwargs:
            options = UmiAwareOptions(**{**options.model_dump(), **kwargs})
        self.options = options

        self._source = duplicate_sets
        self._upstream: Iterator[InputDuplicateSet] = iter(duplicate_sets)
        self._lookahead: Any = None
        self._buffer: Deque[DuplicateSet] = deque()
        if collector is None:
            collector = UmiStatisticsCollector(options.max_edit_distance_to_join)
        elif collector.max_edit_distance_to_join != options.max_edit_distance_to_join:
            raise ConfigurationError(
                "The collector joins UMIs at distance "
                f"{collector.max_edit_distance_to_join}, but the options join them "
                f"at {options.max_edit_distance_to_join}"
            )
        self._collector = collector
        self._n_input_sets = 0
        self.state = StreamState.READY

    def __enter__(self) -> "UmiAwareDuplicateSetIterator":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self.state is not StreamState.CLOSED:
            self.close()

    def __iter__(self) -> "UmiAwareDuplicateSetIterator":
        return self

    def __next__(self) -> DuplicateSet:
        if not self.has_next():
            raise StopIteration
        return self.next()

    @property
    def collector(self) -> UmiStatisticsCollector:
        """Return the statistics collector fed by this iterator."""
        return self._collector

    @property
    def metrics(self) -> UmiMetrics:
        """Return the metrics of the run.

        :raises ProtocolError: if the iterator has not been closed
        """
        if self.state is not StreamState.CLOSED:
            raise ProtocolError("Metrics are only available after close()")
        return self._collector.metrics

    def _upstream_has_next(self) -> bool:
        if self._lookahead is None:
            self._lookahead = next(self._upstream, _END_OF_SOURCE)
        return self._lookahead is not _END_OF_SOURCE

    def _pull(self) -> InputDuplicateSet:
        duplicate_set = self._lookahead
        self._lookahead = None
        return duplicate_set

    def has_next(self) -> bool:
        """Return True if there are more duplicate sets to return.

        Once the source and the buffer are both drained the iterator moves
        to the EXHAUSTED state, where it only waits to be closed.
        """
        if self.state is StreamState.CLOSED:
            return False
        if self._buffer or self._upstream_has_next():
            return True
        self.state = StreamState.EXHAUSTED
        return False

    def next(self) -> DuplicateSet:
        """Return the next refined duplicate set.

        Pulls and processes one input set from the source whenever the
        sets produced from the previous input set have all been returned.

        :returns: the next duplicate set
        :raises ProtocolError: if the iterator is exhausted or closed
        """
        if self.state is StreamState.CLOSED:
            raise ProtocolError("Cannot pull from a closed duplicate set iterator")

        if not self._buffer:
            if not self._upstream_has_next():
                self.state = StreamState.EXHAUSTED
                raise ProtocolError("The duplicate set iterator is exhausted")
            self.state = StreamState.STREAMING
            self._n_input_sets += 1
            self._process(self._pull())
        return self._buffer.popleft()

    def _process(self, reads: InputDuplicateSet) -> None:
        """Break a duplicate set up by UMI and buffer the resulting sets."""
        if self._buffer:
            raise ProtocolError(
                "The buffer of duplicate sets is expected to be empty, "
                "but already contains data."
            )
        if not reads:
            raise ProtocolError(
                f"Duplicate set number {self._n_input_sets} from the source has "
                "no reads"
            )

        umi_to_reads, missing = group_reads_by_umi(
            reads, self.options.observed_umi_key, self.options.allow_missing_umis
        )
        clusters = cluster_umis(umi_to_reads, self.options.max_edit_distance_to_join)

        duplicate_sets: List[DuplicateSet] = []
        for cluster in clusters:
            for read in cluster.reads:
                read.set_tag(self.options.inferred_umi_key, cluster.umi)
            self._collector.add_cluster(
                (umi for umi in cluster.members for _ in umi_to_reads[umi]),
                cluster.umi,
            )
            duplicate_sets.append(
                DuplicateSet(
                    reads=cluster.reads, umi=cluster.umi, observed_umis=cluster.members
                )
            )

        if missing:
            self._collector.add_cluster((None for _ in missing), None)
            duplicate_sets.append(DuplicateSet(reads=tuple(missing)))

        self._collector.add_duplicate_set(
            n_clusters=len(duplicate_sets), n_distinct_umis=len(umi_to_reads)
        )
        logger.debug(
            "Duplicate set of %i reads broken into %i sets",
            sum(len(s) for s in duplicate_sets),
            len(duplicate_sets),
        )
        self._buffer.extend(duplicate_sets)

    def close(self) -> None:
        """Close the source of duplicate sets and finalize the statistics.

        Closing an iterator that is already closed does nothing.
        """
        if self.state is StreamState.CLOSED:
            logger.warning("The duplicate set iterator is already closed")
            return

        self.state = StreamState.CLOSED
        self._buffer.clear()
        self._lookahead = None
        try:
            close_source = getattr(self._source, "close", None)
            if close_source is not None:
                close_source()
        finally:
            metrics = self._collector.finalize()

        logger.info(
            "Processed %i duplicate sets into %i sets with UMIs (%i unique UMIs)",
            metrics.duplicate_sets_without_umi,
            metrics.duplicate_sets_with_umi,
            metrics.observed_unique_umis,
        )


def refine_duplicate_sets(
    duplicate_sets: Iterable[InputDuplicateSet],
    options: Optional[UmiAwareOptions] = None,
) -> Tuple[List[DuplicateSet], UmiMetrics]:
    """Break up all duplicate sets of a run by UMI.

    :param duplicate_sets: the duplicate sets to refine
    :param options: the options to use, defaults are used if None
    :returns: the refined duplicate sets and the metrics of the run
    :rtype: Tuple[List[DuplicateSet], UmiMetrics]
    """
    with UmiAwareDuplicateSetIterator(duplicate_sets, options) as iterator:
        refined = list(iterator)
    return refined, iterator.metrics
