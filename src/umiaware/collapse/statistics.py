"""Collect statistics about the UMIs seen while refining duplicate sets.

Copyright © 2024 Pixelgen Technologies AB.
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional

from umiaware.collapse.process import hamming_distance
from umiaware.exception import ConfigurationError, ProtocolError
from umiaware.report.models import UmiMetrics
from umiaware.statistics import (
    effective_length,
    expected_collisions,
    gini_coefficient,
    phred_scale,
    umi_avoidance,
)
from umiaware.types import Umi

logger = logging.getLogger(__name__)


class UmiStatisticsCollector:
    """Accumulate UMI statistics over a stream of duplicate sets.

    The collector is fed explicitly, once per UMI-bearing read with
    `add_umi` (or per cluster with `add_cluster`) and once per input
    duplicate set with `add_duplicate_set`. When the stream is done
    `finalize` computes the metrics, after which the collector accepts no
    more data.

    The UMI length is fixed by the first UMI added.
    """

    def __init__(self, max_edit_distance_to_join: int) -> None:
        """Initialize the statistics collector.

        :param max_edit_distance_to_join: the distance at which UMIs are
            joined, used by the collision estimates
        """
        if max_edit_distance_to_join < 0:
            raise ValueError("max_edit_distance_to_join must be non-negative")

        self.max_edit_distance_to_join = max_edit_distance_to_join
        self.umi_length: Optional[int] = None

        self._observed_umis: Counter = Counter()
        self._inferred_umis: Counter = Counter()
        # one histogram of UMI suffixes per truncation length 1..L
        self._truncated_umis: List[Counter] = []
        self._clusters_per_set: Counter = Counter()

        self._observed_base_errors = 0
        self._total_umi_bases_observed = 0
        self._duplicate_sets_with_umi = 0
        self._duplicate_sets_processed = 0
        self._expected_collisions = 0.0

        self._metrics: Optional[UmiMetrics] = None

    @property
    def is_finalized(self) -> bool:
        """Return True once `finalize` has been called."""
        return self._metrics is not None

    @property
    def metrics(self) -> UmiMetrics:
        """Return the finalized metrics.

        :raises ProtocolError: if the collector has not been finalized
        """
        if self._metrics is None:
            raise ProtocolError("The UMI statistics have not been finalized yet")
        return self._metrics

    def _check_open(self) -> None:
        if self._metrics is not None:
            raise ProtocolError("Cannot add data to finalized UMI statistics")

    def add_umi(self, observed: Umi, inferred: Umi) -> None:
        """Add a read with an observed UMI that was assigned `inferred`.

        :param observed: the UMI as it was sequenced
        :param inferred: the UMI of the cluster the read was assigned to
        :raises ConfigurationError: if the UMI length differs from the
            length of the UMIs seen before
        """
        self._check_open()

        if self.umi_length is None:
            self.umi_length = len(observed)
            self._truncated_umis = [Counter() for _ in range(self.umi_length)]
            logger.debug("UMI length set to %i", self.umi_length)
        elif len(observed) != self.umi_length:
            raise ConfigurationError(
                f"UMI {observed!r} has length {len(observed)}, "
                f"expected {self.umi_length}"
            )

        self._observed_base_errors += hamming_distance(observed, inferred)
        self._total_umi_bases_observed += self.umi_length

        self._observed_umis[observed] += 1
        self._inferred_umis[inferred] += 1
        for length, histogram in enumerate(self._truncated_umis, start=1):
            histogram[observed[-length:]] += 1

    def add_cluster(
        self, observed_umis: Iterable[Optional[Umi]], inferred: Optional[Umi]
    ) -> None:
        """Add an output duplicate set.

        :param observed_umis: the observed UMI of each read in the set,
            None for reads without a UMI
        :param inferred: the UMI assigned to the set
        """
        self._check_open()

        has_umi = False
        for observed in observed_umis:
            if observed is None or inferred is None:
                continue
            self.add_umi(observed, inferred)
            has_umi = True

        if has_umi:
            self._duplicate_sets_with_umi += 1

    def add_duplicate_set(self, n_clusters: int, n_distinct_umis: int) -> None:
        """Add an input duplicate set.

        Call this after the clusters of the set have been added so that
        the UMI length is known to the collision estimate.

        :param n_clusters: the number of output sets the input set was
            broken into
        :param n_distinct_umis: the number of distinct UMIs in the set
        """
        self._check_open()

        # counts every input set, with or without UMIs
        self._duplicate_sets_processed += 1
        self._clusters_per_set[n_clusters] += 1
        if n_distinct_umis:
            self._expected_collisions += expected_collisions(
                self.umi_length or 0, self.max_edit_distance_to_join, n_distinct_umis
            )

    def finalize(self) -> UmiMetrics:
        """Compute the metrics from the statistics collected.

        :returns: the metrics of the run
        :raises ProtocolError: if the collector was already finalized
        """
        self._check_open()

        umi_length = self.umi_length or 0
        observed_unique_umis = len(self._observed_umis)

        self._metrics = UmiMetrics(
            umi_length=umi_length,
            observed_unique_umis=observed_unique_umis,
            inferred_unique_umis=len(self._inferred_umis),
            observed_base_errors=self._observed_base_errors,
            total_umi_bases_observed=self._total_umi_bases_observed,
            duplicate_sets_with_umi=self._duplicate_sets_with_umi,
            duplicate_sets_without_umi=self._duplicate_sets_processed,
            effective_length_of_observed_umis=effective_length(self._observed_umis),
            effective_length_of_inferred_umis=effective_length(self._inferred_umis),
            estimated_base_quality_of_umis=phred_scale(
                self._observed_base_errors, self._total_umi_bases_observed
            ),
            umi_avoidance=umi_avoidance(
                umi_length, self.max_edit_distance_to_join, observed_unique_umis
            ),
            gini_coefficient=gini_coefficient(self._observed_umis),
            expected_umi_collisions=self._expected_collisions,
            umi_collision_rate=phred_scale(
                self._expected_collisions, observed_unique_umis
            ),
            duplicate_sets_broken_by_umi=dict(self._clusters_per_set),
            effective_umi_length_distribution={
                length: effective_length(histogram)
                for length, histogram in enumerate(self._truncated_umis, start=1)
            },
        )

        logger.debug(
            "UMI statistics finalized for %i duplicate sets",
            self._duplicate_sets_processed,
        )
        return self._metrics
