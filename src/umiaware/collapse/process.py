"""Cluster the UMIs of a duplicate set into their underlying molecules.

This module contains functions for grouping the distinct UMIs observed in
a single duplicate set into clusters of UMIs within a given Hamming
distance of each other, and for picking the UMI that represents each
cluster.

Copyright © 2024 Pixelgen Technologies AB.
"""

import dataclasses
import logging
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
import scipy.sparse
from scipy.sparse.csgraph import connected_components
from umi_tools._dedup_umi import edit_distance

from umiaware.exception import ConfigurationError, MissingDataError
from umiaware.types import TaggedRead, Umi

logger = logging.getLogger(__name__)

UmiToReads = Dict[Umi, List[TaggedRead]]
AdjacencyList = List[List[int]]

UMI_ALPHABET = frozenset("ACGTN")


@dataclasses.dataclass(frozen=True, slots=True)
class UmiCluster:
    """A connected component of UMIs that derive from the same molecule.

    :ivar umi: the representative (inferred) UMI of the cluster
    :ivar members: the distinct observed UMIs in the cluster
    :ivar reads: the reads carrying any of the member UMIs
    """

    umi: Umi
    members: Tuple[Umi, ...]
    reads: Tuple[TaggedRead, ...]


def hamming_distance(a: Umi, b: Umi) -> int:
    """Count the positions at which two UMIs differ.

    :param a: the first UMI
    :param b: the second UMI
    :returns: the number of mismatching positions
    :rtype: int
    :raises ConfigurationError: if the UMIs are of different length or
                                contain characters other than A, C, G, T, N
    """
    if len(a) != len(b):
        raise ConfigurationError(
            f"Cannot compare UMIs of different length: {a!r} ({len(a)}) "
            f"and {b!r} ({len(b)})"
        )
    for umi in (a, b):
        if not UMI_ALPHABET.issuperset(umi):
            raise ConfigurationError(
                f"UMI {umi!r} contains characters other than "
                f"{''.join(sorted(UMI_ALPHABET))}"
            )
    return edit_distance(a.encode("ascii"), b.encode("ascii"))


def build_adjacency(umis: Sequence[Umi], max_edit_distance: int) -> AdjacencyList:
    """Build the adjacency list of the UMI graph of a duplicate set.

    Each UMI is a node, referred to by its index in `umis`, and two nodes
    are linked when their Hamming distance is at most `max_edit_distance`.
    All pairs are compared, which is fine for the handful of distinct UMIs
    found at a single position.

    :param umis: the distinct UMIs
    :param max_edit_distance: the Hamming distance threshold
    :returns: for each UMI the indices of its neighbours
    :rtype: AdjacencyList
    :raises ValueError: if `max_edit_distance` is negative
    :raises ConfigurationError: if two UMIs are of different length
    """
    if max_edit_distance < 0:
        raise ValueError(
            f"max_edit_distance must be non-negative, got {max_edit_distance}"
        )

    adjacency: AdjacencyList = [[] for _ in umis]
    for i in range(len(umis)):
        for j in range(i + 1, len(umis)):
            if hamming_distance(umis[i], umis[j]) <= max_edit_distance:
                adjacency[i].append(j)
                adjacency[j].append(i)
    return adjacency


def build_csgraph(adjacency: AdjacencyList) -> scipy.sparse.csr_matrix:
    """Convert an adjacency list into a sparse adjacency matrix.

    :param adjacency: the adjacency list as produced by `build_adjacency`
    :returns: a square matrix with a 1 for every edge
    :rtype: scipy.sparse.csr_matrix
    """
    n_nodes = len(adjacency)
    rows = [i for i, neighbours in enumerate(adjacency) for _ in neighbours]
    cols = [j for neighbours in adjacency for j in neighbours]
    return scipy.sparse.csr_matrix(
        (np.ones(len(rows), dtype=np.int8), (rows, cols)), shape=(n_nodes, n_nodes)
    )


def get_connected_components(
    adjacency: AdjacencyList, counts: Sequence[int]
) -> List[List[int]]:
    """Get the connected components of a UMI graph.

    Components are labelled with `scipy.sparse.csgraph.connected_components`
    over the node indices. They are returned ordered by their total count
    (largest first), with the members of each component sorted by index.

    :param adjacency: the adjacency list as produced by `build_adjacency`
    :param counts: the number of reads carrying each UMI
    :returns: a list of components, each a list of node indices
    :rtype: List[List[int]]
    """
    if not adjacency:
        return []

    _, labels = connected_components(
        build_csgraph(adjacency), directed=False, return_labels=True
    )
    components: Dict[int, List[int]] = {}
    for i, label in enumerate(labels):
        components.setdefault(int(label), []).append(i)

    # first-seen order of the components breaks ties in total count
    return sorted(
        components.values(),
        key=lambda component: -sum(counts[i] for i in component),
    )


def get_representative_umi_for_component(
    component: Iterable[int], umis: Sequence[Umi], counts: Sequence[int]
) -> Umi:
    """Pick the UMI that represents a component.

    The representative is the member carried by the most reads, and if
    there is a tie the lexicographically smallest UMI is picked to make the
    results reproducible between runs.

    :param component: the node indices of the component
    :param umis: the distinct UMIs
    :param counts: the number of reads carrying each UMI
    :returns: the representative UMI
    :rtype: Umi
    """
    return min((-counts[i], umis[i]) for i in component)[1]


def cluster_umis(umi_to_reads: UmiToReads, max_edit_distance: int) -> List[UmiCluster]:
    """Collapse the UMIs of a duplicate set into clusters.

    Tries to identify all UMIs that derive from the same molecule by
    linking UMIs that are at most `max_edit_distance` mismatches apart, and
    taking the connected components of the resulting graph. With a distance
    of 0 every distinct UMI forms its own cluster.

    :param umi_to_reads: the distinct UMIs of the set and the reads
                         carrying them
    :param max_edit_distance: the Hamming distance threshold
    :returns: the clusters, ordered by decreasing number of reads
    :rtype: List[UmiCluster]
    :raises ConfigurationError: if two UMIs are of different length
    """
    umis = list(umi_to_reads.keys())
    counts = [len(umi_to_reads[umi]) for umi in umis]

    adjacency = build_adjacency(umis, max_edit_distance)
    components = get_connected_components(adjacency, counts)

    clusters = []
    for component in components:
        members = tuple(umis[i] for i in component)
        clusters.append(
            UmiCluster(
                umi=get_representative_umi_for_component(component, umis, counts),
                members=members,
                reads=tuple(read for umi in members for read in umi_to_reads[umi]),
            )
        )

    logger.debug(
        "Collapsed %i distinct UMIs into %i clusters", len(umis), len(clusters)
    )
    return clusters


def group_reads_by_umi(
    reads: Iterable[TaggedRead], observed_umi_key: str, allow_missing_umis: bool
) -> Tuple[UmiToReads, List[TaggedRead]]:
    """Group the reads of a duplicate set by their observed UMI.

    :param reads: the reads of the duplicate set
    :param observed_umi_key: the tag holding the observed UMI
    :param allow_missing_umis: keep reads without a UMI instead of failing
    :returns: the reads per distinct UMI, in order of first appearance, and
              the reads without a UMI
    :rtype: Tuple[UmiToReads, List[TaggedRead]]
    :raises MissingDataError: if a read lacks a UMI and missing UMIs are not
                              allowed
    """
    umi_to_reads: UmiToReads = {}
    missing = []
    for read in reads:
        umi = read.get_tag(observed_umi_key) if read.has_tag(observed_umi_key) else None
        if not umi:
            if not allow_missing_umis:
                raise MissingDataError(
                    f"Read {getattr(read, 'query_name', read)} lacks a UMI "
                    f"in tag {observed_umi_key}",
                    read=read,
                    key=observed_umi_key,
                )
            missing.append(read)
            continue
        umi_to_reads.setdefault(umi, []).append(read)
    return umi_to_reads, missing
