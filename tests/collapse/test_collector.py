"""Tests for the UMI statistics collector.

Copyright © 2024 Pixelgen Technologies AB.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from umiaware.collapse.statistics import UmiStatisticsCollector
from umiaware.exception import ConfigurationError, ProtocolError


@pytest.fixture(name="collector")
def collector_fixture():
    """Return an empty collector joining UMIs one mismatch apart."""
    return UmiStatisticsCollector(max_edit_distance_to_join=1)


def test_collector_negative_distance():
    """Test that a negative distance is rejected."""
    with pytest.raises(ValueError):
        UmiStatisticsCollector(max_edit_distance_to_join=-1)


def test_add_umi_sets_umi_length(collector):
    """Test that the first UMI fixes the UMI length."""
    assert collector.umi_length is None
    collector.add_umi("ACGTAC", "ACGTAC")
    assert collector.umi_length == 6


def test_add_umi_different_length(collector):
    """Test that a UMI of another length than the first one fails."""
    collector.add_umi("ACGT", "ACGT")
    with pytest.raises(ConfigurationError):
        collector.add_umi("ACGTA", "ACGTA")


def test_add_umi_counts_errors(collector):
    """Test that mismatches to the inferred UMI are counted as errors."""
    collector.add_umi("AAAA", "AAAA")
    collector.add_umi("AAAT", "AAAA")
    collector.add_umi("ATAT", "AAAA")

    metrics = collector.finalize()
    assert metrics.observed_base_errors == 3
    assert metrics.total_umi_bases_observed == 12
    assert_allclose(metrics.estimated_base_quality_of_umis, -10 * np.log10(3 / 12))


def test_add_cluster(collector):
    """Test adding output duplicate sets."""
    collector.add_cluster(["AAAA", "AAAA", "AAAT"], "AAAA")
    collector.add_cluster(["GGGG"], "GGGG")

    metrics = collector.finalize()
    assert metrics.duplicate_sets_with_umi == 2
    assert metrics.observed_unique_umis == 3
    assert metrics.inferred_unique_umis == 2


def test_add_cluster_without_umis(collector):
    """Test that sets without UMIs leave the histograms untouched."""
    collector.add_cluster([None, None], None)

    metrics = collector.finalize()
    assert metrics.duplicate_sets_with_umi == 0
    assert metrics.observed_unique_umis == 0
    assert metrics.total_umi_bases_observed == 0


def test_add_duplicate_set_counts_every_set(collector):
    """Test that every input set is counted, with or without UMIs."""
    collector.add_cluster(["AAAA"], "AAAA")
    collector.add_cluster(["CCCC"], "CCCC")
    collector.add_duplicate_set(n_clusters=2, n_distinct_umis=2)
    collector.add_cluster([None], None)
    collector.add_duplicate_set(n_clusters=1, n_distinct_umis=0)
    collector.add_cluster(["GGGG"], "GGGG")
    collector.add_duplicate_set(n_clusters=1, n_distinct_umis=1)

    metrics = collector.finalize()
    assert metrics.duplicate_sets_without_umi == 3
    assert metrics.duplicate_sets_with_umi == 3
    assert metrics.duplicate_sets_broken_by_umi == {2: 1, 1: 2}


def test_expected_collisions(collector):
    """Test the accumulation of expected UMI collisions."""
    collector.add_cluster(["AAAA"], "AAAA")
    collector.add_cluster(["CCCC"], "CCCC")
    collector.add_duplicate_set(n_clusters=2, n_distinct_umis=2)

    metrics = collector.finalize()
    p = 13 / 256
    assert_allclose(metrics.expected_umi_collisions, 2 * p)
    assert_allclose(metrics.umi_collision_rate, -10 * np.log10(2 * p / 2))


def test_effective_length_by_truncation(collector):
    """Test the effective length of UMIs truncated to their last bases."""
    collector.add_umi("AC", "AC")
    collector.add_umi("GC", "GC")

    metrics = collector.finalize()
    assert metrics.effective_umi_length_distribution.keys() == {1, 2}
    assert_allclose(metrics.effective_umi_length_distribution[1], 0.0)
    assert_allclose(metrics.effective_umi_length_distribution[2], 0.5)


def test_finalize(collector):
    """Test the metrics of a small run."""
    for umi in ["A", "C", "G", "T"]:
        collector.add_cluster([umi, umi], umi)
    collector.add_duplicate_set(n_clusters=4, n_distinct_umis=4)

    metrics = collector.finalize()
    assert metrics.umi_length == 1
    assert_allclose(metrics.effective_length_of_observed_umis, 1.0)
    assert_allclose(metrics.effective_length_of_inferred_umis, 1.0)
    assert_allclose(metrics.gini_coefficient, 0.0)
    assert metrics.observed_base_errors == 0
    assert metrics.estimated_base_quality_of_umis == np.inf


def test_finalize_empty(collector):
    """Test finalizing a collector that saw no UMIs."""
    metrics = collector.finalize()
    assert metrics.umi_length == 0
    assert metrics.observed_unique_umis == 0
    assert metrics.effective_length_of_observed_umis == 0.0
    assert metrics.gini_coefficient == 0.0
    assert np.isnan(metrics.estimated_base_quality_of_umis)
    assert np.isnan(metrics.umi_avoidance)
    assert metrics.duplicate_sets_broken_by_umi == {}
    assert metrics.effective_umi_length_distribution == {}


def test_finalize_only_once(collector):
    """Test that the collector can only be finalized once."""
    collector.finalize()
    assert collector.is_finalized
    with pytest.raises(ProtocolError):
        collector.finalize()


def test_add_after_finalize(collector):
    """Test that no data can be added after finalizing."""
    metrics = collector.finalize()
    with pytest.raises(ProtocolError):
        collector.add_umi("AAAA", "AAAA")
    with pytest.raises(ProtocolError):
        collector.add_duplicate_set(n_clusters=1, n_distinct_umis=1)
    assert collector.metrics is metrics


def test_metrics_before_finalize(collector):
    """Test that metrics are not available before finalizing."""
    with pytest.raises(ProtocolError):
        collector.metrics
