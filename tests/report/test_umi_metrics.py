"""Copyright © 2024 Pixelgen Technologies AB."""

import json

import pandas as pd
import pydantic
import pytest
from pandas.testing import assert_frame_equal

from umiaware.report.models import UmiMetrics


@pytest.fixture(name="umi_metrics")
def umi_metrics_fixture() -> UmiMetrics:
    return UmiMetrics(
        umi_length=4,
        observed_unique_umis=3,
        inferred_unique_umis=2,
        observed_base_errors=1,
        total_umi_bases_observed=16,
        duplicate_sets_with_umi=2,
        duplicate_sets_without_umi=1,
        effective_length_of_observed_umis=0.75,
        effective_length_of_inferred_umis=0.4,
        estimated_base_quality_of_umis=12.04,
        umi_avoidance=7.1,
        gini_coefficient=0.1,
        expected_umi_collisions=0.2,
        umi_collision_rate=11.76,
        duplicate_sets_broken_by_umi={2: 1},
        effective_umi_length_distribution={1: 0.4, 2: 0.4, 3: 0.4, 4: 0.75},
    )


def test_umi_metrics_metric_names(umi_metrics):
    """Test that the metrics dump under their upper-case metric names."""
    dumped = umi_metrics.model_dump(by_alias=True)

    assert dumped["UMI_LENGTH"] == 4
    assert dumped["OBSERVED_UNIQUE_UMIS"] == 3
    assert dumped["DUPLICATE_SETS_WITHOUT_UMI"] == 1
    assert dumped["ESTIMATED_BASE_QUALITY_OF_UMIS"] == 12.04
    assert dumped["DUPLICATE_SETS_BROKEN_BY_UMI"] == {2: 1}


def test_umi_metrics_populate_by_metric_name():
    """Test building metrics from their upper-case metric names."""
    metrics = UmiMetrics(UMI_LENGTH=8, GINI_COEFFICIENT=0.5)

    assert metrics.umi_length == 8
    assert metrics.gini_coefficient == 0.5


def test_umi_metrics_are_frozen(umi_metrics):
    """Test that metrics cannot be changed once created."""
    with pytest.raises(pydantic.ValidationError):
        umi_metrics.umi_length = 5


def test_umi_metrics_json(umi_metrics):
    """Test writing metrics to JSON and reading them back."""
    data = umi_metrics.to_json()

    assert json.loads(data)["INFERRED_UNIQUE_UMIS"] == 2
    assert UmiMetrics.from_json(data) == umi_metrics


def test_umi_metrics_json_non_finite():
    """Test that non-finite metrics survive a JSON round trip."""
    metrics = UmiMetrics(estimated_base_quality_of_umis=float("inf"))

    restored = UmiMetrics.from_json(metrics.to_json())
    assert restored.estimated_base_quality_of_umis == float("inf")


def test_duplicate_sets_broken_by_umi_frame(umi_metrics):
    """Test the clusters per duplicate set as a data frame."""
    assert_frame_equal(
        umi_metrics.duplicate_sets_broken_by_umi_frame(),
        pd.DataFrame({"clusters": [2], "duplicate_sets": [1]}),
    )


def test_effective_umi_length_frame(umi_metrics):
    """Test the effective length per truncation as a data frame."""
    assert_frame_equal(
        umi_metrics.effective_umi_length_frame(),
        pd.DataFrame(
            {
                "truncation_length": [1, 2, 3, 4],
                "effective_length": [0.4, 0.4, 0.4, 0.75],
            }
        ),
    )
