"""Model for the metrics describing the UMIs of a run.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import json
from typing import Any, Dict

import pandas as pd
import pydantic

try:
    from typing import Self
except ImportError:
    from typing_extensions import Self


class UmiMetrics(
    pydantic.BaseModel,
    frozen=True,
    alias_generator=str.upper,
    populate_by_name=True,
):
    """Metrics describing the UMIs observed while refining duplicate sets.

    Dumping the model with `by_alias=True` gives the upper-case metric
    names, e.g. `UMI_LENGTH`.
    """

    umi_length: int = pydantic.Field(0, description="Number of bases in each UMI.")

    observed_unique_umis: int = pydantic.Field(
        0, description="Number of different UMI sequences observed."
    )
    inferred_unique_umis: int = pydantic.Field(
        0, description="Number of different inferred UMI sequences derived."
    )

    observed_base_errors: int = pydantic.Field(
        0,
        description=(
            "Number of errors inferred by comparing the observed and inferred UMIs."
        ),
    )
    total_umi_bases_observed: int = pydantic.Field(
        0, description="Total number of UMI bases observed."
    )

    duplicate_sets_with_umi: int = pydantic.Field(
        0, description="Number of duplicate sets found after taking UMIs into account."
    )
    duplicate_sets_without_umi: int = pydantic.Field(
        0, description="Number of duplicate sets found before taking UMIs into account."
    )

    effective_length_of_observed_umis: float = pydantic.Field(
        0.0,
        description="Entropy (base 4) of the observed UMIs, in effective bases.",
    )
    effective_length_of_inferred_umis: float = pydantic.Field(
        0.0,
        description="Entropy (base 4) of the inferred UMIs, in effective bases.",
    )

    estimated_base_quality_of_umis: float = pydantic.Field(
        float("nan"), description="Phred scaled quality of the UMI bases."
    )
    umi_avoidance: float = pydantic.Field(
        float("nan"),
        description="Phred scaled probability that random UMIs do not collide.",
    )
    gini_coefficient: float = pydantic.Field(
        0.0, description="Gini coefficient of the observed UMI frequencies."
    )

    expected_umi_collisions: float = pydantic.Field(
        0.0, description="Expected number of UMIs colliding within a duplicate set."
    )
    umi_collision_rate: float = pydantic.Field(
        float("nan"), description="Phred scaled rate of expected UMI collisions."
    )

    duplicate_sets_broken_by_umi: Dict[int, int] = pydantic.Field(
        default_factory=dict,
        description="Number of input duplicate sets per number of clusters produced.",
    )
    effective_umi_length_distribution: Dict[int, float] = pydantic.Field(
        default_factory=dict,
        description="Effective length of the observed UMIs truncated to each length.",
    )

    @classmethod
    def from_json(cls, data: str) -> Self:
        """Initialize :class:`UmiMetrics` from a JSON string.

        :param data: the JSON data, with either field names or metric names
        :return: A :class:`UmiMetrics` object.
        """
        return cls(**json.loads(data))

    def to_json(self, **kwargs: Any) -> str:  # noqa: DOC103
        """Dump the metrics to a json string using the metric names.

        :param kwargs: Additional arguments to pass to `json.dumps`.
        :return: The metrics serialized to JSON as a string.
        """
        return json.dumps(self.model_dump(by_alias=True), **kwargs)

    def duplicate_sets_broken_by_umi_frame(self) -> pd.DataFrame:
        """Return the clusters per duplicate set distribution as a dataframe."""
        return pd.DataFrame(
            sorted(self.duplicate_sets_broken_by_umi.items()),
            columns=["clusters", "duplicate_sets"],
        )

    def effective_umi_length_frame(self) -> pd.DataFrame:
        """Return the effective length per truncation length as a dataframe."""
        return pd.DataFrame(
            sorted(self.effective_umi_length_distribution.items()),
            columns=["truncation_length", "effective_length"],
        )
