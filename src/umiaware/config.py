"""
This module contains the settings used when refining duplicate sets by UMI.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import pydantic

DEFAULT_MAX_EDIT_DISTANCE_TO_JOIN = 1
DEFAULT_OBSERVED_UMI_KEY = "RX"
DEFAULT_INFERRED_UMI_KEY = "MI"


class UmiAwareOptions(pydantic.BaseModel, frozen=True, extra="forbid"):
    """Options controlling how duplicate sets are broken up by UMI.

    The tag names default to the SAM conventions: `RX` for the UMI as it
    was sequenced and `MI` for the molecular identifier assigned to it.
    """

    max_edit_distance_to_join: int = pydantic.Field(
        DEFAULT_MAX_EDIT_DISTANCE_TO_JOIN,
        ge=0,
        description="The largest Hamming distance at which two UMIs are joined.",
    )
    observed_umi_key: str = pydantic.Field(
        DEFAULT_OBSERVED_UMI_KEY,
        min_length=1,
        description="The read tag holding the observed UMI.",
    )
    inferred_umi_key: str = pydantic.Field(
        DEFAULT_INFERRED_UMI_KEY,
        min_length=1,
        description="The read tag the inferred UMI is written to.",
    )
    allow_missing_umis: bool = pydantic.Field(
        False,
        description="Pass reads without a UMI through instead of failing.",
    )
