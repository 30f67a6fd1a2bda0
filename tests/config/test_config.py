"""
Tests for config module

Copyright © 2024 Pixelgen Technologies AB.
"""

import pydantic
import pytest

from umiaware.config import UmiAwareOptions


def test_options_defaults():
    """Test the default options."""
    options = UmiAwareOptions()

    assert options.max_edit_distance_to_join == 1
    assert options.observed_umi_key == "RX"
    assert options.inferred_umi_key == "MI"
    assert options.allow_missing_umis is False


def test_options_from_mapping():
    """Test building options from a mapping."""
    options = UmiAwareOptions.model_validate(
        {
            "max_edit_distance_to_join": 0,
            "observed_umi_key": "BX",
            "inferred_umi_key": "XI",
            "allow_missing_umis": True,
        }
    )

    assert options.max_edit_distance_to_join == 0
    assert options.observed_umi_key == "BX"
    assert options.inferred_umi_key == "XI"
    assert options.allow_missing_umis is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_edit_distance_to_join": -1},
        {"observed_umi_key": ""},
        {"inferred_umi_key": ""},
        {"max_edit_distnace_to_join": 2},
    ],
)
def test_options_invalid(kwargs):
    """Test that invalid or unknown options are rejected."""
    with pytest.raises(pydantic.ValidationError):
        UmiAwareOptions(**kwargs)


def test_options_are_frozen():
    """Test that options cannot be changed once created."""
    options = UmiAwareOptions()

    with pytest.raises(pydantic.ValidationError):
        options.max_edit_distance_to_join = 3
