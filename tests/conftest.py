"""Configuration and shared files/objects for the testing framework.

Copyright © 2024 Pixelgen Technologies AB.
"""

import pytest

from umiaware.test_utils import DuplicateSetSimulator, make_reads


class ClosableSource:
    """An upstream source of duplicate sets that records being closed."""

    def __init__(self, duplicate_sets):
        self._duplicate_sets = list(duplicate_sets)
        self.pulled = 0
        self.closed = False

    def __iter__(self):
        for duplicate_set in self._duplicate_sets:
            if self.closed:
                raise RuntimeError("Reading from a closed source")
            self.pulled += 1
            yield duplicate_set

    def close(self):
        self.closed = True


@pytest.fixture(name="example_reads")
def example_reads_fixture():
    """Reads of two molecules, one read carrying a sequencing error."""
    return make_reads(["AAAA", "AAAA", "AAAT", "GGGG"])


@pytest.fixture(name="closable_source")
def closable_source_fixture():
    """A closable source of three duplicate sets."""
    return ClosableSource(
        [
            make_reads(["AAAA", "AAAA", "AAAT", "GGGG"], prefix="first"),
            make_reads(["CCCC", "CCCC", "CCCA"], prefix="second"),
            make_reads(["TTTT", "ACAC", "GTGT"], prefix="third"),
        ]
    )


@pytest.fixture(name="simulator")
def simulator_fixture():
    """A duplicate set simulator with a fixed seed."""
    return DuplicateSetSimulator(umi_length=10, random_seed=42)
