"""Module containing utilities for simulating data.

Module containing utilities for simulating duplicate sets of UMI tagged
reads, in testing, and in-silico experiments.

Copyright © 2024 Pixelgen Technologies AB.
"""

import dataclasses
import itertools
from typing import Any, Dict, Generator, Iterable, Iterator, List, Optional

import numpy as np

from umiaware.config import DEFAULT_OBSERVED_UMI_KEY


@dataclasses.dataclass(eq=False)
class SimulatedRead:
    """A minimal read implementing the tag interface of `pysam.AlignedSegment`."""

    query_name: str
    tags: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def get_tag(self, tag: str) -> Any:
        try:
            return self.tags[tag]
        except KeyError as exc:
            raise KeyError(f"tag '{tag}' not present") from exc

    def set_tag(self, tag: str, value: Any) -> None:
        if value is None:
            self.tags.pop(tag, None)
        else:
            self.tags[tag] = value


def make_reads(
    umis: Iterable[Optional[str]],
    umi_key: str = DEFAULT_OBSERVED_UMI_KEY,
    prefix: str = "read",
) -> List[SimulatedRead]:
    """Create one read per UMI, None creates a read without a UMI.

    :param umis: the UMI of each read
    :param umi_key: the tag to store the UMI in
    :param prefix: the prefix of the read names
    :return: the reads
    :rtype: List[SimulatedRead]
    """
    reads = []
    for i, umi in enumerate(umis):
        read = SimulatedRead(f"{prefix}-{i}")
        if umi is not None:
            read.set_tag(umi_key, umi)
        reads.append(read)
    return reads


class DuplicateSetSimulator:
    """Simulate duplicate sets for tests and experiments.

    Simplistic simulator that produces duplicate sets of UMI tagged reads.
    It works by generating template molecules, each with a random UMI,
    that are then "sequenced" by sampling them a number of times. It allows
    for the addition of base substitutions errors in the UMIs with a given
    probability to simulate simple sequencing errors.
    """

    _ERRORS_DICT = {
        "A": ["C", "G", "T"],
        "C": ["A", "G", "T"],
        "G": ["C", "A", "T"],
        "T": ["C", "G", "A"],
    }

    def __init__(
        self,
        umi_length: int = 8,
        random_seed: int = 42,
        umi_key: str = DEFAULT_OBSERVED_UMI_KEY,
    ) -> None:
        """Create a DuplicateSetSimulator instance.

        :param umi_length: the length of the simulated UMIs, defaults to 8
        :param random_seed: Set the random seed, defaults to 42
        :param umi_key: the tag to store the UMI in, defaults to RX
        """
        self.umi_length = umi_length
        self.umi_key = umi_key
        self.rng = np.random.default_rng(random_seed)
        self._read_names = itertools.count()

    def random_umi(self) -> str:
        """Generate a random UMI.

        :return: A random DNA sequence of length `umi_length`
        :rtype: str
        """
        return "".join(self.rng.choice(["A", "C", "G", "T"], size=self.umi_length))

    def build_molecules(self, nbr_of_molecules: int) -> List[str]:
        """Pick the UMIs of the molecules at one position.

        :param nbr_of_molecules: number of molecules to generate
        :return: the UMI of each molecule
        :rtype: List[str]
        """
        return [self.random_umi() for _ in range(nbr_of_molecules)]

    def sequence_molecules(
        self,
        molecules: Iterable[str],
        mean_nbr_of_reads_per_molecule: float,
        std_nbr_of_reads_per_molecule: float,
    ) -> Generator[str, None, None]:
        """Simulate sequencing of reads from a set of molecules.

        Each molecule is read at least once.

        :param molecules: the UMIs of the underlying molecules to "sequence"
        :param mean_nbr_of_reads_per_molecule: the mean number of reads to
                                               generate per molecule
        :param std_nbr_of_reads_per_molecule: the standard deviation in the
                                              number of reads per molecule
        :yields: the UMI of each "sequenced" read
        :rtype: Generator[str, None, None]
        """
        for molecule in molecules:
            nbr_of_times_sequenced = max(
                1,
                int(
                    self.rng.normal(
                        mean_nbr_of_reads_per_molecule, std_nbr_of_reads_per_molecule
                    )
                ),
            )
            for _ in range(nbr_of_times_sequenced):
                yield molecule

    def add_sequencing_errors(
        self, umis: Iterable[str], error_prob_per_base: float
    ) -> Generator[str, None, None]:
        """Add sequencing errors to UMIs.

        :param umis: UMIs to add errors to
        :param error_prob_per_base: probability of adding an error, range: [0,1)
        :yields: an iterator of UMIs with errors added to them
        :raises AssertionError: if `error_prob_per_base` is invalid
        :rtype: Generator[str, None, None]
        """
        if error_prob_per_base < 0 or error_prob_per_base > 1:
            raise AssertionError("`error_prob_per_base` must be between 0 and 1.")

        for umi in umis:
            yield "".join(
                self.rng.choice(self._ERRORS_DICT[base])
                if self.rng.random() < error_prob_per_base
                else base
                for base in umi
            )

    def simulated_duplicate_sets(
        self,
        n_sets: int,
        molecules_per_set: int,
        mean_reads_per_molecule: float,
        std_reads_per_molecule: float,
        prob_of_seq_error: float = 0,
    ) -> Iterator[List[SimulatedRead]]:
        """Simulate duplicate sets of reads, adding sequencing errors to the UMIs.

        :param n_sets: the number of duplicate sets (positions) to simulate
        :param molecules_per_set: the number of molecules at each position
        :param mean_reads_per_molecule: mean number of reads per molecule
        :param std_reads_per_molecule: standard deviation of the number of
                                       reads per molecule
        :param prob_of_seq_error: probability of base substitutions errors
                                  per UMI base sequenced. Default: 0.
        :yields: the reads of each duplicate set
        :rtype: Iterator[List[SimulatedRead]]
        """
        for _ in range(n_sets):
            umis: Iterable[str] = self.sequence_molecules(
                self.build_molecules(molecules_per_set),
                mean_nbr_of_reads_per_molecule=mean_reads_per_molecule,
                std_nbr_of_reads_per_molecule=std_reads_per_molecule,
            )
            if prob_of_seq_error:
                umis = self.add_sequencing_errors(umis, prob_of_seq_error)
            yield [
                SimulatedRead(
                    f"read-{next(self._read_names)}", tags={self.umi_key: umi}
                )
                for umi in umis
            ]
