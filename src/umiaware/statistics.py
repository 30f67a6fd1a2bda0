"""Functions for statistics/math.

This module contains the estimators used to describe a population of UMIs,
e.g. its effective length (entropy), its inequality (Gini coefficient) and
the probability that two random UMIs collide.

Copyright © 2024 Pixelgen Technologies AB.
"""

import logging
from collections.abc import Mapping
from typing import Iterable, Union

import numpy as np
import numpy.typing as npt
from scipy.special import comb
from scipy.stats import entropy

logger = logging.getLogger(__name__)

CountsType = Union[Mapping, Iterable[int], npt.NDArray[np.int64]]

# Number of alternative bases at a mismatching UMI position
N_ALTERNATIVE_BASES = 3


def _as_frequencies(counts: CountsType) -> npt.NDArray[np.float64]:
    if isinstance(counts, Mapping):
        counts = list(counts.values())
    freqs = np.asarray(list(counts), dtype=np.float64)
    return freqs[freqs > 0]


def effective_length(counts: CountsType) -> float:
    """Compute the effective length (in bases) of a frequency histogram.

    The effective length is the Shannon entropy of the histogram computed
    with base 4, i.e. the information content measured in DNA bases. A
    histogram where all observations fall in a single bin has an effective
    length of 0, while the four equally frequent UMIs A, C, G and T have
    an effective length of 1.

    :param counts: the histogram, either as a mapping of value to count
                   or as a sequence of counts
    :returns: the effective length, 0 for a histogram without observations
    :rtype: float
    """
    freqs = _as_frequencies(counts)
    if freqs.sum() == 0:
        return 0.0
    return float(entropy(freqs, base=4))


def gini_coefficient(counts: CountsType) -> float:
    """Compute the Gini coefficient of a frequency histogram.

    The frequencies are sorted in ascending order and their cumulative sum
    normalized to [0, 1] (the Lorenz curve). The coefficient is then
    `(0.5 - B) / 0.5` where B is the area under the Lorenz curve, taken with
    the trapezoidal rule as the mean of the normalized cumulative sum minus
    `1 / (2 * n)` for `n` values.

    Any uniform histogram, including one with a single value, has a
    coefficient of 0. The coefficient stays below 1 and approaches it as
    the mass concentrates on a single value among many.

    :param counts: the histogram, either as a mapping of value to count
                   or as a sequence of counts
    :returns: the Gini coefficient, 0 for a histogram without observations
    :rtype: float
    """
    freqs = np.sort(_as_frequencies(counts))
    if len(freqs) == 0:
        return 0.0

    lorenz = np.cumsum(freqs)
    lorenz = lorenz / lorenz[-1]
    area = lorenz.mean() - 1 / (2 * len(freqs))
    return float((0.5 - area) / 0.5)


def phred_scale(numerator: float, denominator: float) -> float:
    """Express the probability `numerator / denominator` on the Phred scale.

    A probability of 0 gives `inf` and an undefined probability (0 / 0)
    gives `nan`.

    :param numerator: the number of events
    :param denominator: the number of trials
    :returns: `-10 * log10(numerator / denominator)`
    :rtype: float
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        p = np.float64(numerator) / np.float64(denominator)
        return float(-10 * np.log10(p))


def collision_neighbourhood_size(umi_length: int, max_edit_distance: int) -> int:
    """Count the strings within a Hamming distance of a fixed UMI.

    For a UMI of length `L` over a four letter alphabet the number of
    strings with at most `d` mismatches is `sum(C(L, k) * 3**k, k=0..d)`.

    :param umi_length: the length of the UMI
    :param max_edit_distance: the Hamming distance `d`
    :returns: the size of the neighbourhood, including the UMI itself
    :rtype: int
    :raises ValueError: if any of the arguments is negative
    """
    if umi_length < 0 or max_edit_distance < 0:
        raise ValueError("UMI length and edit distance must be non-negative")

    return sum(
        int(comb(umi_length, k, exact=True)) * N_ALTERNATIVE_BASES**k
        for k in range(max_edit_distance + 1)
    )


def _collision_probability(umi_length: int, max_edit_distance: int) -> float:
    z = collision_neighbourhood_size(umi_length, max_edit_distance)
    return z / 4**umi_length


def umi_avoidance(umi_length: int, max_edit_distance: int, n_unique: int) -> float:
    """Compute the Phred scaled probability that random UMIs avoid each other.

    With `p = Z / 4**L` the probability that a random UMI falls within
    `max_edit_distance` of a given one, the probability that at least one of
    the other `n_unique - 1` UMIs does so is `1 - (1 - p)**(n_unique - 1)`.
    The avoidance is this probability on the Phred scale.

    :param umi_length: the UMI length `L`
    :param max_edit_distance: the distance at which UMIs are joined
    :param n_unique: the number of distinct UMIs observed
    :returns: the UMI avoidance; `inf` for a single UMI and `nan` when no
              UMIs were observed
    :rtype: float
    """
    p = _collision_probability(umi_length, max_edit_distance)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        collision = 1 - np.power(np.float64(1 - p), np.float64(n_unique - 1))
    return phred_scale(collision, 1)


def expected_collisions(umi_length: int, max_edit_distance: int, n_umis: int) -> float:
    """Estimate the number of UMIs in a duplicate set expected to collide.

    Each of the `n_umis` distinct UMIs collides with one of the others with
    probability `1 - (1 - p)**(n_umis - 1)`.

    :param umi_length: the UMI length
    :param max_edit_distance: the distance at which UMIs are joined
    :param n_umis: the number of distinct UMIs in the duplicate set
    :returns: the expected number of colliding UMIs
    :rtype: float
    """
    if n_umis <= 0:
        return 0.0

    p = _collision_probability(umi_length, max_edit_distance)
    return float((1 - np.power(np.float64(1 - p), n_umis - 1)) * n_umis)
