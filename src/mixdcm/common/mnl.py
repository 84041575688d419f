#    Copyright 2020 Matthew Wigginton Conway

#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at

#        http://www.apache.org/licenses/LICENSE-2.0

#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""
Multinomial logit probability kernels.

Utilities are stored flat, one per (person, alternative) row, with all of one person's alternatives adjacent. personidx
gives the person each row belongs to and offsets gives the first row of each person, so per-person sums are a
np.bincount and per-person maxima are a np.maximum.reduceat.
"""

import numpy as np
from logging import getLogger

LOG = getLogger(__name__)

# Added to every max-subtracted utility before exponentiating. Any constant cancels in the normalization; this one is
# fixed so that results are reproducible.
STABILIZATION_SHIFT = 1.0


def _check_finite(utility):
    if not np.all(np.isfinite(utility)):
        raise ValueError(
            f"{np.sum(~np.isfinite(utility))} utilities are not finite! This may be a scaling issue."
        )


def probabilities(utility, shift=STABILIZATION_SHIFT):
    """
    Choice probabilities for a single choice set.

    The largest utility is subtracted before exponentiating, so the largest exponentiated utility is exp(shift) no
    matter how large the utilities are and the result cannot overflow.

    :param utility: utility of each alternative
    :type utility: numpy.ndarray
    """
    utility = np.asarray(utility, dtype="float64")
    _check_finite(utility)
    exp_utility = np.exp(utility - np.max(utility) + shift)
    return exp_utility / np.sum(exp_utility)


def person_maxima(utility, offsets):
    "Maximum utility for each person"
    if len(offsets) == 0:
        return np.zeros(0)
    return np.maximum.reduceat(utility, offsets)


def grouped_probabilities(utility, personidx, offsets, shift=STABILIZATION_SHIFT):
    """
    Choice probabilities for every row of a flat utility array, normalized within each person.

    :param utility: utility for each (person, alternative) row
    :type utility: numpy.ndarray

    :param personidx: person each row belongs to, non-decreasing
    :type personidx: numpy.ndarray

    :param offsets: first row of each person; every person must have at least one row
    :type offsets: numpy.ndarray
    """
    _check_finite(utility)
    exp_utility = np.exp(utility - person_maxima(utility, offsets)[personidx] + shift)
    sums = np.bincount(personidx, weights=exp_utility, minlength=len(offsets))
    return exp_utility / sums[personidx]


def log_chosen_probabilities(utility, personidx, offsets, chosen_rows, shift=STABILIZATION_SHIFT):
    """
    Log probability of the chosen alternative for each person.

    Computed in the log domain, so that a chosen alternative with a very small probability gives a large negative
    number rather than log(0).

    :param chosen_rows: row of each person's chosen alternative
    :type chosen_rows: numpy.ndarray
    """
    _check_finite(utility)
    maxima = person_maxima(utility, offsets)
    exp_utility = np.exp(utility - maxima[personidx] + shift)
    sums = np.bincount(personidx, weights=exp_utility, minlength=len(offsets))
    return utility[chosen_rows] - maxima + shift - np.log(sums)


def log_likelihood(utility, personidx, offsets, chosen_rows, shift=STABILIZATION_SHIFT):
    "Log likelihood of the observed choices"
    ll = np.sum(log_chosen_probabilities(utility, personidx, offsets, chosen_rows, shift=shift))
    if np.isnan(ll):
        LOG.warning("log-likelihood is nan")
    return ll
