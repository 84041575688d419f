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

import numpy as np
import pytest
import scipy.special

from mixdcm.common import mnl


def test_probabilities_match_softmax():
    utility = np.array([0.3, -1.2, 2.5, 0.0])
    assert np.allclose(mnl.probabilities(utility), scipy.special.softmax(utility))


def test_shift_cancels():
    utility = np.array([4.1, -3.0, 0.7])
    default = mnl.probabilities(utility)
    assert np.allclose(default, mnl.probabilities(utility, shift=0))
    assert np.allclose(default, mnl.probabilities(utility, shift=-50))
    assert np.allclose(default, mnl.probabilities(utility, shift=25.5))


def test_overflow():
    # naive exp(710) overflows a double
    with np.errstate(over="ignore"):
        assert not np.isfinite(np.exp(710.0))

    probs = mnl.probabilities(np.array([710.0, 0.0, 5.0]))
    assert np.all(np.isfinite(probs))
    assert np.all(probs > 0)
    assert abs(np.sum(probs) - 1) < 1e-9
    assert probs[0] > 1 - 1e-9

    probs = mnl.probabilities(np.array([1e6, 1e6]))
    assert np.allclose(probs, [0.5, 0.5])

    probs = mnl.probabilities(np.array([-1e6, -1e6 - np.log(3)]))
    assert np.allclose(probs, [0.75, 0.25])


def test_non_finite_utilities():
    with pytest.raises(ValueError):
        mnl.probabilities(np.array([1.0, np.nan]))

    with pytest.raises(ValueError):
        mnl.probabilities(np.array([np.inf, 0.0]))


def test_grouped_probabilities():
    # three people with 2, 3 and 1 alternatives
    utility = np.array([1.0, 2.0, 0.5, 0.5, 800.0, -3.0])
    personidx = np.array([0, 0, 1, 1, 1, 2])
    offsets = np.array([0, 2, 5])

    probs = mnl.grouped_probabilities(utility, personidx, offsets)
    assert np.allclose(probs[0:2], scipy.special.softmax(utility[0:2]))
    assert np.allclose(probs[2:5], scipy.special.softmax(utility[2:5]))
    assert np.allclose(probs[5], 1)
    assert np.allclose(np.bincount(personidx, weights=probs), 1)


def test_log_likelihood():
    utility = np.array([1.0, 2.0, 0.5, 0.5, 3.0])
    personidx = np.array([0, 0, 1, 1, 1])
    offsets = np.array([0, 2])
    chosen_rows = np.array([1, 2])

    expected = np.log(scipy.special.softmax(utility[0:2])[1]) + np.log(
        scipy.special.softmax(utility[2:5])[0]
    )
    assert np.allclose(mnl.log_likelihood(utility, personidx, offsets, chosen_rows), expected)


def test_log_likelihood_tiny_probability():
    # probability of the chosen alternative underflows to zero, but its log is still finite
    utility = np.array([0.0, 1000.0])
    logp = mnl.log_chosen_probabilities(utility, np.array([0, 0]), np.array([0]), np.array([0]))
    assert np.allclose(logp, [-1000.0])


def test_empty():
    probs = mnl.grouped_probabilities(np.zeros(0), np.zeros(0, dtype="int64"), np.zeros(0, dtype="int64"))
    assert len(probs) == 0
