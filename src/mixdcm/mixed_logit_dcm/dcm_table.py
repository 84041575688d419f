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

from logging import getLogger
import operator
import time
import numpy as np
import pandas as pd
import dask.array as da

from mixdcm.common import Table, PicklableModel, mnl
from mixdcm.common.exceptions import ConsistencyError, InvalidChoiceIndexError
from mixdcm.common.util import as_integer_vector, human_bytes, human_shape, human_time
from .distribution import DiagonalGaussianDistribution

LOG = getLogger(__name__)

# Attribute tables larger than this are multiplied by coefficients in chunks
DEFAULT_MAX_CHUNK_BYTES = 2e9


def _as_table(table):
    if isinstance(table, Table):
        return table
    return Table(table)


def _read_only(arr):
    view = arr.view()
    view.flags.writeable = False
    return view


class DCMTable(PicklableModel):
    """
    The discrete choices made by a set of people, with the attributes of every alternative available to each of them.

    Everyone may have a different number of alternatives. The attributes of all alternatives are stored in a single
    table, first all the alternatives of person 0, then all those of person 1, and so on. The row of alternative j
    for person p is offset[p] + j, where offset is the cumulative number of alternatives of everyone before p.

    The table also keeps a randomly shuffled order of people, used for sampling the outer term of a simulated
    log-likelihood, and the number of people choosing each alternative slot.

    Nothing is changed after construction, so a table can be queried from several threads at once, as long as the
    tables passed in are not modified either.
    """

    def __init__(
        self,
        attribute_table,
        attribute_dimensions,
        decisions_table,
        num_alternatives_table,
        distribution=None,
        seed=None,
        max_chunk_bytes=DEFAULT_MAX_CHUNK_BYTES,
    ):
        """
        Set up a discrete choice table, building the offsets, shuffled order and choice counts.

        :param attribute_table: attributes of every (person, alternative) pair, one row each, grouped by person
        :type attribute_table: Table or 2-D numpy array

        :param attribute_dimensions: number of attribute columns in each block of attributes. Only used by the
            distribution.
        :type attribute_dimensions: sequence of int

        :param decisions_table: 1-based index of the alternative chosen by each person. This is converted to 0-based
            in place. A list, or an array that is not contiguous, is copied first, so the caller's values stay
            1-based.
        :type decisions_table: Table or numpy array

        :param num_alternatives_table: number of alternatives available to each person
        :type num_alternatives_table: Table or numpy array

        :param distribution: distribution coefficients are drawn from, default independent normal
        :type distribution: mixdcm.mixed_logit_dcm.distribution.Distribution

        :param seed: seed or numpy Generator used to shuffle people
        :type seed: int, numpy.random.Generator or None

        :param max_chunk_bytes: attribute tables larger than this are processed in chunks when computing utilities for
            everyone at once
        :type max_chunk_bytes: float
        """
        start_time = time.perf_counter()

        self.attribute_table = _as_table(attribute_table)
        self.decisions_table = _as_table(decisions_table)
        self.num_alternatives_table = _as_table(num_alternatives_table)
        self._attribute_dimensions = tuple(int(d) for d in attribute_dimensions)
        self.max_chunk_bytes = max_chunk_bytes
        self.seed = None if isinstance(seed, np.random.Generator) else seed

        # set by loaders that know them
        self.person_ids = None
        self.attribute_names = None

        num_alternatives = as_integer_vector(
            self.num_alternatives_table.data, "num_alternatives_table"
        )
        raw_decisions = as_integer_vector(self.decisions_table.data, "decisions_table")

        if len(raw_decisions) != len(num_alternatives):
            raise ValueError(
                f"decisions_table has {len(raw_decisions)} entries but num_alternatives_table has "
                f"{len(num_alternatives)}; both need one entry per person"
            )

        if np.any(num_alternatives < 1):
            bad = np.flatnonzero(num_alternatives < 1)
            LOG.error(f"{len(bad)} people have no alternatives, first is person {bad[0]}")
            raise ValueError("Every person must have at least one alternative")

        num_people = len(num_alternatives)

        # decisions are 1-based on disk
        decisions = raw_decisions - 1

        if distribution is None:
            distribution = DiagonalGaussianDistribution()
        distribution.init_from_dimensions(self._attribute_dimensions)
        self._distribution = distribution

        if distribution.num_attributes != self.attribute_table.n_attributes:
            LOG.warning(
                f"attribute_dimensions {self._attribute_dimensions} describe {distribution.num_attributes} "
                f"attributes, but attribute table has {self.attribute_table.n_attributes}"
            )

        rng = np.random.default_rng(seed)
        shuffled = rng.permutation(num_people)

        offsets = np.zeros(num_people, dtype="int64")
        np.cumsum(num_alternatives[:-1], out=offsets[1:])

        total_alternatives = (
            int(offsets[-1] + num_alternatives[-1]) if num_people > 0 else 0
        )
        if total_alternatives != self.attribute_table.n_entries:
            LOG.error(
                f"The cumulative number of discrete choices ({total_alternatives}) does not equal the total number of "
                f"attribute vectors ({self.attribute_table.n_entries})"
            )
            raise ConsistencyError(
                "The cumulative number of discrete choices does not equal the number of attribute vectors"
            )
        LOG.info(f"The cumulative number of discrete choices: {total_alternatives}")

        invalid = np.flatnonzero((decisions < 0) | (decisions >= num_alternatives))
        if len(invalid) > 0:
            for person in invalid[:10]:
                LOG.error(
                    f"Person {person} chose alternative {raw_decisions[person]} (1-based) but has "
                    f"{num_alternatives[person]} alternatives"
                )
            raise InvalidChoiceIndexError(
                f"{len(invalid)} people chose alternatives that are not in their choice set (see log messages)",
                person_indices=invalid,
            )

        max_alternatives = int(num_alternatives.max()) if num_people > 0 else 0
        population = np.bincount(decisions, minlength=max_alternatives)

        # everything checks out, so now it is safe to modify the decisions table
        if self.decisions_table.data.flags.writeable:
            np.subtract(self.decisions_table.data, 1, out=self.decisions_table.data)
        else:
            LOG.info("decisions_table is read-only, not converting it to 0-based in place")

        if not isinstance(decisions_table, Table) and not (
            isinstance(decisions_table, np.ndarray)
            and np.shares_memory(decisions_table, self.decisions_table.data)
        ):
            LOG.info(
                "decisions_table was copied (not a contiguous numpy array), the caller's copy is still 1-based"
            )

        self._attributes = _read_only(self.attribute_table.data)
        self._num_alternatives = _read_only(num_alternatives)
        self._decisions = _read_only(decisions)
        self._offsets = _read_only(offsets)
        self._shuffled = _read_only(shuffled)
        self._population = _read_only(population)
        self._personidx = _read_only(np.repeat(np.arange(num_people), num_alternatives))
        self._chosen_rows = _read_only(offsets + decisions)

        end_time = time.perf_counter()
        LOG.info(
            f"Discrete choice table has {num_people} people, attributes are "
            f"{human_shape(self._attributes.shape)} and use {human_bytes(self._attributes.nbytes)} memory"
        )
        LOG.info(f"Initialized discrete choice table in {human_time(end_time - start_time)}")

    @classmethod
    def generate_random_dataset(
        cls,
        num_people,
        num_attributes,
        attribute_dimensions,
        distribution=None,
        seed=None,
        **kwargs,
    ):
        """
        Create a table of random choices, for testing. Each person has between 3 and 6 alternatives, attributes are
        uniform between 0.1 and 1, and each person chooses one of their alternatives at random.
        """
        rng = np.random.default_rng(seed)
        num_alternatives = rng.integers(3, 7, size=num_people)
        attributes = rng.uniform(0.1, 1.0, size=(int(num_alternatives.sum()), num_attributes))
        decisions = rng.integers(0, num_alternatives) + 1

        return cls(
            Table(attributes),
            attribute_dimensions,
            Table(decisions.astype("float64")),
            Table(num_alternatives.astype("float64")),
            distribution=distribution,
            seed=rng,
            **kwargs,
        )

    @classmethod
    def load(
        cls,
        attribute_file,
        decision_file,
        num_alternatives_file,
        attribute_dimensions,
        mmap=False,
        **kwargs,
    ):
        """
        Load a table written by save(). If mmap is True, the attribute table is memory-mapped rather than read into
        memory.
        """
        return cls(
            Table.load(attribute_file, mmap=mmap),
            attribute_dimensions,
            Table.load(decision_file),
            Table.load(num_alternatives_file),
            **kwargs,
        )

    def save(self, attribute_file, decision_file, num_alternatives_file):
        "Save the attribute, decision and number of alternatives tables. Decisions are saved 1-based."
        self.attribute_table.save(attribute_file)
        Table(self._decisions + 1).save(decision_file)
        self.num_alternatives_table.save(num_alternatives_file)

    @property
    def distribution(self):
        "The distribution coefficients are drawn from"
        return self._distribution

    @property
    def attribute_dimensions(self):
        return self._attribute_dimensions

    def _check_person(self, person_index):
        person_index = operator.index(person_index)
        if not 0 <= person_index < len(self._offsets):
            raise IndexError(
                f"Person {person_index} out of range for table with {len(self._offsets)} people"
            )
        return person_index

    def _check_beta(self, beta):
        beta = np.asarray(beta, dtype="float64")
        if beta.ndim != 1 or len(beta) != self.num_attributes():
            raise ValueError(
                f"Coefficient vector must have {self.num_attributes()} entries, got shape {beta.shape}"
            )
        return beta

    def num_people(self):
        return len(self._offsets)

    def num_alternatives(self, person_index):
        "Number of alternatives available to a person"
        return int(self._num_alternatives[self._check_person(person_index)])

    def chosen_index(self, person_index):
        "0-based index of the alternative a person chose"
        return int(self._decisions[self._check_person(person_index)])

    def offset(self, person_index):
        "Row of the attribute table holding a person's first alternative"
        return int(self._offsets[self._check_person(person_index)])

    def num_attributes(self):
        return self.attribute_table.n_attributes

    def num_parameters(self):
        return self._distribution.parameter_count()

    def total_alternative_rows(self):
        "Number of (person, alternative) pairs, i.e. rows in the attribute table"
        return self.attribute_table.n_entries

    def total_num_discrete_choices(self):
        "Largest number of alternatives available to any one person"
        return len(self._population)

    def population_count(self, alternative_slot):
        "Number of people who chose the alternative in this (0-based) position of their choice set"
        alternative_slot = operator.index(alternative_slot)
        if not 0 <= alternative_slot < len(self._population):
            raise IndexError(
                f"Alternative {alternative_slot} out of range, no one has more than {len(self._population)} alternatives"
            )
        return int(self._population[alternative_slot])

    def shuffled_person(self, position):
        "The person at this position in the shuffled order"
        position = operator.index(position)
        if not 0 <= position < len(self._shuffled):
            raise IndexError(
                f"Position {position} out of range for table with {len(self._shuffled)} people"
            )
        return int(self._shuffled[position])

    def shuffled_people(self):
        "Iterate over all people in shuffled order"
        for person in self._shuffled:
            yield int(person)

    def population_shares(self):
        "Number and share of people choosing each alternative slot"
        return pd.DataFrame(
            {
                "count": self._population,
                "share": self._population / max(self.num_people(), 1),
            },
            index=pd.RangeIndex(len(self._population), name="alternative"),
        )

    def attribute_vector(self, person_index, alternative_index):
        "Attributes of one alternative available to a person (read-only)"
        person_index = self._check_person(person_index)
        alternative_index = operator.index(alternative_index)
        if not 0 <= alternative_index < self._num_alternatives[person_index]:
            raise IndexError(
                f"Alternative {alternative_index} out of range, person {person_index} has "
                f"{self._num_alternatives[person_index]} alternatives"
            )
        return self._attributes[self._offsets[person_index] + alternative_index]

    def choice_probabilities(self, person_index, beta):
        """
        Multinomial logit probability of a person choosing each of their alternatives, for coefficients beta.

        :param person_index: person to compute probabilities for
        :type person_index: int

        :param beta: coefficients, one per attribute
        :type beta: numpy.ndarray

        :return: probability of each alternative, in the order of the attribute table
        """
        person_index = self._check_person(person_index)
        beta = self._check_beta(beta)
        start = self._offsets[person_index]
        end = start + self._num_alternatives[person_index]
        return mnl.probabilities(np.dot(self._attributes[start:end], beta))

    def choice_probability(self, person_index, beta):
        "Probability of the alternative the person actually chose, for coefficients beta"
        probabilities = self.choice_probabilities(person_index, beta)
        return probabilities[self._decisions[person_index]]

    def utilities(self, beta):
        "Utility of every row of the attribute table"
        beta = self._check_beta(beta)

        if self._attributes.nbytes > self.max_chunk_bytes:
            row_bytes = self._attributes.itemsize * self._attributes.shape[1]
            rows_per_chunk = max(1, int(self.max_chunk_bytes // row_bytes))
            LOG.info(f"Computing utilities in chunks of {rows_per_chunk} rows")
            alts = da.from_array(self._attributes, chunks=(rows_per_chunk, -1))
            return da.dot(alts, beta).compute()

        return np.dot(self._attributes, beta)

    def all_choice_probabilities(self, beta):
        "Probabilities for every row of the attribute table, normalized within each person"
        return mnl.grouped_probabilities(self.utilities(beta), self._personidx, self._offsets)

    def log_likelihood(self, beta):
        "Log likelihood of everyone's choices, for coefficients beta"
        return mnl.log_likelihood(
            self.utilities(beta), self._personidx, self._offsets, self._chosen_rows
        )

    # derived arrays that are stored read-only
    _DERIVED_FIELDS = (
        "_num_alternatives",
        "_decisions",
        "_offsets",
        "_shuffled",
        "_population",
        "_personidx",
        "_chosen_rows",
    )

    # don't pickle the attribute view, it would be a second copy of the attribute table
    def __getstate__(self):
        return {k: v for k, v in self.__dict__.items() if k != "_attributes"}

    def __setstate__(self, state):
        self.__dict__.update(state)
        # numpy does not keep arrays read-only through pickling
        for field in self._DERIVED_FIELDS:
            setattr(self, field, _read_only(getattr(self, field)))
        self._attributes = _read_only(self.attribute_table.data)

    def __repr__(self):
        return (
            f"DCMTable({self.num_people()} people, {self.total_alternative_rows()} alternatives, "
            f"{self.num_attributes()} attributes, {self._distribution} distribution)"
        )
