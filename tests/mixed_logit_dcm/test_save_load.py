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
Test saving and loading discrete choice tables
"""

import io

import numpy as np
import pytest

from mixdcm.mixed_logit_dcm import DCMTable, ConstantDistribution


@pytest.fixture
def table():
    return DCMTable.generate_random_dataset(25, 3, [3], distribution=ConstantDistribution(), seed=9)


def _assert_same(a, b):
    assert a.num_people() == b.num_people()
    assert a.total_alternative_rows() == b.total_alternative_rows()
    beta = np.array([0.3, -0.2, 1.1])
    for person in range(a.num_people()):
        assert a.num_alternatives(person) == b.num_alternatives(person)
        assert a.chosen_index(person) == b.chosen_index(person)
        assert a.offset(person) == b.offset(person)
        assert np.allclose(a.choice_probabilities(person, beta), b.choice_probabilities(person, beta))


@pytest.mark.parametrize("mmap", [False, True])
def test_save_load(table, tmp_path, mmap):
    files = [str(tmp_path / f"{name}.npy") for name in ("attributes", "decisions", "num_alternatives")]
    table.save(*files)

    # decisions are saved 1-based, like the input
    assert np.all(np.load(files[1])[:, 0] == [table.chosen_index(p) + 1 for p in range(table.num_people())])

    loaded = DCMTable.load(*files, attribute_dimensions=[3], mmap=mmap, seed=9)
    _assert_same(table, loaded)
    assert loaded.population_shares().equals(table.population_shares())


def test_pickle(table, tmp_path):
    fn = tmp_path / "table.pickle"
    table.to_pickle(fn)
    loaded = DCMTable.from_pickle(fn)

    _assert_same(table, loaded)
    assert list(loaded.shuffled_people()) == list(table.shuffled_people())
    assert loaded.num_parameters() == 3

    # still read-only, and attributes are not stored twice
    with pytest.raises(ValueError):
        loaded.attribute_vector(0, 0)[0] = 42
    assert not loaded._offsets.flags.writeable
    assert not loaded._decisions.flags.writeable
    assert np.shares_memory(loaded.attribute_vector(0, 0), loaded.attribute_table.data)


def test_pickle_file_object(table):
    buf = io.BytesIO()
    table.to_pickle(buf)
    buf.seek(0)
    _assert_same(table, DCMTable.from_pickle(buf))


def test_pickle_wrong_type(tmp_path):
    import dill

    fn = tmp_path / "not_a_table.pickle"
    with open(fn, "wb") as out:
        dill.dump({"a": 1}, out)

    with pytest.raises(ValueError):
        DCMTable.from_pickle(fn)
