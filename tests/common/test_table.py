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

from mixdcm.common import Table


def test_one_dimensional_data_is_a_column():
    table = Table(np.array([3.0, 2.0, 4.0]))
    assert table.n_entries == 3
    assert table.n_attributes == 1
    assert table.row_count() == 3
    assert np.all(table.get_row(2) == [4.0])


def test_table_wraps_caller_array():
    arr = np.arange(6, dtype="float64").reshape(3, 2)
    table = Table(arr)
    table.set_row(1, [10, 11])
    assert np.all(arr[1] == [10, 11]), "table should share memory with a contiguous input array"


def test_get_row_bounds():
    table = Table(np.arange(6).reshape(3, 2))
    assert np.all(table.get_row(0) == [0, 1])
    assert np.all(table.get_row(2) == [4, 5])

    with pytest.raises(IndexError):
        table.get_row(3)

    # negative indices are out of range, not counted from the end
    with pytest.raises(IndexError):
        table.get_row(-1)


def test_set_row_checks_length():
    table = Table()
    table.init(3, 2)
    assert table.data.shape == (2, 3)
    assert np.all(table.data == 0)

    table.set_row(1, [1, 2, 3])
    assert np.all(table.get_row(1) == [1, 2, 3])

    with pytest.raises(ValueError):
        table.set_row(0, [1, 2])

    with pytest.raises(IndexError):
        table.set_row(2, [1, 2, 3])


def test_invalid_data():
    with pytest.raises(ValueError):
        Table(np.array(["a", "b"]))

    with pytest.raises(ValueError):
        Table(np.zeros((2, 2, 2)))


def test_save_load(tmp_path):
    arr = np.random.default_rng(1).uniform(size=(5, 3))
    fn = str(tmp_path / "attributes.npy")
    Table(arr).save(fn)

    loaded = Table.load(fn)
    assert loaded.data.shape == (5, 3)
    assert np.all(loaded.data == arr)

    mmapped = Table.load(fn, mmap=True)
    assert np.all(mmapped.data == arr)
    assert not mmapped.data.flags.writeable
