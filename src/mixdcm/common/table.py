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
A dense, row-addressable numeric table.

Every table used by a discrete choice model is one of these: the attribute table has one row per (person,
alternative) pair and one column per attribute, and the decision and alternative count tables have one row per person
and a single column.
"""

import operator
import numpy as np
from logging import getLogger

from .util import human_bytes, human_shape

LOG = getLogger(__name__)


class Table(object):
    """
    A contiguous two-dimensional table of numbers, stored row-major so that each row is a single block of memory.
    """

    def __init__(self, data=None):
        """
        :param data: table contents. A one-dimensional array is treated as a single column. Arrays that are already
            contiguous are wrapped, not copied, so changes made through the table are visible to the caller.
        :type data: numpy.ndarray or None
        """
        if data is None:
            self._data = np.zeros((0, 0))
        else:
            self._data = self._as_table_array(data)

    @staticmethod
    def _as_table_array(data):
        arr = np.asarray(data)
        if arr.dtype.kind not in "iuf":
            raise ValueError(f"Table data must be numeric, got dtype {arr.dtype}")
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        elif arr.ndim != 2:
            raise ValueError(f"Table data must be one- or two-dimensional, got {arr.ndim} dimensions")
        return np.ascontiguousarray(arr)

    def init(self, n_attributes, n_entries):
        "Allocate an all-zero table with n_entries rows of n_attributes values each"
        if n_attributes < 0 or n_entries < 0:
            raise ValueError("Table dimensions must be non-negative")
        self._data = np.zeros((n_entries, n_attributes))

    @property
    def data(self):
        "The underlying array, with shape (n_entries, n_attributes)"
        return self._data

    @property
    def n_entries(self):
        return self._data.shape[0]

    @property
    def n_attributes(self):
        return self._data.shape[1]

    def row_count(self):
        return self.n_entries

    def __len__(self):
        return self.n_entries

    def _check_row(self, i):
        i = operator.index(i)
        if not 0 <= i < self.n_entries:
            raise IndexError(f"Row {i} out of range for table with {self.n_entries} rows")
        return i

    def get_row(self, i):
        "Get row i. This is a view, not a copy."
        return self._data[self._check_row(i)]

    def set_row(self, i, values):
        i = self._check_row(i)
        values = np.asarray(values).reshape(-1)
        if len(values) != self.n_attributes:
            raise ValueError(f"Row has {len(values)} values, table has {self.n_attributes} attributes")
        self._data[i] = values

    def save(self, filename):
        "Save the table in numpy .npy format"
        LOG.info(f"Saving {human_shape(self._data.shape)} table ({human_bytes(self._data.nbytes)}) to {filename}")
        np.save(filename, self._data, allow_pickle=False)

    @classmethod
    def load(cls, filename, mmap=False):
        """
        Load a table saved with save().

        :param mmap: memory-map the file read-only rather than reading it into memory, for attribute tables that are
            larger than memory
        :type mmap: bool
        """
        data = np.load(filename, mmap_mode="r" if mmap else None, allow_pickle=False)
        LOG.info(f"Loaded {human_shape(data.shape)} table from {filename}")
        return cls(data)

    def __repr__(self):
        return f"Table({human_shape(self._data.shape)})"
