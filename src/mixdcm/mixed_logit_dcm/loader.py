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
Build discrete choice tables from long-format data, with one row per person and alternative.
"""

from logging import getLogger
import numpy as np
import pandas as pd

from mixdcm.common import Table
from .dcm_table import DCMTable

LOG = getLogger(__name__)


def from_long_format(
    df,
    person_col,
    alternative_col,
    chosen_col,
    attribute_cols,
    attribute_dimensions=None,
    **kwargs,
):
    """
    Create a DCMTable from a data frame with one row per (person, alternative) pair.

    :param df: long-format choice data
    :type df: pandas.DataFrame

    :param person_col: column identifying the person. People are numbered in sorted order of this column; the
        original identifiers are kept in the person_ids attribute of the result.
    :type person_col: str

    :param alternative_col: column used to order each person's alternatives
    :type alternative_col: str

    :param chosen_col: column that is true (or 1) for the alternative each person chose, and false otherwise
    :type chosen_col: str

    :param attribute_cols: attribute columns, in order
    :type attribute_cols: list of str

    :param attribute_dimensions: number of columns in each block of attributes, default one block of all attributes
    :type attribute_dimensions: sequence of int

    Other keyword arguments are passed to DCMTable.
    """
    attribute_cols = list(attribute_cols)

    allPassed = True
    for col in [person_col, alternative_col, chosen_col, *attribute_cols]:
        if col not in df.columns:
            LOG.error(f"Column {col} not found in data")
            allPassed = False

    if allPassed:
        for col in attribute_cols:
            if df[col].isnull().any():
                LOG.error(f"Attribute {col} contains NaNs")
                allPassed = False

    if not allPassed:
        raise ValueError("Some validation checks failed (see log messages)")

    # stable sort so ties in alternative_col keep their original order
    data = df.sort_values([person_col, alternative_col], kind="mergesort").reset_index(
        drop=True
    )

    person_codes, person_ids = pd.factorize(data[person_col], sort=True)
    num_people = len(person_ids)
    chosen = data[chosen_col].to_numpy().astype(bool)

    num_alternatives = np.bincount(person_codes, minlength=num_people)
    choices_per_person = np.bincount(
        person_codes, weights=chosen.astype("float64"), minlength=num_people
    )
    if not np.all(choices_per_person == 1):
        bad = np.flatnonzero(choices_per_person != 1)
        LOG.error(
            f"{len(bad)} people do not have exactly one chosen alternative, including {list(person_ids[bad[:10]])}"
        )
        raise ValueError("Every person must have exactly one chosen alternative")

    offsets = np.zeros(num_people, dtype="int64")
    np.cumsum(num_alternatives[:-1], out=offsets[1:])

    # data is sorted by person, so chosen rows are in person order
    chosen_rows = np.flatnonzero(chosen)
    decisions = chosen_rows - offsets + 1

    if attribute_dimensions is None:
        attribute_dimensions = [len(attribute_cols)]

    LOG.info(f"Read {len(data)} alternatives for {num_people} people")

    table = DCMTable(
        Table(data[attribute_cols].to_numpy(dtype="float64")),
        attribute_dimensions,
        Table(decisions.astype("float64")),
        Table(num_alternatives.astype("float64")),
        **kwargs,
    )
    table.person_ids = pd.Index(person_ids, name=person_col)
    table.attribute_names = attribute_cols
    return table
