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
Exceptions raised when a discrete choice table is internally inconsistent.

All of them are ValueErrors, so code that already catches ValueError for bad input data keeps working.
"""


class MixdcmError(ValueError):
    "Base class for mixdcm data errors"

    pass


class ConsistencyError(MixdcmError):
    """
    The number of alternatives summed over all people does not match the number of rows in the attribute table.

    A table in this state cannot be used, as the offsets of every person after the first mismatch are wrong.
    """

    pass


class InvalidChoiceIndexError(MixdcmError):
    """
    The chosen alternative of one or more people is not one of their available alternatives.
    """

    def __init__(self, message, person_indices=()):
        super().__init__(message)
        self.person_indices = tuple(person_indices)
