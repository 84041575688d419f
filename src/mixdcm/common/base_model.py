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

import os
import dill


class PicklableModel(object):
    """
    Mixin to save and restore a complete model, including derived indices and the distribution, using dill.
    """

    def to_pickle(self, fn):
        "Save to disk"
        if isinstance(fn, (str, os.PathLike)):
            with open(fn, "wb") as out:
                dill.dump(self, out)
        else:
            dill.dump(self, fn)

    @classmethod
    def from_pickle(cls, fn):
        "Read a previously saved model"
        if isinstance(fn, (str, os.PathLike)):
            with open(fn, "rb") as inf:
                model = dill.load(inf)
        else:
            model = dill.load(fn)

        if not isinstance(model, cls):
            raise ValueError(f"File does not contain a {cls.__name__}!")

        return model
