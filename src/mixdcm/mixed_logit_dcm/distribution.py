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
Distributions that coefficient vectors are drawn from in a mixed logit model.

The discrete choice table only needs to tell the distribution how the attributes are laid out, and to ask it how many
parameters it has. Drawing coefficients is left to the estimation code.
"""

import numpy as np


class Distribution(object):
    """
    Base class for coefficient distributions. This is not usable on its own: subclasses must override
    count_parameters, which gives the number of parameters a distribution has for a given number of attributes.
    """

    name = "distribution"

    def __init__(self):
        self.attribute_dimensions = None
        self.num_attributes = None
        self._num_parameters = None

    def init_from_dimensions(self, attribute_dimensions):
        """
        Set up the distribution for attributes made of blocks with the given dimensions.

        :param attribute_dimensions: number of attribute columns in each block
        :type attribute_dimensions: sequence of int
        """
        dims = tuple(int(d) for d in attribute_dimensions)
        if len(dims) == 0:
            raise ValueError("attribute_dimensions must have at least one entry")
        if any(d < 0 for d in dims):
            raise ValueError(f"attribute_dimensions must be non-negative, got {dims}")

        self.attribute_dimensions = dims
        self.num_attributes = int(np.sum(dims))
        self._num_parameters = self.count_parameters(self.num_attributes)

    def count_parameters(self, num_attributes):
        "Number of parameters for num_attributes attributes. Subclasses must override this."
        raise NotImplementedError(f"{type(self).__name__} does not define count_parameters")

    def parameter_count(self):
        if self._num_parameters is None:
            raise ValueError(f"{self.name} distribution has not been initialized from attribute dimensions")
        return self._num_parameters

    def __repr__(self):
        return self.name


class ConstantDistribution(Distribution):
    "Coefficients are fixed, so there is one parameter per attribute (a plain multinomial logit)"

    name = "constant"

    def count_parameters(self, num_attributes):
        return num_attributes


class DiagonalGaussianDistribution(Distribution):
    "Independent normal coefficients: a mean and a variance for each attribute"

    name = "diagonal gaussian"

    def count_parameters(self, num_attributes):
        return 2 * num_attributes


class GaussianDistribution(Distribution):
    """
    Jointly normal coefficients: a mean for each attribute, plus the lower triangle of the Cholesky factor of the
    covariance matrix.
    """

    name = "gaussian"

    def count_parameters(self, num_attributes):
        return num_attributes + num_attributes * (num_attributes + 1) // 2
