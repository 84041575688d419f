"""
Discrete choice tables for mixed logit models, where every person has their own set of alternatives and coefficients
are drawn from a distribution.
"""

from .dcm_table import DCMTable
from .distribution import (
    Distribution,
    ConstantDistribution,
    DiagonalGaussianDistribution,
    GaussianDistribution,
)
from . import loader
