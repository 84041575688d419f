# a simple example application of mixdcm

#    Copyright 2019 Matthew Wigginton Conway

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
from sys import path, argv
import os.path
path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(argv[0]))), "src"))
import mixdcm
from mixdcm.mixed_logit_dcm import DCMTable, DiagonalGaussianDistribution
mixdcm.enable_logging()

table = DCMTable.generate_random_dataset(
    num_people=1000,
    num_attributes=4,
    attribute_dimensions=[4],
    distribution=DiagonalGaussianDistribution(),
    seed=2832,
)

print(table)
print(table.population_shares())

# simulated likelihood of the first 100 people in shuffled order, with coefficients drawn from a normal distribution
rng = np.random.default_rng(2832)
mean = np.array([1.0, -0.5, 0.25, 0.0])
sd = np.array([0.5, 0.5, 0.1, 1.0])
draws = rng.normal(mean, sd, size=(200, 4))

simulated_ll = 0
for position in range(100):
    person = table.shuffled_person(position)
    simulated_ll += np.log(np.mean([table.choice_probability(person, beta) for beta in draws]))

print(f"Simulated log likelihood (100 people, 200 draws): {simulated_ll:.3f}")
print(f"Log likelihood at mean coefficients (all people): {table.log_likelihood(mean):.3f}")
