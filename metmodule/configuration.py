#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Global defaults for graph construction and scoring (Configuration)"""

import logging
from metmodule.names import *
from metmodule.errors import InvalidParameter


class Configuration(object):
    """Process-wide defaults of the metmodule package

    Works like cobra.Configuration: every instantiation returns the same object, so
    changing a value affects all subsequent calls that do not override the value
    through a keyword argument.

    Example:
        conf = Configuration()
        conf.baseline_score = -0.5

    Attributes:
        baseline_score (float): (Default: -0.1)
            Score of every vertex and edge without a scored differential record.

        threshold_max (float): (Default: 0.1)
            Upper limit for the p-value threshold derived from k_gene and k_met.

        scoring (str): (Default: 'bum')
            Name of the scoring strategy: 'bum' or 'log_ratio'.

        topology (str): (Default: 'atoms')
            Graph topology used when none is given: 'atoms' or 'metabolites'.

        solver (str): (Default: None)
            Name of a registered subgraph solver.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._reset()
        return cls._instance

    def _reset(self):
        self._baseline_score = -0.1
        self._threshold_max = 0.1
        self._scoring = BUM
        self._topology = ATOMS
        self.solver = None

    @property
    def baseline_score(self) -> float:
        return self._baseline_score

    @baseline_score.setter
    def baseline_score(self, value):
        self._baseline_score = float(value)

    @property
    def threshold_max(self) -> float:
        return self._threshold_max

    @threshold_max.setter
    def threshold_max(self, value):
        if not 0.0 < float(value) <= 1.0:
            raise InvalidParameter('threshold_max must be within (0, 1].', {THRESHOLD_MAX: value})
        self._threshold_max = float(value)

    @property
    def scoring(self) -> str:
        return self._scoring

    @scoring.setter
    def scoring(self, value):
        if value not in [BUM, LOG_RATIO]:
            raise InvalidParameter('Scoring must be "' + BUM + '" or "' + LOG_RATIO + '".', {SCORING: value})
        self._scoring = value

    @property
    def topology(self) -> str:
        return self._topology

    @topology.setter
    def topology(self, value):
        if value not in [ATOMS, METABOLITES]:
            raise InvalidParameter('Topology must be "' + ATOMS + '" or "' + METABOLITES + '".', {TOPOLOGY: value})
        self._topology = value

    def restore_defaults(self):
        """Reset all values to the package defaults"""
        logging.debug('  Restoring default configuration.')
        self._reset()

    def __repr__(self):
        return (f'Configuration(baseline_score={self.baseline_score}, threshold_max={self.threshold_max}, '
                f'scoring={self.scoring!r}, topology={self.topology!r}, solver={self.solver!r})')
