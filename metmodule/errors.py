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
"""Exceptions raised while building, scoring and solving metabolic graphs"""

from typing import Dict


class MetModuleError(Exception):
    """Base class of all metmodule errors

    Args:
        message (str):
            Human readable description of the problem.

        context (optional (dict)):
            Identifiers or values that caused the error, e.g., {'reaction': 'R1'}.
    """

    def __init__(self, message, context: Dict = None):
        super().__init__(message)
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return str(self) + ': ' + str(self.context)


class InvalidTopology(MetModuleError):
    """The requested graph topology is neither 'atoms' nor 'metabolites'."""


class EmptyGraph(MetModuleError):
    """No edges remain after filtering reactions."""


class InconsistentMapping(MetModuleError):
    """An atom mapping references an atom that does not belong to its metabolite."""


class MissingParameter(MetModuleError):
    """A graph carries differential data of a type whose significance parameter was not given."""


class InvalidParameter(MetModuleError):
    """An argument has an unsupported value or an unknown keyword was passed."""


class InvalidTable(MetModuleError):
    """A differential data table lacks identifier or p-value columns."""


class InvalidModule(MetModuleError):
    """A solver returned vertices or edges that are not part of the scored graph."""
