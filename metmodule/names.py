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
"""Static strings used in the metmodule package

    Topology

        ATOMS = 'atoms'

        METABOLITES = 'metabolites'

    Table columns

        ATOM = 'atom'

        ATOM_X = 'atom_x'

        ATOM_Y = 'atom_y'

        METABOLITE = 'metabolite'

        METABOLITE_X = 'metabolite_x'

        METABOLITE_Y = 'metabolite_y'

        METABOLITE_NAME = 'metabolite_name'

        ELEMENT = 'element'

        REACTION = 'reaction'

        REACTION_NAME = 'reaction_name'

        ENZYME = 'enzyme'

        GENE = 'gene'

        SYMBOL = 'symbol'

        ID = 'ID'

        PVAL = 'pval'

        LOG2FC = 'log2FC'

    Graph element attributes

        ORIGIN = 'origin'

        LABEL = 'label'

        SIGNAL = 'signal'

        SCORE = 'score'

        DIRECTION = 'direction'

        ENZYMES = 'enzymes'

        GENES = 'genes'

    Scoring

        K_GENE = 'k_gene'

        K_MET = 'k_met'

        BASELINE_SCORE = 'baseline_score'

        THRESHOLD_MAX = 'threshold_max'

        SCORING = 'scoring'

        BUM = 'bum'

        LOG_RATIO = 'log_ratio'

        GENE_DATA = 'gene'

        MET_DATA = 'met'
"""

# Topology
ATOMS = 'atoms'
METABOLITES = 'metabolites'
TOPOLOGY = 'topology'

# Table columns
ATOM = 'atom'
ATOM_X = 'atom_x'
ATOM_Y = 'atom_y'
METABOLITE = 'metabolite'
METABOLITE_X = 'metabolite_x'
METABOLITE_Y = 'metabolite_y'
METABOLITE_NAME = 'metabolite_name'
ELEMENT = 'element'
REACTION = 'reaction'
REACTION_NAME = 'reaction_name'
ENZYME = 'enzyme'
GENE = 'gene'
SYMBOL = 'symbol'
ID = 'ID'
PVAL = 'pval'
LOG2FC = 'log2FC'

# cobra annotation key holding EC numbers
EC_CODE = 'ec-code'

# Graph element attributes
ORIGIN = 'origin'
LABEL = 'label'
SIGNAL = 'signal'
SCORE = 'score'
DIRECTION = 'direction'
ENZYMES = 'enzymes'
GENES = 'genes'

# Scoring
K_GENE = 'k_gene'
K_MET = 'k_met'
BASELINE_SCORE = 'baseline_score'
THRESHOLD_MAX = 'threshold_max'
SCORING = 'scoring'
BUM = 'bum'
LOG_RATIO = 'log_ratio'
GENE_DATA = 'gene'
MET_DATA = 'met'

# Solver
SOLVER = 'solver'
