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
"""Container for subgraphs returned by a subgraph solver (MetabolicModule)"""

from typing import List
import networkx as nx
import logging
from metmodule.names import *
from metmodule.errors import InvalidModule
from metmodule.scoring import ScoredGraph


class MetabolicModule(ScoredGraph):
    """Connected subgraph of a scored metabolic graph

    Objects of this class are returned by solve_mwcs and contain the vertices and edges
    selected by a subgraph solver, with all attributes of the scored graph. A module is a
    terminal result: it is exported or inspected, but not used as input of further graph
    construction or scoring.

    Instances of this class are not meant to be created by metmodule users.

    Args:
        scored_graph (ScoredGraph):
            The graph the module was computed from.

        vertices (list of str):
            Vertices of the module.

        edges (list of tuple):
            Edges of the module as (u, v, reaction) triples.
    """

    def __init__(self, scored_graph, vertices, edges):
        source = scored_graph.graph
        vertices = set(vertices)
        missing = sorted(str(v) for v in vertices if v not in source)
        if missing:
            raise InvalidModule('The module contains vertices that are not part of the scored graph: ' + str(missing[:10]),
                                {'vertices': missing})
        g = nx.MultiGraph()
        g.graph.update(source.graph)
        g.add_nodes_from((v, source.nodes[v]) for v in sorted(vertices))
        for e in edges:
            if len(e) != 3 or not source.has_edge(*e):
                raise InvalidModule('The module contains an edge that is not part of the scored graph: ' + str(e), {'edge': e})
            u, v, k = e
            if u not in vertices or v not in vertices:
                raise InvalidModule('Both endpoints of edge ' + str(e) + ' must be part of the module.', {'edge': e})
            g.add_edge(u, v, key=k, **source.edges[u, v, k])
        super().__init__(g, scored_graph.topology)

    def get_genes(self) -> List[str]:
        """Genes whose data is attached to the edges of the module"""
        return sorted({d[GENE] for _, _, d in self.graph.edges(data=True) if d[GENE] is not None})

    def get_metabolites(self) -> List[str]:
        return sorted({d[METABOLITE] for _, d in self.graph.nodes(data=True)})

    def total_score(self) -> float:
        """Sum of the scores of all signals, each signal counted once"""
        return float(sum(self.signal_scores().values()))

    def is_connected(self) -> bool:
        return self.graph.number_of_nodes() > 0 and nx.is_connected(self.graph)

    def collapse_atoms(self):
        """Turn an atom-level module into a metabolite-level module

        Atoms of the same metabolite are merged into one vertex. Edges of one reaction
        between two metabolites are merged into one edge; transitions within a
        metabolite disappear. Modules with metabolite topology are returned unchanged.

        Returns:
            (MetabolicModule):
            A module with 'metabolites' topology.
        """
        if self.topology == METABOLITES:
            return self
        g = nx.MultiGraph()
        g.graph.update(self.graph.graph)
        g.graph[TOPOLOGY] = METABOLITES
        for _, d in sorted(self.graph.nodes(data=True)):
            if d[METABOLITE] not in g:
                attrs = {k: v for k, v in d.items() if k != ELEMENT}
                g.add_node(d[METABOLITE], **attrs)
        for u, v, k, d in sorted(self.graph.edges(keys=True, data=True), key=lambda e: e[:3]):
            met_u, met_v = sorted((self.graph.nodes[u][METABOLITE], self.graph.nodes[v][METABOLITE]))
            if met_u != met_v and not g.has_edge(met_u, met_v, k):
                g.add_edge(met_u, met_v, key=k, **d)
        logging.info('  Collapsed ' + str(self.number_of_vertices()) + ' atoms into ' + str(g.number_of_nodes()) + ' metabolites.')
        collapsed = ScoredGraph(g, METABOLITES)
        return MetabolicModule(collapsed, list(g.nodes), list(g.edges(keys=True)))
