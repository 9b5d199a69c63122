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
"""Interface to external maximum weight connected subgraph solvers (SubgraphSolver, solve_mwcs)"""

from typing import Tuple, List
from pandas import DataFrame
import logging
from metmodule.names import *
from metmodule.errors import InvalidParameter
from metmodule.configuration import Configuration
from metmodule.metabolicModule import MetabolicModule

avail_solvers = {}


class MwcsInstance(object):
    """A generalized maximum weight connected subgraph (GMWCS) problem instance

    The instance presents a scored graph in the form solvers expect: tables of vertices
    and edges with string labels and a signal each, and a table of signal weights. A
    solver must count the weight of each signal at most once, no matter how many
    selected vertices or edges carry it.

    Attributes:
        nodes (pandas.DataFrame): columns 'name', 'label', 'signal', 'score'.
        edges (pandas.DataFrame): columns 'from', 'to', 'reaction', 'label', 'signal', 'score'.
        signals (pandas.DataFrame): columns 'signal', 'score'.
        graph (networkx.MultiGraph): the frozen scored graph.
    """

    def __init__(self, scored_graph):
        self.graph = scored_graph.graph
        self.nodes = DataFrame([{
            'name': n,
            LABEL: str(d[LABEL]),
            SIGNAL: d[SIGNAL],
            SCORE: d[SCORE]
        } for n, d in sorted(self.graph.nodes(data=True))],
                               columns=['name', LABEL, SIGNAL, SCORE])
        self.edges = DataFrame([{
            'from': u,
            'to': v,
            REACTION: k,
            LABEL: str(d[LABEL]),
            SIGNAL: d[SIGNAL],
            SCORE: d[SCORE]
        } for u, v, k, d in sorted(self.graph.edges(keys=True, data=True), key=lambda e: e[:3])],
                               columns=['from', 'to', REACTION, LABEL, SIGNAL, SCORE])
        self.signals = scored_graph.signals()


class SubgraphSolver(object):
    """Base class of subgraph solvers

    Subclasses wrap an (external) heuristic or exact GMWCS solver. solve receives an
    MwcsInstance and returns the vertices and edges of a connected subgraph, edges given
    as (u, v, reaction) triples. An empty solution means that no subgraph was found.
    """

    name = None

    def __init__(self, **kwargs):
        self.options = kwargs

    def solve(self, instance) -> Tuple[List, List]:
        raise NotImplementedError


def register_solver(name, solver_class):
    """Make a subgraph solver available under a name"""
    if not isinstance(solver_class, type) or not issubclass(solver_class, SubgraphSolver):
        raise InvalidParameter('Solvers must be subclasses of SubgraphSolver.', {SOLVER: name})
    avail_solvers[name] = solver_class
    logging.debug('  Registered subgraph solver ' + name + '.')


def select_solver(solver=None) -> str:
    """Select a subgraph solver for subsequent computations

    If a solver name is given and registered, it is used. Otherwise the solver of the
    metmodule Configuration is tried, then the first registered solver.

    Returns:
        (str):
        The name of a registered solver.
    """
    if solver and solver in avail_solvers:
        return solver
    conf_solver = Configuration().solver
    if conf_solver in avail_solvers:
        selected = conf_solver
    elif avail_solvers:
        selected = sorted(avail_solvers)[0]
    else:
        raise InvalidParameter('No subgraph solver registered. Register one with register_solver.')
    if solver:
        logging.warning('Selected solver ' + str(solver) + ' not available. Using ' + selected + ' instead.')
    return selected


def solve_mwcs(scored_graph, solver=None, **kwargs) -> MetabolicModule:
    """Find a maximum weight connected subgraph (module) of a scored graph

    The scored graph is handed to an external solver as MwcsInstance. The returned
    vertices and edges are checked for structural containment in the scored graph, but
    neither for connectivity nor for optimality.

    Example:
        module = solve_mwcs(scored_graph, solver=MySolver(time_limit=30))

    Args:
        scored_graph (ScoredGraph):
            A scored metabolic graph as returned by score_graph.

        solver (optional (str or SubgraphSolver)): (Default: see select_solver)
            A solver object or the name of a registered solver. Further keyword arguments
            are passed to the constructor of a registered solver.

    Returns:
        (MetabolicModule):
        The module, or None if the solver returned an empty solution.

    Raises:
        InvalidModule: if the solution contains vertices or edges outside the scored graph.
    """
    if not isinstance(solver, SubgraphSolver):
        solver = avail_solvers[select_solver(solver)](**kwargs)
    elif kwargs:
        raise InvalidParameter('Solver options can only be passed together with a solver name.', {'options': sorted(kwargs)})
    instance = MwcsInstance(scored_graph)
    logging.info('  Solving GMWCS instance with ' + str(len(instance.nodes)) + ' vertices, ' + str(len(instance.edges)) + ' edges and ' +
                 str(len(instance.signals)) + ' signals using ' + str(solver.name or type(solver).__name__) + '.')
    vertices, edges = solver.solve(instance)
    vertices, edges = list(vertices), [tuple(e) for e in edges]
    if not vertices and not edges:
        logging.info('  Solver returned an empty module.')
        return None
    module = MetabolicModule(scored_graph, vertices, edges)
    logging.info('  Module: ' + str(module.number_of_vertices()) + ' vertices, ' + str(module.number_of_edges()) + ' edges, score ' +
                 format(module.total_score(), '.4g') + '.')
    return module
