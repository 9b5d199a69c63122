"""Test the subgraph solver interface and metabolic modules."""
from .test_01_load_network import *
from math import log
import logging


class PositiveEdgeSolver(mm.SubgraphSolver):
    """Select all edges with positive score and their endpoints (not necessarily optimal)."""

    name = 'positive_edges'

    def solve(self, instance):
        edges = instance.edges[instance.edges[SCORE] > 0]
        triples = list(zip(edges['from'], edges['to'], edges[REACTION]))
        vertices = sorted(set(edges['from']).union(edges['to']))
        return vertices, triples


class FixedSolver(mm.SubgraphSolver):
    """Return the vertices and edges given as options."""

    def solve(self, instance):
        return self.options.get('vertices', []), self.options.get('edges', [])


@pytest.fixture
def scored_graph(network, annotation, met_annotation, gene_de, met_de):
    g = mm.make_metabolic_graph(network, annotation, gene_de, met_de, topology=ATOMS, met_annotation=met_annotation)
    return mm.score_graph(g, k_gene=2, k_met=1, scoring=LOG_RATIO)


def test_mwcs_instance(scored_graph):
    instance = mm.MwcsInstance(scored_graph)
    assert (len(instance.nodes) == 6)
    assert (len(instance.edges) == 4)
    assert (list(instance.edges.columns) == ['from', 'to', REACTION, LABEL, SIGNAL, SCORE])
    # both R2 transitions share the signal of G2
    assert (len(instance.signals) == len(set(instance.nodes[SIGNAL]).union(instance.edges[SIGNAL])))


def test_solve_with_solver_object(scored_graph):
    module = mm.solve_mwcs(scored_graph, solver=PositiveEdgeSolver())
    assert (isinstance(module, mm.MetabolicModule))
    assert (module.get_reactions() == {'R2'})
    assert (module.get_genes() == ['G2'])
    assert (module.get_metabolites() == ['M2', 'M3'])
    assert (module.is_connected() is False)
    # gene:G2 counted once, met:M2 and met:M3
    expected = log(40) + 0.0 - 0.1
    assert (module.total_score() == pytest.approx(expected))


def test_register_and_select(scored_graph):
    with pytest.raises(mm.InvalidParameter):
        mm.select_solver()
    with pytest.raises(mm.InvalidParameter):
        mm.register_solver('bad', dict)
    mm.register_solver('positive_edges', PositiveEdgeSolver)
    mm.register_solver('fixed', FixedSolver)
    assert (mm.select_solver('positive_edges') == 'positive_edges')
    assert (mm.select_solver('unknown') == 'fixed')
    mm.Configuration().solver = 'positive_edges'
    assert (mm.select_solver() == 'positive_edges')
    module = mm.solve_mwcs(scored_graph)
    assert (module.get_reactions() == {'R2'})
    module = mm.solve_mwcs(scored_graph, 'fixed', vertices=['M1_C1', 'M2_C1'], edges=[('M1_C1', 'M2_C1', 'R1')])
    assert (module.number_of_edges() == 1)
    assert (module.is_connected())
    with pytest.raises(mm.InvalidParameter):
        mm.solve_mwcs(scored_graph, FixedSolver(), vertices=['M1_C1'])


def test_fallback_warning_names_selected_solver(caplog):
    mm.register_solver('positive_edges', PositiveEdgeSolver)
    mm.register_solver('fixed', FixedSolver)
    mm.Configuration().solver = 'positive_edges'
    with caplog.at_level(logging.WARNING):
        assert (mm.select_solver('unknown') == 'positive_edges')
    assert ('Using positive_edges instead' in caplog.text)
    caplog.clear()
    with caplog.at_level(logging.WARNING):
        assert (mm.select_solver() == 'positive_edges')
    assert (caplog.text == '')


def test_empty_solution(scored_graph):
    assert (mm.solve_mwcs(scored_graph, solver=FixedSolver()) is None)


def test_invalid_module(scored_graph):
    with pytest.raises(mm.InvalidModule):
        mm.solve_mwcs(scored_graph, solver=FixedSolver(vertices=['X1']))
    with pytest.raises(mm.InvalidModule):
        mm.solve_mwcs(scored_graph, solver=FixedSolver(vertices=['M1_C1', 'M3_C1'], edges=[('M1_C1', 'M3_C1', 'R1')]))
    with pytest.raises(mm.InvalidModule) as e:
        mm.solve_mwcs(scored_graph, solver=FixedSolver(vertices=['M1_C1'], edges=[('M1_C1', 'M2_C1', 'R1')]))
    assert ('edge' in e.value.context)


def test_module_attributes(scored_graph):
    module = mm.MetabolicModule(scored_graph, ['M2_C1', 'M3_C1'], [('M2_C1', 'M3_C1', 'R2')])
    assert (module.get_edge_score('M2_C1', 'M3_C1', 'R2') == scored_graph.get_edge_score('M2_C1', 'M3_C1', 'R2'))
    assert (module.graph.nodes['M2_C1'][LABEL] == 'beta')
    assert (module.parameters == scored_graph.parameters)
    assert (module.topology == ATOMS)


def test_collapse_atoms(scored_graph):
    edges = [('M1_C1', 'M2_C1', 'R1'), ('M1_C2', 'M2_C2', 'R1'), ('M2_C1', 'M3_C1', 'R2')]
    vertices = ['M1_C1', 'M1_C2', 'M2_C1', 'M2_C2', 'M3_C1']
    module = mm.MetabolicModule(scored_graph, vertices, edges)
    collapsed = module.collapse_atoms()
    assert (collapsed.topology == METABOLITES)
    assert (set(collapsed.graph.nodes) == {'M1', 'M2', 'M3'})
    assert (collapsed.number_of_edges() == 2)
    assert (collapsed.total_score() == pytest.approx(module.total_score()))
    assert (collapsed.collapse_atoms() is collapsed)
