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
"""Class and function: metabolic graphs (MetabolicGraph, make_metabolic_graph)"""

from typing import List, Set
from itertools import product
from pandas import DataFrame
import networkx as nx
import logging
from metmodule.names import *
from metmodule.errors import InvalidTopology, EmptyGraph, InvalidParameter
from metmodule.annotation import MetaboliteAnnotation
from metmodule.networktools import reaction_genes
from metmodule.difftable import normalize_diff_table, map_diff_table
from metmodule.configuration import Configuration

NO_RECORD = {ORIGIN: None, PVAL: None, LOG2FC: None}


class MetabolicGraph(object):
    """Labeled metabolic graph with attached differential data

    Objects of this class are returned by make_metabolic_graph and are not meant to be
    created by users. The underlying networkx.MultiGraph is frozen: vertices and edges
    cannot be added or removed. Attribute values are not protected by networkx.freeze:
    writing to graph.nodes[v] or graph.edges[u, v, reaction] changes the graph in place
    and must be avoided. vertex_table and edge_table return independent copies.

    Vertices are atoms or metabolites, depending on the topology. Every vertex carries the
    attributes 'metabolite', 'label', 'signal' and the differential record 'origin',
    'pval', 'log2FC'. Edges are keyed by reaction identifier and carry 'reaction',
    'reaction_name', 'enzymes', 'genes', 'gene', 'label', 'signal' and the differential
    record. Elements without data have None in all record fields.

    Args:
        graph (networkx.MultiGraph):
            The graph. It is frozen upon construction.

        topology (str):
            'atoms' or 'metabolites'.
    """

    def __init__(self, graph, topology):
        self.topology = topology
        self.graph = graph if nx.is_frozen(graph) else nx.freeze(graph)

    def number_of_vertices(self) -> int:
        return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self.graph.number_of_edges()

    def get_reactions(self) -> Set[str]:
        """Reactions represented by the edges of the graph"""
        return {d[REACTION] for _, _, d in self.graph.edges(data=True)}

    def has_gene_data(self) -> bool:
        return any(d[PVAL] is not None for _, _, d in self.graph.edges(data=True))

    def has_met_data(self) -> bool:
        return any(d[PVAL] is not None for _, d in self.graph.nodes(data=True))

    def get_pvals(self, data_type) -> List[float]:
        """All p-values of the differential table of one data type ('gene' or 'met')"""
        return list(self.graph.graph.get(data_type + '_pvals', ()))

    def vertex_table(self) -> DataFrame:
        """Vertices and their attributes as a table, sorted by vertex identifier"""
        rows = [{'name': n, **d} for n, d in sorted(self.graph.nodes(data=True))]
        return DataFrame(rows)

    def edge_table(self) -> DataFrame:
        """Edges and their attributes as a table, sorted by endpoints and reaction"""
        rows = [{'from': u, 'to': v, **d} for u, v, _, d in sorted(self.graph.edges(keys=True, data=True), key=lambda e: e[:3])]
        return DataFrame(rows)

    def _structure(self):
        nodes = sorted((n, tuple(sorted(d.items()))) for n, d in self.graph.nodes(data=True))
        edges = sorted(tuple(sorted((u, v))) + (k, tuple(sorted(d.items()))) for u, v, k, d in self.graph.edges(keys=True, data=True))
        return self.topology, nodes, edges

    def __eq__(self, other):
        """Structural equality: same topology, vertices, edges and attributes"""
        if not isinstance(other, MetabolicGraph):
            return NotImplemented
        return type(self) is type(other) and self._structure() == other._structure()

    __hash__ = None

    def __repr__(self):
        return (type(self).__name__ + '(topology=' + repr(self.topology) + ', vertices=' + str(self.number_of_vertices()) +
                ', edges=' + str(self.number_of_edges()) + ')')


def make_metabolic_graph(network, annotation, gene_de=None, met_de=None, topology=None, **kwargs) -> MetabolicGraph:
    """Build a metabolic graph from a reaction network and differential data

    Reactions are linked to genes through their enzymes and the organism annotation.
    Reactions without genes are dropped unless keep_non_enzymatic is set. With the 'atoms'
    topology, vertices are atoms and edges are atom transitions of atom-mapped reactions.
    With the 'metabolites' topology, vertices are metabolites and edges connect substrates
    and products of a reaction (only the atom-mapped pairs, if the reaction has atom
    mappings). Gene data is attached to edges, metabolite data to vertices. If several
    genes of a reaction have data, the most significant one is attached. Elements without
    matching data carry no record at all, which is different from a non-significant record.

    Example:
        g = make_metabolic_graph(network, annotation, gene_de=gene_de, met_de=met_de, topology='atoms')

    Args:
        network (ReactionNetwork):
            The reference reaction network with atom mappings.

        annotation (GeneAnnotation):
            The organism gene annotation linking enzymes to genes.

        gene_de (optional (pandas.DataFrame)): (Default: None)
            Differential gene data with identifier, p-value and log fold change columns.

        met_de (optional (pandas.DataFrame)): (Default: None)
            Differential metabolite data with identifier, p-value and log fold change columns.

        topology (optional (str)): (Default: Configuration().topology, i.e. 'atoms')
            Vertex granularity: 'atoms' or 'metabolites'.

        gene2reaction_extra (optional (pandas.DataFrame)): (Default: None)
            Additional gene-reaction links with the columns 'gene' and 'reaction'.

        keep_non_enzymatic (optional (bool)): (Default: False)
            Keep reactions that are not associated with any gene.

        met_annotation (optional (MetaboliteAnnotation)): (Default: built from the model)
            Metabolite names and cross references used for labels and for mapping met_de.

        gene_keytype, met_keytype (optional (str)): (Default: detected)
            Identifier types of gene_de and met_de.

        exclude_metabolites (optional (list of str)): (Default: None)
            Metabolites (e.g., cofactors) that do not become vertices.

        largest_component (optional (bool)): (Default: False)
            Keep only the largest connected component.

    Returns:
        (MetabolicGraph):
        A frozen, labeled metabolic graph.

    Raises:
        InvalidTopology: if topology is neither 'atoms' nor 'metabolites'.
        InconsistentMapping: if an atom mapping references an atom absent from its metabolite.
        EmptyGraph: if no edge remains after filtering.
    """
    allowed_keys = {'gene2reaction_extra', 'keep_non_enzymatic', 'met_annotation', 'gene_keytype', 'met_keytype', 'exclude_metabolites', 'largest_component'}
    for key in kwargs:
        if key not in allowed_keys:
            raise InvalidParameter("Key " + key + " is not supported.")
    gene2reaction_extra = kwargs.get('gene2reaction_extra')
    keep_non_enzymatic = bool(kwargs.get('keep_non_enzymatic', False))
    met_annotation = kwargs.get('met_annotation')
    exclude_metabolites = set(kwargs.get('exclude_metabolites') or [])

    if topology is None:
        topology = Configuration().topology
    if topology not in [ATOMS, METABOLITES]:
        raise InvalidTopology('Topology must be "' + ATOMS + '" or "' + METABOLITES + '", not "' + str(topology) + '".', {TOPOLOGY: topology})
    if met_annotation is None:
        met_annotation = MetaboliteAnnotation.from_model(network.model)

    logging.info('  Building metabolic graph with ' + topology + ' topology from network ' + str(network.id) + '.')
    transitions = network.get_atom_transitions()

    # resolve genes and filter reactions without genes
    genes = reaction_genes(network, annotation, gene2reaction_extra)
    if keep_non_enzymatic:
        reac_ids = network.reaction_ids()
    else:
        reac_ids = [r for r in network.reaction_ids() if genes[r]]
        logging.info('  Dropped ' + str(len(genes) - len(reac_ids)) + ' reaction(s) without associated genes.')

    # differential data
    gene_records = {}
    gene_pvals = ()
    if gene_de is not None:
        gene_de = normalize_diff_table(gene_de)
        gene_pvals = tuple(gene_de[PVAL])
        all_genes = set(g for r in reac_ids for g in genes[r])
        gene_records = map_diff_table(gene_de, annotation, kwargs.get('gene_keytype'), extra_native=all_genes)
    met_records = {}
    met_pvals = ()
    if met_de is not None:
        met_de = normalize_diff_table(met_de)
        met_pvals = tuple(met_de[PVAL])
        met_records = map_diff_table(met_de, met_annotation, kwargs.get('met_keytype'))

    g = nx.MultiGraph(topology=topology, network=network.id, gene_pvals=gene_pvals, met_pvals=met_pvals)

    def met_label(met_id):
        name = met_annotation.name(met_id)
        return name if name is not None else network.get_metabolite_name(met_id)

    def add_vertex(vertex, met_id, element=None):
        if vertex in g:
            return
        attrs = {METABOLITE: met_id, LABEL: met_label(met_id), SIGNAL: MET_DATA + ':' + met_id}
        if topology == ATOMS:
            attrs[ELEMENT] = element
        attrs.update(met_records.get(met_id, NO_RECORD))
        g.add_node(vertex, **attrs)

    for reac_id in reac_ids:
        edge_attrs = _edge_attributes(network, annotation, reac_id, genes[reac_id], gene_records)
        if topology == ATOMS:
            pairs = [(a, b, network.get_atom_metabolite(a), network.get_atom_metabolite(b)) for a, b in transitions.get(reac_id, [])]
        else:
            pairs = _metabolite_pairs(network, reac_id, transitions.get(reac_id))
            pairs = [(a, b, a, b) for a, b in pairs]
        for u, v, met_u, met_v in pairs:
            if met_u in exclude_metabolites or met_v in exclude_metabolites:
                continue
            add_vertex(u, met_u, network.get_atom_element(u) if topology == ATOMS else None)
            add_vertex(v, met_v, network.get_atom_element(v) if topology == ATOMS else None)
            g.add_edge(u, v, key=reac_id, **edge_attrs)

    if kwargs.get('largest_component', False) and g.number_of_nodes():
        components = sorted(nx.connected_components(g), key=lambda c: (-len(c), min(c)))
        g = g.subgraph(components[0]).copy()
        logging.info('  Kept the largest of ' + str(len(components)) + ' connected components.')

    if g.number_of_edges() == 0:
        raise EmptyGraph('The metabolic graph has no edges. Consider keep_non_enzymatic=True or another topology.', {
            TOPOLOGY: topology,
            'reactions': len(reac_ids)
        })
    logging.info('  Metabolic graph: ' + str(g.number_of_nodes()) + ' vertices, ' + str(g.number_of_edges()) + ' edges, ' +
                 str(len({d[REACTION] for _, _, d in g.edges(data=True)})) + ' reactions.')
    return MetabolicGraph(g, topology)


def _edge_attributes(network, annotation, reac_id, genes, gene_records) -> dict:
    """Attributes shared by all edges of one reaction"""
    best = None
    for gene in genes:
        rec = gene_records.get(gene)
        if rec is not None and (best is None or rec[PVAL] < gene_records[best][PVAL]):
            best = gene
    attrs = {
        REACTION: reac_id,
        REACTION_NAME: network.get_reaction_name(reac_id),
        ENZYMES: tuple(network.get_enzymes(reac_id)),
        GENES: tuple(genes),
        GENE: best,
    }
    if best is not None:
        attrs[LABEL] = annotation.symbol(best)
        attrs[SIGNAL] = GENE_DATA + ':' + best
        attrs.update(gene_records[best])
    else:
        attrs[LABEL] = annotation.symbol(genes[0]) if genes else attrs[REACTION_NAME]
        attrs[SIGNAL] = REACTION + ':' + reac_id
        attrs.update(NO_RECORD)
    return attrs


def _metabolite_pairs(network, reac_id, transitions=None) -> List[tuple]:
    """Metabolite pairs connected by a reaction, in sorted order"""
    if transitions:
        pairs = {
            tuple(sorted((network.get_atom_metabolite(a), network.get_atom_metabolite(b))))
            for a, b in transitions
        }
    else:
        pairs = {tuple(sorted((s, p))) for s, p in product(network.get_substrates(reac_id), network.get_products(reac_id))}
    return sorted(p for p in pairs if p[0] != p[1])
