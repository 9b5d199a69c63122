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
"""Reaction networks with atom mappings and enzyme links (ReactionNetwork)"""

from typing import Dict, List, Tuple
from pandas import DataFrame
import logging
from cobra import Model
from metmodule.names import *
from metmodule.errors import InconsistentMapping, InvalidParameter


class ReactionNetwork(object):
    """Reference reaction network used for metabolic graph construction

    A reaction network couples a metabolic model with atom-level information. The model
    provides reactions, their stoichiometry (negative coefficients: substrates, positive
    coefficients: products), metabolites and the enzymes (EC numbers) catalyzing each
    reaction. Enzymes are read from the cobra annotation of each reaction
    (reaction.annotation['ec-code']) unless an explicit reaction2enzyme table is given.
    Atom mappings describe which atom of a substrate becomes which atom of a product.

    The network is reference data: it is read, never modified, by graph construction.

    Example:
        network = ReactionNetwork(model, atoms, atom_mappings)

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        atoms (optional (pandas.DataFrame)): (Default: None)
            Table of atoms with the columns 'atom', 'metabolite' and optionally 'element'.

        atom_mappings (optional (pandas.DataFrame)): (Default: None)
            Table of atom transitions with the columns 'reaction', 'atom_x', 'atom_y' and
            optionally 'metabolite_x' and 'metabolite_y', the metabolites the atoms are
            declared to belong to.

        reaction2enzyme (optional (pandas.DataFrame)): (Default: None)
            Table with the columns 'reaction' and 'enzyme'. If given, it replaces the
            EC numbers of the model annotation.
    """

    def __init__(self, model: Model, atoms=None, atom_mappings=None, reaction2enzyme=None):
        self.model = model
        if atoms is None:
            atoms = DataFrame(columns=[ATOM, METABOLITE, ELEMENT])
        if atom_mappings is None:
            atom_mappings = DataFrame(columns=[REACTION, ATOM_X, ATOM_Y])
        for c in [ATOM, METABOLITE]:
            if c not in atoms.columns:
                raise InvalidParameter('The atoms table must contain the column "' + c + '".')
        for c in [REACTION, ATOM_X, ATOM_Y]:
            if c not in atom_mappings.columns:
                raise InvalidParameter('The atom mapping table must contain the column "' + c + '".')
        atoms = atoms.copy()
        if ELEMENT not in atoms.columns:
            atoms[ELEMENT] = None
        self._atoms = atoms[[ATOM, METABOLITE, ELEMENT]].drop_duplicates(subset=ATOM).reset_index(drop=True)
        self._atom_met = dict(zip(self._atoms[ATOM].astype(str), self._atoms[METABOLITE].astype(str)))
        self._atom_element = dict(zip(self._atoms[ATOM].astype(str), self._atoms[ELEMENT]))
        cols = [c for c in [REACTION, ATOM_X, ATOM_Y, METABOLITE_X, METABOLITE_Y] if c in atom_mappings.columns]
        self._atom_mappings = atom_mappings[cols].reset_index(drop=True)

        if reaction2enzyme is not None:
            if REACTION not in reaction2enzyme.columns or ENZYME not in reaction2enzyme.columns:
                raise InvalidParameter('The reaction2enzyme table must contain the columns "' + REACTION + '" and "' + ENZYME + '".')
            self._enzymes = {}
            for r, e in zip(reaction2enzyme[REACTION].astype(str), reaction2enzyme[ENZYME].astype(str)):
                self._enzymes.setdefault(r, set()).add(e)
        else:
            self._enzymes = {r.id: set(_ec_codes(r)) for r in model.reactions}

    @property
    def id(self):
        return self.model.id

    @property
    def atoms(self) -> DataFrame:
        return self._atoms.copy()

    @property
    def atom_mappings(self) -> DataFrame:
        return self._atom_mappings.copy()

    def reaction_ids(self) -> List[str]:
        return sorted(self.model.reactions.list_attr('id'))

    def get_enzymes(self, reac_id) -> List[str]:
        """EC numbers of the enzymes that catalyze a reaction"""
        return sorted(self._enzymes.get(reac_id, set()))

    def get_substrates(self, reac_id) -> List[str]:
        r = self.model.reactions.get_by_id(reac_id)
        return sorted(m.id for m, v in r.metabolites.items() if v < 0)

    def get_products(self, reac_id) -> List[str]:
        r = self.model.reactions.get_by_id(reac_id)
        return sorted(m.id for m, v in r.metabolites.items() if v > 0)

    def get_atom_metabolite(self, atom):
        return self._atom_met.get(atom)

    def get_atom_element(self, atom):
        return self._atom_element.get(atom)

    def get_reaction_name(self, reac_id) -> str:
        r = self.model.reactions.get_by_id(reac_id)
        return r.name if r.name else r.id

    def get_metabolite_name(self, met_id) -> str:
        if self.model.metabolites.has_id(met_id):
            m = self.model.metabolites.get_by_id(met_id)
            return m.name if m.name else m.id
        return met_id

    def get_atom_transitions(self) -> Dict[str, List[Tuple[str, str]]]:
        """Validated atom transitions of all reactions

        Every atom of a mapping must be listed in the atoms table, it must belong to the
        metabolite it is declared to belong to and this metabolite must take part in the
        reaction. Self-transitions and duplicates are dropped.

        Returns:
            (dict):
            A dict {reaction id: [(atom_x, atom_y), ...]} with atom pairs in sorted order.

        Raises:
            InconsistentMapping: if an atom mapping violates the conditions above.
        """
        reac_ids = set(self.model.reactions.list_attr('id'))
        transitions = {}
        for row in self._atom_mappings.itertuples(index=False):
            row = row._asdict()
            reac_id = str(row[REACTION])
            if reac_id not in reac_ids:
                logging.warning('  Atom mapping of unknown reaction ' + reac_id + ' is ignored.')
                continue
            participants = {m.id for m in self.model.reactions.get_by_id(reac_id).metabolites}
            for atom_col, met_col in [(ATOM_X, METABOLITE_X), (ATOM_Y, METABOLITE_Y)]:
                atom = str(row[atom_col])
                met = self._atom_met.get(atom)
                if met is None:
                    raise InconsistentMapping('Atom ' + atom + ' of the mapping of reaction ' + reac_id + ' is not part of the network.',
                                              {REACTION: reac_id, ATOM: atom})
                declared = row.get(met_col)
                if declared is not None and declared == declared and str(declared) != met:
                    raise InconsistentMapping('Atom ' + atom + ' is mapped as part of ' + str(declared) + ' in reaction ' + reac_id +
                                              ' but belongs to ' + met + '.', {
                                                  REACTION: reac_id,
                                                  ATOM: atom,
                                                  METABOLITE: str(declared)
                                              })
                if met not in participants:
                    raise InconsistentMapping('Atom ' + atom + ' of metabolite ' + met + ' is mapped in reaction ' + reac_id +
                                              ', but the metabolite does not take part in the reaction.', {
                                                  REACTION: reac_id,
                                                  ATOM: atom,
                                                  METABOLITE: met
                                              })
            pair = tuple(sorted((str(row[ATOM_X]), str(row[ATOM_Y]))))
            if pair[0] == pair[1]:
                continue
            transitions.setdefault(reac_id, set()).add(pair)
        return {r: sorted(p) for r, p in sorted(transitions.items())}

    def validate(self):
        """Check the consistency of all atom mappings (raises InconsistentMapping)"""
        self.get_atom_transitions()


def _ec_codes(reaction) -> List[str]:
    """EC numbers stored in the annotation of a cobra reaction"""
    ec = reaction.annotation.get(EC_CODE, [])
    if isinstance(ec, str):
        ec = [ec]
    return [str(e) for e in ec]


def reaction_genes(network, annotation, gene2reaction_extra=None) -> Dict[str, List[str]]:
    """Resolve the genes associated with each reaction of a network

    Genes are found through the enzymes of a reaction and the gene2enzyme table of the
    organism annotation. An additional table of gene-reaction links broadens the coverage,
    e.g., for transporters or reactions without EC numbers. Both sources are united; genes
    from the annotation come first.

    Example:
        genes = reaction_genes(network, annotation, extra)

    Args:
        network (ReactionNetwork):
            The reaction network.

        annotation (GeneAnnotation):
            The organism gene annotation.

        gene2reaction_extra (optional (pandas.DataFrame)): (Default: None)
            Table with the columns 'gene' and 'reaction'.

    Returns:
        (dict):
        A dict {reaction id: [gene ids]} covering every reaction of the network.
    """
    extra = {}
    if gene2reaction_extra is not None:
        if GENE not in gene2reaction_extra.columns or REACTION not in gene2reaction_extra.columns:
            raise InvalidParameter('gene2reaction_extra must contain the columns "' + GENE + '" and "' + REACTION + '".')
        for g, r in zip(gene2reaction_extra[GENE].astype(str), gene2reaction_extra[REACTION].astype(str)):
            extra.setdefault(r, []).append(g)
    genes = {}
    for reac_id in network.reaction_ids():
        g = annotation.genes_of_enzymes(network.get_enzymes(reac_id))
        for e in sorted(set(extra.get(reac_id, []))):
            if e not in g:
                g.append(e)
        genes[reac_id] = g
    return genes
