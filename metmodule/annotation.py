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
"""Organism gene annotation and metabolite annotation (GeneAnnotation, MetaboliteAnnotation)"""

from typing import Dict, List
from pandas import DataFrame, Series
from pandas.api.types import is_float_dtype
import logging
from metmodule.names import *
from metmodule.errors import InvalidParameter


def identifier_strings(values) -> Series:
    """Identifiers as strings, whole-number floats (e.g., Entrez ids next to missing values) without decimals"""
    values = Series(values)
    if is_float_dtype(values) and (values.dropna() % 1 == 0).all():
        return values.astype('Int64').astype(str)
    return values.astype(str)


def _check_columns(table, columns, table_name):
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise InvalidParameter('Table ' + table_name + ' lacks the column(s) ' + str(missing) + '.', {'columns': list(table.columns)})


class _Annotation(object):
    """Shared handling of identifier cross references"""

    _key = None

    def __init__(self, map_from=None):
        self._map_from = {}
        if map_from:
            for keytype, table in map_from.items():
                _check_columns(table, [self._key, keytype], 'map_from[' + keytype + ']')
                table = table[[self._key, keytype]].dropna().apply(identifier_strings).drop_duplicates()
                self._map_from[keytype] = table.sort_values([keytype, self._key]).reset_index(drop=True)

    @property
    def keytypes(self) -> List[str]:
        """Identifier types for which cross references are available"""
        return sorted(self._map_from.keys())

    def map_from(self, keytype) -> DataFrame:
        """Get the cross reference table of a key type (columns: native id, keytype)"""
        if keytype not in self._map_from:
            raise InvalidParameter('Unknown key type ' + str(keytype) + '. Available: ' + str(self.keytypes) + '.')
        return self._map_from[keytype].copy()

    def native_ids(self) -> set:
        raise NotImplementedError

    def detect_keytype(self, ids, extra_native=()) -> str:
        """Find the identifier type of a list of identifiers

        The native identifiers of the annotation (and extra_native) are preferred.
        Otherwise, the cross reference with the largest overlap is chosen. Ties are
        broken by the name of the key type. Returns None if none of the identifiers
        is known.
        """
        ids = set(str(i) for i in ids)
        overlap = {None: len(ids.intersection(self.native_ids().union(extra_native)))}
        for keytype in self.keytypes:
            overlap[keytype] = len(ids.intersection(self._map_from[keytype][keytype]))
        best = max(overlap.values())
        if best == 0:
            return None
        if overlap[None] == best:
            return self._key
        return min(k for k, v in overlap.items() if k is not None and v == best)

    def to_native(self, ids, keytype=None, extra_native=()) -> Dict[str, List[str]]:
        """Map identifiers of a key type to native identifiers

        Returns:
            (dict):
            A dict {foreign id: [native ids]}. Identifiers without a match are omitted.
        """
        if keytype is None or keytype == self._key:
            native = self.native_ids().union(extra_native)
            return {str(i): [str(i)] for i in ids if str(i) in native}
        table = self._map_from[keytype]
        ids = set(str(i) for i in ids)
        mapping = {}
        for foreign, native in zip(table[keytype], table[self._key]):
            if foreign in ids:
                mapping.setdefault(foreign, []).append(native)
        return mapping


class GeneAnnotation(_Annotation):
    """Organism-specific gene annotation

    Links genes to enzyme classes (EC numbers) and provides auxiliary gene identifiers.
    Gene annotations are reference data and are never modified after construction.

    Example:
        anno = GeneAnnotation(genes, gene2enzyme, map_from={'Symbol': symbol_table})

    Args:
        genes (pandas.DataFrame):
            Table of genes with the columns 'gene' (native identifier) and optionally 'symbol'.

        gene2enzyme (pandas.DataFrame):
            Table with the columns 'gene' and 'enzyme' linking genes to EC numbers.

        map_from (optional (dict of pandas.DataFrame)): (Default: None)
            Cross references, e.g., {'Entrez': DataFrame(columns=['gene', 'Entrez'])}.
    """

    _key = GENE

    def __init__(self, genes, gene2enzyme, map_from=None):
        _check_columns(genes, [GENE], 'genes')
        _check_columns(gene2enzyme, [GENE, ENZYME], 'gene2enzyme')
        super().__init__(map_from)
        genes = genes.copy()
        if SYMBOL not in genes.columns:
            genes[SYMBOL] = genes[GENE]
        genes = genes[[GENE, SYMBOL]].astype(str).drop_duplicates(subset=GENE)
        self._genes = genes.sort_values(GENE).reset_index(drop=True)
        self._symbols = dict(zip(self._genes[GENE], self._genes[SYMBOL]))
        g2e = gene2enzyme[[GENE, ENZYME]].dropna().apply(identifier_strings).drop_duplicates()
        unknown = set(g2e[GENE]).difference(self._symbols)
        if unknown:
            logging.warning('  ' + str(len(unknown)) + ' gene(s) of gene2enzyme are not listed in the gene table.')
        self._gene2enzyme = g2e.sort_values([ENZYME, GENE]).reset_index(drop=True)
        self._enzyme_genes = {}
        for g, e in zip(self._gene2enzyme[GENE], self._gene2enzyme[ENZYME]):
            self._enzyme_genes.setdefault(e, []).append(g)

    @property
    def genes(self) -> DataFrame:
        return self._genes.copy()

    @property
    def gene2enzyme(self) -> DataFrame:
        return self._gene2enzyme.copy()

    def native_ids(self):
        return set(self._symbols.keys())

    def genes_of_enzymes(self, enzymes) -> List[str]:
        """Genes linked to any of the given enzymes, in a reproducible order"""
        genes = []
        for e in sorted(set(enzymes)):
            for g in self._enzyme_genes.get(e, []):
                if g not in genes:
                    genes.append(g)
        return genes

    def symbol(self, gene) -> str:
        """Human readable gene symbol (the identifier if no symbol is known)"""
        return self._symbols.get(gene, gene)


class MetaboliteAnnotation(_Annotation):
    """Metabolite names and cross references to chemical databases

    Example:
        met_anno = MetaboliteAnnotation(metabolites, map_from={'HMDB': hmdb_table})

    Args:
        metabolites (pandas.DataFrame):
            Table with the columns 'metabolite' and optionally 'metabolite_name'.

        map_from (optional (dict of pandas.DataFrame)): (Default: None)
            Cross references, e.g., {'HMDB': DataFrame(columns=['metabolite', 'HMDB'])}.
    """

    _key = METABOLITE

    def __init__(self, metabolites, map_from=None):
        _check_columns(metabolites, [METABOLITE], 'metabolites')
        super().__init__(map_from)
        metabolites = metabolites.copy()
        if METABOLITE_NAME not in metabolites.columns:
            metabolites[METABOLITE_NAME] = metabolites[METABOLITE]
        metabolites = metabolites[[METABOLITE, METABOLITE_NAME]].astype(str).drop_duplicates(subset=METABOLITE)
        self._metabolites = metabolites.sort_values(METABOLITE).reset_index(drop=True)
        self._names = dict(zip(self._metabolites[METABOLITE], self._metabolites[METABOLITE_NAME]))

    @property
    def metabolites(self) -> DataFrame:
        return self._metabolites.copy()

    def native_ids(self):
        return set(self._names.keys())

    def name(self, metabolite):
        """Metabolite name, None if the metabolite is not annotated"""
        return self._names.get(metabolite)

    @classmethod
    def from_model(cls, model, map_from=None):
        """Build a metabolite annotation from the metabolites of a cobra.Model"""
        table = DataFrame({
            METABOLITE: model.metabolites.list_attr('id'),
            METABOLITE_NAME: [m.name if m.name else m.id for m in model.metabolites]
        })
        return cls(table, map_from=map_from)
