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
"""Normalization and identifier mapping of differential data tables"""

from typing import Dict
from pandas import DataFrame, to_numeric
from numpy import nan
import logging
from metmodule.names import *
from metmodule.errors import InvalidTable
from metmodule.annotation import identifier_strings

# accepted column names, matched case-insensitively in this order
ID_COLUMNS = ['id', 'gene', 'metabolite', 'symbol', 'entrez', 'ensembl', 'hmdb', 'kegg', 'name']
PVAL_COLUMNS = ['pval', 'p.value', 'pvalue', 'p_value', 'p-value', 'p']
LOG2FC_COLUMNS = ['log2fc', 'logfc', 'log2foldchange', 'log2_fold_change', 'lfc', 'fc']


def _find_column(table, candidates, what, required=True):
    lower = {str(c).lower(): c for c in table.columns}
    for c in candidates:
        if c in lower:
            return lower[c]
    if required:
        raise InvalidTable('No ' + what + ' column found in differential table. Accepted names: ' + str(candidates) + '.',
                           {'columns': list(table.columns)})
    return None


def normalize_diff_table(table) -> DataFrame:
    """Bring a differential data table into the standard form

    Identifier, significance and effect columns are detected by their names (e.g.,
    'ID', 'pval' or 'P.Value', 'log2FC' or 'logFC'). Other columns are ignored. Rows
    without an identifier or p-value are dropped. Identifiers must be unique: if they
    are not, the most significant row of each identifier is kept.

    Example:
        de = normalize_diff_table(DataFrame({'ID': ['G1'], 'pval': [0.01], 'log2FC': [2.0]}))

    Args:
        table (pandas.DataFrame):
            Differential data with an identifier column, a p-value column and an
            optional log fold change column.

    Returns:
        (pandas.DataFrame):
        A table with the columns 'ID', 'pval' and 'log2FC', sorted by p-value and ID.
    """
    id_col = _find_column(table, ID_COLUMNS, 'identifier')
    pval_col = _find_column(table, PVAL_COLUMNS, 'p-value')
    lfc_col = _find_column(table, LOG2FC_COLUMNS, 'log fold change', required=False)
    de = DataFrame({
        ID: table[id_col].values,
        PVAL: to_numeric(table[pval_col], errors='coerce').values,
        LOG2FC: to_numeric(table[lfc_col], errors='coerce').values if lfc_col is not None else nan
    })
    de = de.dropna(subset=[ID, PVAL])
    de[ID] = identifier_strings(de[ID])
    if ((de[PVAL] < 0) | (de[PVAL] > 1)).any():
        raise InvalidTable('P-values must lie within [0, 1].', {'column': pval_col})
    de = de.sort_values([PVAL, ID], kind='mergesort')
    num_dup = int(de.duplicated(subset=ID).sum())
    if num_dup:
        logging.warning('  ' + str(num_dup) + ' duplicate identifier(s) in differential table. Keeping the most significant rows.')
        de = de.drop_duplicates(subset=ID, keep='first')
    return de.reset_index(drop=True)


def map_diff_table(de, annotation, keytype=None, extra_native=()) -> Dict[str, dict]:
    """Attach differential records to the native identifiers of an annotation

    The key type of the table is detected automatically, unless given. Identifiers
    that cannot be mapped are ignored. If several rows map to the same native
    identifier, the most significant one is used.

    Args:
        de (pandas.DataFrame):
            A normalized differential table (see normalize_diff_table).

        annotation (GeneAnnotation or MetaboliteAnnotation):
            The annotation providing native identifiers and cross references.

        keytype (optional (str)): (Default: None)
            Identifier type of the table.

        extra_native (optional (set of str)): (Default: ())
            Identifiers treated as native in addition to those of the annotation.

    Returns:
        (dict):
        A dict {native id: {'origin': table id, 'pval': float, 'log2FC': float or None}}.
    """
    if keytype is None:
        keytype = annotation.detect_keytype(de[ID], extra_native)
        if keytype is None:
            logging.warning('  None of the identifiers of the differential table could be matched to the annotation.')
            return {}
        logging.info('  Detected identifier type: ' + keytype)
    mapping = annotation.to_native(de[ID], keytype, extra_native)
    records = {}
    # rows are sorted by significance, so the first hit is the most significant one
    for i, p, l in zip(de[ID], de[PVAL], de[LOG2FC]):
        for native in mapping.get(i, []):
            if native not in records:
                records[native] = {ORIGIN: i, PVAL: float(p), LOG2FC: None if l != l else float(l)}
    logging.info('  Mapped ' + str(len(mapping)) + ' of ' + str(len(de)) + ' differential records.')
    return records
