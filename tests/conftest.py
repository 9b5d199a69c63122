import pytest
from cobra import Model, Metabolite, Reaction
from pandas import DataFrame
import metmodule as mm
from metmodule.names import *


@pytest.fixture(autouse=True)
def restore_configuration():
    """Provide default metmodule configuration and an empty solver registry to every test."""
    yield
    mm.Configuration().restore_defaults()
    mm.avail_solvers.clear()


@pytest.fixture
def two_reaction_network():
    """Network with R1 (a1 -> a2, EC 1.1.1.1) and R2 (a3 -> a4, no EC number)."""
    model = Model('two_reactions')
    mets = {m: Metabolite(m, name=m.lower(), compartment='c') for m in ['M1', 'M2', 'M3', 'M4']}
    r1 = Reaction('R1', name='first')
    r2 = Reaction('R2', name='second')
    model.add_reactions([r1, r2])
    r1.add_metabolites({mets['M1']: -1, mets['M2']: 1})
    r2.add_metabolites({mets['M3']: -1, mets['M4']: 1})
    r1.annotation[EC_CODE] = ['1.1.1.1']
    atoms = DataFrame({ATOM: ['a1', 'a2', 'a3', 'a4'], METABOLITE: ['M1', 'M2', 'M3', 'M4']})
    mappings = DataFrame({REACTION: ['R1', 'R2'], ATOM_X: ['a1', 'a3'], ATOM_Y: ['a2', 'a4']})
    return mm.ReactionNetwork(model, atoms, mappings)


@pytest.fixture
def two_reaction_annotation():
    return mm.GeneAnnotation(DataFrame({GENE: ['G1']}), DataFrame({GENE: ['G1'], ENZYME: ['1.1.1.1']}))


@pytest.fixture
def two_reaction_gene_de():
    return DataFrame({'ID': ['G1'], 'log2FC': [2.0], 'pval': [0.01]})
