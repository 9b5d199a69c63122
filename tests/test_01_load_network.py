"""Test if networks and annotations load and resolve genes correctly."""
from os.path import dirname, abspath
from cobra.io import load_json_model
from pandas import DataFrame
import metmodule as mm
from metmodule.names import *
import pytest


@pytest.fixture
def model_small_network():
    """Load linear model with four reactions (R3 has no EC number)."""
    return load_json_model(dirname(abspath(__file__)) + "/model_small_network.json")


@pytest.fixture
def atoms():
    return DataFrame({
        ATOM: ['M1_C1', 'M1_C2', 'M2_C1', 'M2_C2', 'M3_C1', 'M3_C2', 'M4_C1', 'M5_C1'],
        METABOLITE: ['M1', 'M1', 'M2', 'M2', 'M3', 'M3', 'M4', 'M5'],
        ELEMENT: ['C'] * 8
    })


@pytest.fixture
def atom_mappings():
    return DataFrame({
        REACTION: ['R1', 'R1', 'R2', 'R2', 'R3', 'R4'],
        ATOM_X: ['M1_C1', 'M1_C2', 'M2_C1', 'M2_C2', 'M3_C1', 'M4_C1'],
        ATOM_Y: ['M2_C1', 'M2_C2', 'M3_C1', 'M3_C2', 'M4_C1', 'M5_C1']
    })


@pytest.fixture
def network(model_small_network, atoms, atom_mappings):
    return mm.ReactionNetwork(model_small_network, atoms, atom_mappings)


@pytest.fixture
def annotation():
    """Gene annotation: G1 -> 1.1.1.1, G2 and G3 -> 2.2.2.2, G4 without enzyme."""
    genes = DataFrame({GENE: ['G1', 'G2', 'G3', 'G4'], SYMBOL: ['Aldr1', 'Bsyn1', 'Bsyn2', 'Dtr1']})
    gene2enzyme = DataFrame({GENE: ['G1', 'G2', 'G3'], ENZYME: ['1.1.1.1', '2.2.2.2', '2.2.2.2']})
    entrez = DataFrame({GENE: ['G1', 'G2', 'G3', 'G4'], 'Entrez': ['101', '102', '103', '104']})
    return mm.GeneAnnotation(genes, gene2enzyme, map_from={'Entrez': entrez})


@pytest.fixture
def met_annotation():
    metabolites = DataFrame({METABOLITE: ['M1', 'M2', 'M3', 'M4', 'M5'], METABOLITE_NAME: ['alpha', 'beta', 'gamma', 'delta', 'epsilon']})
    hmdb = DataFrame({METABOLITE: ['M1', 'M2', 'M3'], 'HMDB': ['HMDB01', 'HMDB02', 'HMDB03']})
    return mm.MetaboliteAnnotation(metabolites, map_from={'HMDB': hmdb})


@pytest.fixture
def gene2reaction_extra():
    return DataFrame({GENE: ['G4'], REACTION: ['R4']})


@pytest.fixture
def gene_de():
    return DataFrame({
        'ID': ['G1', 'G2', 'G3', 'G9'],
        'pval': [0.04, 0.001, 0.2, 0.0001],
        'log2FC': [1.0, -1.5, 0.5, 3.0],
        'baseMean': [100, 200, 300, 400]
    })


@pytest.fixture
def met_de():
    return DataFrame({'ID': ['M2', 'M5', 'X7'], 'pval': [0.003, 0.5, 0.01], 'log2FC': [2.0, -0.1, 1.0]})


def test_import_mm():
    import metmodule


def test_load_model(model_small_network):
    assert (len(model_small_network.reactions) == 4)
    assert (len(model_small_network.metabolites) == 5)


def test_enzymes_from_annotation(network):
    assert (network.get_enzymes('R1') == ['1.1.1.1'])
    assert (network.get_enzymes('R3') == [])
    assert (network.reaction_ids() == ['R1', 'R2', 'R3', 'R4'])


def test_enzymes_from_table(model_small_network, atoms, atom_mappings):
    r2e = DataFrame({REACTION: ['R3', 'R3'], ENZYME: ['3.3.3.3', '3.3.3.4']})
    network = mm.ReactionNetwork(model_small_network, atoms, atom_mappings, reaction2enzyme=r2e)
    assert (network.get_enzymes('R3') == ['3.3.3.3', '3.3.3.4'])
    assert (network.get_enzymes('R1') == [])


def test_substrates_products(network):
    assert (network.get_substrates('R2') == ['M2'])
    assert (network.get_products('R2') == ['M3'])
    assert (network.get_reaction_name('R1') == 'Alphaate reductase')


def test_atom_transitions(network):
    transitions = network.get_atom_transitions()
    assert (transitions['R1'] == [('M1_C1', 'M2_C1'), ('M1_C2', 'M2_C2')])
    assert (set(transitions) == {'R1', 'R2', 'R3', 'R4'})


def test_unknown_atom(model_small_network, atoms):
    mappings = DataFrame({REACTION: ['R1'], ATOM_X: ['M1_C1'], ATOM_Y: ['M2_C9']})
    network = mm.ReactionNetwork(model_small_network, atoms, mappings)
    with pytest.raises(mm.InconsistentMapping):
        network.validate()


def test_atom_of_other_metabolite(model_small_network, atoms):
    mappings = DataFrame({REACTION: ['R1'], ATOM_X: ['M1_C1'], ATOM_Y: ['M2_C1'], METABOLITE_X: ['M1'], METABOLITE_Y: ['M3']})
    network = mm.ReactionNetwork(model_small_network, atoms, mappings)
    with pytest.raises(mm.InconsistentMapping) as e:
        network.validate()
    assert (e.value.context[ATOM] == 'M2_C1')


def test_atom_outside_reaction(model_small_network, atoms):
    mappings = DataFrame({REACTION: ['R1'], ATOM_X: ['M1_C1'], ATOM_Y: ['M4_C1']})
    network = mm.ReactionNetwork(model_small_network, atoms, mappings)
    with pytest.raises(mm.InconsistentMapping):
        network.validate()


def test_reaction_genes(network, annotation, gene2reaction_extra):
    genes = mm.reaction_genes(network, annotation)
    assert (genes == {'R1': ['G1'], 'R2': ['G2', 'G3'], 'R3': [], 'R4': []})
    genes = mm.reaction_genes(network, annotation, gene2reaction_extra)
    assert (genes['R4'] == ['G4'])
    assert (genes['R2'] == ['G2', 'G3'])


def test_annotation_keytype(annotation, met_annotation):
    assert (annotation.detect_keytype(['G1', 'G2']) == GENE)
    assert (annotation.detect_keytype(['101', '102', 'G1']) == 'Entrez')
    assert (annotation.detect_keytype(['nothing']) is None)
    assert (annotation.to_native(['103', '999'], 'Entrez') == {'103': ['G3']})
    assert (annotation.symbol('G2') == 'Bsyn1')
    assert (met_annotation.detect_keytype(['HMDB02']) == 'HMDB')
    assert (met_annotation.name('M4') == 'delta')


def test_annotation_missing_columns():
    with pytest.raises(mm.InvalidParameter):
        mm.GeneAnnotation(DataFrame({'id': ['G1']}), DataFrame({GENE: ['G1'], ENZYME: ['1.1.1.1']}))


def test_disable_logger(model_small_network, atoms):
    mappings = DataFrame({REACTION: ['R9'], ATOM_X: ['M1_C1'], ATOM_Y: ['M2_C1']})
    network = mm.ReactionNetwork(model_small_network, atoms, mappings)
    with mm.DisableLogger():
        assert (network.get_atom_transitions() == {})
