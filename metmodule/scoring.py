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
"""Scoring of metabolic graphs for maximum weight connected subgraph search (score_graph)"""

from typing import Dict, List
from numbers import Real
from math import ceil
from pandas import DataFrame
from numpy import array, asarray, log, clip, finfo, sign, linspace, histogram
from scipy.optimize import minimize
import matplotlib.pyplot as plt
from matplotlib import use as set_matplotlib_backend
import networkx as nx
import logging
from metmodule.names import *
from metmodule.errors import MissingParameter, InvalidParameter
from metmodule.configuration import Configuration
from metmodule.metabolicGraph import MetabolicGraph

P_MIN = finfo(float).tiny
BOUND_EPS = 1e-6


class _Exclude(object):
    """Marker for a data type that is deliberately left out of scoring"""

    def __repr__(self):
        return 'EXCLUDE'


EXCLUDE = _Exclude()


class BumFit(object):
    """Beta-uniform mixture model of p-values

    The density of p-values is modeled as f(p) = lambda + (1 - lambda) * a * p^(a - 1),
    a mixture of a uniform (noise) and a beta(a, 1) (signal) component.

    Attributes:
        lambda_ (float): Weight of the uniform component.
        a (float): Shape parameter of the beta component (0 < a < 1).
        nll (float): Negative log likelihood of the fit.
    """

    def __init__(self, lambda_, a, nll):
        self.lambda_ = lambda_
        self.a = a
        self.nll = nll

    def density(self, p):
        p = clip(asarray(p, dtype=float), P_MIN, 1.0)
        return self.lambda_ + (1 - self.lambda_) * self.a * p**(self.a - 1)

    def __repr__(self):
        return 'BumFit(lambda_=' + format(self.lambda_, '.4g') + ', a=' + format(self.a, '.4g') + ')'


def fit_bum(pvals) -> BumFit:
    """Fit a beta-uniform mixture model to p-values by maximum likelihood

    The optimization is started from a fixed set of initial values, so identical
    p-values always give the same fit.

    Example:
        fb = fit_bum([0.001, 0.02, 0.3, 0.7, 0.9])

    Args:
        pvals (list of float):
            P-values within [0, 1]. At least one value is needed.

    Returns:
        (BumFit):
        The fitted model.
    """
    p = clip(array(pvals, dtype=float), P_MIN, 1.0)
    if p.size == 0:
        raise InvalidParameter('A beta-uniform mixture model cannot be fitted without p-values.')
    logp = log(p)

    def nll(x):
        lam, a = x
        return -float(log(lam + (1 - lam) * a * (p**(a - 1))).sum())

    bounds = [(BOUND_EPS, 1 - BOUND_EPS), (BOUND_EPS, 1 - BOUND_EPS)]
    best = None
    for x0 in [(0.5, 0.5), (0.1, 0.1), (0.9, 0.9)]:
        res = minimize(nll, x0, method='L-BFGS-B', bounds=bounds)
        if best is None or res.fun < best.fun:
            best = res
    fb = BumFit(float(best.x[0]), float(best.x[1]), float(best.fun))
    logging.info('  Fitted ' + repr(fb) + ' to ' + str(p.size) + ' p-values (mean log p: ' + format(logp.mean(), '.3g') + ').')
    return fb


class ScoringStrategy(object):
    """Base class of scoring strategies

    A scoring strategy turns p-values and a p-value threshold into scores. Scores must
    not decrease when the threshold grows and should be positive for p-values below the
    threshold. prepare is called once per data type with all p-values of the
    corresponding differential table before any score is computed.
    """

    name = None

    def prepare(self, pvals):
        return self

    def score(self, pvals, threshold):
        raise NotImplementedError


class BumScoring(ScoringStrategy):
    """Scores from a beta-uniform mixture model: (a - 1) * (log(p) - log(threshold))"""

    name = BUM

    def __init__(self):
        self.fit = None

    def prepare(self, pvals):
        self.fit = fit_bum(pvals)
        return self

    def score(self, pvals, threshold):
        if self.fit is None:
            raise InvalidParameter('BumScoring must be prepared with p-values before scoring.')
        p = clip(asarray(pvals, dtype=float), P_MIN, 1.0)
        return (self.fit.a - 1) * (log(p) - log(threshold))


class LogRatioScoring(ScoringStrategy):
    """Scores as log ratio of threshold and p-value: log(threshold) - log(p)"""

    name = LOG_RATIO

    def score(self, pvals, threshold):
        p = clip(asarray(pvals, dtype=float), P_MIN, 1.0)
        return log(threshold) - log(p)


SCORING_STRATEGIES = {BUM: BumScoring, LOG_RATIO: LogRatioScoring}


def get_scoring_strategy(scoring=None) -> ScoringStrategy:
    """Get a fresh scoring strategy by name (or pass through a strategy object)"""
    if scoring is None:
        scoring = Configuration().scoring
    if isinstance(scoring, ScoringStrategy):
        return scoring
    if scoring not in SCORING_STRATEGIES:
        raise InvalidParameter('Unknown scoring strategy ' + str(scoring) + '. Use one of ' + str(sorted(SCORING_STRATEGIES)) + '.')
    return SCORING_STRATEGIES[scoring]()


def pval_threshold(k, signal_pvals, threshold_max) -> float:
    """P-value threshold from a significance parameter

    The threshold is the p-value of the k-th most significant signal, or 1 if there are
    fewer than k signals, but never more than threshold_max. It does not decrease with k.
    An infinite k takes all signals.
    """
    pvals = sorted(signal_pvals)
    t = pvals[int(ceil(k)) - 1] if k <= len(pvals) else 1.0
    return min(max(t, P_MIN), threshold_max)


class ScoredGraph(MetabolicGraph):
    """Metabolic graph whose vertices and edges carry scores

    In addition to the attributes of the MetabolicGraph, every vertex and edge carries a
    'score' and a 'direction' (+1: up, -1: down, 0: unknown or unchanged) for display.
    Elements that share a signal share the same score. Objects of this class are returned
    by score_graph and are frozen.
    """

    @property
    def parameters(self) -> Dict:
        """Parameters used for scoring (k values, thresholds, baseline, strategy)"""
        return dict(self.graph.graph.get('scoring', {}))

    @property
    def baseline_score(self) -> float:
        return self.parameters[BASELINE_SCORE]

    def signal_scores(self) -> Dict[str, float]:
        """Scores of all signals {signal: score}"""
        scores = {}
        for _, d in self.graph.nodes(data=True):
            scores[d[SIGNAL]] = d[SCORE]
        for _, _, d in self.graph.edges(data=True):
            scores[d[SIGNAL]] = d[SCORE]
        return scores

    def signals(self) -> DataFrame:
        """Table of signals and their scores, sorted by signal"""
        scores = self.signal_scores()
        return DataFrame({SIGNAL: sorted(scores), SCORE: [scores[s] for s in sorted(scores)]})

    def get_vertex_score(self, vertex) -> float:
        return self.graph.nodes[vertex][SCORE]

    def get_edge_score(self, u, v, reaction) -> float:
        return self.graph.edges[u, v, reaction][SCORE]


def _check_k(k, name):
    if k is None or k is EXCLUDE:
        return
    if isinstance(k, bool) or not isinstance(k, Real) or not k > 0 or k != k:
        raise InvalidParameter(name + ' must be a positive number, None or EXCLUDE, not ' + repr(k) + '.', {name: k})


def _direction(log2fc) -> int:
    if log2fc is None:
        return 0
    return int(sign(log2fc))


def score_graph(graph, k_gene=None, k_met=None, **kwargs) -> ScoredGraph:
    """Assign scores to the vertices and edges of a metabolic graph

    Elements with a differential record are scored from their p-value and a p-value
    threshold. The threshold is the p-value of the k-th most significant signal of the
    data type (see pval_threshold), so larger values of k_gene and k_met produce higher
    scores and, eventually, larger modules. Elements without a record, and elements whose
    data type is excluded, receive the same baseline score. The sign of the log fold change
    is kept as 'direction' for display and does not enter the score.

    For each data type present on the graph the significance parameter must be given:
    either a positive number, or EXCLUDE to deliberately leave that data out. If a graph
    carries records of a type and the parameter is missing (None), MissingParameter is
    raised. Parameters of data types absent from the graph are ignored.

    Example:
        sg = score_graph(g, k_gene=50, k_met=EXCLUDE)

    Args:
        graph (MetabolicGraph):
            A metabolic graph as returned by make_metabolic_graph.

        k_gene, k_met (optional (float or EXCLUDE)): (Default: None)
            Significance parameters for gene (edge) and metabolite (vertex) data.

        baseline_score (optional (float)): (Default: Configuration().baseline_score, -0.1)
            Score of all elements without a scored record.

        threshold_max (optional (float)): (Default: Configuration().threshold_max, 0.1)
            Upper limit of the p-value thresholds.

        scoring (optional (str or ScoringStrategy)): (Default: Configuration().scoring, 'bum')
            The scoring strategy: 'bum', 'log_ratio' or a ScoringStrategy object. A fresh
            strategy is prepared for each data type; strategy objects are prepared in place.

    Returns:
        (ScoredGraph):
        A frozen graph with the same vertices and edges and the additional attributes
        'score' and 'direction'.

    Raises:
        MissingParameter: if the graph carries data of a type whose parameter is None.
        InvalidParameter: if a parameter is not a positive number or keyword is unknown.
    """
    allowed_keys = {BASELINE_SCORE, THRESHOLD_MAX, SCORING}
    for key in kwargs:
        if key not in allowed_keys:
            raise InvalidParameter("Key " + key + " is not supported.")
    conf = Configuration()
    baseline = float(kwargs.get(BASELINE_SCORE, conf.baseline_score))
    threshold_max = float(kwargs.get(THRESHOLD_MAX, conf.threshold_max))
    if not 0.0 < threshold_max <= 1.0:
        raise InvalidParameter('threshold_max must be within (0, 1].', {THRESHOLD_MAX: threshold_max})
    _check_k(k_gene, K_GENE)
    _check_k(k_met, K_MET)

    if graph.has_gene_data() and k_gene is None:
        raise MissingParameter('The graph carries gene data, but k_gene was not given. '
                               'Pass a positive k_gene or k_gene=EXCLUDE to score without gene data.', {K_GENE: k_gene})
    if graph.has_met_data() and k_met is None:
        raise MissingParameter('The graph carries metabolite data, but k_met was not given. '
                               'Pass a positive k_met or k_met=EXCLUDE to score without metabolite data.', {K_MET: k_met})

    g = nx.MultiGraph(graph.graph)
    params = {K_GENE: k_gene, K_MET: k_met, BASELINE_SCORE: baseline, THRESHOLD_MAX: threshold_max}

    # edges carry gene data, vertices metabolite data
    elements = {
        GENE_DATA: [d for _, _, d in g.edges(data=True)],
        MET_DATA: [d for _, d in g.nodes(data=True)],
    }
    for data_type, k in [(GENE_DATA, k_gene), (MET_DATA, k_met)]:
        records = [d for d in elements[data_type] if d[PVAL] is not None]
        use = bool(records) and k is not None and k is not EXCLUDE
        if use:
            signal_pvals = {d[SIGNAL]: d[PVAL] for d in records}
            threshold = pval_threshold(k, signal_pvals.values(), threshold_max)
            strategy = get_scoring_strategy(kwargs.get(SCORING))
            strategy.prepare(graph.get_pvals(data_type) or list(signal_pvals.values()))
            scores = strategy.score([d[PVAL] for d in records], threshold)
            for d, s in zip(records, scores):
                d[SCORE] = float(s)
            params[data_type + '_threshold'] = threshold
            params[SCORING] = strategy.name
            if isinstance(strategy, BumScoring):
                params[data_type + '_bum'] = (strategy.fit.lambda_, strategy.fit.a)
            logging.info('  Scored ' + str(len(records)) + ' ' + data_type + ' element(s) with p-value threshold ' + format(threshold, '.3g') +
                         ' (' + str(sum(s > 0 for s in scores)) + ' positive).')
        for d in elements[data_type]:
            if not use or d[PVAL] is None:
                d[SCORE] = baseline
            d[DIRECTION] = _direction(d[LOG2FC])
    g.graph['scoring'] = params
    return ScoredGraph(g, graph.topology)


def plot_bum_fit(fit, pvals, **kwargs):
    """Plot a histogram of p-values together with the density of a fitted BUM model

    This helps to judge whether the beta-uniform mixture model describes the p-value
    distribution of a differential table well.

    Example:
        plot_bum_fit(fit_bum(pvals), pvals, plt_backend='template')

    Args:
        fit (BumFit):
            The fitted model.

        pvals (list of float):
            The p-values the model was fitted to.

        bins (optional (int)): (Default: 50)
            Number of histogram bins.

        plt_backend (optional (str)): (Default: None)
            The matplotlib backend, e.g., 'template' for environments without display.

        show (optional (bool)): (Default: True)
            Show the plot.

    Returns:
        (matplotlib.axes.Axes):
        The axes of the plot.
    """
    if 'plt_backend' in kwargs:
        set_matplotlib_backend(kwargs['plt_backend'])
    show = kwargs.get('show', True)
    bins = kwargs.get('bins', 50)
    pvals = clip(array(pvals, dtype=float), 0.0, 1.0)
    density, edges = histogram(pvals, bins=bins, range=(0.0, 1.0), density=True)
    ax = plt.figure().add_subplot()
    ax.bar(edges[:-1], density, width=edges[1:] - edges[:-1], align='edge', alpha=0.5)
    x = linspace(1.0 / (10 * bins), 1.0, 200)
    ax.plot(x, fit.density(x), color='darkred')
    ax.axhline(fit.lambda_ + (1 - fit.lambda_) * fit.a, linestyle='--', color='grey')
    ax.set_xlabel('p-value')
    ax.set_ylabel('density')
    ax.set_title(repr(fit))
    if show:
        try:
            plt.show()
        except UserWarning as e:
            if 'non-interactive' in str(e):
                logging.warning('warning: Interactive plot not supported in current execution environment.')
    return ax
