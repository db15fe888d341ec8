"""
Unit Tests for the MICA Similarity Scorer
"""
import pytest

from dxsuggest.services.util.associations import AssociationIndex, Diagnosis
from dxsuggest.services.util.ontology import OntologyGraph, Term
from dxsuggest.services.util.similarity import SimilarityScorer


@pytest.fixture
def scorer(terms, diagnoses) -> SimilarityScorer:
    return SimilarityScorer(AssociationIndex(OntologyGraph(terms), diagnoses))


def test_exact_match_scores_its_information_content(scorer):
    assert scorer.score({"T:B"}, "D:1") == pytest.approx(0.5)


def test_generic_match_scores_the_common_ancestor(scorer):
    assert scorer.score({"T:B"}, "D:2") == pytest.approx(0.1)
    assert scorer.best_matches({"T:B"}, "D:2") == {"T:B": ("T:A", 0.1)}


def test_score_is_averaged_over_query_terms(scorer):
    assert scorer.score({"T:B", "T:C"}, "D:1") == pytest.approx(0.3)
    assert scorer.score({"T:B", "T:C"}, "D:2") == pytest.approx(0.35)


def test_score_accepts_diagnosis(scorer, diagnoses):
    assert scorer.score({"T:C"}, diagnoses[1]) == pytest.approx(0.6)


def test_empty_query_scores_zero(scorer):
    assert scorer.score(set(), "D:1") == 0.0
    assert scorer.best_matches(set(), "D:1") == {}


def test_unmatched_term_contributes_nothing():
    graph = OntologyGraph([
        Term("T:R1", frozenset(), 0.2),
        Term("T:X", frozenset({"T:R1"}), 1.0),
        Term("T:R2", frozenset(), 0.2),
        Term("T:Y", frozenset({"T:R2"}), 3.0),
    ])
    scorer = SimilarityScorer(
        AssociationIndex(graph, [Diagnosis(id="D:X", phenotypes=frozenset({"T:X"}))])
    )
    matches = scorer.best_matches({"T:X", "T:Y"}, "D:X")
    assert matches == {"T:X": ("T:X", 1.0)}
    # no penalty for T:Y: only the averaging
    assert scorer.score({"T:X", "T:Y"}, "D:X") == pytest.approx(0.5)
    assert scorer.score({"T:Y"}, "D:X") == 0.0


def test_adding_exact_match_never_lowers_evidence(scorer):
    before = scorer.best_matches({"T:C"}, "D:1")
    after = scorer.best_matches({"T:C", "T:B"}, "D:1")
    assert SimilarityScorer.evidence(after) >= SimilarityScorer.evidence(before)
    assert scorer.score({"T:C", "T:B"}, "D:1") >= scorer.score({"T:C"}, "D:1")


def test_aggregate():
    assert SimilarityScorer.aggregate({"T:X": ("T:X", 1.0), "T:Y": ("T:R", 0.5)}, 3) == pytest.approx(0.5)
    assert SimilarityScorer.aggregate({}, 0) == 0.0
