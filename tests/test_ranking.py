"""
Unit Tests for the Ranking Engine
"""
from concurrent.futures import ThreadPoolExecutor
from typing import List
import pytest

from dxsuggest.services.util.associations import Diagnosis
from dxsuggest.services.util.errors import EngineNotReady, InvalidLimit, OntologyError
from dxsuggest.services.util.ontology import Term
from dxsuggest.services.util.ranking import RankingEngine, ScoredCandidate


def test_single_term_scenario(engine):
    assert engine.get_diagnosis(["T:B"], 2) == ["D:1", "D:2"]


def test_two_term_scenario(engine):
    # D:1 = (0.5 + 0.1) / 2, D:2 = (0.1 + 0.6) / 2
    assert engine.get_diagnosis(["T:B", "T:C"], 1) == ["D:2"]
    result = engine.rank(["T:B", "T:C"], 2)
    assert [candidate.diagnosis_id for candidate in result.candidates] == ["D:2", "D:1"]
    assert result.candidates[0].score == pytest.approx(0.35)
    assert result.candidates[1].score == pytest.approx(0.3)


def test_ties_break_on_identifier(terms):
    engine = RankingEngine()
    engine.rebuild(
        terms,
        [
            Diagnosis(id="D:9", phenotypes=frozenset({"T:B"})),
            Diagnosis(id="D:10", phenotypes=frozenset({"T:B"})),
            Diagnosis(id="D:2", phenotypes=frozenset({"T:C"})),
        ]
    )
    # 'D:10' < 'D:9' as strings
    assert engine.get_diagnosis(["T:B"], 3) == ["D:10", "D:9", "D:2"]
    assert engine.get_diagnosis(["T:B"], 1) == ["D:10"]


@pytest.mark.parametrize(
    "phenotypes",
    [
        ["T:B"],
        ["T:C", "T:B"],
        ["T:A"],
        ["T:B", "T:B", " T:B "],
    ]
)
@pytest.mark.parametrize("limit", [0, 1, 2, 5])
def test_result_shape(engine, phenotypes: List[str], limit: int):
    result = engine.rank(phenotypes, limit)
    identifiers = [candidate.diagnosis_id for candidate in result.candidates]
    assert len(identifiers) <= limit
    assert len(identifiers) == len(set(identifiers))
    keys = [candidate.sort_key() for candidate in result.candidates]
    assert keys == sorted(keys)
    assert engine.get_diagnosis(phenotypes, limit) == identifiers


@pytest.mark.parametrize("phenotypes", [[], ["T:B"], ["T:B", "T:C"], ["X:UNKNOWN"]])
def test_zero_limit_is_empty(engine, phenotypes):
    assert engine.get_diagnosis(phenotypes, 0) == []


@pytest.mark.parametrize("limit", [0, 1, 10])
def test_empty_query_is_empty(engine, limit):
    assert engine.get_diagnosis([], limit) == []


def test_unrecognized_codes_behave_as_empty_query(engine):
    result = engine.rank(["T:Z", "HP:0000001", "not-a-code", ""], 5)
    assert result.candidates == []
    assert result.query_terms == ()
    assert result.dropped_phenotypes == ("T:Z", "HP:0000001", "not-a-code", "")
    assert engine.get_diagnosis(["T:Z", "not-a-code"], 5) == engine.get_diagnosis([], 5)


def test_unrecognized_codes_are_dropped_from_query(engine):
    result = engine.rank(["T:B", "T:Z"], 2)
    assert result.query_terms == ("T:B",)
    assert result.dropped_phenotypes == ("T:Z",)
    # scored as if only T:B had been observed
    assert result.candidates[0] == ScoredCandidate(
        diagnosis_id="D:1", score=0.5, evidence=0.5, matches={"T:B": ("T:B", 0.5)}, name="First disease"
    )
    assert any("T:Z" in entry["message"] for entry in result.logs)


def test_match_outranks_unrelated_diagnosis(terms):
    engine = RankingEngine()
    engine.rebuild(
        terms + [Term(id="T:OTHER", parents=frozenset(), information_content=0.0)],
        [
            Diagnosis(id="D:A", phenotypes=frozenset({"T:OTHER"})),
            Diagnosis(id="D:B", phenotypes=frozenset({"T:B"})),
        ]
    )
    result = engine.rank(["T:B"], 10)
    assert result.candidates[0].diagnosis_id == "D:B"
    assert result.candidates[0].score > 0
    # no shared ancestor: never ranked above the match
    assert "D:A" not in result.diagnosis_ids


def test_repeated_queries_are_identical(engine):
    first = engine.rank(["T:C", "T:B"], 2).candidates
    for _ in range(10):
        assert engine.rank(["T:B", "T:C"], 2).candidates == first


def test_exact_match_never_lowers_score(engine):
    before = {c.diagnosis_id: c for c in engine.rank(["T:C"], 5).candidates}
    after = {c.diagnosis_id: c for c in engine.rank(["T:C", "T:B"], 5).candidates}
    assert after["D:1"].score >= before["D:1"].score
    assert after["D:1"].evidence >= before["D:1"].evidence


def test_exact_match_never_lowers_evidence(terms):
    engine = RankingEngine()
    engine.rebuild(terms, [Diagnosis(id="D:BC", phenotypes=frozenset({"T:B", "T:C"}))])
    before = engine.rank(["T:C"], 1).candidates[0]
    after = engine.rank(["T:C", "T:B"], 1).candidates[0]
    assert after.evidence == pytest.approx(before.evidence + 0.5)
    # the mean drops when the added match is less informative than the current score
    assert before.score == pytest.approx(0.6)
    assert after.score == pytest.approx(0.55)


@pytest.mark.parametrize("limit", [-1, -100, 1.5, "3", None, True])
def test_invalid_limit(engine, limit):
    with pytest.raises(InvalidLimit):
        engine.get_diagnosis(["T:B"], limit)


def test_invalid_limit_is_a_value_error(engine):
    with pytest.raises(ValueError):
        engine.get_diagnosis([], -1)


def test_engine_not_ready():
    engine = RankingEngine()
    assert not engine.ready
    with pytest.raises(EngineNotReady):
        engine.get_diagnosis(["T:B"], 1)
    assert engine.metadata()["status"] == "not ready"


def test_failed_rebuild_keeps_published_index(engine, diagnoses):
    cyclic = [
        Term(id="T:R", parents=frozenset(), information_content=0.0),
        Term(id="T:X", parents=frozenset({"T:R", "T:Y"}), information_content=1.0),
        Term(id="T:Y", parents=frozenset({"T:X"}), information_content=1.0),
    ]
    published = engine.snapshot()
    with pytest.raises(OntologyError):
        engine.rebuild(cyclic, diagnoses)
    assert engine.snapshot() is published
    assert engine.get_diagnosis(["T:B"], 2) == ["D:1", "D:2"]


def test_failed_first_build_leaves_engine_not_ready(diagnoses):
    engine = RankingEngine()
    with pytest.raises(OntologyError):
        engine.rebuild([], diagnoses)
    assert not engine.ready


def test_rebuild_replaces_index(engine, terms):
    engine.rebuild(terms, [Diagnosis(id="D:3", phenotypes=frozenset({"T:B"}))], {"catalog": {"name": "v2"}})
    assert engine.get_diagnosis(["T:B"], 5) == ["D:3"]
    metadata = engine.metadata()
    assert metadata["status"] == "ready"
    assert metadata["terms"] == 3
    assert metadata["diagnoses"] == 1
    assert metadata["sources"] == {"catalog": {"name": "v2"}}


def test_names_come_from_the_ranked_snapshot(engine, terms):
    result = engine.rank(["T:B"], 2)
    engine.rebuild(terms, [Diagnosis(id="D:2", phenotypes=frozenset({"T:C"}), name="Renamed")])
    assert [(c.diagnosis_id, c.name) for c in result.candidates] == [
        ("D:1", "First disease"), ("D:2", "Second disease")
    ]


def test_concurrent_queries_see_whole_snapshots(terms, diagnoses):
    engine = RankingEngine()
    engine.rebuild(terms, diagnoses)
    swapped = [
        Diagnosis(id="D:3", phenotypes=frozenset({"T:B"})),
        Diagnosis(id="D:4", phenotypes=frozenset({"T:C"})),
    ]
    # either the original or the swapped catalog, never a mix
    allowed = [["D:1", "D:2"], ["D:3", "D:4"]]

    def query(_):
        return engine.get_diagnosis(["T:B"], 2)

    def rebuild(n):
        engine.rebuild(terms, swapped if n % 2 else diagnoses)

    with ThreadPoolExecutor(max_workers=8) as pool:
        rebuilds = [pool.submit(rebuild, n) for n in range(20)]
        results = list(pool.map(query, range(200)))
        for future in rebuilds:
            future.result()

    assert all(result in allowed for result in results)
