"""
Shared fixtures: a three term ontology with two diagnoses
    T:A (root, IC 0.1) <- T:B (IC 0.5), T:C (IC 0.6)
    D:1 annotated with T:B, D:2 annotated with T:C
"""
from typing import List
import pytest

from dxsuggest.services.util.associations import Diagnosis
from dxsuggest.services.util.diagnosis_adapter import DiagnosisInterface
from dxsuggest.services.util.ontology import Term
from dxsuggest.services.util.ranking import RankingEngine


def scenario_terms() -> List[Term]:
    return [
        Term(id="T:A", parents=frozenset(), information_content=0.1),
        Term(id="T:B", parents=frozenset({"T:A"}), information_content=0.5),
        Term(id="T:C", parents=frozenset({"T:A"}), information_content=0.6),
    ]


def scenario_diagnoses() -> List[Diagnosis]:
    return [
        Diagnosis(id="D:1", phenotypes=frozenset({"T:B"}), name="First disease"),
        Diagnosis(id="D:2", phenotypes=frozenset({"T:C"}), name="Second disease"),
    ]


@pytest.fixture
def terms() -> List[Term]:
    return scenario_terms()


@pytest.fixture
def diagnoses() -> List[Diagnosis]:
    return scenario_diagnoses()


@pytest.fixture
def engine(terms, diagnoses) -> RankingEngine:
    ranking_engine = RankingEngine()
    ranking_engine.rebuild(terms, diagnoses)
    return ranking_engine


@pytest.fixture
def diagnosis_interface(terms, diagnoses):
    DiagnosisInterface.instance = None
    interface = DiagnosisInterface()
    interface.rebuild(terms, diagnoses)
    yield interface
    DiagnosisInterface.instance = None
