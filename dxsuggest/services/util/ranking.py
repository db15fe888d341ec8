"""
Diagnosis ranking engine: turns a list of observed phenotype
codes into an ordered list of candidate diagnoses.
"""
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Sequence, Tuple
from datetime import datetime
from uuid import UUID, uuid4
import threading

from dxsuggest.services.config import config
from dxsuggest.services.util import (
    ENGINE_METADATA,
    MATCH_MAP,
    SOURCE_META,
    normalize_curie
)
from dxsuggest.services.util.associations import AssociationIndex, Diagnosis
from dxsuggest.services.util.errors import EngineNotReady, InvalidLimit, UnknownTerm
from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.util.ontology import OntologyGraph, Term
from dxsuggest.services.util.similarity import SimilarityScorer

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


class ScoredCandidate(NamedTuple):
    diagnosis_id: str
    score: float
    # summed (not averaged) MICA information content
    evidence: float = 0.0
    matches: Optional[MATCH_MAP] = None
    name: Optional[str] = None

    def sort_key(self) -> Tuple[float, str]:
        return -self.score, self.diagnosis_id


class RankingResult(NamedTuple):
    query_id: UUID
    query_terms: Tuple[str, ...]
    dropped_phenotypes: Tuple[str, ...]
    candidates: List[ScoredCandidate]
    logs: List[Dict[str, str]]

    @property
    def diagnosis_ids(self) -> List[str]:
        return [candidate.diagnosis_id for candidate in self.candidates]


class IndexSnapshot(NamedTuple):
    """Everything a query reads, published and replaced as one reference."""
    graph: OntologyGraph
    index: AssociationIndex
    scorer: SimilarityScorer
    built_at: datetime
    sources: Dict[str, SOURCE_META]


def check_limit(limit) -> int:
    # bool is an int subclass, but never a sensible limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise InvalidLimit(limit)
    return limit


class RankingEngine:
    """
    Queries run lock free against whichever IndexSnapshot is published when
    they start. A rebuild constructs a complete new snapshot privately and
    publishes it with a single assignment, so a query observes either the old
    or the new snapshot, never a partially built one.
    """

    def __init__(self):
        self._snapshot: Optional[IndexSnapshot] = None
        # serializes writers only
        self._rebuild_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._snapshot is not None

    def snapshot(self) -> IndexSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise EngineNotReady()
        return snapshot

    def rebuild(
            self,
            terms: Iterable[Term],
            diagnoses: Iterable[Diagnosis],
            sources: Optional[Dict[str, SOURCE_META]] = None
    ) -> IndexSnapshot:
        """
        Build a new ontology graph and association index, then publish them.

        :param terms: Iterable[Term], the full phenotype ontology
        :param diagnoses: Iterable[Diagnosis], the full diagnosis catalog
        :param sources: Optional[Dict[str, SOURCE_META]], provenance of the loaded data
        :return: IndexSnapshot, the newly published snapshot
        :raises OntologyError: malformed ontology, the current snapshot stays published
        :raises CatalogError: malformed catalog, the current snapshot stays published
        """
        with self._rebuild_lock:
            graph = OntologyGraph(terms)
            index = AssociationIndex(graph, diagnoses)
            snapshot = IndexSnapshot(
                graph=graph,
                index=index,
                scorer=SimilarityScorer(index),
                built_at=datetime.now(),
                sources=dict(sources or {})
            )
            self._snapshot = snapshot

        logger.info(f"Published diagnosis index: {len(graph)} terms, {len(index)} diagnoses")
        return snapshot

    @staticmethod
    def _recognize(
            graph: OntologyGraph,
            phenotypes: Sequence[str],
            query_id: UUID
    ) -> Tuple[FrozenSet[str], Tuple[str, ...]]:
        """Split phenotype codes into recognized term identifiers and dropped codes."""
        recognized = set()
        dropped = []
        for code in phenotypes:
            term_id = normalize_curie(code)
            if term_id is None:
                logger.debug(f"Ignoring malformed phenotype code '{code}'", query_id=query_id)
                dropped.append(code)
                continue
            try:
                graph.ancestors_of(term_id)
            except UnknownTerm as unknown:
                logger.debug(f"Ignoring phenotype: {unknown}", query_id=query_id)
                dropped.append(code)
                continue
            recognized.add(term_id)
        return frozenset(recognized), tuple(dropped)

    def rank(self, phenotypes: Sequence[str], limit: int) -> RankingResult:
        """
        Rank the diagnoses of the catalog against observed phenotypes.

        Phenotype codes which are malformed or not in the ontology are dropped
        from the query and reported back in 'dropped_phenotypes'; dropping
        every code leaves an empty query, hence an empty result.

        :param phenotypes: Sequence[str], '<prefix>:<id>' phenotype codes
        :param limit: int, maximum number of candidates returned, >= 0
        :return: RankingResult, candidates by descending score, then ascending identifier
        :raises InvalidLimit: if 'limit' is negative or not an integer
        :raises EngineNotReady: if no index has been published yet
        """
        limit = check_limit(limit)
        snapshot = self.snapshot()
        query_id = uuid4()

        query_terms, dropped = self._recognize(snapshot.graph, phenotypes or [], query_id)

        candidates: List[ScoredCandidate] = list()
        if query_terms and limit:
            for diagnosis_id in snapshot.index.candidates_for(query_terms):
                matches = snapshot.scorer.best_matches(query_terms, diagnosis_id)
                candidates.append(
                    ScoredCandidate(
                        diagnosis_id=diagnosis_id,
                        score=SimilarityScorer.aggregate(matches, len(query_terms)),
                        evidence=SimilarityScorer.evidence(matches),
                        matches=matches,
                        name=snapshot.index.diagnosis(diagnosis_id).name
                    )
                )
            candidates.sort(key=ScoredCandidate.sort_key)
            logger.debug(
                f"Scored {len(candidates)} candidate diagnoses for {len(query_terms)} phenotypes",
                query_id=query_id
            )
            candidates = candidates[:limit]

        return RankingResult(
            query_id=query_id,
            query_terms=tuple(sorted(query_terms)),
            dropped_phenotypes=dropped,
            candidates=candidates,
            logs=logger.get_logs(query_id)
        )

    def get_diagnosis(self, phenotypes: Sequence[str], limit: int) -> List[str]:
        """
        Suggest diagnoses for a list of observed phenotypes.

        :param phenotypes: Sequence[str], phenotype codes such as 'HP:0002066'
        :param limit: int, maximum number of diagnoses returned, >= 0
        :return: List[str], diagnosis identifiers, most likely first
        """
        return self.rank(phenotypes, limit).diagnosis_ids

    def metadata(self) -> ENGINE_METADATA:
        snapshot = self._snapshot
        if snapshot is None:
            return {"status": "not ready", "terms": 0, "diagnoses": 0, "built_at": None, "sources": {}}
        return {
            "status": "ready",
            "terms": len(snapshot.graph),
            "roots": len(snapshot.graph.roots),
            "diagnoses": len(snapshot.index),
            "built_at": snapshot.built_at.isoformat(),
            "sources": snapshot.sources
        }
