"""
Diagnosis to phenotype associations, indexed for candidate retrieval.
"""
from typing import Dict, FrozenSet, Iterable, NamedTuple, Optional, Set

from dxsuggest.services.config import config
from dxsuggest.services.util.errors import CatalogError
from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.util.ontology import OntologyGraph

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


class Diagnosis(NamedTuple):
    id: str
    phenotypes: FrozenSet[str]
    name: Optional[str] = None


class AssociationIndex:
    """
    Read-only snapshot of the diagnosis catalog against a given ontology.

    The forward map holds, for each diagnosis, the ancestor closure of its
    annotated terms. The reverse map holds, for each term, the diagnoses
    annotated with that term or any of its descendants: every diagnosis is
    inserted into the bucket of every ancestor of each of its annotations.
    Candidate lookup is then one bucket access per ancestor of a query term.

    An index is never mutated once built; a changed catalog means a new index.
    """

    def __init__(self, graph: OntologyGraph, diagnoses: Iterable[Diagnosis]):
        self._graph = graph
        self._diagnoses: Dict[str, Diagnosis] = dict()
        self._closures: Dict[str, FrozenSet[str]] = dict()
        reverse: Dict[str, Set[str]] = dict()

        seen: Set[str] = set()
        for diagnosis in diagnoses:
            if diagnosis.id in seen:
                raise CatalogError(f"Duplicate diagnosis '{diagnosis.id}' in catalog")
            seen.add(diagnosis.id)

            annotations: Set[str] = set()
            for term_id in diagnosis.phenotypes:
                if term_id in graph:
                    annotations.add(term_id)
                else:
                    logger.warning(f"Diagnosis '{diagnosis.id}' is annotated with unknown term '{term_id}'. Skipped!")

            if not annotations:
                logger.warning(f"Diagnosis '{diagnosis.id}' has no usable phenotype annotation. Skipped!")
                continue

            closure: Set[str] = set()
            for term_id in annotations:
                closure |= graph.ancestors_of(term_id)

            self._diagnoses[diagnosis.id] = diagnosis._replace(phenotypes=frozenset(annotations))
            self._closures[diagnosis.id] = frozenset(closure)
            for term_id in closure:
                reverse.setdefault(term_id, set()).add(diagnosis.id)

        self._reverse: Dict[str, FrozenSet[str]] = {
            term_id: frozenset(bucket) for term_id, bucket in reverse.items()
        }

        logger.debug(f"Association index built for {len(self._diagnoses)} diagnoses over {len(reverse)} terms")

    @property
    def graph(self) -> OntologyGraph:
        return self._graph

    def __contains__(self, diagnosis_id) -> bool:
        return diagnosis_id in self._diagnoses

    def __len__(self) -> int:
        return len(self._diagnoses)

    def __iter__(self):
        return iter(self._diagnoses.values())

    def diagnosis(self, diagnosis_id: str) -> Diagnosis:
        return self._diagnoses[diagnosis_id]

    def annotation_closure(self, diagnosis_id: str) -> FrozenSet[str]:
        """Annotated terms of a diagnosis together with all of their ancestors."""
        return self._closures[diagnosis_id]

    def diagnoses_with(self, term_id: str) -> FrozenSet[str]:
        """Diagnoses annotated with 'term_id' or any of its descendants."""
        return self._reverse.get(term_id, frozenset())

    def candidates_for(self, query_term_ids: Iterable[str]) -> FrozenSet[str]:
        """
        Diagnoses sharing at least one ancestor-or-self term with some query term.

        :param query_term_ids: Iterable[str], recognized query term identifiers
        :return: FrozenSet[str], candidate diagnosis identifiers
        :raises UnknownTerm: if a query term is not in the ontology
        """
        candidates: Set[str] = set()
        for query_term in query_term_ids:
            for ancestor in self._graph.ancestors_of(query_term):
                candidates |= self.diagnoses_with(ancestor)
        return frozenset(candidates)
