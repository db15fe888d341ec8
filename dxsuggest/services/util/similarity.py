"""
Ontology aware similarity of a phenotype query to a diagnosis.

Each query term is matched to its most informative common ancestor (MICA)
with the terms annotated on the diagnosis. The score is the information
content of those matches averaged over the query terms: matching more of the
query, and matching it with more specific terms, both raise the score.
"""
from typing import Dict, FrozenSet, Iterable, Tuple, Union

from dxsuggest.services.util import MATCH_MAP
from dxsuggest.services.util.associations import AssociationIndex, Diagnosis


class SimilarityScorer:

    def __init__(self, index: AssociationIndex):
        self._index = index
        self._graph = index.graph

    def best_matches(self, query_term_ids: Iterable[str], diagnosis: Union[str, Diagnosis]) -> MATCH_MAP:
        """
        MICA of each query term against the annotations of a diagnosis.

        :param query_term_ids: Iterable[str], recognized query term identifiers
        :param diagnosis: Union[str, Diagnosis], indexed diagnosis or its identifier
        :return: MATCH_MAP, query term to (MICA term, information content);
                 query terms sharing no ancestor with the diagnosis are absent
        """
        diagnosis_id = diagnosis.id if isinstance(diagnosis, Diagnosis) else diagnosis
        closure: FrozenSet[str] = self._index.annotation_closure(diagnosis_id)
        matches: Dict[str, Tuple[str, float]] = dict()
        for query_term in query_term_ids:
            common = self._graph.ancestors_of(query_term) & closure
            if common:
                matches[query_term] = self._graph.most_informative(common)
        return matches

    @staticmethod
    def evidence(matches: MATCH_MAP) -> float:
        """Summed MICA information content of a set of matches."""
        # fixed summation order, identical queries give identical floats
        return sum(matches[term_id][1] for term_id in sorted(matches))

    @classmethod
    def aggregate(cls, matches: MATCH_MAP, query_size: int) -> float:
        if not query_size:
            return 0.0
        return cls.evidence(matches) / query_size

    def score(self, query_term_ids: Iterable[str], diagnosis: Union[str, Diagnosis]) -> float:
        """
        :return: float >= 0, mean MICA information content over the
                 query terms; 0.0 for an empty query
        """
        query_term_ids = frozenset(query_term_ids)
        return self.aggregate(self.best_matches(query_term_ids, diagnosis), len(query_term_ids))
