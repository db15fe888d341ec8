"""
Phenotype ontology term graph: an immutable DAG of terms with
their parent edges, ancestor closures and information content.
"""
from typing import Dict, FrozenSet, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple
import math

from dxsuggest.services.config import config
from dxsuggest.services.util.errors import UnknownTerm, OntologyError
from dxsuggest.services.util.logutil import LoggingUtil

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


class Term(NamedTuple):
    """
    Ontology term. Parents are referenced by identifier,
    the OntologyGraph owns every Term.
    """
    id: str
    parents: FrozenSet[str] = frozenset()
    information_content: float = 0.0


class OntologyGraph:
    """
    Arena of Terms indexed by identifier. The ancestor closure of every term
    is computed once, when the graph is built, so lookups on the query path
    are plain dictionary accesses.
    """

    def __init__(self, terms: Iterable[Term]):
        self._terms: Dict[str, Term] = dict()
        for term in terms:
            if term.id in self._terms:
                raise OntologyError(f"Duplicate ontology term '{term.id}'")
            if term.information_content is None or term.information_content < 0 or \
                    math.isnan(term.information_content):
                raise OntologyError(
                    f"Term '{term.id}' has invalid information content '{term.information_content}'"
                )
            self._terms[term.id] = term

        if not self._terms:
            raise OntologyError("Ontology has no terms")

        for term in self._terms.values():
            for parent in term.parents:
                if parent not in self._terms:
                    raise OntologyError(f"Term '{term.id}' references unknown parent '{parent}'")

        self._roots: FrozenSet[str] = frozenset(
            term_id for term_id, term in self._terms.items() if not term.parents
        )
        if not self._roots:
            raise OntologyError("Ontology has no root term: the parent relation is cyclic")

        self._ancestors: Dict[str, FrozenSet[str]] = self._build_ancestor_closures()

        logger.debug(f"Ontology graph built with {len(self._terms)} terms and {len(self._roots)} root(s)")

    def _build_ancestor_closures(self) -> Dict[str, FrozenSet[str]]:
        """
        Iterative depth-first traversal up the parent edges. A term met again
        while still on the traversal path closes a cycle, which is fatal.
        """
        closures: Dict[str, FrozenSet[str]] = dict()
        on_path: Set[str] = set()

        for start in self._terms:
            if start in closures:
                continue
            stack: List[Tuple[str, bool]] = [(start, False)]
            while stack:
                term_id, expanded = stack.pop()
                if expanded:
                    on_path.discard(term_id)
                    closure: Set[str] = {term_id}
                    for parent in self._terms[term_id].parents:
                        closure |= closures[parent]
                    closures[term_id] = frozenset(closure)
                    continue
                if term_id in closures:
                    continue
                if term_id in on_path:
                    raise OntologyError(f"Cycle detected in the ontology through term '{term_id}'")
                on_path.add(term_id)
                stack.append((term_id, True))
                for parent in sorted(self._terms[term_id].parents):
                    if parent in on_path:
                        raise OntologyError(
                            f"Cycle detected in the ontology: '{parent}' is an ancestor of itself"
                        )
                    if parent not in closures:
                        stack.append((parent, False))

        return closures

    def __contains__(self, term_id) -> bool:
        return term_id in self._terms

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self):
        return iter(self._terms.values())

    @property
    def roots(self) -> FrozenSet[str]:
        return self._roots

    def term(self, term_id: str) -> Term:
        try:
            return self._terms[term_id]
        except KeyError:
            raise UnknownTerm(term_id) from None

    def parents_of(self, term_id: str) -> FrozenSet[str]:
        return self.term(term_id).parents

    def ancestors_of(self, term_id: str) -> FrozenSet[str]:
        """
        Ancestor closure of a term.
        :param term_id: str, term CURIE
        :return: FrozenSet[str], the term itself and all its transitive parents
        :raises UnknownTerm: if the term is not in the graph
        """
        try:
            return self._ancestors[term_id]
        except KeyError:
            raise UnknownTerm(term_id) from None

    def information_content(self, term_id: str) -> float:
        """
        :raises UnknownTerm: if the term is not in the graph
        """
        return self.term(term_id).information_content

    def most_informative(self, term_ids: Iterable[str]) -> Tuple[Optional[str], float]:
        """
        Pick the term of highest information content, ties going to
        the smaller identifier. Returns (None, 0.0) for no terms.
        """
        best_id: Optional[str] = None
        best_ic: float = 0.0
        for term_id in term_ids:
            ic = self._terms[term_id].information_content
            if best_id is None or ic > best_ic or (ic == best_ic and term_id < best_id):
                best_id, best_ic = term_id, ic
        return best_id, best_ic

    def mica(self, term_a: str, term_b: str) -> Tuple[Optional[str], float]:
        """
        Most informative common ancestor of two terms.
        :return: (ancestor identifier, its information content),
                 or (None, 0.0) when the terms share no ancestor
        """
        common = self.ancestors_of(term_a) & self.ancestors_of(term_b)
        return self.most_informative(common)


def annotation_information_content(
        terms: Iterable[Term],
        annotations: Mapping[str, Iterable[str]]
) -> List[Term]:
    """
    Derive term information content from annotation frequency,
    IC(t) = -ln(n_t / N), for terms which do not carry their own.

    :param terms: Iterable[Term], terms of the ontology; a term with a
                  None information content is assigned a derived one
    :param annotations: Mapping[str, Iterable[str]], diagnosis identifier
                        to its annotated term identifiers
    :return: List[Term], terms with the information content filled in
    """
    terms = list(terms)
    # weights are not needed to resolve the closures
    graph = OntologyGraph(term._replace(information_content=0.0) for term in terms)

    frequency: Dict[str, int] = dict()
    total = 0
    for diagnosis_id, term_ids in annotations.items():
        closure: Set[str] = set()
        for term_id in term_ids:
            if term_id in graph:
                closure |= graph.ancestors_of(term_id)
        if not closure:
            continue
        total += 1
        for term_id in closure:
            frequency[term_id] = frequency.get(term_id, 0) + 1

    derived: Dict[str, float] = {
        term_id: math.log(total / count) for term_id, count in frequency.items()
    }
    # never annotated: at least as specific as the rarest annotated term
    ceiling = max(derived.values()) if derived else 0.0

    return [
        term if term.information_content is not None
        else term._replace(information_content=derived.get(term.id, ceiling))
        for term in terms
    ]
