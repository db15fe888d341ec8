"""
Service facade of the diagnosis ranking engine
"""
from typing import Dict, List, Optional, Sequence

from dxsuggest.services.config import config
from dxsuggest.services.util import ENGINE_METADATA
from dxsuggest.services.util.associations import Diagnosis
from dxsuggest.services.util.loader import load_sources
from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.util.ontology import Term
from dxsuggest.services.util.ranking import RankingEngine, RankingResult

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


class DiagnosisInterface:
    """
    Singleton class for interfacing with the diagnosis ranking engine.
    """
    class _DiagnosisInterface:
        def __init__(self):
            self.engine = RankingEngine()

        @property
        def ready(self) -> bool:
            return self.engine.ready

        def load(self, ontology_file: Optional[str] = None, catalog_file: Optional[str] = None):
            """
            (Re)build the engine from ontology and catalog files, by default
            those named by the 'ontology_file' and 'catalog_file' settings.
            Any failure leaves the currently published index in place.
            """
            ontology_file = ontology_file or config.get('ontology_file')
            catalog_file = catalog_file or config.get('catalog_file')
            terms, diagnoses, sources = load_sources(ontology_file, catalog_file)
            self.engine.rebuild(terms, diagnoses, sources)

        def rebuild(self, terms: Sequence[Term], diagnoses: Sequence[Diagnosis], sources: Optional[Dict] = None):
            self.engine.rebuild(terms, diagnoses, sources)

        async def get_diagnosis(self, phenotypes: List[str], limit: int) -> List[str]:
            """
            :param phenotypes: List[str], observed phenotype codes, e.g. 'HP:0002066'
            :param limit: int, maximum number of diagnoses returned
            :return: List[str], suggested diagnosis identifiers, most likely first
            """
            return self.engine.get_diagnosis(phenotypes, limit)

        async def rank(self, phenotypes: List[str], limit: int) -> RankingResult:
            return self.engine.rank(phenotypes, limit)

        def diagnosis(self, diagnosis_id: str) -> Optional[Diagnosis]:
            index = self.engine.snapshot().index
            return index.diagnosis(diagnosis_id) if diagnosis_id in index else None

        async def get_ancestors(self, curie: str) -> Dict:
            """
            :raises UnknownTerm: if 'curie' is not an ontology term
            """
            graph = self.engine.snapshot().graph
            return {
                "id": curie,
                "information_content": graph.information_content(curie),
                "ancestors": sorted(graph.ancestors_of(curie))
            }

        async def get_metadata(self) -> ENGINE_METADATA:
            return self.engine.metadata()

    instance = None

    def __init__(self):
        # create a new instance if not already created.
        if not DiagnosisInterface.instance:
            DiagnosisInterface.instance = DiagnosisInterface._DiagnosisInterface()

    def __getattr__(self, item):
        # proxy function calls to the inner object.
        return getattr(self.instance, item)
