"""
Pydantic models of the diagnosis suggestion service.
"""
from dxsuggest.models.models_diagnosis import (
    TermRecord,
    DiagnosisRecord,
    OntologyDocument,
    CatalogDocument,
    DiagnosisQuery,
    ScoredDiagnosis,
    DiagnosisResponse,
    AncestorsResponse,
    DEFAULT_RESULT_LIMIT
)

API_VERSION = "1.0"
