"""
Pydantic models.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, constr, validator

from dxsuggest.services.config import config

Curie = constr(strip_whitespace=True, regex=r"^[A-Za-z][A-Za-z0-9_.\-]*:\S+$")
DEFAULT_RESULT_LIMIT = int(config.get('default_result_limit', 10))


class TermRecord(BaseModel):
    """Phenotype ontology term, as supplied by an ontology document."""
    id: Curie
    parents: List[Curie] = []
    # missing values are derived from annotation frequency
    information_content: Optional[float] = None

    @validator("information_content")
    def validate_information_content(cls, v):
        if v is not None:
            assert v >= 0, "information content must be a non-negative number"
        return v


class DiagnosisRecord(BaseModel):
    """Catalog entry: a diagnosis and the phenotypes annotated on it."""
    id: Curie
    name: Optional[str] = None
    phenotypes: List[Curie] = []


class OntologyDocument(BaseModel):
    meta: Dict[str, Any] = {}
    terms: List[TermRecord]


class CatalogDocument(BaseModel):
    meta: Dict[str, Any] = {}
    diagnoses: List[DiagnosisRecord]


class DiagnosisQuery(BaseModel):
    phenotypes: List[str] = Field(
        ...,
        description="Observed phenotypes, as '<ontology prefix>:<term id>' codes",
        example=["HP:0002104", "HP:0012378"]
    )
    # range checked by the ranking engine, which reports negative values
    limit: int = Field(DEFAULT_RESULT_LIMIT, description="Maximum number of diagnoses returned")


class ScoredDiagnosis(BaseModel):
    id: str
    name: Optional[str] = None
    score: float
    # query phenotype to its most informative common ancestor with the diagnosis
    matches: Dict[str, str] = {}


class DiagnosisResponse(BaseModel):
    phenotypes: List[str]
    limit: int
    results: List[ScoredDiagnosis] = []
    dropped_phenotypes: List[str] = []
    logs: List[Dict[str, str]] = []
    description: Optional[str] = None


class AncestorsResponse(BaseModel):
    id: str
    information_content: float
    ancestors: List[str]
