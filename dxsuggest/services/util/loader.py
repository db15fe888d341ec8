"""
Reads the phenotype ontology and the diagnosis catalog from
local JSON or YAML documents into engine data structures.
"""
from typing import Any, Dict, List, Tuple, Type
import json
import os

import yaml
from pydantic import ValidationError

from dxsuggest.models import OntologyDocument, CatalogDocument
from dxsuggest.services.config import config
from dxsuggest.services.util import SOURCE_META, tag_value
from dxsuggest.services.util.associations import Diagnosis
from dxsuggest.services.util.errors import CatalogError, DiagnosisEngineError, OntologyError
from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.util.ontology import Term, annotation_information_content

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


def resolve_path(path: str) -> str:
    """Paths from the configuration are relative to the services package."""
    return path if os.path.isabs(path) else config.get_resource_path(path)


def read_document(path: str, error_class: Type[DiagnosisEngineError]) -> Dict[str, Any]:
    """
    Parse a JSON or (by file extension) YAML document.
    :raises error_class: if the file cannot be read or parsed
    """
    try:
        with open(path) as stream:
            if path.endswith((".yaml", ".yml")):
                document = yaml.load(stream, Loader=yaml.SafeLoader)
            else:
                document = json.load(stream)
    except (OSError, ValueError, yaml.YAMLError) as read_error:
        raise error_class(f"Cannot read '{path}': {read_error}") from read_error

    if not isinstance(document, dict):
        raise error_class(f"Document '{path}' is not a JSON/YAML object")
    return document


def parse_ontology(document: Dict[str, Any], source: str = "<document>") -> Tuple[List[Term], SOURCE_META]:
    try:
        ontology = OntologyDocument.parse_obj(document)
    except ValidationError as invalid:
        raise OntologyError(f"Invalid ontology in '{source}': {invalid}") from invalid
    terms = [
        Term(
            id=record.id,
            parents=frozenset(record.parents),
            information_content=record.information_content
        )
        for record in ontology.terms
    ]
    return terms, ontology.meta


def parse_catalog(document: Dict[str, Any], source: str = "<document>") -> Tuple[List[Diagnosis], SOURCE_META]:
    try:
        catalog = CatalogDocument.parse_obj(document)
    except ValidationError as invalid:
        raise CatalogError(f"Invalid diagnosis catalog in '{source}': {invalid}") from invalid
    diagnoses = [
        Diagnosis(id=record.id, phenotypes=frozenset(record.phenotypes), name=record.name)
        for record in catalog.diagnoses
    ]
    return diagnoses, catalog.meta


def load_sources(ontology_path: str, catalog_path: str) -> Tuple[List[Term], List[Diagnosis], Dict[str, SOURCE_META]]:
    """
    Load an ontology and a diagnosis catalog, deriving information
    content from the catalog for terms which do not supply their own.

    :param ontology_path: str, ontology JSON/YAML file
    :param catalog_path: str, diagnosis catalog JSON/YAML file
    :return: terms, diagnoses and the 'meta' blocks of both documents
    """
    ontology_path = resolve_path(ontology_path)
    catalog_path = resolve_path(catalog_path)

    terms, ontology_meta = parse_ontology(read_document(ontology_path, OntologyError), ontology_path)
    diagnoses, catalog_meta = parse_catalog(read_document(catalog_path, CatalogError), catalog_path)

    missing_ic = sum(1 for term in terms if term.information_content is None)
    if missing_ic:
        logger.info(f"Deriving information content of {missing_ic} terms from catalog annotations")
        terms = annotation_information_content(
            terms, {diagnosis.id: diagnosis.phenotypes for diagnosis in diagnoses}
        )

    logger.info(
        f"Loaded ontology '{tag_value(ontology_meta, 'name') or ontology_path}' ({len(terms)} terms) "
        f"and catalog '{tag_value(catalog_meta, 'name') or catalog_path}' ({len(diagnoses)} diagnoses)"
    )
    return terms, diagnoses, {"ontology": ontology_meta, "catalog": catalog_meta}
