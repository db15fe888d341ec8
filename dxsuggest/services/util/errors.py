"""
Errors raised by the diagnosis ranking engine.
"""


class DiagnosisEngineError(RuntimeError):
    """Base class of all diagnosis engine failures."""


class UnknownTerm(DiagnosisEngineError, KeyError):
    """A term identifier is not present in the ontology term graph."""

    def __init__(self, term_id: str):
        super().__init__(term_id)
        self.term_id = term_id

    def __str__(self):
        return f"Unknown ontology term '{self.term_id}'"


class InvalidLimit(DiagnosisEngineError, ValueError):
    """A result limit which is not a non-negative integer."""

    def __init__(self, limit):
        super().__init__(limit)
        self.limit = limit

    def __str__(self):
        return f"Invalid result limit '{self.limit}': expected an integer >= 0"


class OntologyError(DiagnosisEngineError):
    """The phenotype ontology is malformed (cycle, dangling parent, bad weight...)."""


class CatalogError(DiagnosisEngineError):
    """The diagnosis catalog is malformed or could not be read."""


class EngineNotReady(DiagnosisEngineError):
    """No association index has been published yet."""

    def __str__(self):
        return "Diagnosis engine is not ready: no ontology and catalog have been loaded"
