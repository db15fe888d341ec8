"""
FastAPI app wrapper of generic methods.
"""
from typing import Any
from starlette.responses import Response
from fastapi import (
    Depends,
    FastAPI,
    status
)

from dxsuggest.models import AncestorsResponse
from dxsuggest.services.util.diagnosis_adapter import DiagnosisInterface
from dxsuggest.services.util.errors import EngineNotReady, UnknownTerm
from dxsuggest.services.util.api_utils import (
    get_diagnosis_interface,
    construct_open_api_schema,
    json_response
)


APP_COMMON = FastAPI(openapi_url='/common/openapi.json', docs_url='/common/docs')


async def metadata(
        diagnosis_interface: DiagnosisInterface = Depends(get_diagnosis_interface),
) -> Response:
    """Handle /metadata."""
    result = await diagnosis_interface.get_metadata()
    return json_response(result)


APP_COMMON.add_api_route(
    path="/metadata",
    endpoint=metadata,
    methods=["GET"],
    response_model=Any,
    summary="Metadata about the loaded ontology and diagnosis catalog.",
    description="Returns JSON with term and diagnosis counts, index build time and data source annotation.",
)


async def ancestors(
        curie: str,
        diagnosis_interface: DiagnosisInterface = Depends(get_diagnosis_interface)
) -> Response:
    """Handle ancestor closure lookup."""
    try:
        result = await diagnosis_interface.get_ancestors(curie)
    except UnknownTerm as unknown:
        return json_response({"detail": str(unknown)}, status_code=status.HTTP_404_NOT_FOUND)
    except EngineNotReady as not_ready:
        return json_response({"detail": str(not_ready)}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return json_response(result)


APP_COMMON.add_api_route(
    path="/term/{curie}/ancestors",
    endpoint=ancestors,
    methods=["GET"],
    response_model=AncestorsResponse,
    summary="Find the ancestors of an ontology term",
    description="Returns the term `curie`, its information content and its ancestor closure.",
    tags=["ontology"]
)

APP_COMMON.openapi_schema = construct_open_api_schema(app=APP_COMMON, api_version="N/A")
