"""FastAPI app."""
from typing import Dict, List
from fastapi import Body, Depends, FastAPI, Query, Response, status

from dxsuggest.models import API_VERSION, DEFAULT_RESULT_LIMIT, DiagnosisQuery, DiagnosisResponse
from dxsuggest.services.config import config
from dxsuggest.services.util.diagnosis_adapter import DiagnosisInterface
from dxsuggest.services.util.errors import EngineNotReady, InvalidLimit
from dxsuggest.services.util.ranking import RankingResult
from dxsuggest.services.util.api_utils import (
    get_diagnosis_interface,
    construct_open_api_schema,
    get_example,
    json_response
)
from dxsuggest.services.util.logutil import LoggingUtil

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format')
)

# Mount open api at /1.0/openapi.json
APP_DIAGNOSIS = FastAPI(openapi_url="/openapi.json", docs_url="/docs", root_path=f'/{API_VERSION}')


def format_ranking(query: Dict, result: RankingResult) -> Dict:
    """
    Render a RankingResult as a DiagnosisResponse JSON dictionary.
    :param query: Dict, the DiagnosisQuery JSON
    :param result: RankingResult, ranked candidates, names included
    :return: Dict, DiagnosisResponse JSON
    """
    results: List[Dict] = list()
    for candidate in result.candidates:
        results.append({
            "id": candidate.diagnosis_id,
            "name": candidate.name,
            "score": candidate.score,
            "matches": {
                query_term: mica_term
                for query_term, (mica_term, _) in sorted((candidate.matches or {}).items())
            }
        })
    return {
        "phenotypes": query["phenotypes"],
        "limit": query["limit"],
        "results": results,
        "dropped_phenotypes": list(result.dropped_phenotypes),
        "logs": result.logs,
        "description": None
    }


async def suggest_diagnosis(
        request: DiagnosisQuery = Body(
            ...,
            example=get_example("diagnosis-query"),
        ),
        diagnosis_interface: DiagnosisInterface = Depends(get_diagnosis_interface)
) -> Response:
    """
    Handle diagnosis suggestion request.
    :return: starlette wrapped DiagnosisResponse.
    :rtype: Response(DiagnosisResponse)
    """
    query = request.dict()
    try:
        result: RankingResult = await diagnosis_interface.rank(query["phenotypes"], query["limit"])
    except InvalidLimit as invalid_limit:
        logger.warning(str(invalid_limit))
        return json_response(
            {**query, "results": [], "dropped_phenotypes": [], "logs": [], "description": str(invalid_limit)},
            status_code=status.HTTP_400_BAD_REQUEST
        )
    except EngineNotReady as not_ready:
        logger.error(str(not_ready))
        return json_response(
            {**query, "results": [], "dropped_phenotypes": [], "logs": [], "description": str(not_ready)},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return json_response(format_ranking(query, result))


APP_DIAGNOSIS.add_api_route(
    path="/diagnosis",
    endpoint=suggest_diagnosis,
    methods=["POST"],
    response_model=DiagnosisResponse,
    summary="Suggest diagnoses for a set of observed phenotypes.",
    description=(
        "Ranks the diagnoses of the catalog by semantic similarity to the query phenotypes. "
        "Phenotype codes not found in the ontology are ignored and listed in `dropped_phenotypes`."
    ),
    tags=["diagnosis"]
)


async def get_diagnosis(
        phenotypes: List[str] = Query([], description="Observed phenotype codes, e.g. HP:0002066"),
        limit: int = Query(DEFAULT_RESULT_LIMIT, description="Maximum number of diagnoses returned"),
        diagnosis_interface: DiagnosisInterface = Depends(get_diagnosis_interface)
) -> Response:
    """Handle plain diagnosis identifier lookup."""
    try:
        result: List[str] = await diagnosis_interface.get_diagnosis(phenotypes, limit)
    except InvalidLimit as invalid_limit:
        return json_response({"detail": str(invalid_limit)}, status_code=status.HTTP_400_BAD_REQUEST)
    except EngineNotReady as not_ready:
        return json_response({"detail": str(not_ready)}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return json_response(result)


APP_DIAGNOSIS.add_api_route(
    path="/diagnosis",
    endpoint=get_diagnosis,
    methods=["GET"],
    response_model=List[str],
    summary="Ordered diagnosis identifiers for a set of observed phenotypes.",
    description="Returns at most `limit` diagnosis identifiers, most likely first.",
    tags=["diagnosis"]
)

APP_DIAGNOSIS.openapi_schema = construct_open_api_schema(app=APP_DIAGNOSIS, api_version=API_VERSION, prefix=f'/{API_VERSION}')
