"""FastAPI app."""
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from dxsuggest.models import API_VERSION
from dxsuggest.services.config import config
from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.app_common import APP_COMMON
from dxsuggest.services.app_diagnosis import APP_DIAGNOSIS
from dxsuggest.services.util.api_utils import construct_open_api_schema, get_diagnosis_interface

TITLE = config.get('DXS_TITLE', 'Diagnosis Suggestion Service')

VERSION = config.get('DXS_VERSION', '1.0.0')

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)

APP = FastAPI()

# CORS
APP.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the diagnosis API at /1.0
APP.mount(f'/{API_VERSION}', APP_DIAGNOSIS, f'Diagnosis {API_VERSION}')

# Mount supplemental API endpoints at /
APP.mount('/', APP_COMMON, '')

# Add all routes of each app for open api generation at /openapi.json
# This will create an aggregate openapi spec.
APP.include_router(APP_DIAGNOSIS.router, prefix=f'/{API_VERSION}')
APP.include_router(APP_COMMON.router)

APP.openapi_schema = construct_open_api_schema(app=APP, api_version='N/A')


@APP.on_event("startup")
async def load_diagnosis_index():
    """
    The ontology and catalog must be indexed before any query is served;
    a load failure aborts the startup.
    """
    diagnosis_interface = get_diagnosis_interface()
    if not diagnosis_interface.ready:
        diagnosis_interface.load()
    logger.info(f"{TITLE} {VERSION} ready")


if __name__ == '__main__':
    import uvicorn
    uvicorn.run("dxsuggest.services.server:APP", host="0.0.0.0", port=8080, log_level="info", reload=True)
