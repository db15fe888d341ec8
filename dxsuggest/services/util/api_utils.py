from typing import Any
import yaml
from fastapi import Response
from fastapi.openapi.utils import get_openapi
import json
import os

from dxsuggest.models import API_VERSION
from dxsuggest.services.util import DEFAULT_PROVENANCE
from dxsuggest.services.util.diagnosis_adapter import DiagnosisInterface
from dxsuggest.services.config import config


def get_diagnosis_interface():
    """Get diagnosis engine interface."""
    return DiagnosisInterface()


def construct_open_api_schema(app, api_version, prefix=""):
    dxs_title = config.get('DXS_TITLE', 'Diagnosis Suggestion Service')
    dxs_version = config.get('DXS_VERSION', '1.0.0')
    if app.openapi_schema:
        return app.openapi_schema
    open_api_schema = get_openapi(
        title=dxs_title,
        version=dxs_version,
        description='',
        routes=app.routes,
    )
    open_api_extended_file_path = config.get_resource_path('../openapi-config.yaml')
    with open(open_api_extended_file_path) as open_api_file:
        open_api_extended_spec = yaml.load(open_api_file, Loader=yaml.SafeLoader)

    contact_config = open_api_extended_spec.get("contact")
    terms_of_service = open_api_extended_spec.get("termsOfService")
    servers_conf = open_api_extended_spec.get("servers")
    tags = open_api_extended_spec.get("tags")
    title_override = (open_api_extended_spec.get("title") or dxs_title)
    description = open_api_extended_spec.get("description")
    if tags:
        open_api_schema['tags'] = tags

    if contact_config:
        open_api_schema["info"]["contact"] = contact_config

    if terms_of_service:
        open_api_schema["info"]["termsOfService"] = terms_of_service

    if description:
        open_api_schema["info"]["description"] = description

    if title_override:
        open_api_schema["info"]["title"] = title_override

    if servers_conf:
        for cnf in servers_conf:
            if prefix and 'url' in cnf:
                cnf['url'] = cnf['url'] + prefix
                cnf['x-maturity'] = os.environ.get("MATURITY_VALUE", "maturity")
                cnf['x-location'] = os.environ.get("LOCATION_VALUE", "location")
        open_api_schema["servers"] = servers_conf

    open_api_schema["info"]["x-dxsuggest"] = {
        "api_version": api_version or API_VERSION,
        "infores": config.get('PROVENANCE_TAG', DEFAULT_PROVENANCE)
    }
    return open_api_schema


def get_example(operation: str):
    """Get example for operation."""
    with open(os.path.join(
        os.path.dirname(__file__),
        "..",
        "..",
        "examples",
        f"{operation}.json",
    )) as stream:
        return json.load(stream)


def encode_content(content: Any, encoding: str = "utf-8") -> bytes:
    return json.dumps(content).encode(encoding)


def json_response(content: Any, status_code: int = 200) -> Response:
    return Response(encode_content(content), status_code=status_code, media_type="application/json")
