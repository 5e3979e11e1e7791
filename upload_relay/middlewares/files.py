"""File upload middleware for OpenAPI multipart/form-data patching."""

from typing import Any

import orjson
from robyn import Response

from upload_relay.core.logger import LogIcon, logger
from upload_relay.core.router import FILE_UPLOAD_ENDPOINTS
from upload_relay.middlewares.base import BaseMiddleware
from upload_relay.models.relay import FORWARD_FIELD


def multipart_request_body(field: str = FORWARD_FIELD) -> dict[str, Any]:
    """OpenAPI requestBody for one or more binary files under ``field``."""
    return {
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        field: {
                            "type": "array",
                            "items": {"type": "string", "format": "binary"},
                            "description": "Files to relay to the external server",
                        }
                    },
                    "required": [field],
                }
            }
        },
        "required": True,
    }


def patch_openapi_spec(spec: dict[str, Any], endpoints: set[str]) -> dict[str, Any]:
    """Replace the requestBody of every file-upload operation in ``spec``."""
    paths = spec.get("paths", {})
    for endpoint in endpoints:
        for operation in paths.get(endpoint, {}).values():
            operation["requestBody"] = multipart_request_body()
    return spec


class FileUploadOpenAPIMiddleware(BaseMiddleware):
    """Patches OpenAPI responses to use multipart/form-data for file upload endpoints."""

    endpoints = frozenset(["/openapi.json"])

    def after(self, response: Response) -> Response:
        """Patch OpenAPI spec with multipart/form-data for file upload endpoints."""
        if not FILE_UPLOAD_ENDPOINTS:
            return response

        try:
            spec = orjson.loads(response.description)
        except orjson.JSONDecodeError as ex:
            logger.warning("OpenAPI spec is not valid JSON, left unpatched", icon=LogIcon.WARNING, error=str(ex))
            return response

        response.description = orjson.dumps(patch_openapi_spec(spec, FILE_UPLOAD_ENDPOINTS)).decode()
        return response
