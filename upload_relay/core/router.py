"""Router with automatic file injection and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

import orjson
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from upload_relay.models.core import UploadFile

FILE_UPLOAD_ENDPOINTS: set[str] = set()

JSON_HEADERS = {"content-type": "application/json"}


def parse_endpoint_signature(sig: inspect.Signature) -> set[str]:
    """Names of the parameters annotated with UploadFile."""
    return {name for name, param in sig.parameters.items() if param.annotation is UploadFile}


def parse_request_files(
    file_params: set[str],
    request: Request,
    kwargs: dict[str, Any],
) -> Response | None:
    """Transfer request.files to UploadFile kwargs."""
    if not file_params:
        return None

    files = getattr(request, "files", None)
    if not files:
        return Response(
            status_code=status_codes.HTTP_422_UNPROCESSABLE_ENTITY,
            headers=dict(JSON_HEADERS),
            description=orjson.dumps({"error": "missing_files", "required": sorted(file_params)}).decode(),
        )

    for param_name in file_params:
        kwargs[param_name] = UploadFile(files=dict(files))

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response. A ``(status_code, body)`` tuple sets the status."""
    status_code = status_codes.HTTP_200_OK
    if isinstance(result, tuple) and len(result) == 2 and isinstance(result[0], int):
        status_code, result = result

    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_code,
                headers=dict(JSON_HEADERS),
                description=result.model_dump_json(),
            )
        case dict():
            return Response(
                status_code=status_code,
                headers=dict(JSON_HEADERS),
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_code,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            file_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if file_params:
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                FILE_UPLOAD_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                if file_params and (error := parse_request_files(file_params, request, h_kwargs)):
                    return error

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            new_params.extend(
                param for name, param in sig.parameters.items() if name != "request" and name not in file_params
            )

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            decorator(wrapped_handler)
            # Module-level name stays bound to the parsing wrapper Robyn dispatches to
            return wrapped_handler

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with automatic file injection and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
