"""Base middleware architecture for Robyn applications."""

from abc import ABC
from collections.abc import Callable
from typing import Any

from robyn import Request, Response, Robyn

from upload_relay.core.logger import LogIcon, logger


class BaseMiddleware(ABC):
    """Abstract base class for middlewares with before/after hooks."""

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: frozenset[str] | list[str] | None = None) -> None:
        if endpoints:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        # At least one of before/after must be overridden
        if not (cls.implements("before") or cls.implements("after")):
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    def before(self, request: Request) -> Request | Response:
        """Called before request handling. Return Request to continue or Response to short-circuit."""
        return request

    def after(self, response: Response) -> Response:
        """Called after request handling. Return modified Response."""
        return response

    @classmethod
    def implements(cls, hook: str) -> bool:
        """Whether the subclass overrides ``before`` or ``after``."""
        return getattr(cls, hook) is not getattr(BaseMiddleware, hook)


class MiddlewareHandler:
    """Manages middleware registration for a Robyn application."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._middlewares: list[BaseMiddleware] = []

    @property
    def middlewares(self) -> list[BaseMiddleware]:
        return self._middlewares

    def register(self, middleware_cls: type[BaseMiddleware], **options: Any) -> "MiddlewareHandler":
        """Instantiate and register a middleware. Returns self for chaining."""
        middleware = middleware_cls(**options)
        self._middlewares.append(middleware)
        self._apply_middleware(middleware)
        logger.info(f"Registered middleware: {middleware_cls.__name__}", icon=LogIcon.ADAPTER)
        return self

    def _apply_middleware(self, middleware: BaseMiddleware) -> None:
        """Apply middleware to endpoints."""
        endpoints = middleware.endpoints or self._get_all_routes()

        for endpoint in endpoints:
            if middleware.implements("before"):
                self._register_before(endpoint, middleware.before)
            if middleware.implements("after"):
                self._register_after(endpoint, middleware.after)

    def _get_all_routes(self) -> frozenset[str]:
        """Get all registered routes from the app."""
        routes = self._app.get_all_routes()
        return frozenset(route[1] for route in routes)

    def _register_before(self, endpoint: str, handler: Callable) -> None:
        """Register a before_request handler for an endpoint."""
        @self._app.before_request(endpoint)
        async def before_wrapper(request: Request) -> Request | Response:
            return handler(request)

    def _register_after(self, endpoint: str, handler: Callable) -> None:
        """Register an after_request handler for an endpoint."""
        @self._app.after_request(endpoint)
        def after_wrapper(response: Response) -> Response:
            return handler(response)
