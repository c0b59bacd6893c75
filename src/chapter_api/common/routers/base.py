"""
Custom APIRouter that handles both trailing and non-trailing slash endpoints.

Every route is registered twice, with and without a trailing slash, so clients
never receive a 307 redirect for the "other" spelling.
"""
from typing import Any, Callable
from fastapi import APIRouter as FastAPIRouter
from fastapi.types import DecoratedCallable
from loguru import logger


class ChapterAPIRouter(FastAPIRouter):
    """
    APIRouter that registers both trailing-slash variants of every path.

    Example:
        ``@router.get("/items")`` also answers ``/items/``; only the declared
        spelling appears in the OpenAPI schema.
    """

    def api_route(
        self,
        path: str,
        *,
        include_in_schema: bool = True,
        **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        # Root path has no alternate
        if path == "/":
            return super().api_route(path, include_in_schema=include_in_schema, **kwargs)

        alternate_path = path[:-1] if path.endswith("/") else path + "/"

        add_main_path = super().api_route(path, include_in_schema=include_in_schema, **kwargs)
        add_alternate_path = super().api_route(alternate_path, include_in_schema=False, **kwargs)

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            add_alternate_path(func)
            logger.debug(
                f"Registered {kwargs.get('methods', ['GET'])} {self.prefix}{path} "
                f"(+ {self.prefix}{alternate_path})"
            )
            return add_main_path(func)

        return decorator
