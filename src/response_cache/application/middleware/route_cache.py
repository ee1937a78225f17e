"""
Route Cache Decorator

Binds a CacheAsideMiddleware to a single FastAPI endpoint:

    @router.get("/items")
    @cache_response({"duration": "5m"})
    async def list_items(cache: ResponseCacheDep):
        return await cache.json(await load_items()).commit()

The route options are merged over the optional registry key
``response_cache.route`` and validated once, when the decorator is applied;
an invalid or missing ``duration`` raises ConfigurationError at import time
rather than on the first request.

FastAPI builds its dependency graph from the endpoint signature, so the
wrapper republishes that signature, with string annotations already
evaluated, plus a ``Request`` and a ``Response`` parameter when the endpoint
does not declare them itself.
"""

import inspect
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any

from fastapi import Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from response_cache.core.config.constants import CONFIG_KEY_ROUTE
from response_cache.core.config.models import RouteCacheConfig, merge_route_config
from response_cache.core.config.registry import ConfigRegistry, get_config_registry
from response_cache.core.exceptions import ConfigurationError
from response_cache.infrastructure.store.connection_manager import ConnectionManager

from .cache_aside import CacheAsideMiddleware, get_cache_context

_INJECTED_REQUEST = "__cache_request"
_INJECTED_RESPONSE = "__cache_response"


def resolve_route_config(
    config: RouteCacheConfig | Mapping[str, Any] | None,
    registry: ConfigRegistry | None = None,
) -> RouteCacheConfig:
    """
    Merge ``config`` over the registry's route defaults and validate it.

    Raises:
        ConfigurationError: If the merged options are invalid
    """
    registry = registry or get_config_registry()
    defaults = registry.get(CONFIG_KEY_ROUTE)
    if isinstance(defaults, RouteCacheConfig):
        defaults = defaults.model_dump(exclude_unset=True)

    merged = merge_route_config(defaults, dict(config) if isinstance(config, Mapping) else config)
    try:
        return RouteCacheConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid route cache configuration",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def _find_param(parameters: list[inspect.Parameter], annotation: type) -> inspect.Parameter | None:
    for param in parameters:
        if inspect.isclass(param.annotation) and issubclass(param.annotation, annotation):
            return param
    return None


def _augment_signature(
    signature: inspect.Signature, request_param: inspect.Parameter | None, response_param: inspect.Parameter | None
) -> inspect.Signature:
    parameters = list(signature.parameters.values())
    extra = []
    if request_param is None:
        extra.append(inspect.Parameter(_INJECTED_REQUEST, inspect.Parameter.KEYWORD_ONLY, annotation=Request))
    if response_param is None:
        extra.append(inspect.Parameter(_INJECTED_RESPONSE, inspect.Parameter.KEYWORD_ONLY, annotation=Response))
    if not extra:
        return signature

    # Keyword-only parameters must precede **kwargs
    if parameters and parameters[-1].kind is inspect.Parameter.VAR_KEYWORD:
        parameters = parameters[:-1] + extra + parameters[-1:]
    else:
        parameters = parameters + extra
    return signature.replace(parameters=parameters)


def cache_response(
    config: RouteCacheConfig | Mapping[str, Any] | None = None,
    *,
    connections: ConnectionManager | None = None,
    registry: ConfigRegistry | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Cache an endpoint's JSON responses.

    Args:
        config: Route options (``duration`` required, ``cache_key``,
            ``enabled``); snake_case or camelCase keys
        connections: ConnectionManager to use; defaults to
            ``request.app.state.cache_connections``
        registry: Configuration registry; defaults to the global one

    Raises:
        ConfigurationError: If the route options are invalid
    """
    route_config = resolve_route_config(config, registry)

    def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
        middleware = CacheAsideMiddleware(route_config, connections=connections, registry=registry)
        # String annotations (PEP 563) must resolve against the endpoint module
        signature = inspect.signature(endpoint, eval_str=True)
        parameters = list(signature.parameters.values())
        request_param = _find_param(parameters, Request)
        response_param = _find_param(parameters, Response)
        is_coroutine = inspect.iscoroutinefunction(endpoint)

        @wraps(endpoint)
        async def wrapper(*args, **kwargs):
            if request_param is None:
                request: Request = kwargs.pop(_INJECTED_REQUEST)
            else:
                request = kwargs[request_param.name]
            if response_param is None:
                response: Response = kwargs.pop(_INJECTED_RESPONSE)
            else:
                response = kwargs[response_param.name]

            async def call_endpoint(_: Request) -> Any:
                if is_coroutine:
                    return await endpoint(*args, **kwargs)
                return await run_in_threadpool(endpoint, *args, **kwargs)

            result = await middleware.dispatch(request, call_endpoint)

            # Plain return values are serialized by FastAPI; the status goes
            # on the response FastAPI merges headers from.
            context = get_cache_context(request)
            if context is not None and context.status is not None and not isinstance(result, Response):
                response.headers[middleware.status_header] = context.status.value
            return result

        wrapper.__signature__ = _augment_signature(signature, request_param, response_param)
        # FastAPI must inspect the async wrapper, not a possibly sync endpoint
        del wrapper.__wrapped__
        wrapper.cache_middleware = middleware
        return wrapper

    return decorator
