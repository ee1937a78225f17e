"""
Cache-Aside Middleware - Educational Documentation
==================================================

WHAT IS CACHE-ASIDE?
--------------------
The caller checks the cache first and only populates it explicitly after a
miss. The store never loads data on its own. In this layer the "caller" is a
per-route middleware and the explicit population step is offered to the route
handler as ``commit()``:

    @router.get("/items")
    @cache_response({"duration": "1h"})
    async def list_items(cache: ResponseCacheDep):
        items = await load_items()
        return await cache.json(items).commit()

PER-REQUEST FLOW:
-----------------
    START
      │  read GlobalCacheConfig from the registry (fresh on every request)
      ▼
    CONFIG_CHECKED ── invalid / disabled / excluded path ──► pass through
      │  attach CacheContext to request.state (before any store I/O)
      ▼
    PATCHED
      │  GET <key> on a leased connection
      ▼
    LOOKUP_DONE ── value decoded ──► HIT: cached JSON, X-Cache-Status: HIT,
      │                               handler NOT called
      │ no value / undecodable / store failure
      ▼
    MISS: handler runs; response tagged X-Cache-Status: MISS; the handler may
          call commit() to SET + EXPIRE its body under the same key

WHY A TYPED RESPONSE INSTEAD OF PATCHING?
-----------------------------------------
``CacheContext.json()`` returns a ``CachedJSONResponse``: a normal Starlette
JSONResponse that also carries a PendingWrite and an async ``commit()``.
The capability is part of the return type, so editors and type checkers see
it, and nothing on the framework's response class is replaced at runtime.

FAILURE POLICY:
---------------
Caching is best-effort. Invalid configuration is logged at error level and the
request passes through; store failures (after one reconnect for a closed
connection) and undecodable cached values make the request a MISS. The client
always gets the handler's normal response.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import orjson
from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from response_cache.core.config.constants import (
    APP_STATE_CONNECTIONS,
    APP_STATE_REGISTRY,
    CONFIG_KEY_GLOBAL,
    REQUEST_STATE_CONTEXT,
    CacheStatus,
    Stage,
)
from response_cache.core.config.models import GlobalCacheConfig, RouteCacheConfig
from response_cache.core.config.registry import ConfigRegistry, get_config_registry
from response_cache.core.config.settings import get_settings
from response_cache.core.exceptions import CacheDeserializationError, CacheError
from response_cache.core.logging.logger import get_logger
from response_cache.infrastructure.store.connection_manager import ConnectionManager
from response_cache.infrastructure.store.session import StoreSession

logger = get_logger(__name__)


# ============================================================================
# CONFIGURATION AND SERIALIZATION HELPERS
# ============================================================================


def load_global_config(registry: ConfigRegistry) -> GlobalCacheConfig | None:
    """
    Read and validate the process-wide cache options.

    Returns:
        The validated config, or None when it is missing or malformed
        (logged at error level, never raised)
    """
    raw = registry.get(CONFIG_KEY_GLOBAL)
    if raw is None:
        logger.error("No global cache configuration registered", stage=Stage.CONFIG_CHECK, key=CONFIG_KEY_GLOBAL)
        return None
    if isinstance(raw, GlobalCacheConfig):
        return raw

    try:
        return GlobalCacheConfig.model_validate(raw)
    except ValidationError as e:
        logger.error(
            "Invalid global cache configuration",
            stage=Stage.CONFIG_CHECK,
            key=CONFIG_KEY_GLOBAL,
            errors=e.errors(include_url=False, include_context=False),
        )
        return None


def encode_body(content: Any) -> str:
    """Serialize a JSON-compatible body for storage."""
    return orjson.dumps(jsonable_encoder(content)).decode()


def decode_body(value: str) -> Any:
    """
    Deserialize a stored body.

    Raises:
        CacheDeserializationError: If the stored value is not valid JSON
    """
    try:
        return orjson.loads(value)
    except orjson.JSONDecodeError as e:
        raise CacheDeserializationError.from_exception(e, message="Cached value is not valid JSON") from e


# ============================================================================
# DEFERRED WRITE
# ============================================================================


@dataclass(frozen=True)
class PendingWrite:
    """
    A write prepared for a response but not yet performed.

    Attributes:
        key: Store key
        payload: Serialized body
        ttl_seconds: Expiry, from the route's duration
    """

    key: str
    payload: str
    ttl_seconds: int


class CachedJSONResponse(JSONResponse):
    """
    JSON response that can write its own body to the cache.

    ``commit()`` returns the response itself, so handlers can write
    ``return await cache.json(body).commit()``.
    """

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
        *,
        context: "CacheContext | None" = None,
    ):
        content = jsonable_encoder(content)
        super().__init__(content, status_code=status_code, headers=headers, media_type=media_type, background=background)
        self._context = context
        self.pending: PendingWrite | None = context.prepare_write(content) if context is not None else None

    async def commit(self) -> Response:
        """
        Write this response's body to the cache.

        Without an active cache context (caching disabled, excluded path or
        invalid configuration) this is a no-op returning the response.
        """
        if self._context is None:
            return self
        return await self._context.commit(self)


class CacheContext:
    """
    Per-request cache state, attached to ``request.state`` before lookup.

    Guarantees at most one successful write per request: the first committed
    response (or the HIT response) is remembered and returned by every later
    ``commit()``.
    """

    def __init__(
        self,
        key: str,
        route_config: RouteCacheConfig,
        global_config: GlobalCacheConfig,
        session: StoreSession,
        status_header: str,
    ):
        self.key = key
        self.route_config = route_config
        self.global_config = global_config
        self.session = session
        self.status_header = status_header
        self.status: CacheStatus | None = None
        self._commit_lock = asyncio.Lock()
        self._committed: Response | None = None

    @property
    def committed(self) -> bool:
        return self._committed is not None

    def trace(self, message: str, **kwargs) -> None:
        """Log a per-request trace line when debug mode is on."""
        if self.global_config.debug:
            logger.info(message, cache_key=self.key, **kwargs)

    def json(
        self,
        content: Any,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
    ) -> CachedJSONResponse:
        """Build the handler's JSON response with ``commit()`` attached."""
        return CachedJSONResponse(
            content,
            status_code=status_code,
            headers=headers,
            media_type=media_type,
            background=background,
            context=self,
        )

    def prepare_write(self, content: Any) -> PendingWrite:
        return PendingWrite(
            key=self.key,
            payload=encode_body(content),
            ttl_seconds=self.route_config.ttl_seconds,
        )

    def tag(self, response: Any, status: CacheStatus) -> None:
        """Record the cache status and stamp it on ``response`` when it is a Response."""
        self.status = status
        if isinstance(response, Response):
            response.headers[self.status_header] = status.value

    def mark_hit(self, response: Response) -> None:
        """Close the write path: a HIT must never be written back."""
        self._committed = response
        self.tag(response, CacheStatus.HIT)

    async def commit(self, response: CachedJSONResponse) -> Response:
        """
        Perform ``response``'s pending write.

        SET then EXPIRE under the request's key, then release the connection
        (closed only if it was exclusive). Failures are logged; the response
        is returned either way.
        """
        async with self._commit_lock:
            if self._committed is not None:
                self.trace("Commit skipped, already committed", stage=Stage.CACHE_COMMIT)
                return self._committed

            pending = response.pending
            self.trace(
                "Caching response",
                stage=Stage.CACHE_COMMIT,
                ttl_seconds=pending.ttl_seconds,
            )
            try:
                await self.session.write(pending.key, pending.payload, pending.ttl_seconds)
            except CacheError as e:
                logger.warning(
                    "Cache write failed, response not cached",
                    stage=Stage.CACHE_COMMIT,
                    cache_key=pending.key,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                self._committed = response
            finally:
                await self.session.close()

            self.tag(response, CacheStatus.MISS)
            return response


# ============================================================================
# MIDDLEWARE
# ============================================================================


class CacheAsideMiddleware:
    """
    Per-route cache-aside middleware.

    One instance is bound to one route (see ``cache_response``). It reads the
    global configuration on every request. The registry and the
    ConnectionManager passed to the constructor win; otherwise they come from
    ``request.app.state`` (``cache_registry`` and ``cache_connections``), and
    the registry finally falls back to the process-wide one.
    """

    def __init__(
        self,
        route_config: RouteCacheConfig,
        connections: ConnectionManager | None = None,
        registry: ConfigRegistry | None = None,
        status_header: str | None = None,
    ):
        self.route_config = route_config
        self._connections = connections
        self._registry = registry
        self.status_header = status_header or get_settings().cache.CACHE_STATUS_HEADER

    def _resolve_registry(self, request: Request) -> ConfigRegistry:
        if self._registry is not None:
            return self._registry
        return getattr(request.app.state, APP_STATE_REGISTRY, None) or get_config_registry()

    def _resolve_connections(self, request: Request) -> ConnectionManager | None:
        if self._connections is not None:
            return self._connections
        return getattr(request.app.state, APP_STATE_CONNECTIONS, None)

    def cache_key(self, request: Request) -> str:
        """Custom route key, else the full request URL."""
        return self.route_config.cache_key or str(request.url)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Any]]) -> Any:
        """
        Run the cache-aside flow around ``call_next``.

        Args:
            request: Incoming request
            call_next: Invokes the route handler; returns its result

        Returns:
            The cached JSONResponse on HIT, else the handler's result
        """
        # CONFIG_CHECKED
        global_config = load_global_config(self._resolve_registry(request))
        if global_config is None:
            return await call_next(request)

        if not global_config.enabled or not self.route_config.enabled:
            if global_config.debug:
                logger.info("Caching is disabled via config", stage=Stage.CONFIG_CHECK, path=request.url.path)
            return await call_next(request)

        if global_config.is_excluded(request.url.path):
            if global_config.debug:
                logger.info("Path excluded from cache", stage=Stage.CONFIG_CHECK, path=request.url.path)
            return await call_next(request)

        connections = self._resolve_connections(request)
        if connections is None:
            logger.error(
                "No ConnectionManager available, serving uncached",
                stage=Stage.CONFIG_CHECK,
                path=request.url.path,
            )
            return await call_next(request)

        # PATCHED
        context = CacheContext(
            key=self.cache_key(request),
            route_config=self.route_config,
            global_config=global_config,
            session=StoreSession(connections, global_config.store_url),
            status_header=self.status_header,
        )
        setattr(request.state, REQUEST_STATE_CONTEXT, context)
        context.trace("Cache context attached", stage=Stage.CONTEXT_ATTACH)

        try:
            # LOOKUP_DONE
            hit = await self._lookup(context)
            if hit is not None:
                return hit

            result = await call_next(request)
            context.tag(result, CacheStatus.MISS)
            return result
        finally:
            await context.session.close()

    async def _lookup(self, context: CacheContext) -> JSONResponse | None:
        context.trace("Checking cache", stage=Stage.CACHE_LOOKUP)
        try:
            cached = await context.session.lookup(context.key)
        except CacheError as e:
            logger.warning(
                "Cache lookup failed, serving uncached",
                stage=Stage.CACHE_LOOKUP,
                cache_key=context.key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if cached is None:
            context.trace("Cache MISS", stage=Stage.CACHE_MISS)
            return None

        try:
            body = decode_body(cached)
        except CacheDeserializationError as e:
            logger.warning(
                "Failed to parse cached value, treating as miss",
                stage=Stage.CACHE_LOOKUP,
                cache_key=context.key,
                error=e.details.get("original_message"),
            )
            return None

        context.trace("Cache HIT", stage=Stage.CACHE_HIT)
        response = JSONResponse(body)
        context.mark_hit(response)
        return response


def get_cache_context(request: Request) -> CacheContext | None:
    """The CacheContext attached to ``request``, if the middleware attached one."""
    return getattr(request.state, REQUEST_STATE_CONTEXT, None)


class ResponseCache:
    """
    Request-bound handle to the cache, resolved lazily.

    FastAPI resolves dependencies before the route wrapper runs the
    middleware, so the handle looks up the CacheContext on first use rather
    than at injection time. Without a context (caching disabled, excluded
    path, invalid configuration) ``json()`` builds a response whose
    ``commit()`` is a no-op.
    """

    def __init__(self, request: Request):
        self._request = request

    @property
    def context(self) -> CacheContext | None:
        return get_cache_context(self._request)

    @property
    def active(self) -> bool:
        return self.context is not None

    @property
    def status(self) -> CacheStatus | None:
        context = self.context
        return context.status if context is not None else None

    def json(
        self,
        content: Any,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
    ) -> CachedJSONResponse:
        return CachedJSONResponse(
            content,
            status_code=status_code,
            headers=headers,
            media_type=media_type,
            background=background,
            context=self.context,
        )
