"""HTTP client for the Tempo API, with a TTL cache in front of the network."""
from __future__ import annotations

import threading
from typing import Callable, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from tempo_tray.cache import TTLCache
from tempo_tray.config import DEFAULT_API_BASE_URL
from tempo_tray.domain import RefreshRequest, TempoDayResponse, TempoNowResponse
from tempo_tray.exceptions import DecodeError, TransientFetchError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="tempo_api_client")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode(body: bytes, model: Type[ModelT], *, source: str) -> ModelT:
    """Validate raw JSON bytes into `model`, raising DecodeError on failure."""
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        logger.error("Failed to decode payload", extra={"source": source, "model": model.__name__, "error": str(exc)})
        raise DecodeError(f"Invalid {model.__name__} payload from {source}: {exc}") from exc


class TempoApiClient:
    """Fetches Tempo API queries, serving fresh answers from a shared TTL cache.

    The cache is keyed by request URL. A body is written to the cache only
    after it decoded successfully, so cached bytes are always parseable by the
    next reader; a cached body that no longer decodes is reported as a
    DecodeError rather than refetched.

    Each calling thread gets its own `requests.Session` from `session_factory`.
    An explicitly passed `session` is used by every thread instead.
    """

    def __init__(
        self,
        cache: TTLCache,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        cache_ttl: float = 1800.0,
        session: Optional[requests.Session] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._shared_session = session
        self._session_factory = session_factory
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
            logger.debug("Opened HTTP session", extra={"thread": threading.current_thread().name})
        return session

    def url_for(self, request: RefreshRequest) -> str:
        """Absolute URL of a logical query; also its cache identity."""
        return f"{self.base_url}/{request.path}"

    def fetch(self, request: RefreshRequest, *, use_cache: bool = True) -> BaseModel:
        """Run one logical query and return its decoded response."""
        return self.fetch_model(self.url_for(request), request.response_model, use_cache=use_cache)

    def fetch_day(self, request: RefreshRequest, *, use_cache: bool = True) -> TempoDayResponse:
        """Fetch today's or tomorrow's day record."""
        if request is RefreshRequest.NOW:
            raise ValueError("fetch_day expects TODAY or TOMORROW")
        return self.fetch_model(self.url_for(request), TempoDayResponse, use_cache=use_cache)

    def fetch_now(self, *, use_cache: bool = True) -> TempoNowResponse:
        """Fetch the tariff applicable right now."""
        return self.fetch_model(self.url_for(RefreshRequest.NOW), TempoNowResponse, use_cache=use_cache)

    def fetch_model(self, url: str, model: Type[ModelT], *, use_cache: bool = True) -> ModelT:
        """GET `url` and decode it into `model`, going through the cache."""
        if use_cache:
            body, hit = self.cache.get(url)
            if hit:
                logger.debug("Cache hit", extra={"url": url})
                return _decode(body, model, source="cache")

        logger.debug("HTTP request", extra={"url": url})
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.error("HTTP timeout", extra={"url": url, "error": str(exc)})
            raise TransientFetchError(f"Timeout fetching {url}") from exc
        except requests.RequestException as exc:
            logger.error("HTTP error", extra={"url": url, "error": str(exc)})
            raise TransientFetchError(f"Error fetching {url}: {exc}") from exc

        if resp.status_code != 200:
            logger.error("Unexpected HTTP status", extra={"url": url, "status": resp.status_code})
            raise TransientFetchError(f"Unexpected status {resp.status_code} for {url}", status_code=resp.status_code)

        body = resp.content
        result = _decode(body, model, source=url)
        self.cache.put(url, body, self.cache_ttl)
        return result

    def close(self) -> None:
        """Release every HTTP session opened by this client."""
        if self._shared_session is not None:
            self._shared_session.close()
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
