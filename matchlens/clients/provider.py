"""
Async client for the collaborator endpoints.

Endpoints (JSON):
- GET  /api/match-data?sportKey=...&includeOdds=false -> {events: [...]}
- GET  /api/ai-picks?limit=50 -> {success, aiPicks, flaggedMatchIds}
- POST /api/analyze -> AnalyzeResponse
- POST /api/tts -> {success, audioBase64, contentType}
- POST /api/share -> {success, url}

No retries and no backoff: a failed call raises ProviderError with a generic
user-facing message, and the caller decides what to show. Every call takes
an optional AbortSignal.
"""

import asyncio
import logging
import time
from typing import Iterable, Optional

import httpx
from pydantic import ValidationError

from matchlens.clients.cancellation import AbortSignal, RequestAborted, run_abortable
from matchlens.config import get_settings
from matchlens.models import AIPicksResponse, AnalyzeResponse, MatchData, ShareResponse, TTSResponse
from matchlens.state import _incr
from matchlens.telemetry.metrics import record_provider_error, record_provider_request
from matchlens.utils.cache import SimpleCache

logger = logging.getLogger(__name__)

MATCHES_ERROR = "Could not load matches"
AI_PICKS_ERROR = "Could not load AI picks"
ANALYZE_ERROR = "Analysis failed. Please try again."
TTS_ERROR = "Could not generate audio"
SHARE_ERROR = "Could not create share link"


class ProviderError(Exception):
    """A collaborator call failed. str(error) is safe to show to users."""

    def __init__(self, message: str, *, endpoint: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code


class ProviderClient:
    """Async client for the match-data, ai-picks, analyze, tts and share endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ai_picks_ttl: Optional[float] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.PROVIDER_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.ai_picks_limit = settings.AI_PICKS_LIMIT
        self._transport = transport
        self._ai_picks_cache = SimpleCache(
            ttl=ai_picks_ttl if ai_picks_ttl is not None else settings.AI_PICKS_CACHE_TTL
        )

        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        endpoint: str,
        error_message: str,
        signal: Optional[AbortSignal] = None,
        **kwargs,
    ) -> dict:
        """One request, decoded to a JSON object. Raises ProviderError or RequestAborted."""
        client = await self._get_client()
        start_time = time.time()

        try:
            response = await run_abortable(client.request(method, path, **kwargs), signal)
        except RequestAborted:
            logger.info(f"Request to {endpoint} aborted")
            record_provider_error(endpoint, "aborted")
            raise
        except httpx.TimeoutException as e:
            logger.error(f"{endpoint} timeout after {int((time.time() - start_time) * 1000)}ms")
            record_provider_error(endpoint, "timeout")
            raise ProviderError(error_message, endpoint=endpoint) from e
        except httpx.HTTPError as e:
            logger.error(f"{endpoint} request error: {e}")
            record_provider_error(endpoint, "http_error")
            raise ProviderError(error_message, endpoint=endpoint) from e

        elapsed_ms = (time.time() - start_time) * 1000
        record_provider_request(endpoint, response.status_code, elapsed_ms)

        if response.status_code >= 400:
            logger.warning(f"{endpoint} returned {response.status_code}: {response.text[:200]}")
            record_provider_error(endpoint, "http_5xx" if response.status_code >= 500 else "http_4xx")
            raise ProviderError(error_message, endpoint=endpoint, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"{endpoint} returned non-JSON body")
            record_provider_error(endpoint, "decode")
            raise ProviderError(error_message, endpoint=endpoint, status_code=response.status_code) from e

        if not isinstance(data, dict):
            record_provider_error(endpoint, "decode")
            raise ProviderError(error_message, endpoint=endpoint, status_code=response.status_code)
        return data

    # -------------------------------------------------------------------------
    # Match listings
    # -------------------------------------------------------------------------

    async def fetch_matches(
        self,
        sport_key: str,
        signal: Optional[AbortSignal] = None,
        include_odds: bool = False,
    ) -> list[MatchData]:
        """
        All listed matches for one league.

        Events that fail validation are dropped (logged), the rest are kept.
        """
        data = await self._request(
            "GET",
            "/api/match-data",
            endpoint="match-data",
            error_message=MATCHES_ERROR,
            signal=signal,
            params={"sportKey": sport_key, "includeOdds": "true" if include_odds else "false"},
        )

        matches = []
        for raw in data.get("events") or []:
            try:
                matches.append(MatchData.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Dropping malformed event for {sport_key}: {e.error_count()} error(s)")
        return matches

    async def fetch_league_counts(
        self,
        league_keys: Iterable[str],
        signal: Optional[AbortSignal] = None,
    ) -> dict[str, int]:
        """
        Match counts for many leagues, fetched in parallel.

        A league whose fetch fails counts 0; the batch never fails as a whole.
        An abort still propagates.
        """

        async def _count(key: str) -> tuple[str, int]:
            try:
                return key, len(await self.fetch_matches(key, signal=signal))
            except ProviderError:
                _incr("league_count_failed")
                logger.warning(f"League count failed for {key}, using 0")
                return key, 0

        results = await asyncio.gather(*(_count(k) for k in league_keys))
        return dict(results)

    # -------------------------------------------------------------------------
    # AI picks
    # -------------------------------------------------------------------------

    async def fetch_ai_picks(
        self,
        limit: Optional[int] = None,
        signal: Optional[AbortSignal] = None,
    ) -> AIPicksResponse:
        """
        Server-side flagged matches, cached per limit.

        Failure is not fatal: an empty response is returned (and not cached),
        so callers fall back to the odds heuristic.
        """
        if limit is None:
            limit = self.ai_picks_limit

        hit, cached = self._ai_picks_cache.get(params=limit)
        if hit:
            _incr("ai_picks_cache_hit")
            return cached
        _incr("ai_picks_cache_miss")

        try:
            data = await self._request(
                "GET",
                "/api/ai-picks",
                endpoint="ai-picks",
                error_message=AI_PICKS_ERROR,
                signal=signal,
                params={"limit": limit},
            )
            picks = AIPicksResponse.model_validate(data)
        except (ProviderError, ValidationError) as e:
            _incr("ai_picks_fetch_failed")
            logger.warning(f"AI picks unavailable: {e}")
            return AIPicksResponse()

        if not picks.success:
            logger.info("AI picks endpoint reported success=false, treating as empty")
            return AIPicksResponse()

        self._ai_picks_cache.set(picks, params=limit)
        return picks

    def invalidate_ai_picks(self) -> None:
        self._ai_picks_cache.invalidate()

    # -------------------------------------------------------------------------
    # Analysis, audio, share
    # -------------------------------------------------------------------------

    async def analyze(self, payload: dict, signal: Optional[AbortSignal] = None) -> AnalyzeResponse:
        data = await self._request(
            "POST",
            "/api/analyze",
            endpoint="analyze",
            error_message=ANALYZE_ERROR,
            signal=signal,
            json=payload,
        )
        if data.get("success") is False:
            logger.warning(f"Analyze reported failure: {data.get('error')}")
            raise ProviderError(ANALYZE_ERROR, endpoint="analyze")
        try:
            return AnalyzeResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Analyze response failed validation: {e.error_count()} error(s)")
            raise ProviderError(ANALYZE_ERROR, endpoint="analyze") from e

    async def generate_audio(self, text: str, signal: Optional[AbortSignal] = None) -> TTSResponse:
        data = await self._request(
            "POST",
            "/api/tts",
            endpoint="tts",
            error_message=TTS_ERROR,
            signal=signal,
            json={"text": text},
        )
        tts = TTSResponse.model_validate(data)
        if not tts.success or not tts.audio_base64:
            raise ProviderError(TTS_ERROR, endpoint="tts")
        return tts

    async def create_share_link(self, payload: dict, signal: Optional[AbortSignal] = None) -> ShareResponse:
        data = await self._request(
            "POST",
            "/api/share",
            endpoint="share",
            error_message=SHARE_ERROR,
            signal=signal,
            json=payload,
        )
        share = ShareResponse.model_validate(data)
        if not share.success or not share.url:
            raise ProviderError(SHARE_ERROR, endpoint="share")
        return share
