"""
Tests for the collaborator client.

Uses httpx.MockTransport, no network.
"""

import asyncio
import base64

import httpx
import pytest

from matchlens.clients.cancellation import AbortSignal, RequestAborted
from matchlens.clients.provider import ProviderClient, ProviderError
from matchlens.state import _telemetry, reset_telemetry

EVENTS = {
    "events": [
        {
            "matchId": "m1",
            "sportKey": "soccer_epl",
            "homeTeam": "Arsenal",
            "awayTeam": "Chelsea",
            "commenceTime": "2026-03-10T15:00:00Z",
            "odds": {"home": 2.1, "draw": 3.4, "away": 3.5},
            "bookmakers": [{"name": "Pinnacle", "home": 2.1, "draw": 3.4, "away": 3.5}],
        },
        {"homeTeam": "No", "awayTeam": "Id"},
    ]
}

PICKS = {
    "success": True,
    "aiPicks": [{"matchId": "m1", "aiReason": "Sharp money", "valueBetEdge": 4.2, "conviction": 70}],
    "flaggedMatchIds": ["m1"],
}


def _client(handler, **kwargs) -> ProviderClient:
    return ProviderClient(base_url="http://provider.test", transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture(autouse=True)
def _clean_telemetry():
    reset_telemetry()
    yield
    reset_telemetry()


class TestFetchMatches:
    """Test match listing."""

    @pytest.mark.asyncio
    async def test_parses_events_and_drops_invalid(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=EVENTS)

        client = _client(handler)
        matches = await client.fetch_matches("soccer_epl")
        await client.close()

        assert [m.match_id for m in matches] == ["m1"]
        assert matches[0].home_team == "Arsenal"
        assert matches[0].bookmakers[0].name == "Pinnacle"
        assert seen[0].url.path == "/api/match-data"
        assert seen[0].url.params["sportKey"] == "soccer_epl"
        assert seen[0].url.params["includeOdds"] == "false"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = _client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(ProviderError) as exc_info:
            await client.fetch_matches("soccer_epl")

        assert str(exc_info.value) == "Could not load matches"
        assert exc_info.value.status_code == 500
        assert exc_info.value.endpoint == "match-data"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError, match="Could not load matches"):
            await _client(handler).fetch_matches("soccer_epl")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError):
            await client.fetch_matches("soccer_epl")

    @pytest.mark.asyncio
    async def test_missing_events_is_empty(self):
        client = _client(lambda request: httpx.Response(200, json={"events": None}))
        assert await client.fetch_matches("soccer_epl") == []


class TestAbort:
    """Test cancellation through AbortSignal."""

    @pytest.mark.asyncio
    async def test_abort_in_flight(self):
        async def handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=EVENTS)

        client = _client(handler)
        signal = AbortSignal()
        task = asyncio.create_task(client.fetch_matches("soccer_epl", signal=signal))
        await asyncio.sleep(0.01)
        signal.abort("view closed")

        with pytest.raises(RequestAborted) as exc_info:
            await task
        assert exc_info.value.reason == "view closed"

    @pytest.mark.asyncio
    async def test_already_aborted(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=EVENTS)

        signal = AbortSignal()
        signal.abort()
        with pytest.raises(RequestAborted):
            await _client(handler).fetch_matches("soccer_epl", signal=signal)
        assert calls == []

    @pytest.mark.asyncio
    async def test_first_abort_reason_wins(self):
        signal = AbortSignal()
        signal.abort("superseded")
        signal.abort("cancelled")
        assert signal.reason == "superseded"


class TestLeagueCounts:
    """Test parallel per-league counts."""

    @pytest.mark.asyncio
    async def test_partial_failure_counts_zero(self):
        def handler(request):
            if request.url.params["sportKey"] == "basketball_nba":
                return httpx.Response(503)
            return httpx.Response(200, json=EVENTS)

        counts = await _client(handler).fetch_league_counts(["soccer_epl", "basketball_nba", "icehockey_nhl"])

        assert counts == {"soccer_epl": 1, "basketball_nba": 0, "icehockey_nhl": 1}
        assert _telemetry["league_count_failed"] == 1


class TestAIPicks:
    """Test caching and soft failure."""

    @pytest.mark.asyncio
    async def test_cached_per_limit(self):
        calls = []

        def handler(request):
            calls.append(request.url.params["limit"])
            return httpx.Response(200, json=PICKS)

        client = _client(handler)
        first = await client.fetch_ai_picks(limit=50)
        second = await client.fetch_ai_picks(limit=50)
        await client.fetch_ai_picks(limit=10)

        assert first is second
        assert first.flagged_match_ids == ["m1"]
        assert first.ai_picks[0].rank_score == pytest.approx(11.2)
        assert calls == ["50", "10"]
        assert _telemetry["ai_picks_cache_hit"] == 1
        assert _telemetry["ai_picks_cache_miss"] == 2

    @pytest.mark.asyncio
    async def test_zero_limit_is_sent_as_given(self):
        calls = []

        def handler(request):
            calls.append(request.url.params["limit"])
            return httpx.Response(200, json=PICKS)

        client = _client(handler)
        await client.fetch_ai_picks(limit=0)
        await client.fetch_ai_picks()

        assert calls == ["0", str(client.ai_picks_limit)]
        assert _telemetry["ai_picks_cache_miss"] == 2

    @pytest.mark.asyncio
    async def test_failure_returns_empty_and_is_not_cached(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        client = _client(handler)
        picks = await client.fetch_ai_picks()
        await client.fetch_ai_picks()

        assert picks.has_flagged is False
        assert picks.ai_picks == []
        assert len(calls) == 2
        assert _telemetry["ai_picks_fetch_failed"] == 2

    @pytest.mark.asyncio
    async def test_success_false_is_empty(self):
        client = _client(lambda request: httpx.Response(200, json={"success": False, "flaggedMatchIds": ["m1"]}))
        picks = await client.fetch_ai_picks()
        assert picks.flagged_match_ids == []

    @pytest.mark.asyncio
    async def test_invalidate(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=PICKS)

        client = _client(handler)
        await client.fetch_ai_picks()
        client.invalidate_ai_picks()
        await client.fetch_ai_picks()
        assert len(calls) == 2


class TestAnalysisEndpoints:
    """Test analyze, tts and share calls."""

    @pytest.mark.asyncio
    async def test_analyze(self):
        def handler(request):
            assert request.method == "POST"
            assert request.url.path == "/api/analyze"
            return httpx.Response(200, json={
                "success": True,
                "matchInfo": {"homeTeam": "Arsenal", "awayTeam": "Chelsea", "dataQuality": "HIGH"},
                "probabilities": {"homeWin": 52, "draw": 25, "awayWin": 23},
            })

        result = await _client(handler).analyze({"matchId": "m1"})
        assert result.match_info.home_team == "Arsenal"
        assert result.probabilities.home_win == 52

    @pytest.mark.asyncio
    async def test_analyze_reported_failure(self):
        client = _client(lambda request: httpx.Response(200, json={"success": False, "error": "quota"}))
        with pytest.raises(ProviderError, match="Analysis failed"):
            await client.analyze({"matchId": "m1"})

    @pytest.mark.asyncio
    async def test_generate_audio(self):
        audio = base64.b64encode(b"ID3fake").decode()

        def handler(request):
            assert request.url.path == "/api/tts"
            return httpx.Response(200, json={"success": True, "audioBase64": audio, "contentType": "audio/mpeg"})

        tts = await _client(handler).generate_audio("Hello")
        assert tts.audio_bytes() == b"ID3fake"

    @pytest.mark.asyncio
    async def test_generate_audio_failure(self):
        client = _client(lambda request: httpx.Response(200, json={"success": False}))
        with pytest.raises(ProviderError, match="Could not generate audio"):
            await client.generate_audio("Hello")

    @pytest.mark.asyncio
    async def test_share_link(self):
        client = _client(lambda request: httpx.Response(200, json={"success": True, "url": "https://s.test/abc"}))
        share = await client.create_share_link({"homeTeam": "A", "awayTeam": "B"})
        assert share.url == "https://s.test/abc"

    @pytest.mark.asyncio
    async def test_share_link_without_url(self):
        client = _client(lambda request: httpx.Response(200, json={"success": True}))
        with pytest.raises(ProviderError, match="Could not create share link"):
            await client.create_share_link({"homeTeam": "A", "awayTeam": "B"})
