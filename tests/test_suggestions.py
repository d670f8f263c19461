"""Tests for smart suggestions."""

import asyncio
import json

import httpx
import pytest

from conftest import SAMPLE_REPLY, gemini_payload, make_client, request_prompt
from voice_cart.config import SuggestionsConfig
from voice_cart.models import CartChange
from voice_cart.suggestions import (
    SuggestionFormatError,
    SuggestionIntegrator,
    SuggestionTransportError,
    build_prompt,
    extract_reply_text,
    parse_suggestion_reply,
    split_fragments,
)


class TestParseSuggestionReply:
    """Tests for reply parsing."""

    def test_both_sections(self):
        """Lists are split and seasonal is capped at three."""
        text = "Suggestions:\n- A\n- B\nSeasonal:\n- C\n- D\n- E\n- F"
        assert parse_suggestion_reply(text) == (["A", "B"], ["C", "D", "E"])

    def test_missing_seasonal_label(self):
        """A missing label yields an empty list."""
        assert parse_suggestion_reply("Suggestions:\n- X") == (["X"], [])

    def test_missing_suggestions_label(self):
        """Seasonal still parses without suggestions."""
        assert parse_suggestion_reply("Seasonal: • Mango • Guava") == ([], ["Mango", "Guava"])

    def test_no_labels(self):
        """Unlabeled text gives two empty lists."""
        assert parse_suggestion_reply("I can't help with that.") == ([], [])

    def test_empty_text(self):
        """Empty reply gives two empty lists."""
        assert parse_suggestion_reply("") == ([], [])

    def test_labels_case_insensitive(self):
        """Label matching ignores case."""
        assert parse_suggestion_reply("SUGGESTIONS:\n- A\nseasonal:\n- B") == (["A"], ["B"])

    def test_markdown_decoration(self):
        """Bold labels and numbered entries are tolerated."""
        text = "**Suggestions:**\n1. Bread\n2. Butter\n\n**Seasonal:**\n* Mangoes\n* Lychees"
        assert parse_suggestion_reply(text) == (["Bread", "Butter"], ["Mangoes", "Lychees"])

    def test_suggestions_capped(self):
        """Suggestions are capped at three."""
        text = "Suggestions:\n- A\n- B\n- C\n- D"
        assert parse_suggestion_reply(text)[0] == ["A", "B", "C"]

    def test_custom_limit(self):
        """Limit is configurable."""
        assert parse_suggestion_reply(SAMPLE_REPLY, limit=1) == (["Bread"], ["Mangoes"])

    def test_sections_in_reverse_order(self):
        """Seasonal first does not leak the other label into its list."""
        text = "Seasonal:\n- A\n- B\nSuggestions:\n- C"
        assert parse_suggestion_reply(text) == (["C"], ["A", "B"])

    def test_decimal_quantities_kept(self):
        """Leading decimals are not mistaken for list numbering."""
        text = "Suggestions:\n1. Bread\n- 1.5 kg rice\n2) 2.5L milk"
        assert parse_suggestion_reply(text)[0] == ["Bread", "1.5 kg rice", "2.5L milk"]

    def test_split_fragments(self):
        """Bullets, dashes and line breaks all separate entries."""
        assert split_fragments(" Eggs • Milk\n- Rice \n\n") == ["Eggs", "Milk", "Rice"]


class TestPromptAndPayload:
    """Tests for the request and response contract."""

    def test_prompt_lists_items_and_labels(self):
        """Prompt embeds the names and asks for both sections."""
        prompt = build_prompt(["milk", "bread"])
        assert "milk, bread" in prompt
        assert "Suggestions:" in prompt
        assert "Seasonal:" in prompt

    def test_extract_reply_text(self):
        """Text is read from the first candidate part."""
        assert extract_reply_text(gemini_payload("hello")) == "hello"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"candidates": []},
            {"candidates": [{"content": {}}]},
            {"candidates": [{"content": {"parts": [{}]}}]},
            {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
            None,
            [],
        ],
    )
    def test_missing_content_path(self, payload):
        """Missing path is a format error, not a crash."""
        with pytest.raises(SuggestionFormatError):
            extract_reply_text(payload)


class TestSuggestionClient:
    """Tests for the HTTP client."""

    def test_request_shape(self, suggestions_config, reply_handler, recorded_requests):
        """POSTs the prompt with the key as a query parameter."""
        client = make_client(suggestions_config, reply_handler)

        text = asyncio.run(client.generate("hello"))

        assert text == SAMPLE_REPLY
        request = recorded_requests[0]
        assert request.method == "POST"
        assert request.url.path.endswith("/gemini-1.5-flash-latest:generateContent")
        assert request.url.params["key"] == "test-key"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"contents": [{"parts": [{"text": "hello"}]}]}

    def test_non_success_status(self, suggestions_config):
        """Non-2xx responses are transport errors."""
        client = make_client(suggestions_config, lambda request: httpx.Response(503))

        with pytest.raises(SuggestionTransportError) as exc_info:
            asyncio.run(client.generate("hello"))
        assert exc_info.value.status_code == 503

    def test_timeout(self, suggestions_config):
        """Timeouts are transport errors."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = make_client(suggestions_config, handler)
        with pytest.raises(SuggestionTransportError, match="timed out"):
            asyncio.run(client.generate("hello"))

    def test_connection_error(self, suggestions_config):
        """Network failures are transport errors."""

        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        client = make_client(suggestions_config, handler)
        with pytest.raises(SuggestionTransportError):
            asyncio.run(client.generate("hello"))

    def test_non_json_body(self, suggestions_config):
        """A body that is not JSON is a format error."""
        client = make_client(suggestions_config, lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(SuggestionFormatError):
            asyncio.run(client.generate("hello"))


class TestSuggestionIntegrator:
    """Tests for refresh, failure handling and staleness."""

    def test_refresh_publishes_state(self, integrator, recorded_requests):
        """A successful refresh replaces both lists."""
        published = []
        integrator.subscribe(published.append)

        applied = asyncio.run(integrator.refresh(["milk", "bread"], generation=1))

        assert applied is True
        assert integrator.suggestions == ["Bread", "Butter", "Jam"]
        assert integrator.seasonal == ["Mangoes", "Lychees", "Okra"]
        assert integrator.state.generation == 1
        assert integrator.state.updated_at is not None
        assert published == [integrator.state]
        assert "milk, bread" in request_prompt(recorded_requests[0])

    def test_empty_cart_skipped(self, integrator, recorded_requests):
        """No request is made for an empty cart."""
        assert asyncio.run(integrator.refresh([], generation=1)) is False
        assert recorded_requests == []
        assert integrator.suggestions == []

    def test_missing_credential_skipped(self, reply_handler, recorded_requests):
        """Without a key the integrator silently does nothing."""
        config = SuggestionsConfig(api_key=None)
        integrator = SuggestionIntegrator(config, client=make_client(config, reply_handler))

        assert integrator.enabled is False
        assert asyncio.run(integrator.refresh(["milk"])) is False
        assert recorded_requests == []
        assert integrator.seasonal == []

    def test_transport_failure_keeps_previous_state(self, suggestions_config):
        """A failed refresh leaves earlier suggestions in place."""
        responses = iter(
            [httpx.Response(200, json=gemini_payload(SAMPLE_REPLY)), httpx.Response(500)]
        )
        integrator = SuggestionIntegrator(
            suggestions_config,
            client=make_client(suggestions_config, lambda request: next(responses)),
        )

        async def scenario():
            await integrator.refresh(["milk"], generation=1)
            integrator.latest_generation = 2
            return await integrator.refresh(["milk", "eggs"], generation=2)

        assert asyncio.run(scenario()) is False
        assert integrator.suggestions == ["Bread", "Butter", "Jam"]
        assert integrator.state.generation == 1

    def test_format_failure_keeps_state(self, suggestions_config):
        """A reply without the content path changes nothing."""
        integrator = SuggestionIntegrator(
            suggestions_config,
            client=make_client(
                suggestions_config, lambda request: httpx.Response(200, json={"error": "x"})
            ),
        )
        assert asyncio.run(integrator.refresh(["milk"], generation=1)) is False
        assert integrator.suggestions == []
        assert integrator.loading is False

    def test_unlabeled_reply_publishes_empty_lists(self, suggestions_config):
        """A reply without labels degrades to empty lists."""
        integrator = SuggestionIntegrator(
            suggestions_config,
            client=make_client(
                suggestions_config,
                lambda request: httpx.Response(200, json=gemini_payload("No idea, sorry.")),
            ),
        )
        assert asyncio.run(integrator.refresh(["milk"], generation=1)) is True
        assert integrator.state.suggestions == []
        assert integrator.state.seasonal == []

    def test_stale_response_discarded(self, suggestions_config):
        """An older generation's reply never overwrites a newer one."""
        first_release = asyncio.Event()

        async def handler(request):
            prompt = request_prompt(request)
            if "The cart contains: milk." in prompt:
                await first_release.wait()
                return httpx.Response(200, json=gemini_payload("Suggestions:\n- Old"))
            return httpx.Response(200, json=gemini_payload("Suggestions:\n- New"))

        integrator = SuggestionIntegrator(
            suggestions_config, client=make_client(suggestions_config, handler)
        )

        async def scenario():
            integrator.on_cart_change(CartChange(generation=1, item_names=["milk"]))
            await asyncio.sleep(0)
            integrator.on_cart_change(CartChange(generation=2, item_names=["milk", "eggs"]))
            await asyncio.sleep(0)
            # let the newer request resolve first, then release the older one
            while integrator.state.generation != 2:
                await asyncio.sleep(0)
            first_release.set()
            await integrator.wait_pending()

        asyncio.run(scenario())

        assert integrator.suggestions == ["New"]
        assert integrator.state.generation == 2

    def test_late_reply_for_superseded_cart_discarded(self, integrator):
        """A reply arriving after the cart changed again is dropped."""

        async def scenario():
            integrator.latest_generation = 5
            return await integrator.refresh(["milk"], generation=4)

        assert asyncio.run(scenario()) is False
        assert integrator.suggestions == []

    def test_cart_change_without_loop_is_recorded(self, integrator, recorded_requests):
        """Outside an event loop a change only moves the generation."""
        integrator.on_cart_change(CartChange(generation=3, item_names=["milk"]))
        assert integrator.latest_generation == 3
        assert integrator.pending == set()
        assert recorded_requests == []

    def test_cart_change_schedules_refresh(self, integrator, recorded_requests):
        """Inside an event loop a change triggers a refresh."""

        async def scenario():
            integrator.on_cart_change(CartChange(generation=1, item_names=["milk"]))
            assert len(integrator.pending) == 1
            await integrator.wait_pending()

        asyncio.run(scenario())
        assert len(recorded_requests) == 1
        assert integrator.state.generation == 1

    def test_empty_cart_change_does_not_schedule(self, integrator):
        """An emptied cart keeps the last suggestions and makes no call."""

        async def scenario():
            integrator.on_cart_change(CartChange(generation=1, item_names=[]))
            assert integrator.pending == set()

        asyncio.run(scenario())
        assert integrator.latest_generation == 1
