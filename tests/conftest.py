"""Shared test fixtures for Voice Cart."""

import json
import logging

import httpx
import pytest
import structlog

from voice_cart.cart_store import CartStore
from voice_cart.config import ConfigManager, SuggestionsConfig
from voice_cart.logging_config import LOGGER_NAME
from voice_cart.session import ShoppingSession
from voice_cart.suggestions import SuggestionClient, SuggestionIntegrator

SAMPLE_REPLY = "Suggestions:\n- Bread\n- Butter\n- Jam\nSeasonal:\n- Mangoes\n- Lychees\n- Okra"


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(logging.NOTSET)
    stdlib_logger.propagate = True


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    """Keep a developer's real credential out of the tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("VOICE_CART_API_KEY", raising=False)


@pytest.fixture
def cart():
    """Create an empty CartStore."""
    return CartStore()


@pytest.fixture
def config_file(tmp_path):
    """Config file without a credential."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("""
[cart]
frequent_limit = 3
""")
    return config_path


@pytest.fixture
def config(config_file):
    """ConfigManager without a credential."""
    return ConfigManager(config_path=config_file, environ={})


@pytest.fixture
def suggestions_config():
    """Suggestion service config with a test credential."""
    return SuggestionsConfig(api_key="test-key", timeout_seconds=2.0)


def gemini_payload(text: str) -> dict:
    """Response body shaped like generateContent output."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def make_client(config: SuggestionsConfig, handler) -> SuggestionClient:
    """SuggestionClient backed by an httpx mock transport."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SuggestionClient(config, http_client=http_client)


@pytest.fixture
def recorded_requests():
    """Requests seen by the mock suggestion service."""
    return []


@pytest.fixture
def reply_handler(recorded_requests):
    """Mock handler answering every request with SAMPLE_REPLY."""

    def handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        return httpx.Response(200, json=gemini_payload(SAMPLE_REPLY))

    return handler


@pytest.fixture
def integrator(suggestions_config, reply_handler):
    """SuggestionIntegrator talking to the mock service."""
    return SuggestionIntegrator(
        suggestions_config, client=make_client(suggestions_config, reply_handler)
    )


@pytest.fixture
def session(config, integrator):
    """ShoppingSession wired to the mock suggestion service."""
    return ShoppingSession(config=config, integrator=integrator)


def request_prompt(request: httpx.Request) -> str:
    """Prompt text sent in a recorded request."""
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]
