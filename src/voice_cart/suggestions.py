"""
Smart suggestions from a generative text service.

The cart's item names are sent to a Gemini-style ``generateContent``
endpoint, which is asked to answer with two labeled sections:

    Suggestions:
    - ...
    Seasonal:
    - ...

The reply is free text, so parsing is forgiving: a missing label yields an
empty list, list markers and blank lines are dropped, and each list is capped
at three entries. Network and format failures are logged and leave the
previously published suggestions untouched.

Refreshes run as asyncio tasks and may overlap. Each one carries the cart
generation that triggered it; a reply for an older generation than the
latest known cart change is discarded on arrival.
"""
import asyncio
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

import httpx
import structlog

from .config import SuggestionsConfig
from .models import CartChange, SuggestionState

logger = structlog.get_logger(__name__)

SUGGESTIONS_LABEL = "Suggestions:"
SEASONAL_LABEL = "Seasonal:"
MAX_ITEMS = 3

_FRAGMENT_SPLIT = re.compile(r"[\n•-]")
_LIST_NUMBERING = re.compile(r"^\d+[.)](?=\s|$)\s*")
_DECORATION = " \t\r*#_`"

StateListener = Callable[[SuggestionState], None]


class SuggestionError(Exception):
    """Base class for suggestion service failures."""


class SuggestionTransportError(SuggestionError):
    """Raised on network errors, timeouts and non-success responses."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SuggestionFormatError(SuggestionError):
    """Raised when a reply does not contain generated text where expected."""


def build_prompt(item_names: Iterable[str]) -> str:
    """Build the request prompt for the current cart contents."""
    names = ", ".join(item_names)
    return (
        f"The cart contains: {names}.\n"
        "Suggest 3 useful shopping recommendations and list 3 seasonal "
        "fruits/vegetables right now.\n"
        "Return the response as two lists:\n"
        f"{SUGGESTIONS_LABEL} ...\n"
        f"{SEASONAL_LABEL} ..."
    )


def _section(text: str, label: str, end_label: str | None = None) -> str | None:
    """Text between a label and the next end label (or the end of text)."""
    lowered = text.lower()
    start = lowered.find(label.lower())
    if start < 0:
        return None
    start += len(label)

    end = len(text)
    if end_label:
        found = lowered.find(end_label.lower(), start)
        if found >= 0:
            end = found
    return text[start:end]


def split_fragments(section: str) -> list[str]:
    """Split a section on line breaks and bullet markers into clean entries."""
    fragments = []
    for raw in _FRAGMENT_SPLIT.split(section):
        fragment = _LIST_NUMBERING.sub("", raw.strip(_DECORATION)).strip(_DECORATION)
        if fragment:
            fragments.append(fragment)
    return fragments


def parse_suggestion_reply(text: str, limit: int = MAX_ITEMS) -> tuple[list[str], list[str]]:
    """Parse a labeled reply into suggestion and seasonal lists.

    Args:
        text: Generated reply text
        limit: Maximum entries per list

    Returns:
        Tuple of (suggestions, seasonal); a list is empty when its label
        is missing. Either section may come first.
    """
    if not text:
        return [], []

    suggestions = _section(text, SUGGESTIONS_LABEL, SEASONAL_LABEL)
    seasonal = _section(text, SEASONAL_LABEL, SUGGESTIONS_LABEL)

    return (
        split_fragments(suggestions)[:limit] if suggestions is not None else [],
        split_fragments(seasonal)[:limit] if seasonal is not None else [],
    )


def extract_reply_text(payload: Any) -> str:
    """Read ``candidates[0].content.parts[0].text`` from a response body.

    Raises:
        SuggestionFormatError: If the path is missing or not text
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise SuggestionFormatError(f"Reply has no generated text: {e!r}") from e
    if not isinstance(text, str):
        raise SuggestionFormatError("Reply text is not a string")
    return text


class SuggestionClient:
    """Thin async client for the generateContent endpoint."""

    def __init__(self, config: SuggestionsConfig, http_client: httpx.AsyncClient | None = None):
        """Initialize client.

        Args:
            config: Suggestion service configuration
            http_client: Shared httpx client. One is created (and owned) if omitted.
        """
        self.config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def generate(self, prompt: str) -> str:
        """Send a prompt and return the generated reply text.

        Raises:
            SuggestionTransportError: On network failure, timeout or non-2xx status
            SuggestionFormatError: If the reply body lacks generated text
        """
        try:
            response = await self._http.post(
                self.config.url,
                params={"key": self.config.api_key or ""},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise SuggestionTransportError(
                f"Suggestion request timed out after {self.config.timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            raise SuggestionTransportError(f"Suggestion request failed: {e}") from e

        if not response.is_success:
            raise SuggestionTransportError(
                f"Suggestion service returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SuggestionFormatError("Reply body is not JSON") from e

        return extract_reply_text(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


class SuggestionIntegrator:
    """Keeps suggestion and seasonal lists in step with the cart.

    Subscribe :meth:`on_cart_change` to a CartStore; every item-set change
    schedules a refresh tagged with the cart generation.
    """

    def __init__(self, config: SuggestionsConfig, client: SuggestionClient | None = None):
        self.config = config
        self.client = client or SuggestionClient(config)
        self.latest_generation = 0
        self._state = SuggestionState()
        self._listeners: list[StateListener] = []
        self._pending: set[asyncio.Task] = set()
        self._in_flight = 0

    @property
    def enabled(self) -> bool:
        """Whether a service credential is configured."""
        return self.config.enabled

    @property
    def state(self) -> SuggestionState:
        return self._state

    @property
    def suggestions(self) -> list[str]:
        return list(self._state.suggestions)

    @property
    def seasonal(self) -> list[str]:
        return list(self._state.seasonal)

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def pending(self) -> set[asyncio.Task]:
        return set(self._pending)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback for newly published suggestion state."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_cart_change(self, change: CartChange) -> None:
        """Record a cart change and schedule a refresh for it.

        Without a running event loop the change is only recorded; callers can
        await :meth:`refresh` themselves later.
        """
        self.latest_generation = max(self.latest_generation, change.generation)
        if not change.item_names or not self.enabled:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("suggestions_refresh_deferred", generation=change.generation)
            return

        task = loop.create_task(self.refresh(change.item_names, change.generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def refresh(self, item_names: list[str], generation: int | None = None) -> bool:
        """Fetch and publish suggestions for the given cart contents.

        Args:
            item_names: Current cart item names
            generation: Cart generation the names belong to. Defaults to the
                latest known generation.

        Returns:
            True if new state was published
        """
        if generation is None:
            generation = self.latest_generation

        if not item_names:
            logger.debug("suggestions_skipped_empty_cart", generation=generation)
            return False
        if not self.enabled:
            logger.debug("suggestions_disabled", message="No suggestion API key configured")
            return False

        logger.info("suggestions_refresh_started", generation=generation, item_count=len(item_names))

        self._in_flight += 1
        try:
            text = await self.client.generate(build_prompt(item_names))
        except SuggestionTransportError as e:
            logger.warning(
                "suggestions_fetch_failed",
                generation=generation,
                status_code=e.status_code,
                error=str(e),
            )
            return False
        except SuggestionFormatError as e:
            logger.warning("suggestions_reply_malformed", generation=generation, error=str(e))
            return False
        except Exception as e:
            logger.error(
                "suggestions_refresh_error",
                generation=generation,
                error=str(e),
                exc_info=True,
            )
            return False
        finally:
            self._in_flight -= 1

        if generation < self.latest_generation or generation < self._state.generation:
            logger.info(
                "suggestions_stale_discarded",
                generation=generation,
                latest_generation=self.latest_generation,
            )
            return False

        suggestions, seasonal = parse_suggestion_reply(text, MAX_ITEMS)
        self._state = SuggestionState(
            suggestions=suggestions,
            seasonal=seasonal,
            generation=generation,
            updated_at=datetime.now(),
        )
        logger.info(
            "suggestions_refresh_success",
            generation=generation,
            suggestions=len(suggestions),
            seasonal=len(seasonal),
        )

        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error("suggestion_listener_failed", error=str(e), exc_info=True)
        return True

    async def wait_pending(self) -> None:
        """Wait for all scheduled refreshes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.wait_pending()
        await self.client.aclose()
