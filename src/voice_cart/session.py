"""Shopping session: command text in, cart and suggestions out."""

import structlog

from .cart_store import CartStore
from .categorizer import Categorizer
from .command_parser import parse
from .config import ConfigManager
from .models import AddCommand, CartItem, CommandResult, RemoveCommand
from .suggestions import SuggestionIntegrator

logger = structlog.get_logger(__name__)


class ShoppingSession:
    """Wires the interpreter, cart and suggestion integrator together.

    Speech and manual input both end up in :meth:`apply_command`. Commands
    are applied in the order they arrive.
    """

    def __init__(
        self,
        config: ConfigManager | None = None,
        cart: CartStore | None = None,
        integrator: SuggestionIntegrator | None = None,
        categorizer: Categorizer | None = None,
    ):
        """Initialize session.

        Args:
            config: ConfigManager instance. Creates new one if not provided.
            cart: CartStore instance. Creates new one if not provided.
            integrator: SuggestionIntegrator instance. Creates one from config if not provided.
            categorizer: Categorizer instance. Uses config's fallback category if not provided.
        """
        self.config = config or ConfigManager()
        self.cart = cart or CartStore()
        self.integrator = integrator or SuggestionIntegrator(self.config.suggestions)
        self.categorizer = categorizer or Categorizer(fallback=self.config.defaults.category)
        self.pending_input = ""
        self._unsubscribe = self.cart.subscribe(self.integrator.on_cart_change)

    @property
    def items(self) -> list[CartItem]:
        return self.cart.items

    @property
    def suggestions(self) -> list[str]:
        return self.integrator.suggestions

    @property
    def seasonal(self) -> list[str]:
        return self.integrator.seasonal

    def items_by_category(self) -> dict[str, list[CartItem]]:
        return self.cart.items_by_category()

    def frequent_items(self, limit: int | None = None) -> list[str]:
        if limit is None:
            limit = self.config.cart.frequent_limit
        return self.cart.frequent_items(limit)

    def on_interim_transcript(self, text: str) -> None:
        """Show partial speech as pending input. Never interpreted."""
        self.pending_input = text or ""

    def on_final_transcript(self, text: str) -> CommandResult:
        """Apply the finished utterance of a recognition session."""
        return self.apply_command(text)

    def on_manual_submit(self, text: str) -> CommandResult | None:
        """Apply typed text. Blank submissions are ignored."""
        if not text or not text.strip():
            return None
        return self.apply_command(text)

    def apply_command(self, text: str) -> CommandResult:
        """Interpret text and apply it to the cart.

        Args:
            text: Raw command text

        Returns:
            CommandResult describing what happened
        """
        text = text or ""
        command = parse(text)

        if isinstance(command, AddCommand):
            category = self.categorizer.categorize(command.item)
            result = self.cart.add_item(command.item, command.quantity, category)
            outcome = CommandResult(
                command=command, applied=True, message=result["message"], text=text
            )
        elif isinstance(command, RemoveCommand):
            result = self.cart.remove_item(command.item)
            outcome = CommandResult(
                command=command,
                applied=result["data"]["changed"],
                message=result["message"],
                text=text,
            )
        else:
            logger.info("command_unrecognized", text=text)
            outcome = CommandResult(
                command=command,
                applied=False,
                message=f"Sorry, I didn't understand \"{text.strip()}\"",
                text=text,
            )

        self.pending_input = ""
        return outcome

    def add_suggestion(self, name: str) -> dict:
        """Add a suggested or frequent item with quantity 1."""
        return self.add_item(name)

    def add_item(self, name: str, quantity: int = 1, category: str | None = None) -> dict:
        return self.cart.add_item(name, quantity, category or self.categorizer.categorize(name))

    def remove_item(self, name: str) -> dict:
        return self.cart.remove_item(name)

    def increment(self, name: str) -> dict:
        return self.cart.increment(name)

    def decrement(self, name: str) -> dict:
        return self.cart.decrement(name)

    async def refresh_suggestions(self) -> bool:
        """Refresh suggestions for the current cart right away."""
        return await self.integrator.refresh(self.cart.item_names, self.cart.generation)

    async def aclose(self) -> None:
        self._unsubscribe()
        await self.integrator.aclose()
