"""Voice Cart - Build a shopping cart from spoken or typed commands."""

from .cart_store import CartStore, InvalidItemError
from .categorizer import Categorizer, categorize
from .command_parser import parse
from .config import ConfigManager
from .models import (
    AddCommand,
    CartChange,
    CartItem,
    Category,
    Command,
    CommandResult,
    Intent,
    RemoveCommand,
    SuggestionState,
    UnrecognizedCommand,
)
from .session import ShoppingSession
from .suggestions import (
    SuggestionClient,
    SuggestionError,
    SuggestionFormatError,
    SuggestionIntegrator,
    SuggestionTransportError,
    build_prompt,
    parse_suggestion_reply,
)

__version__ = "0.1.0"

__all__ = [
    "AddCommand",
    "build_prompt",
    "CartChange",
    "CartItem",
    "CartStore",
    "categorize",
    "Categorizer",
    "Category",
    "Command",
    "CommandResult",
    "ConfigManager",
    "Intent",
    "InvalidItemError",
    "parse",
    "parse_suggestion_reply",
    "RemoveCommand",
    "ShoppingSession",
    "SuggestionClient",
    "SuggestionError",
    "SuggestionFormatError",
    "SuggestionIntegrator",
    "SuggestionState",
    "SuggestionTransportError",
    "UnrecognizedCommand",
]
