"""Core data models for Voice Cart."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Intent(str, Enum):
    """Classified purpose of a spoken or typed command."""

    ADD = "add"
    REMOVE = "remove"
    UNRECOGNIZED = "unrecognized"


class Category(str, Enum):
    """Product categories used to group the cart."""

    FRUITS = "Fruits"
    VEGETABLES = "Vegetables"
    DAIRY = "Dairy"
    BAKERY = "Bakery"
    MEAT = "Meat & Seafood"
    PANTRY = "Pantry"
    SNACKS = "Snacks"
    BEVERAGES = "Beverages"
    FROZEN = "Frozen"
    HOUSEHOLD = "Household"
    PERSONAL_CARE = "Personal Care"
    OTHERS = "Others"


class CartItem(BaseModel):
    """A single cart entry. Identity is the normalized name."""

    name: str
    quantity: int = Field(default=1, ge=1)
    category: str = Category.OTHERS.value


class AddCommand(BaseModel):
    """Add `quantity` of `item` to the cart."""

    intent: Literal[Intent.ADD] = Intent.ADD
    item: str
    quantity: int = Field(default=1, ge=1)


class RemoveCommand(BaseModel):
    """Remove `item` from the cart entirely."""

    intent: Literal[Intent.REMOVE] = Intent.REMOVE
    item: str


class UnrecognizedCommand(BaseModel):
    """Input from which no intent could be extracted."""

    intent: Literal[Intent.UNRECOGNIZED] = Intent.UNRECOGNIZED


Command = Annotated[
    Union[AddCommand, RemoveCommand, UnrecognizedCommand],
    Field(discriminator="intent"),
]


class CommandResult(BaseModel):
    """Outcome of applying one command to a shopping session."""

    command: Command
    applied: bool
    message: str
    text: str = ""


class CartChange(BaseModel):
    """Event emitted when the set of item names in the cart changes."""

    generation: int
    item_names: list[str] = Field(default_factory=list)


class SuggestionState(BaseModel):
    """Latest suggestion and seasonal lists published for the UI."""

    suggestions: list[str] = Field(default_factory=list, max_length=3)
    seasonal: list[str] = Field(default_factory=list, max_length=3)
    generation: int = 0
    updated_at: datetime | None = None
