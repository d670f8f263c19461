"""Terminal UI for Voice Cart."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Input, Label, Static

from .models import SuggestionState
from .session import ShoppingSession


class VoiceCartTUI(App[None]):
    """Cart on the left, command box and suggestions on the right."""

    TITLE = "Voice Cart"

    DEFAULT_CSS = """
    #cart-pane {
        width: 40%;
        border-right: solid $primary;
    }

    #side-pane {
        padding: 0 1;
    }

    .section-title {
        margin-top: 1;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("plus", "increment", "+1"),
        Binding("minus", "decrement", "-1"),
        Binding("x", "remove_selected", "Remove"),
        Binding("r", "refresh_suggestions", "Refresh Suggestions"),
        Binding("1", "add_suggestion(0)", "Add #1", show=False),
        Binding("2", "add_suggestion(1)", "Add #2", show=False),
        Binding("3", "add_suggestion(2)", "Add #3", show=False),
        Binding("i", "focus_input", "Type Command"),
        Binding("escape", "focus_cart", "Cart", show=False),
    ]

    def __init__(self, session: ShoppingSession):
        super().__init__()
        self.session = session
        self._row_names: list[str] = []
        self._unsubscribe = session.integrator.subscribe(self._on_suggestions)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            with Vertical(id="cart-pane"):
                yield Label("Your Cart", classes="section-title")
                yield DataTable(id="cart-table")
            with Vertical(id="side-pane"):
                yield Input(placeholder="Speak or type your shopping command...", id="command")
                yield Static("", id="status")
                yield Label("Frequently Added", classes="section-title")
                yield Static("", id="frequent")
                yield Label("Smart Suggestions", classes="section-title")
                yield Static("", id="suggestions")
                yield Label("In Season", classes="section-title")
                yield Static("", id="seasonal")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#cart-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Item", "Qty", "Category")
        self._refresh_cart()
        self._on_suggestions(self.session.integrator.state)
        self.query_one("#command", Input).focus()

    async def on_unmount(self) -> None:
        self._unsubscribe()
        await self.session.aclose()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        result = self.session.on_manual_submit(event.value)
        event.input.value = ""
        if result is None:
            return
        self._set_status(result.message)
        self._refresh_cart()

    def action_focus_input(self) -> None:
        self.query_one("#command", Input).focus()

    def action_focus_cart(self) -> None:
        self.query_one("#cart-table", DataTable).focus()

    def action_increment(self) -> None:
        self._apply_to_selected(self.session.increment)

    def action_decrement(self) -> None:
        self._apply_to_selected(self.session.decrement)

    def action_remove_selected(self) -> None:
        self._apply_to_selected(self.session.remove_item)

    def action_add_suggestion(self, index: int) -> None:
        suggestions = self.session.suggestions
        if index >= len(suggestions):
            self._set_status("No such suggestion")
            return
        result = self.session.add_suggestion(suggestions[index])
        self._set_status(result["message"])
        self._refresh_cart()

    async def action_refresh_suggestions(self) -> None:
        if not self.session.integrator.enabled:
            self._set_status("Suggestions disabled: set GEMINI_API_KEY to enable them")
            return
        self._set_status("Fetching suggestions...")
        if await self.session.refresh_suggestions():
            self._set_status("Suggestions updated")
        else:
            self._set_status("Suggestions unchanged")

    def _apply_to_selected(self, operation) -> None:
        table = self.query_one("#cart-table", DataTable)
        if not self._row_names or table.cursor_row is None:
            self._set_status("No item selected")
            return
        row = min(table.cursor_row, len(self._row_names) - 1)
        result = operation(self._row_names[row])
        self._set_status(result["message"])
        self._refresh_cart()

    def _refresh_cart(self) -> None:
        table = self.query_one("#cart-table", DataTable)
        table.clear(columns=False)
        self._row_names = []

        for category, items in self.session.items_by_category().items():
            for item in items:
                self._row_names.append(item.name)
                table.add_row(item.name, str(item.quantity), category)

        frequent = self.session.frequent_items()
        self.query_one("#frequent", Static).update(
            "\n".join(f"• {name}" for name in frequent) or "Nothing yet"
        )

    def _on_suggestions(self, state: SuggestionState) -> None:
        self.query_one("#suggestions", Static).update(
            "\n".join(f"{i}. {name}" for i, name in enumerate(state.suggestions, start=1))
            or "No suggestions yet"
        )
        self.query_one("#seasonal", Static).update(
            "\n".join(f"☀ {name}" for name in state.seasonal) or "-"
        )

    def _set_status(self, message: str) -> None:
        self.query_one("#status", Static).update(message)
