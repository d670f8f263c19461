"""Output formatting for CLI and programmatic use."""

import json
from datetime import date, datetime
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for output."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False, console: Console | None = None):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
            console: Rich console to print to. Creates one if not provided.
        """
        self.json_mode = json_mode
        self.console = console or Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        if "results" in payload:
            self._render_results(data)
        if "command" in payload:
            self._render_command(data)
        if "category" in payload:
            self._render_category(data)
        if "cart" in payload:
            self._render_cart(data)
        if "frequent" in payload:
            self._render_frequent(data)
        if "suggestions" in payload:
            self._render_suggestions(data)

    def _render_results(self, data: dict) -> None:
        """Render the outcome of each applied command."""
        for result in data["data"]["results"]:
            if result["applied"]:
                self.console.print(f"  [green]✓[/green] {result['message']}")
            else:
                self.console.print(f"  [yellow]•[/yellow] {result['message']}")

    def _render_command(self, data: dict) -> None:
        """Render a parsed command."""
        command = data["data"]["command"]
        intent = command["intent"]

        if intent == "unrecognized":
            self.console.print("[yellow]Unrecognized command[/yellow]")
            return

        panel_content = f"[bold]{intent.capitalize()}[/bold] {command['item']}"
        if intent == "add":
            panel_content += f"\nQuantity: {command.get('quantity', 1)}"

        self.console.print(Panel(panel_content, title="Command", border_style="green"))

    def _render_category(self, data: dict) -> None:
        """Render a categorized item name."""
        self.console.print(f"[bold]{data['data']['name']}[/bold]: {data['data']['category']}")

    def _render_cart(self, data: dict) -> None:
        """Render the cart with Rich."""
        items = data["data"]["cart"]

        if not items:
            self.console.print("[dim]Your cart is empty[/dim]")
            return

        table = Table(title="Your Cart", show_header=True, header_style="bold cyan")
        table.add_column("Item", style="cyan", no_wrap=False)
        table.add_column("Qty", style="magenta", justify="right")
        table.add_column("Category", style="yellow")

        for item in items:
            table.add_row(item["name"], str(item["quantity"]), item["category"])

        self.console.print(table)
        self.console.print(f"\nTotal items: {len(items)}")

    def _render_frequent(self, data: dict) -> None:
        """Render frequently added items."""
        frequent = data["data"]["frequent"]
        if not frequent:
            return

        self.console.print("\n[bold]Frequently Added[/bold]")
        for name in frequent:
            self.console.print(f"  • {name}")

    def _render_suggestions(self, data: dict) -> None:
        """Render smart and seasonal suggestions."""
        state = data["data"]["suggestions"]
        suggestions = state.get("suggestions", [])
        seasonal = state.get("seasonal", [])

        if not suggestions and not seasonal:
            self.console.print("[dim]No suggestions at this time[/dim]")
            return

        self.console.print("\n[bold]Smart Suggestions[/bold]")
        for name in suggestions:
            self.console.print(f"  [green]+[/green] {name}")

        if seasonal:
            self.console.print("\n[bold]In Season[/bold]")
            for name in seasonal:
                self.console.print(f"  [yellow]☀[/yellow] {name}")

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
