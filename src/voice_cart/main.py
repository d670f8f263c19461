"""CLI entry point for Voice Cart."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from .categorizer import Categorizer
from .command_parser import parse
from .config import ConfigManager
from .logging_config import configure_logging, configure_tui_logging
from .output_formatter import OutputFormatter
from .session import ShoppingSession
from .tui import VoiceCartTUI

app = typer.Typer(
    name="voice-cart",
    help="Build a shopping cart from spoken or typed commands",
    no_args_is_help=True,
)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
verbose_logs: bool = False


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    config_path: Annotated[
        Path | None, typer.Option("--config", help="Path to a config.toml file")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logs")] = False,
) -> None:
    """Voice Cart CLI - turn free-form commands into a shopping cart."""
    global formatter, config, verbose_logs

    formatter = OutputFormatter(json_mode=json_output)
    verbose_logs = verbose
    configure_logging(verbose=verbose, json_logs=json_output)
    config = ConfigManager(config_path=config_path)


@app.command(name="parse")
def parse_text(
    text: Annotated[str, typer.Argument(help="Command text, e.g. 'add two apples'")],
) -> None:
    """Show how a command would be interpreted."""
    command = parse(text)
    result = {
        "success": True,
        "data": {"command": command.model_dump(mode="json")},
    }
    formatter.output(result)


@app.command()
def categorize(
    name: Annotated[str, typer.Argument(help="Item name")],
) -> None:
    """Show the category an item would be filed under."""
    categorizer = Categorizer(fallback=get_config().defaults.category)
    result = {
        "success": True,
        "data": {"name": name, "category": categorizer.categorize(name)},
    }
    formatter.output(result)


async def _finish_session(session: ShoppingSession, suggest: bool) -> None:
    try:
        if suggest:
            await session.refresh_suggestions()
    finally:
        await session.aclose()


@app.command()
def run(
    commands: Annotated[list[str], typer.Argument(help="Commands to apply, in order")],
    suggest: Annotated[
        bool, typer.Option("--suggest/--no-suggest", help="Fetch smart suggestions afterwards")
    ] = True,
    frequent: Annotated[
        int | None, typer.Option("--frequent", "-n", help="How many frequent items to show")
    ] = None,
) -> None:
    """Apply commands to a fresh cart and show the result."""
    try:
        session = ShoppingSession(config=get_config())
        results = [session.apply_command(text) for text in commands]

        if suggest and not session.integrator.enabled and not formatter.json_mode:
            formatter.warning("Suggestions disabled: set GEMINI_API_KEY to enable them")
        asyncio.run(_finish_session(session, suggest))

        applied = sum(1 for r in results if r.applied)
        output_data = {
            "success": True,
            "message": f"Applied {applied} of {len(results)} commands",
            "data": {
                "results": [r.model_dump(mode="json") for r in results],
                "cart": [item.model_dump(mode="json") for item in session.items],
                "frequent": session.frequent_items(frequent),
                "suggestions": session.integrator.state.model_dump(mode="json"),
            },
        }
        formatter.output(output_data, output_data["message"])
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def tui() -> None:
    """Launch the interactive terminal UI."""
    configure_tui_logging(verbose=verbose_logs)
    VoiceCartTUI(ShoppingSession(config=get_config())).run()


if __name__ == "__main__":
    app()
