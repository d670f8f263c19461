"""Configuration management for Voice Cart."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash-latest"
API_KEY_ENV_VARS = ("VOICE_CART_API_KEY", "GEMINI_API_KEY")


@dataclass
class SuggestionsConfig:
    """Suggestion service configuration."""

    api_key: str | None = None
    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    timeout_seconds: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/{self.model}:generateContent"


@dataclass
class CartConfig:
    """Cart view configuration."""

    frequent_limit: int = 5


@dataclass
class DefaultsConfig:
    """Default values configuration."""

    category: str = "Others"


@dataclass
class Config:
    """Complete application configuration."""

    suggestions: SuggestionsConfig
    cart: CartConfig
    defaults: DefaultsConfig


class ConfigManager:
    """Manages application configuration from TOML files and the environment."""

    def __init__(self, config_path: Path | None = None, environ: dict[str, str] | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
            environ: Environment mapping. Defaults to os.environ.
        """
        self.config_path = config_path or self._find_config()
        self.environ = os.environ if environ is None else environ
        self._config = self._load_config()

    @property
    def suggestions(self) -> SuggestionsConfig:
        """Get suggestion service configuration."""
        return self._config.suggestions

    @property
    def cart(self) -> CartConfig:
        """Get cart configuration."""
        return self._config.cart

    @property
    def defaults(self) -> DefaultsConfig:
        """Get defaults configuration."""
        return self._config.defaults

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "voice-cart.toml",
            Path.home() / ".config" / "voice-cart" / "config.toml",
            Path.home() / ".voice-cart" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "voice-cart" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file, then apply environment overrides."""
        data: dict[str, Any] = {}
        if self.config_path.exists():
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)

        suggestions = data.get("suggestions", {})
        config = Config(
            suggestions=SuggestionsConfig(
                api_key=suggestions.get("api_key") or None,
                endpoint=suggestions.get("endpoint", DEFAULT_ENDPOINT),
                model=suggestions.get("model", DEFAULT_MODEL),
                timeout_seconds=float(suggestions.get("timeout_seconds", 10.0)),
            ),
            cart=CartConfig(
                frequent_limit=data.get("cart", {}).get("frequent_limit", 5),
            ),
            defaults=DefaultsConfig(
                category=data.get("defaults", {}).get("category", "Others"),
            ),
        )

        for var in API_KEY_ENV_VARS:
            value = self.environ.get(var, "").strip()
            if value:
                config.suggestions.api_key = value
                break

        return config

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'suggestions.model'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if hasattr(value, key):
                value = getattr(value, key)
            elif isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default
