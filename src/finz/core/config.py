"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from finz.core.exceptions import ConfigError
from finz.core.models import LLMProvider


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by every provider client."""

    model_config = ConfigDict(frozen=True)

    # The quote provider rejects requests without realistic browser headers.
    user_agent: str = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36"
    accept: str = "application/json,text/plain,*/*"
    accept_language: str = "en-US,en;q=0.9"
    request_timeout: float = 15.0

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v


class YahooConfig(BaseModel):
    """Quote/chart provider endpoints and session settings."""

    model_config = ConfigDict(frozen=True)

    handshake_url: str = "https://fc.yahoo.com"
    token_url: str = "https://query1.finance.yahoo.com/v1/test/getcrumb"
    quote_base_url: str = "https://query1.finance.yahoo.com"
    summary_base_url: str = "https://query2.finance.yahoo.com"
    session_ttl_seconds: int = 1200
    search_limit: int = 6

    @field_validator("session_ttl_seconds")
    @classmethod
    def ttl_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("session_ttl_seconds must be >= 1")
        return v

    @field_validator("search_limit")
    @classmethod
    def search_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("search_limit must be >= 1")
        return v


class ForexConfig(BaseModel):
    """Foreign-exchange provider configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.frankfurter.app"
    base_currency: str = "USD"
    quote_currency: str = "KRW"
    lookback_days: int = 7
    latest_state_key: str = "krw_rate_today"
    previous_state_key: str = "krw_rate_prev"

    @field_validator("lookback_days")
    @classmethod
    def lookback_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("lookback_days must be >= 1")
        return v


class CryptoConfig(BaseModel):
    """Cryptocurrency price provider configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.coingecko.com/api/v3"
    coin_id: str = "bitcoin"
    vs_currency: str = "usd"


class SummaryConfig(BaseModel):
    """Configuration for AI-generated company blurbs."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    provider: LLMProvider = LLMProvider.ANTHROPIC
    model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 220
    temperature: float = 0.2
    timeout_seconds: int = 30
    api_key: str | None = None

    @field_validator("temperature")
    @classmethod
    def temperature_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("temperature must be between 0.0 and 1.0")
        return v


class StorageConfig(BaseModel):
    """Key-value state store configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    sqlite_path: str = "./data/finz.db"


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str | None = None


class FinzConfig(BaseModel):
    """Root configuration for the whole finz service."""

    model_config = ConfigDict(frozen=True)

    http: HttpConfig = HttpConfig()
    yahoo: YahooConfig = YahooConfig()
    forex: ForexConfig = ForexConfig()
    crypto: CryptoConfig = CryptoConfig()
    summary: SummaryConfig = SummaryConfig()
    storage: StorageConfig = StorageConfig()
    api: APIConfig = APIConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "FINZ_",
) -> FinzConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (FINZ_YAHOO__SESSION_TTL_SECONDS, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        FINZ_FOREX__LOOKBACK_DAYS=5  ->  forex.lookback_days = 5
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return FinzConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("FINZ_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from FINZ_CONFIG not found: {env_path}",
                context={"field": "FINZ_CONFIG", "value": env_path},
            )
        return p

    default = Path("finz.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int/float.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # FINZ_CONFIG names the file, not a setting
        if parts == ["config"]:
            continue

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = _auto_cast(value)

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
