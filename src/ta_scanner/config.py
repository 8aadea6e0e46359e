"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Market data provider connection settings (any ccxt exchange id)."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    exchange_id: str = "binance"
    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    enable_rate_limit: bool = True
    default_type: str = "spot"


class ScoringWeights(BaseSettings):
    """Weights for the composite score factors.

    Each weight is applied as a multiplier on its factor, not as a share
    of a partition, so the four values do not need to sum to 1.
    """

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    trend: float = 0.4
    momentum: float = 0.3
    volume: float = 0.15
    volatility: float = 0.15


class ScanSettings(BaseSettings):
    """Market scan parameters. Supplied by the caller, never persisted by the scanner."""

    model_config = SettingsConfigDict(env_prefix="SCAN_")

    max_pairs: int = 50
    refresh_interval_minutes: int = Field(default=15, ge=1)
    timeframe: str = "15m"
    min_quote_volume: float = 1_000_000.0  # 24h quote volume
    signal_threshold: float = 70.0  # min strongest-signal strength to report
    scoring_enabled: bool = True
    weights: ScoringWeights = ScoringWeights()
    notify_on_signal: bool = True
    notify_min_strength: float = 80.0
    auto_start: bool = False


class AnalysisSettings(BaseSettings):
    """Single-symbol analysis parameters (user-configurable SMA periods)."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    timeframe: str = "1h"
    short_period: int = 5
    long_period: int = 15
    candle_limit: int = 50


class RecommendationThresholds(BaseSettings):
    """Score cut points for mapping a composite score to an action.

    Must satisfy strong_bull > bull > bear > strong_bear.
    """

    model_config = SettingsConfigDict(env_prefix="RECOMMEND_")

    strong_bull: float = 80.0
    bull: float = 60.0
    bear: float = 40.0
    strong_bear: float = 20.0
    history_limit: int = 100

    @model_validator(mode="after")
    def _check_ordering(self) -> "RecommendationThresholds":
        if not (self.strong_bull > self.bull > self.bear > self.strong_bear):
            raise ValueError(
                "thresholds must satisfy strong_bull > bull > bear > strong_bear"
            )
        return self


class ReasoningSettings(BaseSettings):
    """Optional external reasoning service (OpenAI-compatible chat endpoint)."""

    model_config = SettingsConfigDict(env_prefix="REASONING_")

    enabled: bool = False
    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    max_tokens: int = 500
    temperature: float = 0.3
    timeout_seconds: float = 30.0


class AlertSettings(BaseSettings):
    """Price-level and signal-strength alert configuration."""

    model_config = SettingsConfigDict(env_prefix="ALERT_")

    price_enabled: bool = False
    price_above: float | None = None
    price_below: float | None = None
    signals_enabled: bool = False
    signal_min_strength: float = 70.0
    history_limit: int = 100


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    exchange: ExchangeSettings = ExchangeSettings()
    scan: ScanSettings = ScanSettings()
    analysis: AnalysisSettings = AnalysisSettings()
    thresholds: RecommendationThresholds = RecommendationThresholds()
    reasoning: ReasoningSettings = ReasoningSettings()
    alerts: AlertSettings = AlertSettings()
    dashboard: DashboardSettings = DashboardSettings()
