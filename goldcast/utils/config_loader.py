# goldcast/utils/config_loader.py

from pydantic import BaseModel, Field
from typing import Optional
from goldcast.config.timeframes import Timeframe
from goldcast.utils.config import load_config  # YAML loader


# -------------------
# Pydantic Configs
# -------------------
class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None

class HttpConfig(BaseModel):
    timeout_seconds: float = Field(default=10.0, ge=10.0, le=15.0)

class SourcesConfig(BaseModel):
    market_chart_url: str = "https://api.coingecko.com/api/v3"
    coin_id: str = "tether-gold"
    intraday_chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    ticker: str = "GC=F"
    news_url: str = "https://api.gdeltproject.org/api/v2/doc/doc"
    news_query: str = (
        'gold OR XAUUSD OR "gold price" OR geopolitical OR "Federal Reserve" OR inflation'
    )
    max_records: int = Field(default=30, ge=1, le=250)

class CircuitBreakerConfig(BaseModel):
    failure_threshold: int = Field(default=2, ge=1)
    cooldown_seconds: float = Field(default=300.0, gt=0)

class CacheConfig(BaseModel):
    max_items: int = Field(default=128, ge=1)
    last_good_ttl_seconds: Optional[float] = None

class SentimentConfig(BaseModel):
    ttl_seconds: float = Field(default=300.0, gt=0)
    timeout_seconds: float = Field(default=10.0, gt=0)

class SchedulerConfig(BaseModel):
    price_refresh_seconds: float = Field(default=60.0, gt=0)
    sentiment_refresh_seconds: float = Field(default=300.0, gt=0)

class PipelineConfig(BaseModel):
    symbol: str = "XAU"
    default_timeframe: Timeframe = Timeframe.ONE_HOUR
    min_prediction_points: int = Field(default=10, ge=2)
    min_global_points: int = Field(default=20, ge=2)

class ErrorLogConfig(BaseModel):
    path: Optional[str] = None

class AppConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    circuit_breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sentiment: SentimentConfig = Field(default_factory=SentimentConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    error_log: ErrorLogConfig = Field(default_factory=ErrorLogConfig)


# -------------------
# Functions
# -------------------
def load_typed_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load and validate the full config as a typed Pydantic model.

    Args:
        config_path (Optional[str]): Path to main YAML config file. When omitted,
            every section takes its defaults.

    Returns:
        AppConfig: Typed configuration object.
    """
    if config_path is None:
        return AppConfig()
    raw_config = load_config(config_path)
    return AppConfig(**raw_config)
