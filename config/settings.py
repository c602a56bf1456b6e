"""
Configuration Management for the Simulated Market Maker

Centralized, type-safe configuration using Pydantic BaseSettings.
Every constant of the agent can be overridden through environment variables
or a .env file. Values are validated on startup with clear error messages.

Usage:
    from config.settings import settings

    interval_s = settings.schedule.orderbook_interval_s
    client = OrderBookClient(base_url=settings.market_data.base_url)
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from typing import Optional


class MarketDataConfig(BaseSettings):
    """Public order-book endpoint configuration."""

    base_url: str = Field(
        default='https://api.deversifi.com/bfx/v2/book',
        validation_alias='ORDERBOOK_BASE_URL',
        description='Order book REST endpoint (symbol and precision are appended)'
    )

    symbol: str = Field(
        default='tETHUSD',
        validation_alias='ORDERBOOK_SYMBOL',
        description='Trading pair symbol of the feed'
    )

    precision: str = Field(
        default='P0',
        validation_alias='ORDERBOOK_PRECISION',
        description='Price aggregation level (P0-P4, or R0 for raw books)'
    )

    timeout_s: float = Field(
        default=10.0,
        validation_alias='ORDERBOOK_TIMEOUT_S',
        description='HTTP request timeout in seconds'
    )

    max_retries: int = Field(
        default=2,
        validation_alias='ORDERBOOK_MAX_RETRIES',
        description='Additional attempts after a failed fetch within one cycle'
    )

    retry_backoff_s: float = Field(
        default=0.5,
        validation_alias='ORDERBOOK_RETRY_BACKOFF_S',
        description='Initial delay between retries, doubled after each attempt'
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        """Ensure the endpoint is an HTTP(S) URL."""
        if not v.startswith('https://') and not v.startswith('http://'):
            raise ValueError(
                f"Invalid order book URL: '{v}'. "
                "Must start with https:// or http://"
            )
        return v.rstrip('/')

    @field_validator('precision')
    @classmethod
    def validate_precision(cls, v):
        """Validate precision level."""
        valid_precisions = ['P0', 'P1', 'P2', 'P3', 'P4', 'R0']
        if v not in valid_precisions:
            raise ValueError(
                f"Invalid precision: '{v}'. "
                f"Must be one of: {', '.join(valid_precisions)}"
            )
        return v

    @field_validator('timeout_s')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError(f"timeout_s must be > 0, got {v}")
        return v

    @field_validator('max_retries')
    @classmethod
    def validate_max_retries(cls, v):
        if v < 0:
            raise ValueError(f"max_retries must be >= 0, got {v}")
        if v > 10:
            raise ValueError(f"max_retries too large ({v}), recommended <= 10")
        return v

    @field_validator('retry_backoff_s')
    @classmethod
    def validate_backoff(cls, v):
        if v < 0:
            raise ValueError(f"retry_backoff_s must be >= 0, got {v}")
        return v

    @property
    def url(self) -> str:
        """Full order book URL for the configured symbol and precision."""
        return f"{self.base_url}/{self.symbol}/{self.precision}"

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }


class QuotingConfig(BaseSettings):
    """Quote ladder and order-management policy."""

    random_percent: float = Field(
        default=5.0,
        validation_alias='MM_RANDOM_PERCENT',
        description='Quotes are priced uniformly within this percent of the touch'
    )

    num_orders: int = Field(
        default=5,
        validation_alias='MM_NUM_ORDERS',
        description='Number of resting quotes per side'
    )

    minimum_amount: float = Field(
        default=0.1,
        validation_alias='MM_MINIMUM_AMOUNT',
        description='Lower bound of the random quote size (inclusive)'
    )

    maximum_amount: float = Field(
        default=2.0,
        validation_alias='MM_MAXIMUM_AMOUNT',
        description='Upper bound of the random quote size (exclusive)'
    )

    replenish_orders: bool = Field(
        default=True,
        validation_alias='MM_REPLENISH_ORDERS',
        description='Refill empty slots after every cycle'
    )

    cancel_unfilled: bool = Field(
        default=True,
        validation_alias='MM_CANCEL_UNFILLED',
        description='Cancel all quotes that survived the fill check'
    )

    legacy_ask_selection: bool = Field(
        default=False,
        validation_alias='MM_LEGACY_ASK_SELECTION',
        description='Rank asks against the best bid price (legacy compatibility mode)'
    )

    random_seed: Optional[int] = Field(
        default=None,
        validation_alias='MM_RANDOM_SEED',
        description='Seed for the quote generator (None = nondeterministic)'
    )

    @field_validator('random_percent')
    @classmethod
    def validate_random_percent(cls, v):
        if not 0 <= v < 100:
            raise ValueError(f"random_percent must be in [0, 100), got {v}")
        return v

    @field_validator('num_orders')
    @classmethod
    def validate_num_orders(cls, v):
        if v < 1:
            raise ValueError(f"num_orders must be >= 1, got {v}")
        if v > 100:
            raise ValueError(f"num_orders too large ({v}), recommended <= 100")
        return v

    @field_validator('minimum_amount', 'maximum_amount')
    @classmethod
    def validate_positive_amount(cls, v):
        if v <= 0:
            raise ValueError(f"Order amount bounds must be > 0, got {v}")
        return v

    @model_validator(mode='after')
    def validate_amount_range(self):
        if self.minimum_amount >= self.maximum_amount:
            raise ValueError(
                f"MM_MINIMUM_AMOUNT ({self.minimum_amount}) must be below "
                f"MM_MAXIMUM_AMOUNT ({self.maximum_amount})"
            )
        return self

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }


class ScheduleConfig(BaseSettings):
    """Timer cadence of the agent's periodic tasks."""

    balances_interval_ms: int = Field(
        default=30000,
        validation_alias='BALANCES_INTERVAL_MS',
        description='Balance display interval in milliseconds'
    )

    orderbook_interval_ms: int = Field(
        default=5000,
        validation_alias='ORDERBOOK_INTERVAL_MS',
        description='Delay between the end of one cycle and the next fetch'
    )

    @field_validator('balances_interval_ms', 'orderbook_interval_ms')
    @classmethod
    def validate_positive_interval(cls, v):
        """Ensure intervals are positive."""
        if v <= 0:
            raise ValueError(f"Interval must be > 0, got {v}")
        return v

    @property
    def balances_interval_s(self) -> float:
        return self.balances_interval_ms / 1000.0

    @property
    def orderbook_interval_s(self) -> float:
        return self.orderbook_interval_ms / 1000.0

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }


class AccountConfig(BaseSettings):
    """Simulated account: asset pair and starting balances."""

    base_asset: str = Field(
        default='ETH',
        validation_alias='MM_BASE_ASSET',
        description='Asset whose quantity is the order amount'
    )

    counter_asset: str = Field(
        default='USD',
        validation_alias='MM_COUNTER_ASSET',
        description='Pricing currency'
    )

    initial_base_balance: float = Field(
        default=10.0,
        validation_alias='MM_INITIAL_BASE_BALANCE',
        description='Starting balance of the base asset'
    )

    initial_counter_balance: float = Field(
        default=2000.0,
        validation_alias='MM_INITIAL_COUNTER_BALANCE',
        description='Starting balance of the counter asset'
    )

    @field_validator('base_asset', 'counter_asset')
    @classmethod
    def validate_asset_symbol(cls, v):
        """Asset symbols are upper-case and non-empty."""
        if not v or not v.strip():
            raise ValueError("Asset symbol must not be empty")
        return v.strip().upper()

    @model_validator(mode='after')
    def validate_distinct_assets(self):
        if self.base_asset == self.counter_asset:
            raise ValueError(
                f"Base and counter asset must differ, both are '{self.base_asset}'"
            )
        return self

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        default='INFO',
        validation_alias='LOG_LEVEL',
        description='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)'
    )

    file: Optional[str] = Field(
        default=None,
        validation_alias='LOG_FILE',
        description='Log file path (None = stdout only)'
    )

    format: str = Field(
        default='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        validation_alias='LOG_FORMAT',
        description='Log message format'
    )

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: '{v}'. "
                f"Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }


class Settings(BaseSettings):
    """
    Global settings aggregator.

    Loads and validates all configuration from environment variables.
    Raises clear errors on startup if a value is invalid.

    Usage:
        from config.settings import settings

        ledger.register(settings.account.base_asset,
                        settings.account.initial_base_balance)
    """

    market_data: MarketDataConfig = Field(default_factory=MarketDataConfig)
    quoting: QuotingConfig = Field(default_factory=QuotingConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    account: AccountConfig = Field(default_factory=AccountConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore'
    }

    def __repr__(self) -> str:
        lines = [
            "=== Configuration ===",
            "",
            "Market data:",
            f"  URL: {self.market_data.url}",
            f"  Timeout: {self.market_data.timeout_s}s, retries: {self.market_data.max_retries}",
            "",
            "Quoting:",
            f"  Orders per side: {self.quoting.num_orders}",
            f"  Price band: +/-{self.quoting.random_percent}%",
            f"  Amount range: [{self.quoting.minimum_amount}, {self.quoting.maximum_amount})",
            f"  Replenish: {self.quoting.replenish_orders}, cancel unfilled: {self.quoting.cancel_unfilled}",
            f"  Legacy ask selection: {self.quoting.legacy_ask_selection}",
            "",
            "Schedule:",
            f"  Order book every {self.schedule.orderbook_interval_ms}ms",
            f"  Balances every {self.schedule.balances_interval_ms}ms",
            "",
            "Account:",
            f"  {self.account.base_asset}: {self.account.initial_base_balance}",
            f"  {self.account.counter_asset}: {self.account.initial_counter_balance}",
            "",
            "Logging:",
            f"  Level: {self.logging.level}",
            f"  File: {self.logging.file or 'stdout'}",
        ]
        return "\n".join(lines)


# Global settings instance
# Import this in your modules:
#   from config.settings import settings
try:
    settings = Settings()
except Exception as e:
    print(f"\n{'='*60}")
    print("CONFIGURATION ERROR")
    print(f"{'='*60}")
    print(f"\n{e}\n")
    print("Please check your .env file or environment variables.")
    print(f"{'='*60}\n")
    raise


if __name__ == '__main__':
    # Test configuration loading
    print(settings)
