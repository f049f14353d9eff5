import json
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class CacheConfig(BaseModel):
    ttl_seconds: float = Field(default=300, gt=0, description="Lifetime of a resolved video info entry")
    check_period_seconds: float = Field(default=600, gt=0, description="Interval of the background expiry sweep")


class ExtractorConfig(BaseModel):
    binary_path: Optional[str] = Field(default=None, description="Explicit yt-dlp executable path")
    bundled_dir: str = Field(default="bin", description="Directory (relative to cwd) searched for a bundled yt-dlp")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout passed to yt-dlp")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Wall-clock limit for one extraction run")


class RedisConfig(BaseModel):
    url: str = Field(default="redis://redis:6379", description="Redis connection URL")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")


class RateLimitConfig(BaseModel):
    enabled: bool = Field(default=True, description="Enable rate limiting")
    max_requests: int = Field(default=20, ge=1, description="Max requests per window")
    window_seconds: int = Field(default=60, ge=1, description="Rate limit window in seconds")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @validator("level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="Media Link Resolver API", description="API title")
    description: str = Field(
        default="Resolves media page URLs into directly fetchable download links",
        description="API description",
    )
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class Config(BaseSettings):
    """Main configuration model.

    Values come from, in priority order: the JSON file at ``CONFIG_PATH``,
    ``RESOLVER_*`` environment variables (``RESOLVER_CACHE__TTL_SECONDS=60``),
    then the defaults below.
    """

    model_config = SettingsConfigDict(env_prefix="RESOLVER_", env_nested_delimiter="__")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    write_config_file: bool = Field(
        default=False,
        description="Write the effective configuration to config.json on startup when the file is missing",
    )

    @classmethod
    def load_from_file(cls, config_path: str = CONFIG_PATH) -> "Config":
        """Load configuration from a JSON file, falling back to env/defaults"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            logger.info(f"Configuration loaded from {config_path}")
            return cls(**config_data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using environment/default configuration")
            return cls()

    def save_to_file(self, config_path: str = CONFIG_PATH) -> None:
        """Save configuration to JSON file"""
        try:
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump(self.model_dump(exclude_none=True), f, indent=2, ensure_ascii=False)
            logger.info(f"Configuration saved to {config_path}")
        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {str(e)}")


def ensure_config_file(settings: Config, config_path: str = CONFIG_PATH) -> bool:
    """Persist settings when asked to and no file exists yet; returns whether it wrote.

    A written file outranks RESOLVER_* env vars on later starts, so this is opt-in.
    """
    if not settings.write_config_file or os.path.exists(config_path):
        return False
    settings.save_to_file(config_path)
    return True


def load_config() -> Config:
    """Load configuration with priority: config file > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    return Config()


# Global config instance
config = load_config()
