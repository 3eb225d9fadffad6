import logging

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tvproxy.exceptions import ConfigError


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    Credentials, the public host and the public port have no defaults: the
    proxy cannot build usable playlist URLs or log in without them.
    """

    username: str
    password: SecretStr
    host: str
    port: str
    bind_address: str = "0.0.0.0"

    channels_file: str = "./data/channels.json"
    verbose: bool = False
    log_level: str = "INFO"

    upstream_base_url: str = "http://www.neterra.tv"
    upstream_timeout_sec: float = 30.0
    session_validity_sec: int = 28800  # 8 hours
    strict_login: bool = False

    epg_redirect_url: str = "http://epg.kodibg.org/dl.php"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("username", "host", "channels_file")
    @classmethod
    def validate_not_blank(cls, value: str, info) -> str:
        """Reject empty strings for values that have no usable fallback."""
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} must not be empty")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: SecretStr) -> SecretStr:
        """Reject an empty password."""
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value

    @field_validator("port", mode="before")
    @classmethod
    def validate_port(cls, value) -> str:
        """Port is kept as a string but must be a valid TCP port number."""
        value = str(value).strip()
        if not value.isdigit() or not 0 < int(value) < 65536:
            raise ValueError(f"port must be a number between 1 and 65535, got '{value}'")
        return value

    @field_validator("upstream_base_url", "epg_redirect_url")
    @classmethod
    def validate_http_url(cls, value: str, info) -> str:
        """Validate upstream URLs are HTTP/HTTPS."""
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must be HTTP/HTTPS: {value}")
        return value.rstrip("/")

    @field_validator("upstream_timeout_sec")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Every upstream call needs a bounded timeout."""
        if value <= 0:
            raise ValueError("upstream_timeout_sec must be > 0")
        return value

    @field_validator("session_validity_sec")
    @classmethod
    def validate_validity_window(cls, value: int) -> int:
        """Validate the session validity window (seconds)."""
        if value <= 0:
            raise ValueError("session_validity_sec must be > 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        normalized = value.upper()
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Upstream: %s", self.upstream_base_url)
        logger.info("  Upstream Timeout: %ss", self.upstream_timeout_sec)
        logger.info("  Session Validity: %ss", self.session_validity_sec)
        logger.info("  Strict Login: %s", self.strict_login)
        logger.info("  Public Address: %s:%s", self.host, self.port)
        logger.info("  Channels File: %s", self.channels_file)
        logger.info("  Log Level: %s", self.effective_log_level)


def load_settings(**overrides) -> CustomSettings:
    """
    Build settings from the environment, applying explicit overrides.

    Raises:
        ConfigError: If a required value is missing or any value is invalid
    """
    try:
        return CustomSettings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigError(f"Invalid configuration - {problems}") from exc


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger().setLevel(level)
