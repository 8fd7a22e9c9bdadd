import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from errors import ConfigurationError, create_error_context


logger = logging.getLogger(__name__)


DEFAULT_PAGE_BACKGROUND = "#FFFFFF"


@dataclass
class AuditSettings:
    # Tunable limits and defaults for a contrast audit
    max_visits: int = 5000
    max_candidates: int = 2000
    max_ancestor_depth: int = 10
    max_sibling_scan: int = 20
    page_background: str = DEFAULT_PAGE_BACKGROUND
    lookup_max_attempts: int = 3
    lookup_base_wait_seconds: float = 0.1
    log_level: str = "INFO"
    log_format: str = "json"

    def page_background_color(self):
        # Parsed page background; falls back to white if the hex is unusable
        from contrast.color import hex_to_rgb, WHITE
        return hex_to_rgb(self.page_background) or WHITE


# (field name, env var, parser) for every setting that can come from the environment
_ENV_FIELDS = (
    ("max_visits", "CONTRAST_MAX_VISITS", int),
    ("max_candidates", "CONTRAST_MAX_CANDIDATES", int),
    ("max_ancestor_depth", "CONTRAST_MAX_ANCESTOR_DEPTH", int),
    ("max_sibling_scan", "CONTRAST_MAX_SIBLING_SCAN", int),
    ("page_background", "CONTRAST_PAGE_BACKGROUND", str),
    ("lookup_max_attempts", "CONTRAST_LOOKUP_MAX_ATTEMPTS", int),
    ("lookup_base_wait_seconds", "CONTRAST_LOOKUP_BASE_WAIT", float),
    ("log_level", "CONTRAST_LOG_LEVEL", str),
    ("log_format", "CONTRAST_LOG_FORMAT", str),
)


def load_settings(dotenv_path: Optional[str] = None, use_dotenv: bool = True) -> AuditSettings:
    # Build settings from environment variables, reading a .env file first
    # Raises ConfigurationError for any value that cannot be used
    if use_dotenv:
        load_dotenv(dotenv_path)

    values = {}
    for field_name, env_var, parser in _ENV_FIELDS:
        raw = os.getenv(env_var)
        if raw is None or not raw.strip():
            continue

        try:
            value = parser(raw.strip())
        except ValueError as e:
            raise ConfigurationError(
                message=f"Invalid value for {env_var}: '{raw}'",
                config_key=env_var,
                config_file=dotenv_path,
                expected_format=parser.__name__,
                error_context=create_error_context(
                    component="Configuration",
                    operation="settings_parse",
                    provided_value=raw
                ),
                cause=e
            ) from e

        if parser in (int, float) and value <= 0:
            raise ConfigurationError(
                message=f"{env_var} must be positive, got {value}",
                config_key=env_var,
                config_file=dotenv_path,
                expected_format=f"positive {parser.__name__}",
            )

        values[field_name] = value

    settings = AuditSettings(**values)
    validate_settings(settings)

    logger.debug(f"Loaded audit settings: {settings}")
    return settings


def validate_settings(settings: AuditSettings) -> None:
    from contrast.color import hex_to_rgb

    if hex_to_rgb(settings.page_background) is None:
        raise ConfigurationError(
            message=f"Invalid page background color: '{settings.page_background}'",
            config_key="CONTRAST_PAGE_BACKGROUND",
            expected_format="#RRGGBB",
        )

    if settings.log_format.lower() not in ("json", "text"):
        raise ConfigurationError(
            message=f"Unsupported log format: '{settings.log_format}'",
            config_key="CONTRAST_LOG_FORMAT",
            expected_format="One of: json, text",
        )

    if not isinstance(logging.getLevelName(settings.log_level.upper()), int):
        raise ConfigurationError(
            message=f"Unknown log level: '{settings.log_level}'",
            config_key="CONTRAST_LOG_LEVEL",
            expected_format="One of: DEBUG, INFO, WARNING, ERROR, CRITICAL",
        )
