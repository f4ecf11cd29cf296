"""
Environment-driven settings.

Variables are read from the process environment (LABRAT_SITE_ROOT,
LABRAT_HTML_PARSER, LABRAT_LOG_LEVEL). The run script loads a local .env
file first (python-dotenv), so the library itself never touches the
filesystem.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_PARSERS = ("html5lib", "lxml")


class Settings(BaseSettings):
    """Runtime settings shared by the key codec and the orchestrator."""

    site_root: str = "https://www.furaffinity.net/"
    html_parser: str = "html5lib"     # BeautifulSoup tree builder
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LABRAT_",
        env_ignore_empty=True,
        frozen=True,
    )

    @field_validator("site_root")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @field_validator("html_parser")
    @classmethod
    def _known_parser(cls, value: str) -> str:
        if value not in SUPPORTED_PARSERS:
            raise ValueError(f"html_parser must be one of {SUPPORTED_PARSERS}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process, read once from the environment."""
    return Settings()
