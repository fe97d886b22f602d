"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LANGUAGE_PLACEHOLDER = "{language}"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelScope", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    movie_api_url: HttpUrl = Field(
        default="http://localhost:8000",
        alias="MOVIE_API_URL",
        validation_alias=AliasChoices("MOVIE_API_URL", "MOVIE_SOURCE_URL"),
    )
    current_movies_path: str = Field(
        default="/movies/{language}.json", alias="CURRENT_MOVIES_PATH"
    )
    historic_movies_path: str = Field(
        default="/historic-movies/{language}.json", alias="HISTORIC_MOVIES_PATH"
    )
    default_language: str = Field(default="Hindi", alias="DEFAULT_LANGUAGE")
    page_size: int = Field(default=12, alias="PAGE_SIZE", ge=1, le=200)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("current_movies_path", "historic_movies_path", mode="before")
    @classmethod
    def _normalise_path(cls, value: object) -> str:
        """Ensure source paths are rooted and carry the language placeholder."""

        path = str(value or "").strip()
        if LANGUAGE_PLACEHOLDER not in path:
            raise ValueError("Movie source paths must contain a {language} placeholder")
        if not path.startswith("/"):
            path = f"/{path}"
        return path

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("default_language", mode="before")
    @classmethod
    def _strip_language(cls, value: object) -> str:
        language = str(value or "").strip()
        if not language:
            raise ValueError("DEFAULT_LANGUAGE may not be blank")
        return language

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
