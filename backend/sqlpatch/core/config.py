from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "SQL Patch Generator"
    API_V1_STR: str = "/api"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: AnyUrl | None = None

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl | str] | str, BeforeValidator(parse_cors)
    ] = ["*"]

    # Annotated .sql templates, scanned once at start-up
    TEMPLATES_DIR: Path = _PACKAGE_DIR / "sql"
    # Generated patch files land here
    OUTPUT_DIR: Path = Path("./svn_repo_mock")

    # Oracle rejects IN lists longer than 1000 elements
    IN_CLAUSE_MAX_SIZE: int = 999
    # Reject number/integer values that do not parse instead of emitting them raw
    STRICT_PARAM_TYPES: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]


settings = Settings()  # type: ignore
