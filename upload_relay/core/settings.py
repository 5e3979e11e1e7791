"""Unified settings for upload-relay."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when not available (installed wheel)."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(base_dir: Path) -> str:
    """Get version from git tags or fallback to package metadata."""
    try:
        import git

        repo = git.Repo(base_dir, search_parent_directories=True)
        latest_tag = max(repo.tags, key=lambda t: t.commit.committed_datetime, default=None)
        return str(latest_tag) if latest_tag else "0.0.0"
    except Exception:
        try:
            import importlib.metadata

            return importlib.metadata.version("upload-relay")
        except Exception:
            return "0.0.0"


@dataclass(frozen=True, slots=True)
class RelayConfig:
    """Everything the relay handler needs, fixed at construction."""

    upload_dir: Path
    external_endpoint: str
    listen_port: int
    forward_timeout: float | None = None


class Settings(BaseSettings):
    """Unified settings for upload-relay service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "upload-relay")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Multipart upload relay")
    API_VERSION: ClassVar[str] = get_version(BASE_DIR)

    # Server
    API_HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Paths
    UPLOAD_DIR: Path = Path("uploads")
    PUBLIC_DIR: Path = Path(__file__).parent.parent / "public"

    # Forwarding
    EXTERNAL_ENDPOINT: str = "https://app.godamda.kr:43000/externalFiles"
    FORWARD_TIMEOUT: float | None = None

    @property
    def api_url(self) -> str:
        return f"http://{self.API_HOST}:{self.PORT}"

    @property
    def relay_config(self) -> RelayConfig:
        return RelayConfig(
            upload_dir=self.UPLOAD_DIR,
            external_endpoint=self.EXTERNAL_ENDPOINT,
            listen_port=self.PORT,
            forward_timeout=self.FORWARD_TIMEOUT,
        )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
