"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  A ``.env`` file in the working directory is
loaded first (via ``python-dotenv``) so local development does not
need exported variables.  Defaults are provided for all fields; in a
production deployment you should override database and Cloudinary
credentials via the environment.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Values are read when an instance is created, so tests can set
    variables with ``monkeypatch`` and call :meth:`from_env` to obtain
    an isolated configuration.
    """

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "DA Pages Backend API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))

    # Path to the SQLite file that backs the document store.  ``:memory:``
    # keeps everything in process, which is what the test-suite uses when
    # it does not need a file on disk.  Relative paths are resolved
    # against the project root by ``core.db``.
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "pages.db"))

    # Origins allowed by the CORS middleware.  Comma separated.
    allowed_origins: List[str] = field(
        default_factory=lambda: _env_list(
            "ALLOWED_ORIGINS",
            "http://localhost:3000,http://localhost:3001",
        )
    )

    # Optional static bearer token.  When empty the authentication gate
    # lets every request through.
    api_token: str = field(default_factory=lambda: os.getenv("API_TOKEN", ""))

    cloudinary_cloud_name: str = field(default_factory=lambda: os.getenv("CLOUDINARY_CLOUD_NAME", ""))
    cloudinary_api_key: str = field(default_factory=lambda: os.getenv("CLOUDINARY_API_KEY", ""))
    cloudinary_api_secret: str = field(default_factory=lambda: os.getenv("CLOUDINARY_API_SECRET", ""))
    cloudinary_base_url: str = field(
        default_factory=lambda: os.getenv("CLOUDINARY_BASE_URL", "https://api.cloudinary.com/v1_1")
    )
    # Seconds before a Cloudinary request is abandoned.
    upstream_timeout: float = field(default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT", "10")))

    default_page_size: int = field(default_factory=lambda: int(os.getenv("DEFAULT_PAGE_SIZE", "10")))
    max_page_size: int = field(default_factory=lambda: int(os.getenv("MAX_PAGE_SIZE", "100")))

    @classmethod
    def from_env(cls) -> "Settings":
        """Build a fresh settings object from the current environment."""
        return cls()

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  ``create_app`` accepts an
# explicit instance, which is how tests avoid this module-level copy.
settings = Settings()
