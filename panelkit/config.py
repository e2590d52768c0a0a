from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "panelkit"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Site prefix every admin route is mounted under
    url_prefix: str = "admin"
    theme: str = "default"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./panelkit.db"

    # Remote plugin catalog
    catalog_url: str = "https://catalog.panelkit.dev"
    catalog_timeout: float = 10.0

    # Plugin source files loaded at boot
    plugin_paths: list[str] = []

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()


def is_production() -> bool:
    return settings.environment.lower() == "production"


def url_remove_prefix(path: str) -> str:
    """Strip the site prefix from the front of a request path."""
    prefix = "/" + settings.url_prefix.strip("/")
    if prefix != "/" and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix) :]
    return path or "/"


def config_snapshot() -> dict:
    """Plain copy of the current settings handed to templates."""
    return settings.model_dump()
