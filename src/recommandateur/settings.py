from pathlib import Path
from typing import Literal, Optional, List

from pydantic import AnyHttpUrl, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class AllocineSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ALLOCINE_", extra="ignore")
    partner_code: SecretStr
    api_base_url: AnyHttpUrl = "https://api.allocine.fr/rest/v3"
    count: int = 20

class CloudflareKVSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CF_KV_", extra="ignore")
    account_id: str
    namespace_id: str
    api_token: SecretStr
    api_base_url: AnyHttpUrl = "https://api.cloudflare.com/client/v4"

class Settings(BaseSettings):

    # ---- Data roots ----
    project_root: Path = Path(".").resolve()
    data_root: Path = Path("data")
    kv_dir: Path = data_root / "kv"

    # ---- storage ----
    kv_backend: Literal["memory", "local", "cloudflare"] = "local"

    # ---- app/runtime ----
    env: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    verify_ssl: bool = True
    request_timeout_s: float = 10.0

    # ---- API server configuration ----
    api_host: str = "127.0.0.1"  # localhost for dev, 0.0.0.0 for docker/prod
    api_port: int = 8000
    api_reload: bool = True  # Auto-reload on code changes (dev only)
    api_workers: int = 1
    cors_origins: List[str] = ["*"]
    api_token: Optional[SecretStr] = None  # unset => protected routes always answer 401

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_prefix="APP_",      # APP_ENV, APP_LOG_LEVEL, APP_API_TOKEN, etc.
        env_nested_delimiter='__',
        extra = "ignore"
    )

    # ---- integrations ----
    allocine: Optional[AllocineSettings] = None
    cloudflare: Optional[CloudflareKVSettings] = None


def get_settings() -> Settings:
    """Build settings from the environment (.env + APP_* variables)."""
    return Settings()


def _load_optional(model, current):
    if current is not None:
        return current
    try:
        return model()
    except ValidationError:
        return None


def get_allocine_settings(cfg: Settings) -> Optional[AllocineSettings]:
    """Nested APP_ALLOCINE__* settings, else standalone ALLOCINE_* variables, else None."""
    return _load_optional(AllocineSettings, cfg.allocine)


def get_cloudflare_settings(cfg: Settings) -> Optional[CloudflareKVSettings]:
    """Nested APP_CLOUDFLARE__* settings, else standalone CF_KV_* variables, else None."""
    return _load_optional(CloudflareKVSettings, cfg.cloudflare)
