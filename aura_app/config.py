"""Configuration helpers for the Aura wardrobe app."""

from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import List, Optional

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_API_BASE_URL = "http://localhost:3002"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class AuraConfig:
    """Configuration values shared by the client session and the gateway.

    The client side only needs ``api_base_url``, ``access_token`` and the
    local storage directory. The gateway side reads the database, image and
    auth settings. The advisory key is used by both, since the client can fall
    back to calling the model directly when the gateway cannot classify.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    access_token: Optional[str] = None
    auth_secret: Optional[str] = None
    auth_required: bool = True
    database_path: str = "data/wardrobe.db"
    image_dir: str = "data/images"
    public_base_url: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    local_storage_dir: str = "data/profile"
    request_timeout: float = 15.0
    host: str = "0.0.0.0"
    port: int = 3002
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AuraConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("AURA_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        gemini_api_key = get_value("gemini_api_key") or get_value("genai_api_key") or get_value("api_key")
        frontend_url = get_value("frontend_url")
        cors_origins = _split_list(get_value("cors_origins")) or list(DEFAULT_CORS_ORIGINS)
        if frontend_url and frontend_url not in cors_origins:
            cors_origins.append(frontend_url)

        return cls(
            api_base_url=str(get_value("aura_api_url", DEFAULT_API_BASE_URL)).rstrip("/"),
            gemini_api_key=gemini_api_key,
            model=str(get_value("model") or DEFAULT_GEMINI_MODEL),
            image_model=str(get_value("image_model") or DEFAULT_IMAGE_MODEL),
            access_token=get_value("aura_access_token"),
            auth_secret=get_value("aura_auth_secret"),
            auth_required=str(get_value("aura_auth_required", "true")).strip().lower() in _TRUTHY,
            database_path=str(get_value("database_path") or "data/wardrobe.db"),
            image_dir=str(get_value("image_dir") or "data/images"),
            public_base_url=get_value("public_base_url"),
            cors_origins=cors_origins,
            local_storage_dir=str(get_value("local_storage_dir") or "data/profile"),
            request_timeout=float(get_value("request_timeout") or 15.0),
            host=str(get_value("host") or "0.0.0.0"),
            port=int(get_value("port") or 3002),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


__all__ = ["AuraConfig", "DEFAULT_GEMINI_MODEL", "DEFAULT_IMAGE_MODEL"]
