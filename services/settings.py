import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:3000")
DEFAULT_IMAGE_HOSTS = ("hf.space", "huggingface.co", "gitee.com", "modelscope.cn")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: {raw!r}, using {default}")
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup"""
    default_provider: str = "gitee"
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    backend_timeout: float = 120.0
    max_prompt_length: int = 4000
    min_dimension: int = 256
    max_dimension: int = 2048
    dimension_alignment: int = 8
    min_steps: int = 1
    max_steps: int = 50
    allowed_image_hosts: Tuple[str, ...] = field(default=DEFAULT_IMAGE_HOSTS)
    strict_models: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from the environment, loading a .env file first"""
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            default_provider=os.getenv("DEFAULT_PROVIDER", defaults.default_provider),
            cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
            backend_timeout=_env_float("BACKEND_TIMEOUT_SECONDS", defaults.backend_timeout),
            max_prompt_length=_env_int("MAX_PROMPT_LENGTH", defaults.max_prompt_length),
            min_dimension=_env_int("MIN_DIMENSION", defaults.min_dimension),
            max_dimension=_env_int("MAX_DIMENSION", defaults.max_dimension),
            dimension_alignment=_env_int("DIMENSION_ALIGNMENT", defaults.dimension_alignment),
            min_steps=_env_int("MIN_STEPS", defaults.min_steps),
            max_steps=_env_int("MAX_STEPS", defaults.max_steps),
            allowed_image_hosts=_env_list("ALLOWED_IMAGE_HOSTS", defaults.allowed_image_hosts),
            strict_models=_env_bool("STRICT_MODELS", defaults.strict_models),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            host=os.getenv("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
        )
