import logging
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError

# --- Base Path ---
BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CAPABILITY_PATH = BASE_DIR / 'campaign_monitor' / 'v3'
DEFAULT_EXCLUSIONS = ['create', 'send']
logger = logging.getLogger('campaign_monitor.config')

# --- Environment-based Settings ---

class AppSettings(BaseSettings):
    """
    Adapter settings loaded from environment variables.
    The .env file is loaded automatically by pydantic-settings.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- Credentials ---
    CM_API_KEY: str = Field(..., description="Campaign Monitor API key.")

    # --- Capability Loading ---
    CM_BASE_PATH: Optional[str] = Field(None, description="Optional: Directory holding csrest_<capability>.py files.")
    CM_SECURE: bool = Field(False, description="Use the https scheme for capability clients.")

    # --- Cache ---
    CM_CACHE_DIR: Optional[str] = Field(None, description="Optional: Cache directory. Caching is disabled when unset.")
    CM_CACHE_TTL: int = Field(300, ge=0, description="Seconds a cache entry stays valid.")
    CM_CACHE_LOCK_TIMEOUT: float = Field(10.0, gt=0, description="Seconds to wait for a cache write lock.")
    CM_CACHE_KEY_SCOPE: Literal['method', 'call'] = Field('method', description="Derive cache keys from the method name only, or from the full call.")
    CM_CONFIG_PATH: Optional[str] = Field(None, description="Optional: Path to a YAML cache configuration file.")

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", description="Log level for the adapter (e.g., DEBUG, INFO, WARNING, ERROR)")
    LOG_DIR: Optional[str] = Field(None, description="Optional: Directory for the rotating JSON log file.")

# --- YAML-based Configuration Models ---

class CacheConfig(BaseModel):
    exclusions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUSIONS))
    location: Optional[str] = None
    ttl: Optional[int] = Field(None, ge=0)

def load_yaml(path: Path) -> dict:
    """Reads a YAML file, returning an empty mapping for empty files."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return data or {}

def load_config(path: Path, model: type) -> BaseModel:
    """Loads a YAML file and validates it with the given Pydantic model."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file '{path.name}' not found in {path.parent}")
    return model.model_validate(load_yaml(path))

# --- Main Config Object ---

class Config:
    """
    A unified configuration object.
    """
    def __init__(self):
        try:
            self.app = AppSettings()
        except ValidationError as e:
            missing_vars = [str(err['loc'][0]) for err in e.errors() if err['type'] == 'missing']
            if missing_vars:
                logger.critical(
                    "Missing required environment variables. "
                    f"Set the following values in the environment or '.env': {', '.join(missing_vars)}"
                )
                raise ConfigError(f"Missing required settings: {', '.join(missing_vars)}") from e
            logger.critical(f"Configuration validation error: {e}")
            raise ConfigError(f"Invalid settings: {e}") from e

        self.cache: CacheConfig = self._load_cache_config()

    def _load_cache_config(self) -> CacheConfig:
        if not self.app.CM_CONFIG_PATH:
            return CacheConfig()
        try:
            return load_config(Path(self.app.CM_CONFIG_PATH), CacheConfig)
        except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not load cache configuration: {e}") from e

    @property
    def base_path(self) -> Path:
        return Path(self.app.CM_BASE_PATH) if self.app.CM_BASE_PATH else DEFAULT_CAPABILITY_PATH

    @property
    def cache_location(self) -> Optional[str]:
        return self.app.CM_CACHE_DIR or self.cache.location

    @property
    def cache_ttl(self) -> int:
        return self.cache.ttl if self.cache.ttl is not None else self.app.CM_CACHE_TTL

# --- Global Config Instance ---
_settings_instance = None

def get_settings() -> Config:
    """
    Returns a singleton instance of the Config object.
    Settings are loaded on first use rather than at import time, so tests can
    set up the environment first.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Config()
    return _settings_instance

def reset_settings() -> None:
    """Drops the cached Config so the next get_settings() call reloads it."""
    global _settings_instance
    _settings_instance = None
