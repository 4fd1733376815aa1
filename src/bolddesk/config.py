import json
import logging
import os
from pathlib import Path
from typing import Optional, Mapping

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DOMAIN_ENV = "BOLDDESK_DOMAIN"
API_KEY_ENV = "BOLDDESK_API_KEY"
CONFIG_DIR_NAME = ".bolddesk-cli"
CONFIG_FILE_NAME = "config.json"


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


class BoldDeskConfig(BaseModel):
    domain: Optional[str] = Field(None, description="Helpdesk host, e.g. 'yourcompany.bolddesk.com'")
    api_key: Optional[str] = Field(None, alias="apiKey", description="API key sent as x-api-key")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_complete(self) -> bool:
        return bool(self.domain and self.api_key)

    def masked_api_key(self) -> str:
        key = self.api_key or ""
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"


def load_config(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> BoldDeskConfig:
    """Resolve domain and API key.

    The JSON file supplies defaults; BOLDDESK_DOMAIN and BOLDDESK_API_KEY
    override it value by value. A missing file is not an error.
    """
    path = path or default_config_path()
    env = os.environ if env is None else env

    data = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8")) or {}
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Could not read configuration file {path}: {e}") from e
    config = BoldDeskConfig.model_validate(data)

    if env.get(DOMAIN_ENV):
        config.domain = env[DOMAIN_ENV]
    if env.get(API_KEY_ENV):
        config.api_key = env[API_KEY_ENV]
    return config


def save_config(config: BoldDeskConfig, path: Optional[Path] = None) -> Path:
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(by_alias=True, exclude_none=True), indent=2), encoding="utf-8")
    logger.info(f"Saved configuration to {path}")
    return path


def validate_config_or_raise(config: BoldDeskConfig) -> None:
    missing = []
    if not config.api_key:
        missing.append(API_KEY_ENV)
    if not config.domain:
        missing.append(DOMAIN_ENV)
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")
    if "://" in config.domain:
        raise RuntimeError(f"{DOMAIN_ENV} should not include scheme; use e.g. 'yourcompany.bolddesk.com'")
    if "." not in config.domain:
        raise RuntimeError(f"{DOMAIN_ENV} looks invalid (no dot present)")
