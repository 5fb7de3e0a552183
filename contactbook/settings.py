from __future__ import annotations

# contactbook/settings.py
import logging
import os

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) CONTACTS_DB_PATH env var (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: contacts.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "contacts.db")
_CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config.yaml")


class Settings(BaseModel):
    db_path: str = _ROOT_DB
    validate_name_on_update: bool = True
    log_level: str = "INFO"
    operation_log: bool = True


def _read_config_yaml(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return {}
    return cfg if isinstance(cfg, dict) else {}


def _is_test_env() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def resolve_db_path(cfg: dict) -> str:
    env_path = os.environ.get("CONTACTS_DB_PATH")
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")

    if env_path:
        return env_path
    if _is_test_env() and isinstance(cfg_test, str) and cfg_test.strip():
        return cfg_test.strip()
    if isinstance(cfg_db, str) and cfg_db.strip():
        return cfg_db.strip()
    return _ROOT_DB


def load_settings(path: str | None = None) -> Settings:
    """Build Settings from config.yaml (or `path`) plus the environment."""
    cfg = _read_config_yaml(path or _CONFIG_PATH)
    values = {k: cfg[k] for k in ("validate_name_on_update", "log_level", "operation_log") if k in cfg}
    values["db_path"] = resolve_db_path(cfg)
    try:
        return Settings(**values)
    except ValidationError as e:
        logger.warning("ignoring invalid config values: %s", e)
        return Settings(db_path=values["db_path"])


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
