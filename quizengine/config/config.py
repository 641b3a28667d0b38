from __future__ import annotations

"""Configuration loading and validation for quizengine.

This module loads YAML configuration, applies defaults, and validates
that enumerations and numeric limits are sane for the engine and CLI.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ALLOWED_BACKENDS = {"parquet", "memory"}
ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def _int_setting(section: Dict[str, Any], key: str, default: int, minimum: int) -> None:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = None
    if value is None or value < minimum:
        logger.warning("Invalid %s=%r, using %d.", key, raw, default)
        value = default
    section[key] = value


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    for section in ("quiz", "custom", "provider", "storage", "user", "logging"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    quiz = cfg["quiz"]
    custom = cfg["custom"]
    provider = cfg["provider"]
    storage = cfg["storage"]
    user = cfg["user"]
    log_cfg = cfg["logging"]

    quiz.setdefault("default_topic", "science-nature")
    _int_setting(quiz, "question_time_s", 30, 1)
    _int_setting(quiz, "settle_ms", 2000, 0)

    _int_setting(custom, "min_questions", 5, 1)
    _int_setting(custom, "max_questions", 50, 1)
    if custom["max_questions"] < custom["min_questions"]:
        logger.warning("custom.max_questions below min_questions, using %d.", custom["min_questions"])
        custom["max_questions"] = custom["min_questions"]

    provider.setdefault("enabled", True)
    provider.setdefault("model", "gemini-2.5-flash")
    provider.setdefault("api_key_env", "GEMINI_API_KEY")
    provider.setdefault("temperature", 0.7)
    _int_setting(provider, "timeout_s", 60, 1)

    storage.setdefault("backend", "parquet")
    storage.setdefault("data_dir", "./storage/data")
    user.setdefault("default_id", "local")
    log_cfg.setdefault("level", "INFO")

    # Enum validations
    backend = storage.get("backend")
    if backend not in ALLOWED_BACKENDS:
        logger.warning("Unsupported storage backend '%s', falling back to 'parquet'.", backend)
        storage["backend"] = "parquet"

    level = str(log_cfg.get("level")).upper()
    if level not in ALLOWED_LOG_LEVELS:
        logger.warning("Unsupported logging level '%s', using 'INFO'.", log_cfg.get("level"))
        level = "INFO"
    log_cfg["level"] = level

    return cfg
