"""Settings loaded from an optional ``config.json``.

Example::

    {
        "data_dir": "data",
        "seed_extensions": ["png", "jpg", "jpeg", "gif", "bmp"],
        "tag_types": ["location", "person"],
        "tag_policies": {"location": "single"},
        "log_level": "INFO"
    }
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from photoalbum.entities import DEFAULT_TAG_POLICIES, TagPolicy
from photoalbum.lib.imagefiles import DEFAULT_IMAGE_EXTENSIONS
from photoalbum.services.tags import DEFAULT_TAG_TYPES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.json"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    users_dir: Path = Path("data") / "users"
    stock_dir: Path = Path("data") / "stock"
    seed_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    tag_types: tuple[str, ...] = DEFAULT_TAG_TYPES
    tag_policies: dict[str, TagPolicy] = field(default_factory=lambda: dict(DEFAULT_TAG_POLICIES))
    log_level: str = "WARNING"


def _load_config(path: Path) -> dict[str, Any]:
    """Read a JSON config file; a missing or malformed file yields an empty dict."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        logger.warning("ignoring config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config file %s: top level is not an object", path)
        return {}
    logger.debug("loaded config from %s", path)
    return data


def _names(value, default: tuple[str, ...]) -> tuple[str, ...]:
    # accept list or comma string
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        out = tuple(str(v).strip().lower().lstrip(".") for v in value if str(v).strip())
        if out:
            return out
    return default


def _policies(value) -> dict[str, TagPolicy]:
    policies = dict(DEFAULT_TAG_POLICIES)
    if not isinstance(value, dict):
        return policies
    for name, raw in value.items():
        try:
            policies[str(name).strip().lower()] = TagPolicy(str(raw).strip().lower())
        except ValueError:
            logger.warning("ignoring tag policy %r for '%s'", raw, name)
    return policies


def _validate_and_normalize_config(cfg: dict) -> dict:
    out: dict = {}
    data_dir = Path(cfg.get("data_dir") or "data")
    out["data_dir"] = data_dir
    out["users_dir"] = Path(cfg["users_dir"]) if cfg.get("users_dir") else data_dir / "users"
    out["stock_dir"] = Path(cfg["stock_dir"]) if cfg.get("stock_dir") else data_dir / "stock"
    out["seed_extensions"] = _names(cfg.get("seed_extensions"), DEFAULT_IMAGE_EXTENSIONS)
    out["tag_types"] = _names(cfg.get("tag_types"), DEFAULT_TAG_TYPES)
    out["tag_policies"] = _policies(cfg.get("tag_policies"))
    level = str(cfg.get("log_level") or "WARNING").upper()
    out["log_level"] = level if isinstance(logging.getLevelName(level), int) else "WARNING"
    return out


def load_settings(path: Optional[str | Path] = None, **overrides) -> Settings:
    """Build Settings from defaults, a JSON file and keyword overrides.

    Without ``path`` a ``config.json`` in the working directory is used when
    present. Overrides set to None are ignored.
    """
    cfg_path = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_NAME
    raw = _load_config(cfg_path)
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**_validate_and_normalize_config(raw))
