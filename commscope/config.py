"""
commscope/config.py
User settings persisted to commscope_config.json in the project root.
Missing or unreadable files fall back to DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "commscope_config.json"

DEFAULT_CONFIG = {
    "top_n": 15,
    "export_dir": ".",
    "default_source": None,
    "api_host": "127.0.0.1",
    "api_port": 8765,
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from commscope_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("config root is not an object")
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, ValueError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to commscope_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def export_path(config: Dict[str, Any], filename: str) -> Path:
    """Resolve an export filename against the configured export_dir."""
    return Path(config.get("export_dir") or ".") / filename
