"""
Runtime configuration for the inspector sidecar.

Settings are read from the environment once at startup (``main.py`` loads
``.env.local`` and ``.env`` first) and handed to the service explicitly.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_PORT = 8087
DEFAULT_PDFTK_TIMEOUT = 60.0
DEFAULT_FIELD_CACHE_TTL = 300
DEFAULT_FORM_URL = "http://127.0.0.1:8501/"


def _get_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    templates_root: Path
    document_map_file: Path
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    pdftk_bin: str = "pdftk"
    pdftk_timeout: float = DEFAULT_PDFTK_TIMEOUT
    temp_dir: Optional[Path] = None
    form_url: str = DEFAULT_FORM_URL
    field_cache_ttl: int = DEFAULT_FIELD_CACHE_TTL
    log_level: str = "INFO"
    allowed_cors_urls: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        port = _get_int(env, "PORT", DEFAULT_PORT)
        if not 0 < port < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {port}")

        cache_ttl = _get_int(env, "FIELD_CACHE_TTL", DEFAULT_FIELD_CACHE_TTL)
        if cache_ttl < 0:
            raise ValueError(f"FIELD_CACHE_TTL must not be negative, got {cache_ttl}")

        temp_dir = env.get("INSPECTOR_TMP_DIR")
        origins = env.get("ALLOWED_CORS_URLS", "*")

        return cls(
            templates_root=Path(env.get("ORIG_TEMPLATES_ROOT") or PROJECT_ROOT / "originals").resolve(),
            document_map_file=Path(env.get("DOCUMENT_MAP_FILE") or PROJECT_ROOT / "config" / "originals.json"),
            port=port,
            host=env.get("HOST", "0.0.0.0"),
            pdftk_bin=env.get("PDFTK_BIN", "pdftk"),
            pdftk_timeout=_get_float(env, "PDFTK_TIMEOUT", DEFAULT_PDFTK_TIMEOUT),
            temp_dir=Path(temp_dir) if temp_dir else None,
            form_url=env.get("FORM_URL", DEFAULT_FORM_URL),
            field_cache_ttl=cache_ttl,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            allowed_cors_urls=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


def load_document_templates(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load the Paperless document ID -> template filename table.

    A missing or malformed file is not fatal: a warning is logged and an empty
    table is returned so the sidecar still starts.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Document map %s not found; /start will use the default entry point", path)
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not parse %s: %s", path, exc)
        return {}

    if not isinstance(raw, dict):
        logger.warning("Ignoring %s: expected a JSON object, got %s", path, type(raw).__name__)
        return {}

    mappings: Dict[str, str] = {}
    for doc_id, template in raw.items():
        if not isinstance(template, str) or not template:
            logger.warning("Ignoring document map entry %r: template must be a non-empty string", doc_id)
            continue
        mappings[str(doc_id)] = template

    logger.info("Loaded %d document mappings from %s", len(mappings), path)
    return mappings
