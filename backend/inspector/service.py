"""
High-level service that exposes the inspector capabilities to the FastAPI layer.

Responsibilities
----------------
* validate template references against the templates root
* list AcroForm field names (cached per template revision)
* fill and flatten templates with submitted values
* map Paperless document IDs onto templates for the /start entry point
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from cachetools import TTLCache

from .config import Settings
from .errors import InvalidTemplatePath, TemplateNotFound
from .paths import is_within_root, resolve_template_path
from .pdftk import dump_field_names, fill_form
from .template_scanner import TemplateScanner

logger = logging.getLogger(__name__)

FIELD_CACHE_SIZE = 256


def coerce_field_values(values: Mapping[str, Any]) -> Dict[str, str]:
    """Turn submitted JSON scalars into the strings written to the FDF."""
    return {str(name): "" if value is None else str(value) for name, value in values.items()}


class InspectorService:
    def __init__(self, settings: Settings, document_templates: Optional[Mapping[str, str]] = None):
        self.settings = settings
        self.document_templates: Dict[str, str] = dict(document_templates or {})
        self.template_scanner = TemplateScanner(settings.templates_root)

        self._field_cache: Optional[TTLCache] = None
        if settings.field_cache_ttl > 0:
            self._field_cache = TTLCache(maxsize=FIELD_CACHE_SIZE, ttl=settings.field_cache_ttl)
        self._cache_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def resolve_template(self, template: Optional[str]) -> Path:
        """Validate a template reference and make sure the file exists."""
        path = resolve_template_path(self.settings.templates_root, template)
        if not path.is_file():
            raise TemplateNotFound("template not found")
        # Same rule as the template listing: symlinks must not lead out of the root.
        if not is_within_root(self.settings.templates_root, path):
            logger.warning("Rejected template %r: resolves outside the templates root", template)
            raise InvalidTemplatePath("invalid template path")
        return path

    def list_templates(self) -> List[Dict]:
        return self.template_scanner.list_templates()

    def list_fields(self, template: Optional[str]) -> List[str]:
        path = self.resolve_template(template)
        if self._field_cache is None:
            return self._dump_fields(path)

        key = self._cache_key(path)
        with self._cache_lock:
            cached = self._field_cache.get(key)
        if cached is not None:
            return list(cached)

        names = self._dump_fields(path)
        with self._cache_lock:
            self._field_cache[key] = tuple(names)
        return names

    def fill(self, template: Optional[str], values: Mapping[str, Any]) -> bytes:
        path = self.resolve_template(template)
        return fill_form(
            path,
            coerce_field_values(values),
            pdftk_bin=self.settings.pdftk_bin,
            timeout=self.settings.pdftk_timeout,
            temp_dir=self.settings.temp_dir,
        )

    # ------------------------------------------------------------------
    # Paperless integration
    # ------------------------------------------------------------------
    def template_for_document(self, doc_id: Optional[str]) -> Optional[str]:
        if not doc_id:
            return None
        return self.document_templates.get(str(doc_id))

    def start_location(self, doc_id: Optional[str]) -> str:
        """Entry point URL for a document, preselecting its template when known."""
        template = self.template_for_document(doc_id)
        base = self.settings.form_url
        if not template:
            if doc_id:
                logger.info("No template mapped for document %s; using default entry point", doc_id)
            return base
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}{urlencode({'template': template})}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _dump_fields(self, path: Path) -> List[str]:
        return dump_field_names(
            path,
            pdftk_bin=self.settings.pdftk_bin,
            timeout=self.settings.pdftk_timeout,
        )

    @staticmethod
    def _cache_key(path: Path) -> Tuple[str, int, int]:
        stat = path.stat()
        return str(path), stat.st_mtime_ns, stat.st_size
