"""
Inspector sidecar: AcroForm template introspection and pdftk-based filling.

This package bundles:
  - template path validation below a configured root
  - field-name extraction and form filling through pdftk
  - the Paperless document ID -> template lookup
"""

from .config import Settings, load_document_templates
from .errors import (
    ArtifactWriteError,
    InspectorError,
    InvalidTemplatePath,
    OutputReadError,
    PdftkError,
    PdftkExitError,
    PdftkLaunchError,
    PdftkTimeoutError,
    TemplateNotFound,
)
from .paths import resolve_template_path
from .service import InspectorService

__all__ = [
    "ArtifactWriteError",
    "InspectorError",
    "InspectorService",
    "InvalidTemplatePath",
    "OutputReadError",
    "PdftkError",
    "PdftkExitError",
    "PdftkLaunchError",
    "PdftkTimeoutError",
    "Settings",
    "TemplateNotFound",
    "load_document_templates",
    "resolve_template_path",
]
