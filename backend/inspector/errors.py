"""
Exception taxonomy for the inspector sidecar.

Validation errors (`InvalidTemplatePath`, `TemplateNotFound`) are raised before
any subprocess or file I/O happens and map to client errors. Everything deriving
from `PdftkError` is a server-side failure around the external pdftk tool.
"""

from __future__ import annotations

from typing import Optional


class InspectorError(RuntimeError):
    """Domain-specific exception for service errors."""


class InvalidTemplatePath(InspectorError):
    """The template reference does not denote a file below the templates root."""


class TemplateNotFound(InspectorError):
    """The validated template path does not point at an existing file."""


class PdftkError(InspectorError):
    """Base class for failures while driving pdftk."""


class PdftkLaunchError(PdftkError):
    """pdftk could not be started at all (missing executable, permissions...)."""

    def __init__(self, message: str, os_error: Optional[OSError] = None):
        super().__init__(message)
        self.os_error = os_error


class PdftkExitError(PdftkError):
    """pdftk ran but exited with a non-zero status."""

    def __init__(self, operation: str, returncode: int, stderr: str = ""):
        self.operation = operation
        self.returncode = returncode
        self.stderr = stderr
        message = f"pdftk {operation} failed with exit code {returncode}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class PdftkTimeoutError(PdftkError):
    """pdftk did not finish within the configured timeout and was killed."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"pdftk {operation} timed out after {timeout:g}s")


class ArtifactWriteError(PdftkError):
    """The intermediate FDF file could not be written."""


class OutputReadError(PdftkError):
    """pdftk reported success but its output file could not be read."""
