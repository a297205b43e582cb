"""
Thin wrappers around the pdftk command line tool.

`dump_field_names` lists the AcroForm fields of a template and `fill_form`
produces a flattened copy with the supplied values. Both block until pdftk
exits, so callers run them off the event loop (FastAPI does this for sync
endpoints).
"""

from __future__ import annotations

import itertools
import logging
import os
import re
import secrets
import subprocess
import tempfile
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import (
    ArtifactWriteError,
    OutputReadError,
    PdftkExitError,
    PdftkLaunchError,
    PdftkTimeoutError,
)
from .fdf import build_fdf

logger = logging.getLogger(__name__)

FIELD_NAME_RE = re.compile(r"^FieldName:\s*(.+)$")

_artifact_counter = itertools.count(1)

PathLike = Union[str, Path]


def parse_field_names(dump: str) -> List[str]:
    """Return the `FieldName:` values of a pdftk field dump, in order."""
    names = []
    for line in dump.splitlines():
        match = FIELD_NAME_RE.match(line)
        if match:
            names.append(match.group(1))
    return names


def _run_pdftk(
    args: Sequence[str],
    operation: str,
    timeout: Optional[float],
) -> subprocess.CompletedProcess:
    try:
        process = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout or None,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        logger.error("pdftk %s timed out after %ss", operation, timeout)
        raise PdftkTimeoutError(operation, timeout) from exc
    except OSError as exc:
        logger.error("pdftk %s could not be started: %s", operation, exc)
        raise PdftkLaunchError(f"pdftk spawn failed: {exc}", exc) from exc

    if process.returncode != 0:
        stderr = process.stderr.decode("utf-8", errors="replace")
        logger.error("pdftk %s exited with code %s: %s", operation, process.returncode, stderr.strip())
        raise PdftkExitError(operation, process.returncode, stderr)
    return process


def dump_field_names(
    template_path: PathLike,
    *,
    pdftk_bin: str = "pdftk",
    timeout: Optional[float] = None,
) -> List[str]:
    """
    Extract the list of AcroForm field names from a PDF.

    Args:
        template_path: Absolute path to an existing template.
        pdftk_bin: pdftk executable to run.
        timeout: Seconds to wait before killing pdftk; ``None``/``0`` waits forever.

    Returns:
        Field names in the order pdftk reports them.
    """
    process = _run_pdftk(
        [pdftk_bin, str(template_path), "dump_data_fields_utf8"],
        "dump_data_fields",
        timeout,
    )
    names = parse_field_names(process.stdout.decode("utf-8", errors="replace"))
    logger.debug("Found %d fields in %s", len(names), template_path)
    return names


def allocate_artifact_paths(temp_dir: Optional[PathLike] = None) -> Tuple[Path, Path]:
    """Return unique (fdf_path, output_path) names for one fill invocation."""
    base = Path(temp_dir) if temp_dir is not None else Path(tempfile.gettempdir())
    stem = f"inspector_{os.getpid()}_{next(_artifact_counter)}_{secrets.token_hex(8)}"
    return base / f"{stem}.fdf", base / f"{stem}_out.pdf"


def _remove_artifact(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Failed to remove temporary file %s: %s", path, exc)


def fill_form(
    template_path: PathLike,
    fields: Mapping[str, Any],
    *,
    pdftk_bin: str = "pdftk",
    timeout: Optional[float] = None,
    temp_dir: Optional[PathLike] = None,
) -> bytes:
    """
    Fill a PDF template with the provided data and return the flattened PDF.

    The FDF data file and pdftk's output file live in `temp_dir` only for the
    duration of this call; both are removed on every exit path.

    Args:
        template_path: Absolute path to an existing template.
        fields: Mapping of PDF field name -> value.
        pdftk_bin: pdftk executable to run.
        timeout: Seconds to wait before killing pdftk; ``None``/``0`` waits forever.
        temp_dir: Directory for the temporary files (system temp dir by default).

    Raises:
        ArtifactWriteError: the FDF file could not be written, or a value
            could not be encoded.
        PdftkLaunchError: pdftk could not be started.
        PdftkTimeoutError: pdftk exceeded `timeout`.
        PdftkExitError: pdftk exited non-zero.
        OutputReadError: the filled PDF could not be read back.
    """
    fdf_path, out_path = allocate_artifact_paths(temp_dir)
    try:
        try:
            fdf_path.write_bytes(build_fdf(fields))
        except (OSError, UnicodeError) as exc:
            # UnicodeError: lone surrogates have no UTF-16 encoding.
            logger.error("Could not write FDF data to %s: %s", fdf_path, exc)
            raise ArtifactWriteError(f"could not write form data: {exc}") from exc

        _run_pdftk(
            [pdftk_bin, str(template_path), "fill_form", str(fdf_path), "output", str(out_path), "flatten"],
            "fill_form",
            timeout,
        )

        try:
            pdf_bytes = out_path.read_bytes()
        except OSError as exc:
            logger.error("Could not read pdftk output %s: %s", out_path, exc)
            raise OutputReadError(f"could not read filled PDF: {exc}") from exc

        logger.info("Filled %s (%d fields, %d bytes)", template_path, len(fields), len(pdf_bytes))
        return pdf_bytes
    finally:
        _remove_artifact(fdf_path)
        _remove_artifact(out_path)
