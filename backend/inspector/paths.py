"""Template path validation against the configured templates root."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .errors import InvalidTemplatePath

logger = logging.getLogger(__name__)


def resolve_template_path(root: Union[str, Path], candidate: object) -> Path:
    """
    Resolve an untrusted relative template reference below `root`.

    The check is purely lexical: nothing is read from disk, so existence is
    left to the caller. Any normalized path still mentioning ``..`` is refused,
    even where it would only be part of a longer file name.

    Raises:
        InvalidTemplatePath: if the candidate is empty, absolute, or escapes root.
    """
    if not isinstance(candidate, str) or not candidate:
        raise InvalidTemplatePath("invalid template path")
    if "\x00" in candidate:
        raise InvalidTemplatePath("invalid template path")

    normalized = os.path.normpath(candidate)
    if normalized.startswith("..") or ".." in normalized:
        logger.debug("Rejected template path with parent segments: %r", candidate)
        raise InvalidTemplatePath("invalid template path")
    if os.path.isabs(normalized):
        logger.debug("Rejected absolute template path: %r", candidate)
        raise InvalidTemplatePath("invalid template path")

    resolved_root = os.path.abspath(os.fspath(root))
    joined = os.path.join(resolved_root, normalized)
    resolved = os.path.abspath(joined)

    # Segment-wise containment; "/srv/templates-evil" must not pass for "/srv/templates".
    if os.path.commonpath([resolved_root, resolved]) != resolved_root:
        logger.debug("Rejected template path outside root: %r", candidate)
        raise InvalidTemplatePath("invalid template path")

    return Path(resolved_root) / normalized


def is_within_root(root: Union[str, Path], path: Union[str, Path]) -> bool:
    """True if `path`, with symlinks resolved, still lies below `root`."""
    real_root = os.path.realpath(os.fspath(root))
    real_path = os.path.realpath(os.fspath(path))
    return os.path.commonpath([real_root, real_path]) == real_root
