"""
PDF Template Scanner

Lists the PDF templates below the templates root with basic form metadata.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from pypdf import PdfReader

from .paths import is_within_root

logger = logging.getLogger(__name__)


class TemplateScanner:
    """Scans PDF templates for form fields"""

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)

    def scan_template(self, pdf_file: Path) -> Dict:
        """
        Read page and AcroForm field counts of a single template.

        Returns: {
            "template": "forms/fire.pdf",   # relative to the templates root, posix style
            "pages": 2,
            "field_count": 14,
        }
        Counts are None when the file cannot be parsed.
        """
        entry: Dict[str, Optional[object]] = {
            "template": pdf_file.relative_to(self.templates_dir).as_posix(),
            "pages": None,
            "field_count": None,
        }
        try:
            reader = PdfReader(str(pdf_file), strict=False)
            entry["pages"] = len(reader.pages)
            entry["field_count"] = len(reader.get_fields() or {})
        except Exception as e:
            logger.warning("Could not read template %s: %s", pdf_file, e)
        return entry

    def list_templates(self) -> List[Dict]:
        """
        Scan all PDF templates in the templates directory, sorted by relative path.
        """
        if not self.templates_dir.is_dir():
            logger.warning("Templates directory not found: %s", self.templates_dir)
            return []

        results = []
        for pdf_file in sorted(self.templates_dir.rglob("*")):
            if pdf_file.suffix.lower() != ".pdf" or not pdf_file.is_file():
                continue
            # Symlinks may point anywhere; only list what really lives below the root.
            if not is_within_root(self.templates_dir, pdf_file):
                logger.debug("Skipping %s: resolves outside the templates root", pdf_file)
                continue
            results.append(self.scan_template(pdf_file))

        logger.info("Scanned %d templates in %s", len(results), self.templates_dir)
        return results
