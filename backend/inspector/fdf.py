"""
FDF serialization for `pdftk fill_form`.

Field names and values are written as PDF strings. Plain ASCII text uses a
literal string with the delimiters escaped; anything else is written as a
UTF-16BE hex string with a byte-order mark, which pdftk decodes losslessly.
"""

from __future__ import annotations

from typing import Any, Mapping

FDF_HEADER = b"%FDF-1.2\n%\xe2\xe3\xcf\xd3\n"

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    "(": "\\(",
    ")": "\\)",
    "\n": "\\n",
    "\r": "\\r",
}


def escape_pdf_literal(text: str) -> str:
    """Escape backslashes, parentheses and line breaks for a PDF literal string."""
    return "".join(_LITERAL_ESCAPES.get(ch, ch) for ch in text)


def encode_pdf_string(value: Any) -> str:
    """Encode a field name or value as a complete PDF string token."""
    text = "" if value is None else str(value)
    if text.isascii():
        return f"({escape_pdf_literal(text)})"
    encoded = ("\ufeff" + text).encode("utf-16-be")
    return f"<{encoded.hex().upper()}>"


def build_fdf(fields: Mapping[str, Any]) -> bytes:
    """Build an FDF document assigning each value in `fields` to its field name."""
    entries = "".join(
        f"<< /T {encode_pdf_string(name)} /V {encode_pdf_string(value)} >>\n"
        for name, value in fields.items()
    )
    body = (
        "1 0 obj\n"
        "<< /FDF << /Fields [\n"
        f"{entries}"
        "] >> >>\n"
        "endobj\n"
        "trailer\n"
        "<< /Root 1 0 R >>\n"
        "%%EOF\n"
    )
    return FDF_HEADER + body.encode("ascii")
