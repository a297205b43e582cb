import stat
from pathlib import Path

import pytest

from inspector import Settings

TEMPLATE_BYTES = b"%PDF-1.4\n% fire inspection template\n%%EOF\n"

FIELD_DUMP = """\
---
FieldType: Text
FieldName: Name
FieldFlags: 0
FieldJustification: Left
---
FieldType: Text
FieldName: Station
FieldFlags: 4096
---
FieldType: Button
FieldName: Passed
FieldStateOption: Off
FieldStateOption: Yes
"""


@pytest.fixture
def make_pdftk(tmp_path):
    """Write an executable /bin/sh script standing in for pdftk and return its path."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    counter = {"n": 0}

    def _make(body: str) -> str:
        counter["n"] += 1
        script = bin_dir / f"pdftk-{counter['n']}"
        script.write_text("#!/bin/sh\n" + body)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def templates_root(tmp_path) -> Path:
    root = tmp_path / "templates"
    (root / "forms").mkdir(parents=True)
    (root / "forms" / "fire.pdf").write_bytes(TEMPLATE_BYTES)
    return root


@pytest.fixture
def scratch(tmp_path) -> Path:
    """Temp directory for fill artifacts; tests assert it is empty afterwards."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def capture_path(tmp_path) -> Path:
    return tmp_path / "captured.fdf"


@pytest.fixture
def fill_ok(make_pdftk, capture_path):
    """pdftk stand-in: keeps a copy of the FDF and 'fills' by copying the template."""
    # argv: template fill_form <fdf> output <out> flatten
    return make_pdftk(f'cp "$3" "{capture_path}"\ncp "$1" "$5"\n')


@pytest.fixture
def dump_ok(make_pdftk):
    return make_pdftk(f"cat <<'EOF'\n{FIELD_DUMP}EOF\n")


@pytest.fixture
def make_settings(templates_root, scratch, tmp_path):
    def _make(**overrides) -> Settings:
        values = dict(
            templates_root=templates_root,
            document_map_file=tmp_path / "originals.json",
            pdftk_bin="pdftk",
            pdftk_timeout=10.0,
            temp_dir=scratch,
            form_url="http://forms.local/",
            field_cache_ttl=300,
        )
        values.update(overrides)
        return Settings(**values)

    return _make
