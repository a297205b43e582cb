import json
import logging
from pathlib import Path

import pytest

from inspector import Settings, load_document_templates
from inspector.config import PROJECT_ROOT


def test_defaults():
    settings = Settings.from_env({})
    assert settings.port == 8087
    assert settings.templates_root == (PROJECT_ROOT / "originals").resolve()
    assert settings.document_map_file == PROJECT_ROOT / "config" / "originals.json"
    assert settings.pdftk_bin == "pdftk"
    assert settings.pdftk_timeout == 60.0
    assert settings.temp_dir is None
    assert settings.field_cache_ttl == 300
    assert settings.allowed_cors_urls == ("*",)


def test_environment_overrides(tmp_path):
    settings = Settings.from_env(
        {
            "ORIG_TEMPLATES_ROOT": str(tmp_path / "originals"),
            "PORT": "9000",
            "DOCUMENT_MAP_FILE": str(tmp_path / "map.json"),
            "PDFTK_BIN": "/opt/pdftk/bin/pdftk",
            "PDFTK_TIMEOUT": "2.5",
            "INSPECTOR_TMP_DIR": str(tmp_path / "tmp"),
            "FORM_URL": "https://forms.example/",
            "FIELD_CACHE_TTL": "0",
            "LOG_LEVEL": "debug",
            "ALLOWED_CORS_URLS": "https://a.example, https://b.example",
        }
    )
    assert settings.templates_root == (tmp_path / "originals").resolve()
    assert settings.port == 9000
    assert settings.document_map_file == tmp_path / "map.json"
    assert settings.pdftk_bin == "/opt/pdftk/bin/pdftk"
    assert settings.pdftk_timeout == 2.5
    assert settings.temp_dir == tmp_path / "tmp"
    assert settings.form_url == "https://forms.example/"
    assert settings.field_cache_ttl == 0
    assert settings.log_level == "DEBUG"
    assert settings.allowed_cors_urls == ("https://a.example", "https://b.example")


@pytest.mark.parametrize(
    "env",
    [
        {"PORT": "http"},
        {"PORT": "0"},
        {"PORT": "70000"},
        {"PDFTK_TIMEOUT": "soon"},
        {"PDFTK_TIMEOUT": "-1"},
        {"FIELD_CACHE_TTL": "-5"},
    ],
)
def test_invalid_numbers_fail_fast(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_load_document_templates(tmp_path):
    path = tmp_path / "originals.json"
    path.write_text(json.dumps({"12": "fire/annual.pdf", "13": "sprinkler.pdf"}))
    assert load_document_templates(path) == {"12": "fire/annual.pdf", "13": "sprinkler.pdf"}


def test_missing_document_map_is_a_warning(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="inspector.config"):
        assert load_document_templates(tmp_path / "missing.json") == {}
    assert "not found" in caplog.text


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '"fire.pdf"', "\xff\xfe"])
def test_malformed_document_map_is_a_warning(tmp_path, caplog, content):
    path = tmp_path / "originals.json"
    path.write_bytes(content.encode("latin-1"))
    with caplog.at_level(logging.WARNING, logger="inspector.config"):
        assert load_document_templates(path) == {}
    assert caplog.records


def test_invalid_entries_are_dropped(tmp_path):
    path = tmp_path / "originals.json"
    path.write_text(json.dumps({"1": "ok.pdf", "2": 5, "3": "", "4": None}))
    assert load_document_templates(Path(path)) == {"1": "ok.pdf"}
