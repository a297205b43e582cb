from pathlib import Path

import pytest

from inspector import InvalidTemplatePath, resolve_template_path
from inspector.paths import is_within_root

ROOT = "/templates"


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        None,
        42,
        "../x",
        "a/../../b",
        "../../../etc/passwd",
        "forms/../../secrets.pdf",
        "/etc/passwd",
        "//etc/passwd",
        "..",
        "forms/\x00.pdf",
        "../templates-evil/report.pdf",
    ],
)
def test_rejects_unsafe_candidates(candidate):
    with pytest.raises(InvalidTemplatePath):
        resolve_template_path(ROOT, candidate)


@pytest.mark.parametrize(
    "candidate, expected",
    [
        ("forms/fire.pdf", "/templates/forms/fire.pdf"),
        ("a/../b", "/templates/b"),
        ("./forms//fire.pdf", "/templates/forms/fire.pdf"),
        ("fire.pdf", "/templates/fire.pdf"),
    ],
)
def test_accepts_paths_inside_root(candidate, expected):
    assert resolve_template_path(ROOT, candidate) == Path(expected)


def test_filenames_mentioning_dotdot_are_refused():
    with pytest.raises(InvalidTemplatePath):
        resolve_template_path(ROOT, "reports/v1..2.pdf")


def test_sibling_directory_with_shared_prefix_is_not_inside(tmp_path):
    root = tmp_path / "root"
    evil = tmp_path / "root-evil"
    root.mkdir()
    evil.mkdir()
    with pytest.raises(InvalidTemplatePath):
        resolve_template_path(root, "../root-evil/report.pdf")


def test_relative_root_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    resolved = resolve_template_path("templates", "forms/fire.pdf")
    assert resolved.is_absolute()
    assert resolved == Path.cwd() / "templates" / "forms" / "fire.pdf"


def test_does_not_touch_the_filesystem(tmp_path):
    missing_root = tmp_path / "nowhere"
    assert resolve_template_path(missing_root, "x.pdf") == missing_root / "x.pdf"
    assert not missing_root.exists()


def test_is_within_root_follows_symlinks(tmp_path):
    root = tmp_path / "templates"
    (root / "forms").mkdir(parents=True)
    (root / "forms" / "fire.pdf").write_bytes(b"%PDF")
    (tmp_path / "secret.pdf").write_bytes(b"%PDF")
    (root / "inside.pdf").symlink_to(root / "forms" / "fire.pdf")
    (root / "escape.pdf").symlink_to(tmp_path / "secret.pdf")

    assert is_within_root(root, root / "forms" / "fire.pdf")
    assert is_within_root(root, root / "inside.pdf")
    assert not is_within_root(root, root / "escape.pdf")
