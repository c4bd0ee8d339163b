"""Tests for gitignore-style filtering."""

import pytest

from coderag.ingesters import IgnoreFilter, build_ignore_filter, parse_ignore_lines
from coderag.ingesters.ignore import to_posix

pytestmark = pytest.mark.unit


@pytest.fixture
def builtin_filter(tmp_path):
    return build_ignore_filter(tmp_path)


@pytest.mark.parametrize(
    "path, is_dir",
    [
        ("node_modules", True),
        ("packages/web/node_modules", True),
        (".git", True),
        ("__pycache__", True),
        ("dist", True),
        ("app.log", False),
        ("logs/server.log", False),
        (".env", False),
        (".env.local", False),
        ("package-lock.json", False),
        ("Cargo.lock", False),
        (".coderag", True),
    ],
)
def test_builtin_patterns(builtin_filter, path, is_dir):
    assert builtin_filter(path, is_dir=is_dir)


@pytest.mark.parametrize("path", ["src/app.py", "README.md", "docs/guide.md"])
def test_regular_files_are_kept(builtin_filter, path):
    assert not builtin_filter(path)


def test_backslash_paths_are_normalized(builtin_filter):
    assert builtin_filter("node_modules\\pkg\\index.js")
    assert not builtin_filter("src\\app.py")


def test_to_posix():
    assert to_posix("a\\b\\c.txt") == "a/b/c.txt"
    assert to_posix("./src/app.py") == "src/app.py"
    assert to_posix("docs/") == "docs"


def test_negation_reincludes():
    ignore = IgnoreFilter(["*.txt", "!keep.txt"])

    assert ignore("notes.txt")
    assert not ignore("keep.txt")


def test_last_matching_rule_wins():
    ignore = IgnoreFilter(["!keep.txt", "*.txt"])

    assert ignore("keep.txt")


def test_directory_only_pattern():
    ignore = IgnoreFilter(["logs/"])

    assert ignore("logs", is_dir=True)
    assert ignore("logs/today.txt")
    assert not ignore("logs", is_dir=False)


def test_project_rules_layer_over_builtins(tmp_path):
    (tmp_path / ".gitignore").write_text("# comment\n\nsecret.txt\n!important.log\n")

    ignore = build_ignore_filter(tmp_path)

    assert ignore("secret.txt")
    assert ignore("other.log")
    assert not ignore("important.log")
    assert not ignore("README.md")


def test_ignore_file_itself_is_ignored(tmp_path):
    (tmp_path / ".ragignore").write_text("*.tmp\n")

    ignore = build_ignore_filter(tmp_path, ignore_file=".ragignore")

    assert ignore(".ragignore")
    assert ignore("scratch.tmp")


def test_missing_ignore_file_uses_builtins_only(tmp_path):
    ignore = build_ignore_filter(tmp_path)

    assert ignore("node_modules", is_dir=True)
    assert not ignore("secret.txt")


def test_parse_ignore_lines():
    lines = ["# header", "", "   ", "*.tmp\r\n", "  # indented comment", "!keep.tmp"]

    assert parse_ignore_lines(lines) == ["*.tmp", "!keep.tmp"]
