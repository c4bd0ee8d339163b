"""Tests for environment-driven settings and the CLI."""

from pathlib import Path

import pytest

from coderag import cli
from coderag.config import DEFAULT_COLLECTION, Settings

pytestmark = pytest.mark.unit


def test_defaults(tmp_path):
    settings = Settings.from_env({}, project_root=tmp_path)

    assert settings.project_root == tmp_path.resolve()
    assert settings.chunk_size == 500
    assert settings.chunk_overlap == 50
    assert settings.top_k == 15
    assert settings.vector_store == "chroma"
    assert settings.collection_name == DEFAULT_COLLECTION == "mcp-rag-unified"
    assert settings.ignore_file == ".gitignore"
    assert settings.index_on_startup is True
    assert settings.resolved_sqlite_path == tmp_path.resolve() / ".coderag" / "index.db"


def test_environment_overrides(tmp_path):
    env = {
        "RAG_PROJECT_ROOT": str(tmp_path),
        "CHUNK_SIZE": "800",
        "CHUNK_OVERLAP": "100",
        "VECTOR_STORE": "SQLite",
        "SQLITE_PATH": str(tmp_path / "custom.db"),
        "CHROMA_URL": "http://chroma:9000",
        "QUERY_TOP_K": "5",
        "INDEX_PROJECT_ON_STARTUP": "false",
        "EMBED_CONCURRENCY": "8",
        "EMBEDDING_DEVICE": "cuda",
        "LOG_LEVEL": "debug",
    }

    settings = Settings.from_env(env)

    assert settings.project_root == tmp_path.resolve()
    assert (settings.chunk_size, settings.chunk_overlap) == (800, 100)
    assert settings.vector_store == "sqlite"
    assert settings.resolved_sqlite_path == tmp_path / "custom.db"
    assert settings.chroma_url == "http://chroma:9000"
    assert settings.top_k == 5
    assert settings.index_on_startup is False
    assert settings.embed_concurrency == 8
    assert settings.embedding_device == "cuda"
    assert settings.log_level == "DEBUG"


def test_explicit_root_wins(tmp_path):
    other = tmp_path / "other"

    settings = Settings.from_env({"RAG_PROJECT_ROOT": str(tmp_path)}, project_root=other)

    assert settings.project_root == other.resolve()


@pytest.mark.parametrize(
    "env",
    [
        {"CHUNK_SIZE": "big"},
        {"INDEX_PROJECT_ON_STARTUP": "maybe"},
        {"VECTOR_STORE": "pinecone"},
        {"EMBED_CONCURRENCY": "0"},
    ],
)
def test_invalid_values(tmp_path, env):
    with pytest.raises(ValueError):
        Settings.from_env(env, project_root=tmp_path)


@pytest.fixture
def cli_env(monkeypatch, project, tmp_path):
    monkeypatch.setenv("RAG_PROJECT_ROOT", str(project))
    monkeypatch.setenv("VECTOR_STORE", "sqlite")
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "cli.db"))
    return project


def test_cli_scan(cli_env, capsys):
    cli.main(["scan"])

    out = capsys.readouterr().out
    assert "src/app.py" in out
    assert "secret.txt" not in out
    assert "4 files" in out


def test_cli_clear_requires_yes(cli_env):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["clear"])

    assert excinfo.value.code == 1


def test_cli_invalid_filter(cli_env):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["query", "hello", "--filter", "{not json"])

    assert excinfo.value.code == 1


def test_cli_bad_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CHUNK_SIZE", "lots")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--root", str(Path(tmp_path)), "list"])

    assert excinfo.value.code == 2
