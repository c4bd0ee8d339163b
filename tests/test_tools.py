"""Tests for the MCP tool responses."""

import asyncio

import pytest

from coderag.server import ToolHandler, create_mcp_server
from coderag.service import NO_RESULTS_MESSAGE

from conftest import RecordingStore, make_service

pytestmark = pytest.mark.integration


@pytest.fixture
def handler(service):
    return ToolHandler(service)


def test_index_documents(handler):
    message = handler.index_documents(".")

    assert message.startswith("Successfully indexed ")
    assert message.endswith(" chunks from 4 files in .")


def test_index_documents_missing_path(handler):
    assert handler.index_documents("missing").startswith("Error: Path does not exist")


def test_index_documents_empty_directory(handler, project):
    (project / "empty").mkdir()

    assert handler.index_documents("empty").startswith("Error: No files found in directory")


def test_query_documents(handler):
    handler.index_documents(".")

    result = handler.query_documents("The quick brown fox jumps over the lazy dog.", k=1)

    assert result.startswith("[DOCUMENT:notes_txt_chunk1]\n")


def test_query_documents_before_indexing(handler):
    assert handler.query_documents("anything") == NO_RESULTS_MESSAGE


def test_query_documents_invalid_filter(handler):
    result = handler.query_documents("anything", filter={"$not": {"a": 1}})

    assert result.startswith("Error: ")


def test_remove_document(handler):
    handler.index_documents(".")

    message = handler.remove_document("notes.txt")

    assert message == "Successfully requested removal of document: notes.txt"
    assert "notes.txt" not in handler.list_documents()


def test_remove_all_documents_requires_confirmation(settings):
    store = RecordingStore()
    service, _ = make_service(settings, store)

    message = ToolHandler(service).remove_all_documents(False)

    assert message == (
        "Error: Confirmation flag `confirm: true` is required to remove all documents."
    )
    assert store.calls == []


def test_remove_all_documents(handler):
    handler.index_documents("src/app.py")

    assert handler.remove_all_documents(True) == "Successfully removed all documents (2 chunks)."
    assert handler.list_documents() == "No documents found in the index."


def test_list_documents(handler):
    handler.index_documents("src")

    assert handler.list_documents() == (
        "Found 2 unique document paths in the index:\n\n"
        "- src/app.py\n"
        "- src/util/helpers.js"
    )


def test_unexpected_errors_are_reported(settings):
    class Exploding(RecordingStore):
        def get(self, where=None):
            raise KeyError("boom")

    service, _ = make_service(settings, Exploding())

    assert ToolHandler(service).list_documents().startswith("Error: Unexpected failure:")


def test_server_registers_tools(service):
    mcp = create_mcp_server(service)

    tools = asyncio.run(mcp.list_tools())

    assert {tool.name for tool in tools} == {
        "index_documents",
        "query_documents",
        "remove_document",
        "remove_all_documents",
        "list_documents",
    }
