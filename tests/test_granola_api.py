"""
Tests for the Granola API client and the document importers.
"""

import json

import httpx
import pytest

from granola_sync.errors import ApiError
from granola_sync.importers import FileImporter, GranolaClient, GranolaImporter, MockImporter
from granola_sync.importers.granola_api import DOCUMENTS_PATH, TRANSCRIPT_PATH, parse_documents


SAMPLE_DOCS = [
    {
        "id": "doc-1",
        "title": "Planning",
        "created_at": "2024-03-05T10:00:00Z",
        "last_viewed_panel": {"content": {"type": "doc", "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": "Hello"}]}
        ]}}
    },
    {"id": "doc-2", "title": None, "last_viewed_panel": None},
    "not a document",
]


def make_client(handler):
    return GranolaClient(
        "token-123",
        api_base="https://api.example.test/",
        client_version="9.9.9",
        timeout=5,
        transport=httpx.MockTransport(handler)
    )


def test_get_documents_sends_expected_request():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["headers"] = request.headers
        return httpx.Response(200, json={"docs": SAMPLE_DOCS})

    with make_client(handler) as client:
        docs = client.get_documents(limit=50)

    assert len(docs) == 3
    assert seen["path"] == DOCUMENTS_PATH
    assert seen["body"] == {"limit": 50, "offset": 0, "include_last_viewed_panel": True}
    assert seen["headers"]["Authorization"] == "Bearer token-123"
    assert seen["headers"]["X-Client-Version"] == "GranolaSync-9.9.9"
    assert "9.9.9" in seen["headers"]["User-Agent"]


def test_importer_validates_documents():
    client = make_client(lambda request: httpx.Response(200, json={"docs": SAMPLE_DOCS}))
    documents = GranolaImporter(client, page_limit=10).get_all_documents()

    assert [document.id for document in documents] == ["doc-1", "doc-2"]
    assert documents[0].has_note
    assert documents[1].title == "Untitled Granola Note"
    assert not documents[1].has_note


@pytest.mark.parametrize("status, fragment", [
    (401, "access token may have expired"),
    (403, "Access forbidden"),
    (404, "endpoint not found"),
    (502, "server error"),
    (418, "status 418"),
])
def test_error_statuses_raise_api_error(status, fragment):
    client = make_client(lambda request: httpx.Response(status))
    with pytest.raises(ApiError) as excinfo:
        client.get_documents()
    assert excinfo.value.status_code == status
    assert fragment in str(excinfo.value)


def test_transport_failure_raises_api_error():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(ApiError) as excinfo:
        make_client(handler).get_documents()
    assert excinfo.value.status_code is None
    assert "internet connection" in str(excinfo.value)


@pytest.mark.parametrize("response", [
    httpx.Response(200, content=b"<html>nope</html>"),
    httpx.Response(200, json={"documents": []}),
    httpx.Response(200, json=[1, 2, 3]),
])
def test_invalid_payload_shape(response):
    with pytest.raises(ApiError, match="Invalid API response format"):
        make_client(lambda request: response).get_documents()


def test_get_transcript():
    def handler(request):
        assert request.url.path == TRANSCRIPT_PATH
        assert json.loads(request.content) == {"document_id": "doc-1"}
        return httpx.Response(200, json=[
            {"document_id": "doc-1", "source": "microphone", "text": "Hi", "start_timestamp": "t0",
             "end_timestamp": "t1", "id": "e1", "is_final": True},
            {"document_id": "doc-1", "source": "system", "text": None},
            "junk",
        ])

    entries = GranolaImporter(make_client(handler)).get_transcript("doc-1")
    assert [entry.source for entry in entries] == ["microphone", "system"]
    assert entries[1].text == ""


def test_transcript_not_a_list_is_empty():
    client = make_client(lambda request: httpx.Response(200, json={"detail": "none"}))
    assert GranolaImporter(client).get_transcript("doc-1") == []


def test_file_importer_reads_export(tmp_path):
    export = tmp_path / "export.json"
    export.write_text(json.dumps({
        "docs": SAMPLE_DOCS,
        "transcripts": {"doc-1": [{"source": "microphone", "text": "Hello"}]}
    }))

    importer = FileImporter(str(export))
    assert [document.id for document in importer.get_all_documents()] == ["doc-1", "doc-2"]
    assert importer.get_transcript("doc-1")[0].text == "Hello"
    assert importer.get_transcript("doc-2") == []


def test_file_importer_accepts_bare_list(tmp_path):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(SAMPLE_DOCS[:1]))
    assert len(FileImporter(str(export)).get_all_documents()) == 1


@pytest.mark.parametrize("content", ["{broken", json.dumps({"items": []})])
def test_file_importer_rejects_bad_exports(tmp_path, content):
    export = tmp_path / "export.json"
    export.write_text(content)
    with pytest.raises(ApiError):
        FileImporter(str(export)).get_all_documents()


def test_file_importer_missing_file(tmp_path):
    with pytest.raises(ApiError):
        FileImporter(str(tmp_path / "absent.json")).get_all_documents()


def test_mock_importer_samples():
    importer = MockImporter()
    documents = importer.get_all_documents()

    assert len(documents) == 4
    assert sum(1 for document in documents if document.has_note) == 3
    assert importer.get_transcript("doc-standup-0522")
    assert importer.get_transcript("doc-empty") == []


def test_rejected_entries_are_kept():
    client = make_client(lambda request: httpx.Response(200, json={"docs": SAMPLE_DOCS}))
    importer = GranolaImporter(client)
    assert importer.get_rejected_documents() == []

    importer.get_all_documents()
    rejected = importer.get_rejected_documents()

    assert len(rejected) == 1
    assert rejected[0].id == "unknown_id"
    assert rejected[0].reason == "malformed document entry"


def test_file_importer_reports_rejected_entries(tmp_path):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(SAMPLE_DOCS))
    importer = FileImporter(str(export))

    importer.get_all_documents()
    assert [item.reason for item in importer.get_rejected_documents()] == ["malformed document entry"]


def test_file_importer_rejects_undecodable_export(tmp_path):
    export = tmp_path / "export.json"
    export.write_bytes(b'{"docs": ["\xff\xfe"]}')
    with pytest.raises(ApiError):
        FileImporter(str(export)).get_all_documents()


def test_deep_document_is_kept_with_flattened_text():
    node = {"type": "text", "text": "deep"}
    for _ in range(400):
        node = {"type": "paragraph", "content": [node]}
    raw = {"id": "deep-doc", "title": "Deep", "last_viewed_panel": {"content": {"type": "doc", "content": [node]}}}

    rejected = []
    documents = parse_documents([raw], rejected)

    assert [document.id for document in documents] == ["deep-doc"]
    assert documents[0].has_note
    assert rejected == []
