from __future__ import annotations

import io

import pytest

from discovery_client import ApiError, MissingArgumentError
from discovery_client.models import FileContentType, QueryLargePassages, TrainingExample

VERSION = "2020-08-30"
PREFIX = "/instances/abc"


def test_query_end_to_end(client, handler) -> None:
    resp = client.query("p1", natural_language_query="cats")

    req = handler.last
    assert req.method == "POST"
    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/query"
    assert dict(req.url.params) == {"version": VERSION}
    assert handler.last_json() == {"natural_language_query": "cats"}
    assert req.headers["Authorization"] == "Bearer secret-token"
    assert req.headers["Accept"] == "application/json"
    assert resp.get_status_code() == 200
    assert resp.get_result() == {"ok": True}


def test_query_serializes_models_and_lists(client, handler) -> None:
    client.query(
        "p1",
        collection_ids=["a", "b"],
        return_=["title", "text"],
        count=5,
        highlight=False,
        passages=QueryLargePassages(enabled=True, count=3),
    )

    assert handler.last_json() == {
        "collection_ids": ["a", "b"],
        "return": ["title", "text"],
        "count": 5,
        "highlight": False,
        "passages": {"enabled": True, "count": 3},
    }


def test_sdk_headers_attached(client, handler) -> None:
    client.list_collections("p1")

    analytics = handler.last.headers["X-IBMCloud-SDK-Analytics"]
    assert analytics == "service_name=discovery;service_version=V2;operation_id=list_collections"
    assert handler.last.headers["User-Agent"].startswith("discovery-client-python/")


def test_caller_headers_win_over_sdk_headers(client, handler) -> None:
    client.list_collections("p1", headers={"User-Agent": "custom-agent", "X-Trace": "t-1"})

    assert handler.last.headers["User-Agent"] == "custom-agent"
    assert handler.last.headers["X-Trace"] == "t-1"
    assert "operation_id=list_collections" in handler.last.headers["X-IBMCloud-SDK-Analytics"]


def test_caller_headers_replace_sdk_headers_case_insensitively(client, handler) -> None:
    client.list_collections("p1", headers={"user-agent": "custom-agent", "accept": "text/plain"})

    assert handler.last.headers.get_list("User-Agent") == ["custom-agent"]
    assert handler.last.headers.get_list("Accept") == ["text/plain"]


def test_default_headers_applied_with_lowest_precedence(make_client, handler) -> None:
    client = make_client(default_headers={"X-Tenant": "acme", "User-Agent": "ignored"})
    client.get_component_settings("p1")

    assert handler.last.headers["X-Tenant"] == "acme"
    assert handler.last.headers["User-Agent"] != "ignored"


@pytest.mark.parametrize(
    ("project_id", "encoded"),
    [
        ("a/b", "a%2Fb"),
        ("with space", "with%20space"),
        ("café", "caf%C3%A9"),
        ("plain-id_1.2~x", "plain-id_1.2~x"),
        ("..", "%2E%2E"),
        (".", "%2E"),
    ],
)
def test_path_segments_are_percent_encoded(client, handler, project_id, encoded) -> None:
    client.get_training_query(project_id, "q/1")

    assert handler.last_path() == f"{PREFIX}/v2/projects/{encoded}/training_data/queries/q%2F1"


def test_autocompletion_joins_collection_ids(client, handler) -> None:
    client.get_autocompletion("p1", "Ho", collection_ids=["a", "b"], count=5)

    assert handler.last.method == "GET"
    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/autocompletion"
    assert dict(handler.last.url.params) == {
        "version": VERSION,
        "prefix": "Ho",
        "collection_ids": "a,b",
        "count": "5",
    }


def test_list_fields_joins_collection_ids(client, handler) -> None:
    client.list_fields("p1", collection_ids=["a", "b"])

    assert handler.last.url.params["collection_ids"] == "a,b"


def test_unset_optionals_are_omitted(client, handler) -> None:
    client.query_notices("p1")

    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/notices"
    assert list(handler.last.url.params.keys()) == ["version"]


def test_query_notices_forwards_filters(client, handler) -> None:
    client.query_notices("p1", filter="notice_id:123", count=10, offset=20)

    assert dict(handler.last.url.params) == {
        "version": VERSION,
        "filter": "notice_id:123",
        "count": "10",
        "offset": "20",
    }


@pytest.mark.parametrize(
    ("call", "missing"),
    [
        (lambda c: c.list_collections(None), "project_id"),
        (lambda c: c.query(None), "project_id"),
        (lambda c: c.get_autocompletion("p1", None), "prefix"),
        (lambda c: c.query_notices(None), "project_id"),
        (lambda c: c.list_fields(None), "project_id"),
        (lambda c: c.get_component_settings(None), "project_id"),
        (lambda c: c.add_document("p1", None, file=b"x"), "collection_id"),
        (lambda c: c.update_document("p1", "c1", None, file=b"x"), "document_id"),
        (lambda c: c.delete_document(None, "c1", "d1"), "project_id"),
        (lambda c: c.list_training_queries(None), "project_id"),
        (lambda c: c.delete_training_queries(None), "project_id"),
        (lambda c: c.create_training_query("p1", "nlq", None), "examples"),
        (lambda c: c.get_training_query("p1", None), "query_id"),
        (lambda c: c.update_training_query("p1", "q1", None, []), "natural_language_query"),
    ],
)
def test_missing_required_argument_sends_nothing(client, handler, call, missing) -> None:
    with pytest.raises(MissingArgumentError) as exc:
        call(client)

    assert exc.value.name == missing
    assert str(exc.value) == f"{missing} must be provided"
    assert handler.requests == []


def test_add_document_multipart_with_metadata(client, handler) -> None:
    client.add_document(
        "p1",
        "c1",
        file=b"<html>hello</html>",
        filename="hello.html",
        file_content_type=FileContentType.TEXT_HTML,
        metadata='{"author": "me"}',
    )

    req = handler.last
    body = req.content
    assert req.method == "POST"
    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/collections/c1/documents"
    assert req.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="file"; filename="hello.html"' in body
    assert b"Content-Type: text/html" in body
    assert b"<html>hello</html>" in body
    assert b'name="metadata"' in body
    assert b"Content-Type: text/plain" in body
    assert b'{"author": "me"}' in body
    assert "X-Watson-Discovery-Force" not in req.headers


def test_add_document_defaults_content_type_and_filename_from_handle(client, handler) -> None:
    handle = io.BytesIO(b"%PDF-1.4")
    handle.name = "/tmp/reports/annual.pdf"

    client.add_document("p1", "c1", file=handle)

    body = handler.last.content
    assert b'filename="annual.pdf"' in body
    assert b"Content-Type: application/octet-stream" in body
    assert b"%PDF-1.4" in body
    assert b'name="metadata"' not in body


def test_add_document_encodes_text_handle_as_utf8(client, handler) -> None:
    handle = io.StringIO("caf\u00e9 notes")
    handle.name = "notes.txt"

    client.add_document("p1", "c1", file=handle, file_content_type="text/plain")

    body = handler.last.content
    assert b'name="file"; filename="notes.txt"' in body
    assert "caf\u00e9 notes".encode("utf-8") in body
    assert b"Content-Type: text/plain" in body


def test_add_document_serializes_non_bytes_as_json(client, handler) -> None:
    client.add_document("p1", "c1", file={"title": "doc"}, metadata={"source": "crawler"})

    body = handler.last.content
    assert b'{"title": "doc"}' in body
    assert b'{"source": "crawler"}' in body


def test_update_document_sends_force_header(client, handler) -> None:
    client.update_document("p1", "c1", "d 1", file=b"data", x_watson_discovery_force=True)

    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/collections/c1/documents/d%201"
    assert handler.last.headers["X-Watson-Discovery-Force"] == "true"


def test_delete_document(client, handler) -> None:
    handler.body = {"document_id": "d1", "status": "deleted"}

    resp = client.delete_document("p1", "c1", "d1", x_watson_discovery_force=False)

    assert handler.last.method == "DELETE"
    assert handler.last.headers["X-Watson-Discovery-Force"] == "false"
    assert resp.get_result() == {"document_id": "d1", "status": "deleted"}


def test_delete_training_queries_returns_none(client, handler) -> None:
    handler.body = {"unexpected": "payload"}

    assert client.delete_training_queries("p1") is None
    assert handler.last.method == "DELETE"
    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/training_data/queries"
    assert handler.last.headers["Accept"] != "application/json"


def test_delete_training_queries_propagates_errors(client, handler) -> None:
    handler.status_code = 500
    handler.body = {"error": "backend unavailable", "code": 500}

    with pytest.raises(ApiError) as exc:
        client.delete_training_queries("p1")

    assert exc.value.status_code == 500
    assert str(exc.value) == "backend unavailable"


def test_create_training_query_body(client, handler) -> None:
    client.create_training_query(
        "p1",
        "who won",
        [
            TrainingExample(document_id="d1", collection_id="c1", relevance=10),
            {"document_id": "d2", "collection_id": "c1", "relevance": 0},
        ],
    )

    assert handler.last.method == "POST"
    assert handler.last_json() == {
        "natural_language_query": "who won",
        "examples": [
            {"document_id": "d1", "collection_id": "c1", "relevance": 10},
            {"document_id": "d2", "collection_id": "c1", "relevance": 0},
        ],
    }


def test_update_training_query_body_with_filter(client, handler) -> None:
    client.update_training_query("p1", "q1", "who won", [], filter="year:2020")

    assert handler.last_path() == f"{PREFIX}/v2/projects/p1/training_data/queries/q1"
    assert handler.last_json() == {"natural_language_query": "who won", "examples": [], "filter": "year:2020"}


@pytest.mark.parametrize(
    ("call", "verb", "suffix"),
    [
        (lambda c: c.list_collections("p1"), "GET", "/collections"),
        (lambda c: c.get_component_settings("p1"), "GET", "/component_settings"),
        (lambda c: c.list_training_queries("p1"), "GET", "/training_data/queries"),
        (lambda c: c.get_training_query("p1", "q1"), "GET", "/training_data/queries/q1"),
    ],
)
def test_simple_get_endpoints(client, handler, call, verb, suffix) -> None:
    call(client)

    assert handler.last.method == verb
    assert handler.last_path() == f"{PREFIX}/v2/projects/p1{suffix}"
    assert dict(handler.last.url.params) == {"version": VERSION}