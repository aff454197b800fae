from __future__ import annotations

import pytest
from typer.testing import CliRunner

from discovery_cli import main
from discovery_cli.commands import common, training_cmd
from discovery_client import ApiError, DetailedResponse
from discovery_client.models import TrainingExample


class _FakeClient:
    def __init__(self, delete_error: Exception | None = None) -> None:
        self.created = None
        self.deleted_project = None
        self.delete_error = delete_error

    def create_training_query(self, project_id, natural_language_query, examples, *, filter=None):
        self.created = (project_id, natural_language_query, examples, filter)
        return DetailedResponse(status_code=201, result={"query_id": "q-1"})

    def get_training_query(self, project_id, query_id):
        return DetailedResponse(
            status_code=200,
            result={
                "query_id": query_id,
                "natural_language_query": "who won",
                "examples": [{"document_id": "d1", "collection_id": "c1", "relevance": 10}],
            },
        )

    def delete_training_queries(self, project_id):
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted_project = project_id

    def close(self) -> None:
        return None


def test_parse_example() -> None:
    assert training_cmd.parse_example("doc-1:col-1:10") == TrainingExample(
        document_id="doc-1", collection_id="col-1", relevance=10
    )


@pytest.mark.parametrize("raw", ["doc-1:10", "doc:col:high", ":col:1"])
def test_parse_example_rejects_bad_input(raw) -> None:
    with pytest.raises(ValueError):
        training_cmd.parse_example(raw)


def test_create_training_query(monkeypatch) -> None:
    client = _FakeClient()
    monkeypatch.setattr(common, "make_client", lambda *_args, **_kwargs: client)

    result = CliRunner().invoke(
        main.app,
        ["training", "create", "--project", "p1", "--nlq", "who won", "--example", "d1:c1:10", "--example", "d2:c1:0"],
    )

    assert result.exit_code == 0
    assert "q-1" in result.output
    project_id, nlq, examples, filter_text = client.created
    assert (project_id, nlq, filter_text) == ("p1", "who won", None)
    assert [e.relevance for e in examples] == [10, 0]


def test_get_and_show_alias(monkeypatch) -> None:
    monkeypatch.setattr(common, "make_client", lambda *_args, **_kwargs: _FakeClient())
    runner = CliRunner()

    result_get = runner.invoke(main.app, ["training", "get", "q-7", "--project", "p1"])
    assert result_get.exit_code == 0
    assert "query_id: q-7" in result_get.output

    result_show = runner.invoke(main.app, ["training", "show", "q-7", "--project", "p1"])
    assert result_show.exit_code == 0
    assert "who won" in result_show.output


def test_delete_training_queries(monkeypatch) -> None:
    client = _FakeClient()
    monkeypatch.setattr(common, "make_client", lambda *_args, **_kwargs: client)

    result = CliRunner().invoke(main.app, ["training", "delete", "--project", "p1", "--yes"])

    assert result.exit_code == 0
    assert client.deleted_project == "p1"
    assert "Training data deleted" in result.output


def test_delete_training_queries_failure(monkeypatch) -> None:
    client = _FakeClient(delete_error=ApiError(500, "backend unavailable"))
    monkeypatch.setattr(common, "make_client", lambda *_args, **_kwargs: client)

    result = CliRunner().invoke(main.app, ["training", "delete", "--project", "p1", "--yes"])

    assert result.exit_code == 2
    assert "backend unavailable" in result.output
