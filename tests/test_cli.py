import json

import pytest
from typer.testing import CliRunner

from spotlight_data_client import cli
from spotlight_data_client.cli import app

runner = CliRunner()


class StubClient:
    def __init__(self):
        self.reindexed = []
        self.updates = []
        self.closed = False

    async def reindex(self, doc_id):
        self.reindexed.append(doc_id)
        return doc_id != "missing"

    async def projection(self, doc_id):
        return {"id": doc_id, "exhibit_1_tags_ssim": ["map"]}

    async def update_document(self, exhibit_id, doc_id, attributes):
        self.updates.append((exhibit_id, doc_id, attributes))

    async def exhibit_tags(self, exhibit_id, doc_id):
        return ["a", "b"]

    async def check_connections(self):
        return {"postgres": "ok", "elastic": "failed: down", "minio": "ok"}

    async def aclose(self):
        self.closed = True


@pytest.fixture
def stub(monkeypatch):
    client = StubClient()
    monkeypatch.setattr(cli, "create_data_client", lambda: client)
    return client


def test_reindex_command(stub):
    result = runner.invoke(app, ["--log-level", "WARNING", "reindex", "abc123", "missing"])

    assert result.exit_code == 0, result.output
    assert stub.reindexed == ["abc123", "missing"]
    assert stub.closed


def test_show_command_prints_projection(stub):
    result = runner.invoke(app, ["--log-level", "WARNING", "show", "abc123"])

    assert result.exit_code == 0, result.output
    start = result.stdout.index("{")
    assert json.loads(result.stdout[start:]) == {"id": "abc123", "exhibit_1_tags_ssim": ["map"]}


def test_tag_command(stub):
    result = runner.invoke(app, ["--log-level", "WARNING", "tag", "abc123", "--exhibit", "1", "--tags", "a, b"])

    assert result.exit_code == 0, result.output
    assert stub.updates == [(1, "abc123", {"exhibit_tag_list": "a, b"})]


def test_check_command_fails_when_a_service_is_down(stub):
    result = runner.invoke(app, ["--log-level", "WARNING", "check"])

    assert result.exit_code == 1
    assert stub.closed
