"""Unit tests for the node HTTP API."""

import base64

import pytest
from fastapi.testclient import TestClient

from report_generator.core.config import Settings
from report_generator.main import create_app
from tests.docx_helpers import build_docx, read_texts

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.fixture
def client():
    with TestClient(create_app(Settings(_env_file=None))) as test_client:
        yield test_client


def template_item(text: str = "Hello {{name}}!", key: str = "template", **extra) -> dict:
    content = base64.b64encode(build_docx(text)).decode("ascii")
    return {
        "json": {},
        "binary": {key: {"data": content, "mimeType": DOCX_MIME_TYPE, "fileName": "t.docx"}},
        **extra,
    }


def report_texts(item: dict, key: str = "report") -> list[str]:
    return read_texts(base64.b64decode(item["binary"][key]["data"]))


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestNodeDescriptions:
    """Test suite for the node listing endpoints."""

    def test_list_nodes(self, client):
        response = client.get("/nodes")

        assert response.status_code == 200
        [description] = response.json()
        assert description["name"] == "generateReport"
        properties = {prop["name"]: prop for prop in description["properties"]}
        assert [o["name"] for o in properties["tagDelimiters"]["options"]] == [
            "tagStart",
            "tagEnd",
            "containerTagOpen",
            "containerTagClose",
        ]

    def test_describe_node(self, client):
        response = client.get("/nodes/generateReport")

        assert response.status_code == 200
        assert response.json()["display_name"] == "Generate Report"

    def test_unknown_node(self, client):
        response = client.get("/nodes/unknown")
        assert response.status_code == 404


class TestExecuteNode:
    """Test suite for POST /nodes/{name}/execute."""

    def test_execute(self, client):
        response = client.post(
            "/nodes/generateReport/execute",
            json={"parameters": {"data": '{"name": "Alice"}'}, "items": [template_item()]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["node"] == "generateReport"
        [item] = body["items"]
        assert item["json"] == {}
        assert item["pairedItem"] == 0
        report = item["binary"]["report"]
        assert report["fileName"] == "Report.docx"
        assert report["fileExtension"] == "docx"
        assert report["mimeType"] == DOCX_MIME_TYPE
        assert report_texts(item) == ["Hello Alice!"]

    def test_execute_with_custom_delimiters(self, client):
        response = client.post(
            "/nodes/generateReport/execute",
            json={
                "parameters": {
                    "data": '{"name": "Alice"}',
                    "tagDelimiters": {"tagStart": "<<", "tagEnd": ">>"},
                },
                "items": [template_item("Hello <<name>>!")],
            },
        )

        assert response.status_code == 200
        assert report_texts(response.json()["items"][0]) == ["Hello Alice!"]

    def test_per_item_parameters(self, client):
        response = client.post(
            "/nodes/generateReport/execute",
            json={
                "parameters": {"data": '{"name": "Default"}'},
                "items": [
                    template_item(),
                    template_item(parameters={"data": '{"name": "Override"}', "outputFileName": "Two"}),
                ],
            },
        )

        assert response.status_code == 200
        first, second = response.json()["items"]
        assert report_texts(first) == ["Hello Default!"]
        assert report_texts(second) == ["Hello Override!"]
        assert second["binary"]["report"]["fileName"] == "Two.docx"
        assert second["pairedItem"] == 1

    # =========================================================================
    # Error Tests
    # =========================================================================

    def test_malformed_json(self, client):
        response = client.post(
            "/nodes/generateReport/execute",
            json={"parameters": {"data": "{oops"}, "items": [template_item()]},
        )

        assert response.status_code == 422
        error = response.json()["detail"]
        assert error["detail"].startswith("Something went wrong while parsing the template data.")
        assert error["node"] == "generateReport"
        assert error["item_index"] == 0

    def test_missing_binary(self, client):
        response = client.post(
            "/nodes/generateReport/execute",
            json={"parameters": {"data": "{}"}, "items": [{"json": {"a": 1}}]},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["detail"] == "No binary data exists on item!"

    def test_empty_batch(self, client):
        """Test that zero input items give zero output items."""
        response = client.post("/nodes/generateReport/execute", json={"items": []})

        assert response.status_code == 200
        assert response.json() == {"node": "generateReport", "items": []}

    def test_invalid_base64_rejected(self, client):
        item = {"binary": {"template": {"data": "***not base64***"}}}
        response = client.post("/nodes/generateReport/execute", json={"items": [item]})

        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    def test_execute_unknown_node(self, client):
        response = client.post("/nodes/unknown/execute", json={"items": [template_item()]})
        assert response.status_code == 404
