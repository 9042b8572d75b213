"""
Tests for terminology router endpoints.
"""

from unittest.mock import patch

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from terminology_search.routers.terminology import router


@pytest.fixture
def app():
    """Create test FastAPI app with terminology router."""
    app = FastAPI()
    app.include_router(router)
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def tx_server(searchset, expansion, snomed_code_system, concept_items, requests_seen):
    """Handler answering searches and expansions."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if request.url.path.endswith("$expand"):
            offset = int(request.url.params["offset"])
            return httpx.Response(200, json=expansion(*concept_items, offset=offset, total=250))
        return httpx.Response(200, json=searchset(snomed_code_system))

    return handler


@pytest.fixture
def patched_gateway(make_gateway, tx_server):
    with patch(
        "terminology_search.routers.terminology.get_gateway",
        return_value=make_gateway(tx_server),
    ):
        yield


class TestResourceSearches:
    """Tests for GET /api/terminology/code-systems and /value-sets."""

    def test_code_systems(self, client, patched_gateway, requests_seen):
        response = client.get("/api/terminology/code-systems", params={"q": "snomed"})

        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["entries"]] == ["sct"]
        assert data["entries"][0]["valueSet"] == "http://snomed.info/sct?fhir_vs"
        assert data["page"] is None
        assert len(requests_seen) == 3

    def test_value_sets(self, client, patched_gateway, requests_seen):
        response = client.get("/api/terminology/value-sets", params={"q": "covid"})

        assert response.status_code == 200
        assert all(r.url.path.endswith("/ValueSet") for r in requests_seen)

    def test_value_too_short(self, client, patched_gateway, requests_seen):
        response = client.get("/api/terminology/code-systems", params={"q": "s"})

        assert response.status_code == 400
        assert requests_seen == []

    def test_missing_query(self, client):
        response = client.get("/api/terminology/code-systems")
        assert response.status_code == 422


class TestConcepts:
    """Tests for GET /api/terminology/concepts."""

    def test_concepts_page(self, client, patched_gateway, requests_seen):
        response = client.get(
            "/api/terminology/concepts",
            params={"q": "neo", "value_set": "http://example.org/vs", "page": 3},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["entries"][0]["code"] == "55342001"
        assert data["page"]["offset"] == 200
        assert data["page"]["page_count"] == 3
        assert data["page"]["current_page"] == 3
        assert data["page"]["first"] == 201
        params = requests_seen[0].url.params
        assert params["url"] == "http://example.org/vs"
        assert params["offset"] == "200"
        assert params["count"] == "100"

    def test_default_value_set(self, client, patched_gateway, requests_seen):
        client.get("/api/terminology/concepts", params={"q": "neo"})
        assert requests_seen[0].url.params["url"] == "http://snomed.info/sct?fhir_vs"


class TestEcl:
    """Tests for GET /api/terminology/ecl."""

    def test_ecl_search(self, client, patched_gateway, requests_seen):
        response = client.get("/api/terminology/ecl", params={"expression": "*"})

        assert response.status_code == 200
        assert requests_seen[0].url.params["url"] == "http://snomed.info/sct?fhir_vs=ecl/*"

    def test_empty_expression(self, client, patched_gateway):
        response = client.get("/api/terminology/ecl", params={"expression": " "})
        assert response.status_code == 400


class TestGatewayErrors:
    """Tests for terminology server failures."""

    def test_structured_error(self, client, make_gateway):
        outcome = {"resourceType": "OperationOutcome", "issue": [{"diagnostics": "Bad ECL"}]}

        def handler(request):
            return httpx.Response(400, json=outcome)

        with patch(
            "terminology_search.routers.terminology.get_gateway",
            return_value=make_gateway(handler),
        ):
            response = client.get("/api/terminology/ecl", params={"expression": "<< nope"})

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["status"] == 400
        assert detail["structured"] is True
        assert "Bad ECL" in detail["message"]

    def test_transport_error(self, client, make_gateway):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        with patch(
            "terminology_search.routers.terminology.get_gateway",
            return_value=make_gateway(handler),
        ):
            response = client.get("/api/terminology/code-systems", params={"q": "snomed"})

        assert response.status_code == 502
        assert response.json()["detail"]["message"] == "503"


class TestRenderEcl:
    """Tests for POST /api/terminology/ecl/render."""

    def test_render(self, client):
        response = client.post(
            "/api/terminology/ecl/render",
            json={
                "rows": [
                    {"operator": "childOf", "code": "55342001", "label": "Neoplastic disease"},
                    {"operator": "ANY"},
                ]
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["short_form"] == "<! 55342001|Neoplastic disease|, *"
        assert data["long_form"] == "childOf 55342001|Neoplastic disease|, ANY"
        assert len(data["rows"]) == 2

    def test_render_no_rows(self, client):
        response = client.post("/api/terminology/ecl/render", json={"rows": []})

        assert response.json()["short_form"] == ""
        assert response.json()["rows"] == [
            {"operator": "descendantOrSelfOf", "code": "", "label": ""}
        ]

    def test_unknown_operator(self, client):
        response = client.post(
            "/api/terminology/ecl/render", json={"rows": [{"operator": "siblingOf", "code": "1"}]}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "UnknownEclOperatorError"


def test_ecl_operators(client):
    response = client.get("/api/terminology/ecl/operators")

    assert response.status_code == 200
    operators = {op["long_name"]: op["short"] for op in response.json()}
    assert operators["descendantOrSelfOf"] == "<<"
    assert operators["ANY"] == "*"
    assert operators["self"] == ""
