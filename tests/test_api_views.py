import pytest
from rest_framework.test import APIClient

from medtools import api_views
from conftest import rxcui_payload, suggestions_payload, related_payload


ROUTES = {
    "/rxcui.json?name=Tylenol": rxcui_payload("202433"),
    "/rxcui/202433/related.json?tty=IN+BN+SCD+SBD": related_payload([
        ("IN", ["Acetaminophen"]),
        ("BN", ["Tylenol", "Panadol"]),
        ("SCD", ["Acetaminophen 500mg Oral Tablet"]),
    ]),
    "/rxcui/202433/related.json?tty=IN": related_payload([("IN", [("Acetaminophen", "161")])]),
    "/rxcui/161/related.json?tty=BN": related_payload([("BN", ["Tylenol", "Panadol", "Mapap"])]),
    "/rxcui.json?name=Tylenl": {"idGroup": {}},
    "/spellingsuggestions.json?name=Tylenl": suggestions_payload("tylenol"),
}


@pytest.fixture
def api_client(make_service, monkeypatch):
    service, _ = make_service(ROUTES)
    monkeypatch.setattr(api_views, "MedToolsService", lambda: service)
    return APIClient()


def test_lookup(api_client):
    response = api_client.get("/api/lookup/", {"drug": "  Tylenol 500mg  "})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["search_term"] == "Tylenol 500mg"
    assert body["normalized_term"] == "Tylenol"
    assert body["rxcui"] == "202433"
    assert body["brands"] == ["Tylenol", "Panadol"]


def test_alternatives(api_client):
    response = api_client.get("/api/alternatives/", {"drug": "Tylenol"})

    assert response.status_code == 200
    assert response.json()["brands"] == ["Panadol", "Mapap"]


def test_safety_with_no_relations_reports_empty_buckets(api_client):
    response = api_client.get("/api/safety/", {"drug": "Tylenol"})

    assert response.status_code == 200
    body = response.json()
    assert body["ingredient"] == "Acetaminophen"
    assert body["warnings"] == []
    assert body["interactions"] == []
    assert body["contraindications"] == []
    assert body["side_effects"] == []


def test_no_match_is_not_an_error(api_client):
    response = api_client.get("/api/lookup/", {"drug": "Tylenl"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "no_match",
        "search_term": "Tylenl",
        "normalized_term": "Tylenl",
        "suggestions": ["tylenol"],
    }


@pytest.mark.parametrize("url", ["/api/lookup/", "/api/alternatives/", "/api/safety/"])
def test_missing_drug_is_bad_request(api_client, url):
    assert api_client.get(url).status_code == 400
    assert api_client.get(url, {"drug": "   "}).status_code == 400


def test_post_not_allowed(api_client):
    assert api_client.post("/api/lookup/", {"drug": "Tylenol"}).status_code == 405


def test_unexpected_failure_is_server_error(monkeypatch):
    class BrokenService:
        def run(self, tool, search_term):
            raise RuntimeError("boom")

    monkeypatch.setattr(api_views, "MedToolsService", BrokenService)

    response = APIClient().get("/api/lookup/", {"drug": "Tylenol"})

    assert response.status_code == 500
    assert "error" in response.json()
