import json
from urllib.parse import urlencode

import pytest
import requests

from rxnav_client import RxNavAPI
from medtools.services import MedToolsService


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    @property
    def content(self):
        return self.text.encode("utf-8")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """
    Routes GETs to canned payloads keyed by "<path>?<query>".

    A route value may be a JSON-able payload, a FakeResponse, or an exception
    instance to raise. Unknown routes raise ConnectionError.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, timeout=None):
        path = url[len(RxNavAPI.BASE_URL):] if url.startswith(RxNavAPI.BASE_URL) else url
        if isinstance(params, dict):
            query = urlencode(params)
        else:
            query = params or ""
        key = f"{path}?{query}" if query else path
        self.calls.append({"key": key, "timeout": timeout})

        if key not in self.routes:
            raise requests.exceptions.ConnectionError(f"no route for {key}")

        route = self.routes[key]
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(route)

    @property
    def keys(self):
        return [call["key"] for call in self.calls]


def rxcui_payload(*ids):
    return {"idGroup": {"name": "x", "rxnormId": list(ids)}}


def suggestions_payload(*names):
    return {"suggestionGroup": {"name": "x", "suggestionList": {"suggestion": list(names)}}}


def related_payload(groups):
    """
    groups: list of (tty, concepts) where each concept is a name or a (name, rxcui) pair.
    """
    concept_groups = []
    for tty, concepts in groups:
        props = []
        for i, concept in enumerate(concepts):
            name, rxcui = concept if isinstance(concept, tuple) else (concept, str(1000 + i))
            props.append({"rxcui": rxcui, "name": name, "tty": tty})
        group = {"tty": tty}
        if props:
            group["conceptProperties"] = props
        concept_groups.append(group)
    return {"relatedGroup": {"rxcui": "", "conceptGroup": concept_groups}}


def arc_payload(*class_names):
    return {
        "rxclassDrugInfoList": {
            "rxclassDrugInfo": [
                {
                    "minConcept": {"rxcui": "161", "name": "acetaminophen", "tty": "IN"},
                    "rxclassMinConceptItem": {"classId": f"N{i}", "className": name, "classType": "ARC"},
                    "rela": "",
                    "relaSource": "FDASPL",
                }
                for i, name in enumerate(class_names)
            ]
        }
    }


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api(fake_session):
    return RxNavAPI(session=fake_session)


@pytest.fixture
def make_service():
    def _make(routes):
        session = FakeSession(routes)
        return MedToolsService(api=RxNavAPI(session=session)), session
    return _make
