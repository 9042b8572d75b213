"""
Shared pytest fixtures for Terminology Search tests.
"""

import os
from typing import Any

import httpx
import pytest

# Set test environment variables before importing app modules
# This ensures Settings validation passes during test collection
os.environ.setdefault("TERMINOLOGY_SEARCH_DEBUG", "true")
os.environ["TERMINOLOGY_SEARCH_BASE_URL"] = "https://tx.example.org/fhir/"
os.environ["TERMINOLOGY_SEARCH_LOG_JSON"] = "false"

BASE_URL = "https://tx.example.org/fhir/"


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset singletons between tests to avoid state leakage."""
    from terminology_search.config.settings import reset_settings
    from terminology_search.services import gateway

    reset_settings()
    gateway._gateway = None
    yield
    gateway._gateway = None
    reset_settings()


def _searchset(*resources: dict[str, Any]) -> dict[str, Any]:
    return {
        "resourceType": "Bundle",
        "type": "searchset",
        "total": len(resources),
        "entry": [
            {
                "fullUrl": f"{BASE_URL}{r['resourceType']}/{r['id']}",
                "resource": r,
            }
            for r in resources
        ],
    }


def _expansion(
    *items: dict[str, Any], offset: int | None = 0, total: int | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"resourceType": "ValueSet", "expansion": {"contains": list(items)}}
    if offset is not None:
        body["expansion"]["offset"] = offset
    if total is not None:
        body["expansion"]["total"] = total
    return body


@pytest.fixture
def make_gateway():
    """Factory for gateways whose HTTP traffic is answered by a handler function."""
    from terminology_search.services.gateway import TerminologyGateway

    def factory(handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return TerminologyGateway(BASE_URL, client=client)

    return factory


@pytest.fixture
def searchset():
    """Wrap resources in a searchset Bundle."""
    return _searchset


@pytest.fixture
def expansion():
    """Wrap concepts in an expanded ValueSet."""
    return _expansion


@pytest.fixture
def operation_outcome():
    """Build a single-issue OperationOutcome."""

    def factory(code: str, diagnostics: str, severity: str = "error") -> dict[str, Any]:
        return {
            "resourceType": "OperationOutcome",
            "issue": [{"severity": severity, "code": code, "diagnostics": diagnostics}],
        }

    return factory


@pytest.fixture
def snomed_code_system() -> dict[str, Any]:
    """SNOMED CT CodeSystem resource."""
    return {
        "resourceType": "CodeSystem",
        "id": "sct",
        "url": "http://snomed.info/sct",
        "name": "SNOMED_CT",
        "description": "SNOMED CT International Edition",
        "valueSet": "http://snomed.info/sct?fhir_vs",
        "status": "active",
    }


@pytest.fixture
def icd10_code_system() -> dict[str, Any]:
    """ICD-10 CodeSystem resource whose description mentions SNOMED."""
    return {
        "resourceType": "CodeSystem",
        "id": "icd10",
        "url": "http://hl7.org/fhir/sid/icd-10",
        "name": "ICD10",
        "description": "ICD-10 with SNOMED maps",
        "status": "active",
    }


@pytest.fixture
def concept_items() -> list[dict[str, Any]]:
    """Expansion items for two SNOMED CT concepts."""
    return [
        {
            "system": "http://snomed.info/sct",
            "code": "55342001",
            "display": "Neoplastic disease",
            "designation": [{"value": "Tumor disease"}],
        },
        {
            "system": "http://snomed.info/sct",
            "code": "363346000",
            "display": "Malignant neoplastic disease",
            "inactive": True,
        },
    ]


class RecordingListener:
    """Search listener that records every callback."""

    def __init__(self):
        self.loading: list[tuple[Any, bool]] = []
        self.results: list[tuple[Any, Any]] = []
        self.errors: list[tuple[Any, Any]] = []
        self.ecl: list[tuple[Any, Any]] = []

    async def on_loading(self, surface, active):
        self.loading.append((surface, active))

    async def on_result(self, surface, result):
        self.results.append((surface, result))

    async def on_error(self, surface, error):
        self.errors.append((surface, error))

    async def on_ecl_changed(self, expression, rows):
        self.ecl.append((expression, rows))


@pytest.fixture
def listener() -> RecordingListener:
    """Listener that records callbacks."""
    return RecordingListener()
