"""
Unit tests for drug validation lookups (network mocked)
"""
import pytest
import requests

from app.services import drug_lookup
from app.services.drug_lookup import (
    extract_section, extract_text, search_openfda, validate_medicine, validate_medicines,
)
from conftest import FakeResponse

OPENFDA_LABEL = {
    "results": [{
        "openfda": {
            "brand_name": ["Amoxil"],
            "generic_name": ["AMOXICILLIN"],
            "manufacturer_name": ["GSK"],
            "pharm_class_epc": ["Penicillin-class Antibacterial [EPC]"],
            "substance_name": ["AMOXICILLIN"],
            "dosage_form": ["CAPSULE"],
            "route": ["ORAL"],
        },
        "warnings": ["• Serious allergic reactions have been reported.\n• Prolonged use may cause overgrowth."],
        "indications_and_usage": ["Treatment of   infections"],
    }]
}


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(router):
        def _get(url, params=None, timeout=None):
            calls.append((url, params))
            return router(url, params or {})
        monkeypatch.setattr(drug_lookup.requests, "get", _get)
        return calls

    return install


def test_extract_text_collapses_and_truncates():
    assert extract_text(["a   b\n c"]) == "a b c"
    assert extract_text(["x" * 600]).endswith("...")
    assert len(extract_text(["x" * 600])) == 503
    assert extract_text(None) == ""


def test_extract_section_filters_and_limits():
    text = "• short\n" + "\n".join(f"Warning number {i} is long enough" for i in range(8))
    items = extract_section([text])
    assert len(items) == 5
    assert "short" not in items
    assert extract_section([]) == []


def test_openfda_brand_hit(fake_get):
    calls = fake_get(lambda url, params: FakeResponse(200, OPENFDA_LABEL))
    info = search_openfda("Amoxil ")

    assert info.validated and info.fda_approved
    assert info.brand_name == "Amoxil"
    assert info.generic_name == "AMOXICILLIN"
    assert info.warnings == ["Serious allergic reactions have been reported.", "Prolonged use may cause overgrowth."]
    assert info.indications == "Treatment of infections"
    assert info.contraindications == "See package insert"
    assert calls[0][1]["search"] == 'openfda.brand_name:"amoxil"'


def test_openfda_falls_through_strategies(fake_get):
    def router(url, params):
        if "substance_name" in params["search"]:
            return FakeResponse(200, OPENFDA_LABEL)
        return FakeResponse(404)

    calls = fake_get(router)
    assert search_openfda("amoxicillin").validated
    assert len(calls) == 3


def test_rxnorm_fallback(fake_get):
    def router(url, params):
        if "api.fda.gov" in url:
            return FakeResponse(404)
        if url.endswith("/rxcui.json"):
            return FakeResponse(200, {"idGroup": {"rxnormId": ["723"]}})
        if url.endswith("/properties.json"):
            return FakeResponse(200, {"properties": {"name": "amoxicillin"}})
        return FakeResponse(200, {"interactionTypeGroup": [{"interactionType": [
            {"interactionPair": [{"description": f"interaction {i}"} for i in range(7)]}
        ]}]})

    fake_get(router)
    info = validate_medicine("Amoxicilin")

    assert info.validated is True
    assert info.fda_approved is False
    assert info.brand_name == "amoxicillin"
    assert len(info.interactions) == 5


def test_not_found_and_network_errors_degrade(fake_get):
    def router(url, params):
        raise requests.Timeout("slow")

    fake_get(router)
    info = validate_medicine("Zzzzz")

    assert info.validated is False
    assert info.generic_name == "Not found in database"
    assert "not found" in info.message


def test_results_are_cached_case_insensitively(fake_get):
    calls = fake_get(lambda url, params: FakeResponse(200, OPENFDA_LABEL))
    validate_medicine("Amoxil")
    validate_medicine("AMOXIL")
    assert len(calls) == 1


def test_blank_name_skips_network(fake_get):
    calls = fake_get(lambda url, params: FakeResponse(200, OPENFDA_LABEL))
    assert validate_medicine("  ").validated is False
    assert calls == []


def test_batch_uses_openfda_only(fake_get):
    def router(url, params):
        if "api.fda.gov" in url and "amoxil" in params["search"]:
            return FakeResponse(200, OPENFDA_LABEL)
        return FakeResponse(404)

    calls = fake_get(router)
    results = validate_medicines(["Amoxil", "Unknownium"])

    assert [r.validated for r in results] == [True, False]
    assert results[1].data is None
    assert all("api.fda.gov" in url for url, _ in calls)


@pytest.mark.parametrize("body", [
    ["not", "a", "dict"],
    {"results": ["oops"], "idGroup": "oops"},
    {"results": "oops", "idGroup": {"rxnormId": None}},
])
def test_unexpected_body_shapes_degrade(fake_get, body):
    fake_get(lambda url, params: FakeResponse(200, body))
    info = validate_medicine("Amoxil")

    assert info.validated is False
    assert info.message == drug_lookup.NOT_FOUND_MESSAGE


def test_malformed_interaction_pairs_are_skipped(fake_get):
    interactions = {"interactionTypeGroup": [
        "oops",
        {"interactionType": [{"interactionPair": ["oops", {"description": 42}, {"description": "Avoid alcohol."}]}]},
    ]}
    fake_get(lambda url, params: FakeResponse(200, interactions))
    assert drug_lookup.get_drug_interactions("723") == ["Avoid alcohol."]


def test_cache_evicts_oldest_entries(fake_get, monkeypatch):
    monkeypatch.setattr(drug_lookup, "_CACHE_MAX_ENTRIES", 2)
    calls = fake_get(lambda url, params: FakeResponse(200, OPENFDA_LABEL))

    for name in ("Amoxil", "Tylenol", "Advil"):
        validate_medicine(name)

    assert list(drug_lookup._CACHE) == ["tylenol", "advil"]
    validate_medicine("Amoxil")
    assert len(calls) == 4
