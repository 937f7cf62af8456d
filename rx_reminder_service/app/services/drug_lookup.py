# app/services/drug_lookup.py
"""
Drug validation against public databases (OpenFDA drug labels, then RxNav).
Display enrichment only: any failure degrades to "not validated".
"""
import logging
import re
from typing import Any, Dict, List, Optional

import requests

from app.core.settings import DRUG_LOOKUP_TIMEOUT_S, OPENFDA_LABEL_URL, RXNAV_BASE_URL
from app.schemas.models import DrugInfo, ValidationResult

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = (
    "Medicine not found in FDA database. Please verify the spelling or consult your pharmacist."
)
_MAX_TEXT_CHARS = 500
_MAX_SECTION_ITEMS = 5
_MAX_INTERACTIONS = 5
_CACHE_MAX_ENTRIES = 512
_SECTION_SPLIT_RE = re.compile(r"[•\n\r]+")
_WS_RE = re.compile(r"\s+")

# lowercased name -> DrugInfo, oldest entries evicted past _CACHE_MAX_ENTRIES
_CACHE: Dict[str, DrugInfo] = {}

def _remember(key: str, info: DrugInfo) -> None:
    _CACHE.pop(key, None)
    _CACHE[key] = info
    while len(_CACHE) > _CACHE_MAX_ENTRIES:
        del _CACHE[next(iter(_CACHE))]

def extract_text(field: Optional[List[str]]) -> str:
    if not field:
        return ""
    text = _WS_RE.sub(" ", field[0]).strip()
    if len(text) > _MAX_TEXT_CHARS:
        text = text[:_MAX_TEXT_CHARS] + "..."
    return text

def extract_section(field: Optional[List[str]]) -> List[str]:
    if not field:
        return []
    items = [_WS_RE.sub(" ", item).strip() for item in _SECTION_SPLIT_RE.split(field[0])]
    return [item for item in items if 10 < len(item) < 200][:_MAX_SECTION_ITEMS]

def _get_json(url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    try:
        r = requests.get(url, params=params, timeout=DRUG_LOOKUP_TIMEOUT_S)
    except requests.RequestException as e:
        logger.warning("drug lookup request failed (%s): %s", url, e)
        return None
    if r.status_code == 404:
        return None
    if r.status_code >= 400:
        logger.warning("drug lookup %s returned %s", url, r.status_code)
        return None
    try:
        data = r.json()
    except ValueError:
        logger.warning("drug lookup %s returned a non-JSON body", url)
        return None
    if not isinstance(data, dict):
        logger.warning("drug lookup %s returned %s, not an object", url, type(data).__name__)
        return None
    return data

def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}

def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []

def _first(values: Optional[List[str]], default: str) -> str:
    return values[0] if values else default

def search_openfda(medicine_name: str) -> Optional[DrugInfo]:
    clean_name = medicine_name.strip().lower()
    queries = [
        f'openfda.brand_name:"{clean_name}"',
        f'openfda.generic_name:"{clean_name}"',
        f'openfda.substance_name:"{clean_name}"',
    ]

    for query in queries:
        data = _get_json(OPENFDA_LABEL_URL, params={"search": query, "limit": 1})
        results = _list((data or {}).get("results"))
        if not results:
            continue

        drug = _dict(results[0])
        if not drug:
            continue
        openfda = _dict(drug.get("openfda"))
        return DrugInfo(
            validated=True,
            brand_name=_first(openfda.get("brand_name"), medicine_name),
            generic_name=_first(openfda.get("generic_name"), "Not available"),
            manufacturer=_first(openfda.get("manufacturer_name"), "Not available"),
            drug_class=_first(openfda.get("pharm_class_epc") or openfda.get("pharm_class_moa"), "Not classified"),
            active_ingredients=openfda.get("substance_name") or [],
            dosage_forms=openfda.get("dosage_form") or [],
            route=openfda.get("route") or [],
            warnings=extract_section(drug.get("warnings")) or extract_section(drug.get("boxed_warning")),
            indications=extract_text(drug.get("indications_and_usage")) or "See package insert",
            contraindications=extract_text(drug.get("contraindications")) or "See package insert",
            side_effects=extract_section(drug.get("adverse_reactions")),
            interactions=extract_section(drug.get("drug_interactions")),
            storage_instructions=extract_text(drug.get("storage_and_handling")) or "Store as directed",
            fda_approved=True,
        )
    return None

def search_rxnorm(medicine_name: str) -> Optional[Dict[str, str]]:
    data = _get_json(f"{RXNAV_BASE_URL}/rxcui.json", params={"name": medicine_name, "search": 2})
    ids = _list(_dict((data or {}).get("idGroup")).get("rxnormId"))
    if not ids:
        return None

    rxcui = ids[0]
    props = _get_json(f"{RXNAV_BASE_URL}/rxcui/{rxcui}/properties.json")
    if props is None:
        return None
    name = _dict(props.get("properties")).get("name")
    return {"rxcui": str(rxcui), "name": name if isinstance(name, str) and name else medicine_name}

def get_drug_interactions(rxcui: str) -> List[str]:
    data = _get_json(f"{RXNAV_BASE_URL}/interaction/interaction.json", params={"rxcui": rxcui}) or {}
    out: List[str] = []
    for group in _list(data.get("interactionTypeGroup")):
        for itype in _list(_dict(group).get("interactionType")):
            for pair in _list(_dict(itype).get("interactionPair")):
                pair = _dict(pair)
                if isinstance(pair.get("description"), str) and len(out) < _MAX_INTERACTIONS:
                    out.append(pair["description"])
    return out

def not_validated(medicine_name: str) -> DrugInfo:
    return DrugInfo(
        validated=False,
        brand_name=medicine_name,
        generic_name="Not found in database",
        message=NOT_FOUND_MESSAGE,
    )

def validate_medicine(medicine_name: str) -> DrugInfo:
    key = (medicine_name or "").strip().lower()
    if not key:
        return not_validated(medicine_name or "")
    if key in _CACHE:
        return _CACHE[key]

    logger.info("validating medicine %r", medicine_name)
    info = search_openfda(medicine_name)

    if info is None:
        rx = search_rxnorm(medicine_name)
        if rx:
            info = DrugInfo(
                validated=True,
                brand_name=rx["name"],
                generic_name=rx["name"],
                manufacturer="Not available",
                drug_class="Not classified",
                indications="Consult your healthcare provider",
                contraindications="Consult your healthcare provider",
                interactions=get_drug_interactions(rx["rxcui"]),
                storage_instructions="Store as directed",
                fda_approved=False,  # RxNorm cannot confirm FDA approval
            )

    if info is None:
        info = not_validated(medicine_name)
    _remember(key, info)
    return info

def validate_medicines(names: List[str]) -> List[ValidationResult]:
    """Batch lookup, OpenFDA only."""
    results: List[ValidationResult] = []
    for name in names:
        info = search_openfda(name) if (name or "").strip() else None
        if info is not None:
            _remember(name.strip().lower(), info)
        results.append(ValidationResult(original_name=name, validated=info is not None, data=info))
    return results
