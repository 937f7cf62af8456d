# app/services/normalizer.py
import logging
import math
import numbers
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.schemas.models import Medicine, ScanResult

logger = logging.getLogger(__name__)

FIELD_DEFAULTS: Dict[str, str] = {
    "name": "Unknown Medicine",
    "dosage": "Not specified",
    "frequency": "As directed",
    "duration": "As prescribed",
    "instructions": "Follow doctor's instructions",
}

# gateway envelope key -> ScanResult field
_METADATA_KEYS = {
    "doctorName": "doctor_name",
    "patientName": "patient_name",
    "prescriptionDate": "prescription_date",
}

def clean_text(value: Any, default: str) -> str:
    """Trimmed string, or `default` when the value is missing, not a str, or blank."""
    if isinstance(value, str):
        v = value.strip()
        if v:
            return v
    return default

def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None

def normalize_confidence(value: Any) -> int:
    """
    0..100 integer. Out-of-range values are clamped and fractional values are
    rounded to the nearest whole percent (73.6 -> 74). Any real number counts,
    including Decimal and numeric strings; bools, NaN and anything else are 0.
    """
    if value is None or isinstance(value, bool):
        return 0

    try:
        if isinstance(value, (numbers.Real, Decimal)):
            num = float(value)
        elif isinstance(value, str):
            num = float(value.strip())
        else:
            return 0
    except (ValueError, OverflowError):
        return 0

    if math.isnan(num):
        return 0
    return int(round(min(100.0, max(0.0, num))))

def _candidate_fields(candidate: Any) -> Mapping:
    if isinstance(candidate, Mapping):
        return candidate
    if isinstance(candidate, BaseModel):
        return candidate.model_dump()
    return {}

def normalize_medicine(candidate: Any, position: int) -> Medicine:
    fields = _candidate_fields(candidate)
    values = {key: clean_text(fields.get(key), default) for key, default in FIELD_DEFAULTS.items()}

    defaulted = [k for k in FIELD_DEFAULTS if _optional_text(fields.get(k)) is None]
    if defaulted:
        logger.debug("medicine #%d: defaulted %s", position, ", ".join(defaulted))
    return Medicine(id=position, **values)

def normalize_scan(
    candidates: Iterable,
    raw_confidence: Any = None,
    raw_text: Any = None,
    metadata: Optional[Mapping] = None,
) -> ScanResult:
    """
    Single trust boundary between extraction output and the rest of the service.
    - ids are 1-based positions in input order
    - every Medicine string field is populated (defaults above)
    - confidence clamped to 0..100, raw_text never None
    Malformed entries degrade to defaults; only a non-iterable `candidates` raises.
    """
    if isinstance(candidates, (str, bytes, Mapping)) or not isinstance(candidates, Iterable):
        raise TypeError(f"candidates must be a sequence of medicine records, got {type(candidates).__name__}")

    medicines: List[Medicine] = [
        normalize_medicine(c, i) for i, c in enumerate(candidates, start=1)
    ]

    meta = metadata or {}
    result = ScanResult(
        medicines=medicines,
        confidence=normalize_confidence(raw_confidence),
        raw_text=raw_text if isinstance(raw_text, str) else "",
        doctor_name=_optional_text(meta.get("doctor_name")),
        patient_name=_optional_text(meta.get("patient_name")),
        prescription_date=_optional_text(meta.get("prescription_date")),
    )
    logger.debug("normalized %d medicine(s), confidence=%d", len(medicines), result.confidence)
    return result

def normalize_extraction(payload: Mapping) -> ScanResult:
    """Normalize a gateway envelope: {medicines, confidence, rawText, doctorName, ...}."""
    meds = payload.get("medicines")
    if not isinstance(meds, list):
        if meds is not None:
            logger.warning("extraction payload 'medicines' is %s, treating as empty", type(meds).__name__)
        meds = []

    metadata = {field: payload.get(key) for key, field in _METADATA_KEYS.items()}
    return normalize_scan(meds, payload.get("confidence"), payload.get("rawText"), metadata)
