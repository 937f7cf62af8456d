# app/agent/nodes.py
import logging
from typing import Any, Dict

from app.agent.state import ScanState
from app.services.drug_lookup import validate_medicines
from app.services.gateway_client import GatewayError, scan_prescription_image
from app.services.normalizer import normalize_extraction

logger = logging.getLogger(__name__)

def _audit(state: ScanState, event: str, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    audit = list(state.get("audit") or [])
    audit.append({"event": event, **(extra or {})})
    return {"audit": audit}

def extract_node(state: ScanState) -> Dict[str, Any]:
    try:
        extraction = scan_prescription_image(state["image_base64"])
    except GatewayError as e:
        logger.warning("scan %s: extraction failed: %s", state.get("scan_id"), e)
        return {
            "error": str(e),
            "error_kind": e.kind,
            **_audit(state, "extract.failed", {"kind": e.kind}),
        }
    return {"extraction": extraction, **_audit(state, "extract.done")}

def route_after_extract(state: ScanState) -> str:
    # the normalizer only ever sees a structured (possibly empty) envelope
    return "failed" if state.get("error") else "normalize"

def normalize_node(state: ScanState) -> Dict[str, Any]:
    result = normalize_extraction(state.get("extraction") or {})
    return {
        "result": result.model_dump(),
        **_audit(state, "normalize.done", {"count": len(result.medicines), "confidence": result.confidence}),
    }

def route_after_normalize(state: ScanState) -> str:
    meds = (state.get("result") or {}).get("medicines") or []
    return "enrich" if state.get("validate_medicines") and meds else "done"

def enrich_node(state: ScanState) -> Dict[str, Any]:
    names = [m["name"] for m in state["result"]["medicines"]]
    results = validate_medicines(names)
    return {
        "validations": [r.model_dump() for r in results],
        **_audit(state, "enrich.done", {"validated": sum(1 for r in results if r.validated)}),
    }
