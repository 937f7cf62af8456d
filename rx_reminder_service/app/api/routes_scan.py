# app/api/routes_scan.py
import sqlite3
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from app.agent.graph import scan_graph
from app.db.db_config import get_db
from app.schemas.models import (
    NormalizeRequest, ScanRequest, ScanResponse, ScanResult, ValidationResult,
)
from app.services.normalizer import normalize_scan
from app.services.prescription_store import save_prescription
from app.services.security import check_internal_key

router = APIRouter(prefix="/scan", tags=["scan"])

# upstream failure kind -> HTTP status shown to the caller
_ERROR_STATUS = {
    "rate_limited": 429,
    "credits_exhausted": 402,
}

@router.post("", response_model=ScanResponse)
def scan(
    req: ScanRequest,
    conn: sqlite3.Connection = Depends(get_db),
    x_internal_key: Optional[str] = Header(None),
):
    if not req.image_base64.strip():
        raise HTTPException(status_code=400, detail="No image provided")
    if req.save:
        # saving is a prescription write; same guard as POST /prescriptions
        check_internal_key(x_internal_key)

    scan_id = "scan_" + uuid.uuid4().hex
    final_state = scan_graph.invoke({
        "scan_id": scan_id,
        "patient_id": req.patient_id,
        "image_base64": req.image_base64,
        "validate_medicines": req.validate_medicines,
        "audit": [],
    })

    if final_state.get("error"):
        status = _ERROR_STATUS.get(final_state.get("error_kind"), 502)
        raise HTTPException(status_code=status, detail=final_state["error"])

    result = ScanResult(**final_state["result"])
    prescription_id = None
    if req.save:
        prescription_id = save_prescription(conn, req.patient_id, result, req.image_url).prescription_id

    return ScanResponse(
        scan_id=scan_id,
        result=result,
        validations=[ValidationResult(**v) for v in final_state.get("validations", [])],
        prescription_id=prescription_id,
    )

@router.post("/normalize", response_model=ScanResult)
def normalize(req: NormalizeRequest):
    return normalize_scan(req.medicines, req.confidence, req.raw_text)
