# app/api/routes_prescriptions.py
import sqlite3
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.db.db_config import get_db
from app.schemas.models import Prescription, PrescriptionCreate
from app.services.normalizer import normalize_scan
from app.services.prescription_store import (
    delete_prescription, get_prescription, list_prescriptions, save_prescription,
)
from app.services.security import verify_internal_service

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])

@router.post("", response_model=Prescription)
def create(
    req: PrescriptionCreate,
    conn: sqlite3.Connection = Depends(get_db),
    _ = Depends(verify_internal_service),
):
    scan = normalize_scan(req.medicines, req.confidence_score, req.raw_text)
    return save_prescription(conn, req.patient_id, scan, req.image_url)

@router.get("", response_model=List[Prescription])
def list_for_patient(patient_id: str, conn: sqlite3.Connection = Depends(get_db)):
    return list_prescriptions(conn, patient_id)

@router.get("/{prescription_id}", response_model=Prescription)
def fetch(prescription_id: str, conn: sqlite3.Connection = Depends(get_db)):
    rx = get_prescription(conn, prescription_id)
    if not rx:
        raise HTTPException(status_code=404, detail="prescription_id not found")
    return rx

@router.delete("/{prescription_id}")
def delete(
    prescription_id: str,
    conn: sqlite3.Connection = Depends(get_db),
    _ = Depends(verify_internal_service),
):
    if not delete_prescription(conn, prescription_id):
        raise HTTPException(status_code=404, detail="prescription_id not found")
    return {"ok": True, "prescription_id": prescription_id}
