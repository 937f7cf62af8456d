# app/api/routes_medicines.py
from typing import List

from fastapi import APIRouter, HTTPException

from app.schemas.models import (
    BatchDrugLookupRequest, DrugInfo, DrugLookupRequest, FrequencyTimesResponse, ValidationResult,
)
from app.services.drug_lookup import validate_medicine, validate_medicines
from app.services.schedule import times_for_frequency

router = APIRouter(prefix="/medicines", tags=["medicines"])

@router.post("/validate", response_model=DrugInfo)
def validate_one(req: DrugLookupRequest):
    if not req.medicine_name.strip():
        raise HTTPException(status_code=400, detail="medicine_name must not be blank")
    return validate_medicine(req.medicine_name)

@router.post("/validate/batch", response_model=List[ValidationResult])
def validate_batch(req: BatchDrugLookupRequest):
    return validate_medicines([m.name for m in req.medicines])

@router.get("/schedule", response_model=FrequencyTimesResponse)
def schedule_for_frequency(frequency: str = ""):
    return FrequencyTimesResponse(frequency=frequency, times=times_for_frequency(frequency))
