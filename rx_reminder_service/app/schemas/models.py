from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

MEDICAL_DISCLAIMER = (
    "Not medical advice. This service organizes medicines read from your prescription. "
    "Always confirm instructions with a doctor/pharmacist."
)

class RawMedicineCandidate(BaseModel):
    """Untrusted extraction output. Values are kept as-is for the normalizer."""
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    dosage: Any = None
    frequency: Any = None
    duration: Any = None
    instructions: Any = None
    form: Any = None
    route: Any = None

class Medicine(BaseModel):
    id: int = Field(..., ge=1, description="1-based position within one scan/prescription")
    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str

class ScanResult(BaseModel):
    medicines: List[Medicine] = Field(default_factory=list)
    confidence: int = Field(0, ge=0, le=100)
    raw_text: str = ""

    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    prescription_date: Optional[str] = None  # YYYY-MM-DD when the gateway could read it

class SlotState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    taken: bool = False
    notification_enabled: bool = Field(
        False, validation_alias=AliasChoices("notification_enabled", "notificationEnabled")
    )

class ReminderSlot(BaseModel):
    slot_id: str  # "YYYY-MM-DD h:mm AM"
    date: str
    time: str
    medicines: List[str] = Field(default_factory=list)  # "{name} {dosage}"
    taken: bool = False
    notification_enabled: bool = False

class DayProgress(BaseModel):
    taken: int
    total: int

class DrugInfo(BaseModel):
    validated: bool
    brand_name: str
    generic_name: str
    manufacturer: Optional[str] = None
    drug_class: Optional[str] = None
    active_ingredients: List[str] = Field(default_factory=list)
    dosage_forms: List[str] = Field(default_factory=list)
    route: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    indications: Optional[str] = None
    contraindications: Optional[str] = None
    side_effects: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)
    storage_instructions: Optional[str] = None
    fda_approved: Optional[bool] = None
    message: Optional[str] = None

class ValidationResult(BaseModel):
    original_name: str
    validated: bool
    data: Optional[DrugInfo] = None

class Prescription(BaseModel):
    prescription_id: str
    patient_id: str
    medicines: List[Medicine]
    confidence_score: int
    raw_text: str = ""
    image_url: Optional[str] = None
    scan_date: str
    created_at: str

class ToolResult(BaseModel):
    ok: bool
    mock: bool = True
    details: Dict[str, Any] = Field(default_factory=dict)

# ---------------------------
# API payloads
# ---------------------------
class ScanRequest(BaseModel):
    patient_id: str
    image_base64: str  # raw base64 or a data:image/...;base64, URL
    validate_medicines: bool = False
    save: bool = False
    image_url: Optional[str] = None

class ScanResponse(BaseModel):
    scan_id: str
    result: ScanResult
    validations: List[ValidationResult] = Field(default_factory=list)
    prescription_id: Optional[str] = None
    disclaimer: str = MEDICAL_DISCLAIMER

class NormalizeRequest(BaseModel):
    # deliberately loose: malformed entries must reach the normalizer
    medicines: List[Any] = Field(default_factory=list)
    confidence: Any = None
    raw_text: Any = None

class PrescriptionCreate(BaseModel):
    patient_id: str
    medicines: List[Any] = Field(default_factory=list)
    confidence_score: Any = None
    raw_text: Any = None
    image_url: Optional[str] = None

class DrugLookupRequest(BaseModel):
    medicine_name: str

class MedicineName(BaseModel):
    name: str

class BatchDrugLookupRequest(BaseModel):
    medicines: List[MedicineName]

class FrequencyTimesResponse(BaseModel):
    frequency: str
    times: List[str]

class ReminderDayResponse(BaseModel):
    patient_id: str
    date: str
    slots: List[ReminderSlot]
    progress: DayProgress

class SlotActionRequest(BaseModel):
    patient_id: str
    slot_id: str

class NotificationToggleRequest(BaseModel):
    patient_id: str
    slot_id: str
    enabled: bool

class SlotActionResponse(BaseModel):
    slot: ReminderSlot
    dispatch: ToolResult
