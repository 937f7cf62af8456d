from typing import Any, Dict, List, Optional, TypedDict

class ScanState(TypedDict, total=False):
    # identity
    scan_id: str
    patient_id: str

    # inputs
    image_base64: str
    validate_medicines: bool

    # outputs
    extraction: Dict[str, Any]          # raw gateway envelope (untrusted)
    result: Dict[str, Any]              # ScanResult dict (normalized)
    validations: List[Dict[str, Any]]   # ValidationResult dicts
    error: Optional[str]
    error_kind: Optional[str]
    audit: List[Dict[str, Any]]
