# app/services/prescription_store.py
import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from app.schemas.models import Prescription, ScanResult
from app.services.normalizer import normalize_scan

logger = logging.getLogger(__name__)

# stored without `id`: ids are scan-local positions, re-derived on read
_STORED_FIELDS = ("name", "dosage", "frequency", "duration", "instructions")

def _prescription_id() -> str:
    return "rx_" + uuid.uuid4().hex[:12]

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _row_to_prescription(row: sqlite3.Row) -> Prescription:
    try:
        stored = json.loads(row["medicines"] or "[]")
    except json.JSONDecodeError:
        logger.error("prescription %s has unreadable medicines JSON", row["prescription_id"])
        stored = []
    if not isinstance(stored, list):
        stored = []

    # back through the normalizer: ids re-derived, defaults re-applied
    scan = normalize_scan(stored, row["confidence_score"], row["raw_text"])
    return Prescription(
        prescription_id=row["prescription_id"],
        patient_id=row["patient_id"],
        medicines=scan.medicines,
        confidence_score=scan.confidence,
        raw_text=scan.raw_text,
        image_url=row["image_url"],
        scan_date=row["scan_date"],
        created_at=row["created_at"],
    )

def save_prescription(
    conn: sqlite3.Connection,
    patient_id: str,
    scan: ScanResult,
    image_url: Optional[str] = None,
) -> Prescription:
    pid = _prescription_id()
    now = _now_iso()
    medicines = [{f: getattr(m, f) for f in _STORED_FIELDS} for m in scan.medicines]

    with conn:
        conn.execute(
            "INSERT INTO prescriptions "
            "(prescription_id, patient_id, medicines, confidence_score, raw_text, image_url, scan_date, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (pid, patient_id, json.dumps(medicines), scan.confidence, scan.raw_text, image_url, now, now),
        )
    logger.info("saved prescription %s for %s (%d medicines)", pid, patient_id, len(medicines))
    return get_prescription(conn, pid)

def list_prescriptions(conn: sqlite3.Connection, patient_id: str) -> List[Prescription]:
    rows = conn.execute(
        "SELECT * FROM prescriptions WHERE patient_id = ? ORDER BY scan_date DESC, rowid DESC",
        (patient_id,),
    ).fetchall()
    return [_row_to_prescription(r) for r in rows]

def get_prescription(conn: sqlite3.Connection, prescription_id: str) -> Optional[Prescription]:
    row = conn.execute(
        "SELECT * FROM prescriptions WHERE prescription_id = ?", (prescription_id,)
    ).fetchone()
    return _row_to_prescription(row) if row else None

def delete_prescription(conn: sqlite3.Connection, prescription_id: str) -> bool:
    with conn:
        cur = conn.execute("DELETE FROM prescriptions WHERE prescription_id = ?", (prescription_id,))
    return cur.rowcount > 0
