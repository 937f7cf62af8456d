from fastapi import FastAPI
from app.core.logging_config import configure_logging
from app.api.routes_scan import router as scan_router
from app.api.routes_prescriptions import router as prescriptions_router
from app.api.routes_medicines import router as medicines_router
from app.api.routes_reminders import router as reminders_router

configure_logging()

app = FastAPI(title="Prescription Scan & Reminders", version="1.0")

app.include_router(scan_router)
app.include_router(prescriptions_router)
app.include_router(medicines_router)
app.include_router(reminders_router)

@app.get("/health")
def health():
    return {"ok": True}
@app.get("/")
def root():
    return {"ok": True, "service": "Prescription Scan & Reminders"}
