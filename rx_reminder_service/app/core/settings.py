import os
from pathlib import Path

from dotenv import load_dotenv

SERVICE_ROOT = Path(__file__).resolve().parents[2]  # rx_reminder_service/

# real environment variables win over config.env
load_dotenv(dotenv_path=SERVICE_ROOT / "config.env", override=False)

# AI gateway (OCR + structured extraction)
AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY", "")
AI_GATEWAY_MODEL = os.getenv("AI_GATEWAY_MODEL", "google/gemini-2.5-pro")
AI_GATEWAY_TEMPERATURE = float(os.getenv("AI_GATEWAY_TEMPERATURE", "0.1"))
AI_GATEWAY_MAX_TOKENS = int(os.getenv("AI_GATEWAY_MAX_TOKENS", "3000"))
AI_GATEWAY_TIMEOUT_S = int(os.getenv("AI_GATEWAY_TIMEOUT_S", "90"))

# Drug lookup (display enrichment only)
OPENFDA_LABEL_URL = os.getenv("OPENFDA_LABEL_URL", "https://api.fda.gov/drug/label.json")
RXNAV_BASE_URL = os.getenv("RXNAV_BASE_URL", "https://rxnav.nlm.nih.gov/REST")
DRUG_LOOKUP_TIMEOUT_S = int(os.getenv("DRUG_LOOKUP_TIMEOUT_S", "15"))

# Storage
RX_DB_PATH = Path(os.getenv("RX_DB_PATH", str(SERVICE_ROOT / "app" / "db" / "prescriptions.db")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
