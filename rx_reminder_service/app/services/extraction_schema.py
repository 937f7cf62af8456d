# app/services/extraction_schema.py

EXTRACT_TOOL_NAME = "extract_prescription_data"

PRESCRIPTION_SCHEMA = {
    "type": "object",
    "properties": {
        "medicines": {
            "type": "array",
            "description": "List of all medicines found in the prescription",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Full medicine name (brand or generic), properly capitalized"},
                    "dosage": {"type": "string", "description": "Dosage strength, e.g. 500mg, 10ml, 5mg/ml"},
                    "frequency": {"type": "string", "description": "How often, expanded: 'Twice daily' not 'BID'"},
                    "duration": {"type": "string", "description": "How long, e.g. '7 days', 'Until finished'"},
                    "instructions": {"type": "string", "description": "e.g. 'After meals', 'With plenty of water'"},
                    "form": {"type": "string", "description": "tablet, capsule, syrup, cream, ..."},
                    "route": {"type": "string", "description": "oral, topical, injection, ..."},
                },
                "required": ["name", "dosage", "frequency", "duration", "instructions"],
            },
        },
        "confidence": {
            "type": "number",
            "description": (
                "Confidence 0-100: 90+ clear typed text, 70-89 clear handwriting, "
                "50-69 partially legible, below 50 poor quality"
            ),
        },
        "rawText": {"type": "string", "description": "Complete raw text read from the image"},
        "doctorName": {"type": "string"},
        "patientName": {"type": "string"},
        "prescriptionDate": {"type": "string", "description": "YYYY-MM-DD"},
    },
    "required": ["medicines", "confidence", "rawText"],
}

EXTRACT_TOOL = {
    "type": "function",
    "function": {
        "name": EXTRACT_TOOL_NAME,
        "description": "Extract structured prescription data from the analyzed image",
        "parameters": PRESCRIPTION_SCHEMA,
    },
}
