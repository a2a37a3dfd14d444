from __future__ import annotations

from typing import Any

# Predefined inspection forms, seeded into an empty store.
DEFAULT_FORMS: list[dict[str, Any]] = [
    {
        "name": "fire-safety",
        "title": "Fire Safety Inspection",
        "elements": [
            {"id": "site_name", "type": "text", "content": "Site name"},
            {"id": "site_address", "type": "text", "content": "Site address"},
            {"id": "inspected_on", "type": "date", "content": "Inspected on"},
            {"id": "extinguishers_ok", "type": "checkbox", "content": "Extinguishers serviced"},
            {"id": "exits_clear", "type": "checkbox", "content": "Emergency exits clear"},
            {"id": "alarm_tested", "type": "checkbox", "content": "Alarm system tested"},
            {"id": "notes", "type": "text", "content": "Remarks"},
            {"id": "inspector_signature", "type": "signature", "content": "Inspector signature"},
        ],
    },
    {
        "name": "food-hygiene",
        "title": "Food Hygiene Inspection",
        "elements": [
            {"id": "establishment", "type": "text", "content": "Establishment"},
            {"id": "license_number", "type": "text", "content": "License number"},
            {"id": "inspected_on", "type": "date", "content": "Inspected on"},
            {"id": "cold_storage_ok", "type": "checkbox", "content": "Cold storage below 5°C"},
            {"id": "handwash_ok", "type": "checkbox", "content": "Hand-wash stations supplied"},
            {"id": "pest_free", "type": "checkbox", "content": "No sign of pests"},
            {"id": "notes", "type": "text", "content": "Remarks"},
            {"id": "inspector_signature", "type": "signature", "content": "Inspector signature"},
        ],
    },
    {
        "name": "building",
        "title": "Building Structure Inspection",
        "elements": [
            {"id": "permit_number", "type": "text", "content": "Permit number"},
            {"id": "owner", "type": "text", "content": "Owner"},
            {"id": "inspected_on", "type": "date", "content": "Inspected on"},
            {"id": "foundation_ok", "type": "checkbox", "content": "Foundation sound"},
            {"id": "wiring_ok", "type": "checkbox", "content": "Electrical wiring to code"},
            {"id": "next_visit", "type": "date", "content": "Next visit"},
            {"id": "inspector_signature", "type": "signature", "content": "Inspector signature"},
        ],
    },
]
