"""Payload templating domain exports."""

from .data_generators import DataGenerator, convert_date, format_timestamp
from .fhir_payloads import (
    PATIENT_EXTENSION_URL,
    apply_appointment_values,
    create_payment_reconciliation,
    modify_appointment,
)
from .json_templater import (
    generate_document,
    generate_payload,
    load_template,
    render_json,
    render_payload,
    update_document,
    update_payload,
    write_document,
)

__all__ = [
    "generate_document",
    "update_document",
    "generate_payload",
    "update_payload",
    "render_payload",
    "render_json",
    "load_template",
    "write_document",
    "modify_appointment",
    "apply_appointment_values",
    "create_payment_reconciliation",
    "PATIENT_EXTENSION_URL",
    "DataGenerator",
    "convert_date",
    "format_timestamp",
]
