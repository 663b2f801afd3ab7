"""Builders for the canonical Appointment and PaymentReconciliation payloads."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .json_templater import load_template, write_document

PATIENT_EXTENSION_URL = "PaymentReconciliation#patient"

_REFERENCE_PREFIXES = ("Patient/", "Practitioner/", "Location/")


def modify_appointment(
    template_path: Path | str,
    output_path: Path | str,
    *,
    start: str,
    end: str,
    patient: str,
    practitioner: str,
    location: str,
    coding_id: str | None = None,
    coding_code: str | None = None,
) -> str:
    """Write an Appointment payload with new slot times and participant references."""
    document = _require_object(load_template(template_path), template_path)
    apply_appointment_values(
        document,
        start=start,
        end=end,
        references={
            "Patient/": patient,
            "Practitioner/": practitioner,
            "Location/": location,
        },
        coding_id=coding_id,
        coding_code=coding_code,
    )
    return write_document(document, output_path)


def apply_appointment_values(
    document: dict[str, Any],
    *,
    start: str,
    end: str,
    references: dict[str, str],
    coding_id: str | None = None,
    coding_code: str | None = None,
) -> dict[str, Any]:
    document["start"] = start
    document["end"] = end

    participants = document.get("participant")
    if isinstance(participants, list):
        for participant in participants:
            actor = participant.get("actor") if isinstance(participant, dict) else None
            if not isinstance(actor, dict):
                continue
            reference = actor.get("reference")
            if not isinstance(reference, str):
                continue
            for prefix in _REFERENCE_PREFIXES:
                if reference.startswith(prefix) and prefix in references:
                    actor["reference"] = prefix + references[prefix]
                    break

    if coding_id is not None or coding_code is not None:
        coding = _appointment_coding(document)
        if coding is not None:
            if coding_id is not None:
                coding["id"] = coding_id
            if coding_code is not None:
                coding["code"] = coding_code
    return document


def create_payment_reconciliation(
    template_path: Path | str,
    output_path: Path | str,
    *,
    patient_id: str,
    now: datetime | None = None,
) -> str:
    """Write a PaymentReconciliation payload dated now and linked to one patient."""
    document = _require_object(load_template(template_path), template_path)
    timestamp = (now or datetime.now().astimezone()).isoformat()
    document["created"] = timestamp
    document["paymentDate"] = timestamp

    patient_reference = f"Patient/{patient_id}"
    extensions = document.get("extension")
    if isinstance(extensions, list):
        for extension in extensions:
            if not isinstance(extension, dict) or extension.get("url") != PATIENT_EXTENSION_URL:
                continue
            value_reference = extension.get("valueReference")
            if isinstance(value_reference, dict):
                value_reference["reference"] = patient_reference
                value_reference["display"] = patient_reference
    return write_document(document, output_path)


def _appointment_coding(document: dict[str, Any]) -> dict[str, Any] | None:
    appointment_type = document.get("appointmentType")
    if not isinstance(appointment_type, dict):
        return None
    coding = appointment_type.get("coding")
    if isinstance(coding, dict):
        return coding
    if isinstance(coding, list) and coding and isinstance(coding[0], dict):
        return coding[0]
    return None


def _require_object(document: Any, source: Path | str) -> dict[str, Any]:
    if not isinstance(document, dict):
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Payload template {source} must contain a JSON object."
        )
    return document
