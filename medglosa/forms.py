"""
Register/edit form handling.

The form keeps what the user typed. Dates arrive from a date input as
YYYY-MM-DD and are stored as DD/MM/YYYY; the edit form needs them back in
the input format.
"""

from __future__ import annotations

import math
from typing import Optional

from medglosa.models import MedicalProcedure, ProcedureForm


def parse_value(text: str) -> float:
    """Parse the value field; empty or invalid input counts as zero."""
    text = (text or "").strip().replace(",", ".")
    if not text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def to_display_date(text: str) -> str:
    if "-" in text:
        return "/".join(reversed(text.split("-")))
    return text


def to_input_date(text: str) -> str:
    parts = text.split("/")
    if len(parts) == 3:
        return f"{parts[2]}-{parts[1]}-{parts[0]}"
    return text


def procedure_data_from_form(form: ProcedureForm) -> Optional[dict]:
    """
    Build the fields of a record from a submitted form.

    Returns None when patient, date or procedure is missing; the caller
    drops the submission without a message.
    """
    if not form.patient_name or not form.exam_date or not form.procedure_name:
        return None
    return {
        "patient_name": form.patient_name,
        "date": to_display_date(form.exam_date),
        "procedure_name": form.procedure_name,
        "tuss_code": form.tuss_code,
        "insurance": form.insurance,
        "payment_method": form.payment_method if form.insurance == "Particular" else None,
        "procedure_value": parse_value(form.procedure_value),
        "status": "pending",
        "received_status": "nao_recebido",
    }


def form_from_procedure(procedure: MedicalProcedure) -> ProcedureForm:
    return ProcedureForm(
        patient_name=procedure.patient_name,
        exam_date=to_input_date(procedure.date),
        procedure_name=procedure.procedure_name,
        tuss_code=procedure.tuss_code or "",
        insurance=procedure.insurance,
        payment_method=procedure.payment_method or "Dinheiro",
        procedure_value=str(procedure.procedure_value) if procedure.procedure_value else "",
    )
