"""
Procedure store — the practice's billing registry.

The whole collection is one JSON array under settings.storage_key. Every
mutation reads the full array, changes it and writes it back; nothing is
cached between calls. Records are never deleted.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Optional

from medglosa import audit, local_storage
from medglosa.config import settings
from medglosa.models import (
    BillingStatus,
    GlosaReportItem,
    MedicalProcedure,
    ReceivedStatus,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Persistence helpers
# ---------------------------------------------------------------------------


def _write(procedures: list[MedicalProcedure]) -> None:
    payload = json.dumps([p.model_dump() for p in procedures], ensure_ascii=False)
    local_storage.set_item(settings.storage_key, payload)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_procedures() -> list[MedicalProcedure]:
    data = local_storage.get_item(settings.storage_key)
    if not data:
        return []
    return [MedicalProcedure.model_validate(p) for p in json.loads(data)]


def get_procedure(procedure_id: str) -> Optional[MedicalProcedure]:
    for p in get_procedures():
        if p.id == procedure_id:
            return p
    return None


def save_procedure(data: dict) -> MedicalProcedure:
    """Append a new record with a freshly generated id."""
    procedures = get_procedures()
    new_procedure = MedicalProcedure(**{**data, "id": str(uuid.uuid4())})
    procedures.append(new_procedure)
    _write(procedures)
    logger.info("Procedure %s registered for %s", new_procedure.id, new_procedure.patient_name)
    return new_procedure


def update_procedure(updated: MedicalProcedure) -> None:
    procedures = get_procedures()
    _write([updated if p.id == updated.id else p for p in procedures])


def update_received_status(
    procedure_id: str,
    status: ReceivedStatus,
    notes: Optional[str] = None,
) -> bool:
    """Set the received status (and notes, when given) of one record."""
    procedures = get_procedures()
    found = False
    updated = []
    for p in procedures:
        if p.id == procedure_id:
            found = True
            p = p.model_copy(update={
                "received_status": status,
                "notes": notes if notes is not None else p.notes,
            })
        updated.append(p)
    _write(updated)
    return found


def update_procedure_status(
    patient_name: str,
    date: str,
    procedure_name: str,
    status: BillingStatus,
    glosa_amount: Optional[float] = None,
) -> int:
    """
    Apply a statement line to every matching record.

    A record matches when its patient name equals patient_name ignoring case
    and surrounding spaces, its date is exactly date, and procedure_name is a
    case-insensitive substring of its procedure name. All matches are updated.
    """
    name_key = patient_name.lower().strip()
    proc_key = procedure_name.lower()

    procedures = get_procedures()
    count = 0
    updated = []
    for p in procedures:
        if (
            p.patient_name.lower().strip() == name_key
            and p.date == date
            and proc_key in p.procedure_name.lower()
        ):
            p = p.model_copy(update={"status": status, "glosa_amount": glosa_amount})
            count += 1
        updated.append(p)
    _write(updated)

    if count:
        logger.info(
            "Marked %d procedure(s) as %s for %s on %s", count, status, patient_name, date
        )
    return count


def apply_report(items: list[GlosaReportItem]) -> int:
    """Apply every statement line; returns the number of records updated."""
    return sum(
        update_procedure_status(
            item.patient_name,
            item.date,
            item.procedure,
            audit.status_for(item),
            item.glosa_amount,
        )
        for item in items
    )
