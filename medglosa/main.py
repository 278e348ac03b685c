"""
MedGlosa — billing tracker and Unimed statement audit, FastAPI server

Handles:
  - Register / edit of medical procedures
  - Procedure list with an optional date-range filter
  - Payment (received) status toggle
  - Statement audit: Gemini extraction, bulk status update, glosa report

Storage is a single JSON array on local disk (see procedure_store). There is
no authentication; run it on the practice's own machine.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from medglosa import audit, forms, gemini_client, procedure_store
from medglosa.config import settings
from medglosa.models import (
    AnalysisReport,
    GlosaReportItem,
    MedicalProcedure,
    ProcedureForm,
    ReceivedStatusUpdate,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="MedGlosa",
    version="1.0.0",
)

# Last statement analysed; kept in memory only, like the report on screen
last_report: list[GlosaReportItem] = []

# Set while a statement is with Gemini; further uploads are refused
_analyzing = False


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def _build_report(items: list[GlosaReportItem]) -> AnalysisReport:
    procedures = procedure_store.get_procedures()
    return AnalysisReport(
        items=items,
        summary=audit.glosa_summary(items),
        cross_reference=audit.cross_reference(procedures, items),
    )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "practice": settings.practice_name,
        "procedures": len(procedure_store.get_procedures()),
        "analyzing": _analyzing,
    }


# ---------------------------------------------------------------------------
# Register / edit
# ---------------------------------------------------------------------------

@app.post("/procedures", status_code=201, response_model=MedicalProcedure)
async def register_procedure(form: ProcedureForm):
    data = forms.procedure_data_from_form(form)
    if data is None:
        raise HTTPException(status_code=400)
    return procedure_store.save_procedure(data)


@app.get("/procedures/{procedure_id}/form", response_model=ProcedureForm)
async def edit_form(procedure_id: str):
    procedure = procedure_store.get_procedure(procedure_id)
    if procedure is None:
        raise HTTPException(status_code=404, detail="Procedure not found")
    return forms.form_from_procedure(procedure)


@app.put("/procedures/{procedure_id}", response_model=MedicalProcedure)
async def edit_procedure(procedure_id: str, form: ProcedureForm):
    existing = procedure_store.get_procedure(procedure_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Procedure not found")
    data = forms.procedure_data_from_form(form)
    if data is None:
        raise HTTPException(status_code=400)

    # Saving the form resets status and received status, as on a new record
    updated = existing.model_copy(update=data)
    procedure_store.update_procedure(updated)
    logger.info("Procedure %s edited", procedure_id)
    return updated


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

@app.get("/procedures", response_model=list[MedicalProcedure])
async def list_procedures(start_date: date | None = None, end_date: date | None = None):
    return audit.filter_by_date(procedure_store.get_procedures(), start_date, end_date)


@app.patch("/procedures/{procedure_id}/received", response_model=MedicalProcedure)
async def update_received(procedure_id: str, body: ReceivedStatusUpdate):
    found = procedure_store.update_received_status(
        procedure_id, body.received_status, body.notes
    )
    if not found:
        raise HTTPException(status_code=404, detail="Procedure not found")
    return procedure_store.get_procedure(procedure_id)


# ---------------------------------------------------------------------------
# Statement audit
# ---------------------------------------------------------------------------

@app.post("/analyze", response_model=AnalysisReport)
async def analyze_statement(file: UploadFile = File(...)):
    global _analyzing, last_report
    if _analyzing:
        raise HTTPException(status_code=409, detail="Analysis already in progress")

    _analyzing = True
    try:
        content = await file.read()
        base64_data = gemini_client.encode_file(content)
        mime_type = file.content_type or "application/pdf"
        items = await run_in_threadpool(
            gemini_client.analyze_pdf_for_glosas, base64_data, mime_type
        )
    except Exception as exc:
        logger.error("Statement analysis failed for %s: %s", file.filename, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    finally:
        _analyzing = False

    last_report = items
    updated = procedure_store.apply_report(items)
    logger.info(
        "Statement %s: %d line(s), %d procedure(s) updated",
        file.filename, len(items), updated,
    )
    return _build_report(items)


@app.get("/analyze/report", response_model=AnalysisReport)
async def current_report():
    return _build_report(last_report)
