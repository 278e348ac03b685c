"""
Billing records and the payment-statement report items extracted by Gemini.

Dates are kept as the text the practice uses on paper (DD/MM/YYYY), both for
manual records and for the items read off a Unimed statement, so they can be
compared as plain strings.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

Insurance = Literal["Particular", "Publico", "Unimed"]
PaymentMethod = Literal["Dinheiro", "Sicredi", "Banco do Brasil"]
BillingStatus = Literal["pending", "paid", "glosa"]
ReceivedStatus = Literal["recebido", "nao_recebido"]


class MedicalProcedure(BaseModel):
    id: str
    patient_name: str
    date: str
    procedure_name: str
    tuss_code: Optional[str] = None
    insurance: Insurance
    payment_method: Optional[PaymentMethod] = None  # Particular only
    procedure_value: float = 0.0
    status: BillingStatus = "pending"
    received_status: ReceivedStatus = "nao_recebido"
    notes: Optional[str] = None
    glosa_amount: Optional[float] = None


class GlosaReportItem(BaseModel):
    """One line of a Unimed payment statement."""

    patient_name: str
    date: str
    procedure: str
    tuss_code: Optional[str] = None
    hono_amount: float
    glosa_amount: float
    total_paid: float
    is_glosa: bool


class ProcedureForm(BaseModel):
    """The register/edit form exactly as typed; parsing happens in forms.py."""

    patient_name: str = ""
    exam_date: str = ""
    procedure_name: str = ""
    tuss_code: str = ""
    insurance: Insurance = "Unimed"
    payment_method: PaymentMethod = "Dinheiro"
    procedure_value: str = ""


class ReceivedStatusUpdate(BaseModel):
    received_status: ReceivedStatus
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Audit views
# ---------------------------------------------------------------------------


class GlosaSummary(BaseModel):
    total_glosa: float = 0.0
    unique_patients: list[str] = []


class CrossMatch(BaseModel):
    manual: MedicalProcedure
    ai: GlosaReportItem


class CrossReference(BaseModel):
    matched: list[CrossMatch] = []
    unmatched_manual: list[MedicalProcedure] = []


class AnalysisReport(BaseModel):
    items: list[GlosaReportItem] = []
    summary: GlosaSummary = GlosaSummary()
    cross_reference: CrossReference = CrossReference()
