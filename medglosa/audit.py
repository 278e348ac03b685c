"""
Derived views over the registry and a Gemini statement report.

  - date-range filtering of the list view
  - glosa totals and the patients affected
  - cross reference between manual Unimed records and statement lines
"""

from __future__ import annotations

import unicodedata
from datetime import date
from typing import Iterable, Optional

from medglosa.models import (
    BillingStatus,
    CrossMatch,
    CrossReference,
    GlosaReportItem,
    GlosaSummary,
    MedicalProcedure,
)


def normalize(text: str) -> str:
    """Lower-case, drop accents and trim: "  José " -> "jose"."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip()


def parse_record_date(text: str) -> Optional[date]:
    try:
        day, month, year = (int(part) for part in text.split("/"))
        return date(year, month, day)
    except (ValueError, OverflowError):
        return None


def filter_by_date(
    procedures: Iterable[MedicalProcedure],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[MedicalProcedure]:
    """Keep records dated within [start_date, end_date]; both bounds optional."""
    if start_date is None and end_date is None:
        return list(procedures)

    kept = []
    for p in procedures:
        proc_date = parse_record_date(p.date)
        if proc_date is not None:
            if start_date is not None and proc_date < start_date:
                continue
            if end_date is not None and proc_date > end_date:
                continue
        kept.append(p)
    return kept


def status_for(item: GlosaReportItem) -> BillingStatus:
    return "glosa" if item.is_glosa else "paid"


def glosa_summary(report: Iterable[GlosaReportItem]) -> GlosaSummary:
    glosados = [item for item in report if item.is_glosa]
    total = sum(item.glosa_amount for item in glosados)
    # dict keeps first-seen order
    patients = list(dict.fromkeys(item.patient_name for item in glosados))
    return GlosaSummary(total_glosa=total, unique_patients=patients)


def _names_match(a: str, b: str) -> bool:
    na, nb = normalize(a), normalize(b)
    return nb in na or na in nb


def cross_reference(
    procedures: Iterable[MedicalProcedure],
    report: list[GlosaReportItem],
) -> CrossReference:
    """
    Pair each manual Unimed record with the first statement line for the
    same patient. Statement lines nobody registered are left out.
    """
    if not report:
        return CrossReference()

    matched: list[CrossMatch] = []
    unmatched: list[MedicalProcedure] = []
    for manual in procedures:
        if manual.insurance != "Unimed":
            continue
        found = next(
            (ai for ai in report if _names_match(ai.patient_name, manual.patient_name)),
            None,
        )
        if found is not None:
            matched.append(CrossMatch(manual=manual, ai=found))
        else:
            unmatched.append(manual)
    return CrossReference(matched=matched, unmatched_manual=unmatched)
