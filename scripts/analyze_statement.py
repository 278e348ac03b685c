#!/usr/bin/env python3
"""
Read a Unimed payment statement with Gemini and print the glosa report.

Run:
    python scripts/analyze_statement.py extrato.pdf
    python scripts/analyze_statement.py extrato.pdf --apply

With --apply, each statement line also updates the matching procedures in
the local store (same as uploading it through /analyze).
"""

import argparse
import mimetypes
import os
import sys
from pathlib import Path

# Allow running from repo root
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from dotenv import load_dotenv
load_dotenv()

from medglosa import audit, gemini_client, procedure_store
from medglosa.config import settings


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("path", type=Path)
    parser.add_argument("--apply", action="store_true", help="update matching procedures")
    args = parser.parse_args()

    if not settings.gemini_api_key:
        print("ERROR: GEMINI_API_KEY is not set in .env")
        sys.exit(1)

    mime_type = mimetypes.guess_type(args.path.name)[0] or "application/pdf"
    print(f"Analysing {args.path} ({mime_type}) with {settings.gemini_model}...\n")

    try:
        items = gemini_client.analyze_pdf_for_glosas(
            gemini_client.encode_file(args.path.read_bytes()), mime_type
        )
    except gemini_client.GlosaAnalysisError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    for item in items:
        flag = "GLOSA" if item.is_glosa else "pago "
        print(
            f"  [{flag}] {item.date}  {item.patient_name:<35} {item.procedure:<40} "
            f"R$ {item.total_paid:>10.2f}  glosa R$ {item.glosa_amount:.2f}"
        )

    summary = audit.glosa_summary(items)
    print(f"\n{len(items)} line(s), total glosa R$ {summary.total_glosa:.2f}")
    for i, patient in enumerate(summary.unique_patients, start=1):
        print(f"  {i}. {patient}")

    if args.apply:
        updated = procedure_store.apply_report(items)
        print(f"\n✓ {updated} procedure(s) updated in {settings.storage_dir}")


if __name__ == "__main__":
    main()
