"""Gemini API client — reads Unimed payment statements."""

from __future__ import annotations

import base64
import json
import logging

import httpx

from medglosa.config import settings
from medglosa.models import GlosaReportItem

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = (
    "Modelo não encontrado ou erro de permissão. Por favor, verifique sua chave "
    "de API e se o faturamento está ativo no Google Cloud Console."
)

EXTRACTION_PROMPT = """
Analise este documento de Recibo Analítico de Pagamento da Unimed.
Extraia todos os procedimentos listados.
Para cada procedimento, identifique:
1. Nome do Beneficiário (Paciente)
2. Data do atendimento (formato DD/MM/AAAA)
3. Nome do Serviço/Procedimento
4. Código TUSS do procedimento (geralmente um número de 8 a 10 dígitos)
5. Valor de Honorários (Hono)
6. Valor da Glosa (Glosa)
7. Valor Total pago

Um item é considerado uma GLOSA se o campo 'Glosa' tiver um valor diferente de zero ou se houver uma justificativa de glosa associada ao procedimento (como "NAO AUTORIZADO", "DUPLICIDADE", etc).

Retorne os dados estritamente em JSON seguindo o esquema fornecido.
"""

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "patientName": {"type": "STRING"},
            "date": {"type": "STRING"},
            "procedure": {"type": "STRING"},
            "tussCode": {"type": "STRING"},
            "honoAmount": {"type": "NUMBER"},
            "glosaAmount": {"type": "NUMBER"},
            "totalPaid": {"type": "NUMBER"},
            "isGlosa": {"type": "BOOLEAN"},
        },
        "required": [
            "patientName", "date", "procedure",
            "honoAmount", "glosaAmount", "totalPaid", "isGlosa",
        ],
    },
}


class GlosaAnalysisError(Exception):
    """Raised with a message meant for the person who uploaded the statement."""


def _headers() -> dict:
    return {
        "x-goog-api-key": settings.gemini_api_key,
        "Content-Type": "application/json",
    }


def _is_not_found(exc: Exception) -> bool:
    if "Requested entity was not found" in str(exc):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        return response.status_code == 404 or "NOT_FOUND" in response.text
    return False


def _response_text(body: dict) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = candidates[0].get("content", {}).get("parts", [])
    return "".join(part.get("text", "") for part in parts)


def _to_item(raw: dict) -> GlosaReportItem:
    return GlosaReportItem(
        patient_name=raw["patientName"],
        date=raw["date"],
        procedure=raw["procedure"],
        tuss_code=raw.get("tussCode"),
        hono_amount=raw["honoAmount"],
        glosa_amount=raw["glosaAmount"],
        total_paid=raw["totalPaid"],
        is_glosa=raw["isGlosa"],
    )


def encode_file(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def analyze_pdf_for_glosas(base64_data: str, mime_type: str) -> list[GlosaReportItem]:
    """
    Send one statement to Gemini and return its line items.

    No retries and no timeout: the call blocks until Gemini answers. A missing
    model or a key without billing becomes GlosaAnalysisError; every other
    error is re-raised as is.
    """
    payload = {
        "contents": [
            {
                "parts": [
                    {"inlineData": {"data": base64_data, "mimeType": mime_type}},
                    {"text": EXTRACTION_PROMPT},
                ]
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }
    url = f"{settings.gemini_base_url}/models/{settings.gemini_model}:generateContent"

    try:
        with httpx.Client(timeout=None) as client:
            response = client.post(url, headers=_headers(), json=payload)
            response.raise_for_status()
            text = _response_text(response.json())
        result = json.loads(text or "[]")
        return [_to_item(raw) for raw in result]
    except Exception as exc:
        logger.error("Erro ao analisar documento: %s", exc)
        if _is_not_found(exc):
            raise GlosaAnalysisError(NOT_FOUND_MESSAGE) from exc
        raise
