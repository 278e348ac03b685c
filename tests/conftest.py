import pytest

from medglosa.config import settings
from medglosa.models import GlosaReportItem


@pytest.fixture(autouse=True)
def storage_dir(tmp_path, monkeypatch):
    """Point the store at a fresh directory for every test."""
    monkeypatch.setattr(settings, "storage_dir", str(tmp_path))
    return tmp_path


@pytest.fixture
def procedure_data():
    """Fields of a freshly registered Unimed procedure."""
    def _make(**overrides) -> dict:
        data = {
            "patient_name": "Maria Silva",
            "date": "15/01/2024",
            "procedure_name": "Consulta em consultório",
            "tuss_code": "10101012",
            "insurance": "Unimed",
            "payment_method": None,
            "procedure_value": 150.0,
            "status": "pending",
            "received_status": "nao_recebido",
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def report_item():
    def _make(**overrides) -> GlosaReportItem:
        data = {
            "patient_name": "MARIA SILVA",
            "date": "15/01/2024",
            "procedure": "consulta",
            "tuss_code": "10101012",
            "hono_amount": 150.0,
            "glosa_amount": 0.0,
            "total_paid": 150.0,
            "is_glosa": False,
        }
        data.update(overrides)
        return GlosaReportItem(**data)
    return _make
