"""Tests for the procedure store and its local key-value backing."""

import json

from medglosa import local_storage, procedure_store
from medglosa.config import settings


class TestLocalStorage:
    def test_missing_key_returns_none(self):
        assert local_storage.get_item("nothing_here") is None

    def test_set_then_get(self, storage_dir):
        local_storage.set_item("k", '["a"]')
        assert local_storage.get_item("k") == '["a"]'
        assert (storage_dir / "k.json").exists()

    def test_overwrite_leaves_no_temp_files(self, storage_dir):
        local_storage.set_item("k", "1")
        local_storage.set_item("k", "2")
        assert local_storage.get_item("k") == "2"
        assert [p.name for p in storage_dir.iterdir()] == ["k.json"]

    def test_creates_missing_directory(self, storage_dir, monkeypatch):
        nested = storage_dir / "a" / "b"
        monkeypatch.setattr(settings, "storage_dir", str(nested))
        local_storage.set_item("k", "x")
        assert (nested / "k.json").read_text(encoding="utf-8") == "x"


class TestSaveAndFetch:
    def test_empty_store(self):
        assert procedure_store.get_procedures() == []

    def test_insert_adds_exactly_one_record(self, procedure_data):
        procedure_store.save_procedure(procedure_data())
        before = procedure_store.get_procedures()

        created = procedure_store.save_procedure(procedure_data(patient_name="João"))
        after = procedure_store.get_procedures()

        assert len(after) == len(before) + 1
        assert [p for p in after if p.id == created.id] == [created]

    def test_ids_are_unique(self, procedure_data):
        ids = {procedure_store.save_procedure(procedure_data()).id for _ in range(5)}
        assert len(ids) == 5

    def test_persisted_as_json_array_under_key(self, storage_dir, procedure_data):
        created = procedure_store.save_procedure(procedure_data())
        raw = json.loads((storage_dir / f"{settings.storage_key}.json").read_text(encoding="utf-8"))
        assert isinstance(raw, list)
        assert raw[0]["id"] == created.id
        assert raw[0]["patient_name"] == "Maria Silva"

    def test_get_procedure(self, procedure_data):
        created = procedure_store.save_procedure(procedure_data())
        assert procedure_store.get_procedure(created.id) == created
        assert procedure_store.get_procedure("missing") is None


class TestUpdates:
    def test_update_procedure_replaces_by_id(self, procedure_data):
        first = procedure_store.save_procedure(procedure_data())
        second = procedure_store.save_procedure(procedure_data(patient_name="Ana"))

        procedure_store.update_procedure(first.model_copy(update={"procedure_value": 300.0}))

        stored = {p.id: p for p in procedure_store.get_procedures()}
        assert stored[first.id].procedure_value == 300.0
        assert stored[second.id] == second

    def test_update_received_status_changes_only_that_field(self, procedure_data):
        target = procedure_store.save_procedure(procedure_data(notes="ligar"))
        other = procedure_store.save_procedure(procedure_data(patient_name="Ana"))

        assert procedure_store.update_received_status(target.id, "recebido") is True

        stored = {p.id: p for p in procedure_store.get_procedures()}
        assert stored[target.id] == target.model_copy(update={"received_status": "recebido"})
        assert stored[other.id] == other

    def test_update_received_status_with_notes(self, procedure_data):
        target = procedure_store.save_procedure(procedure_data(notes="old"))
        procedure_store.update_received_status(target.id, "recebido", "pago via PIX")
        assert procedure_store.get_procedure(target.id).notes == "pago via PIX"

    def test_update_received_status_unknown_id(self, procedure_data):
        procedure_store.save_procedure(procedure_data())
        assert procedure_store.update_received_status("nope", "recebido") is False
        assert procedure_store.get_procedures()[0].received_status == "nao_recebido"


class TestUpdateProcedureStatus:
    def test_updates_all_matching_records(self, procedure_data):
        a = procedure_store.save_procedure(procedure_data(procedure_name="Consulta eletiva"))
        b = procedure_store.save_procedure(procedure_data(procedure_name="Retorno de consulta"))
        c = procedure_store.save_procedure(procedure_data(procedure_name="Ultrassonografia"))

        count = procedure_store.update_procedure_status(
            "Maria Silva", "15/01/2024", "consulta", "glosa", 40.0
        )

        stored = {p.id: p for p in procedure_store.get_procedures()}
        assert count == 2
        assert stored[a.id].status == "glosa"
        assert stored[a.id].glosa_amount == 40.0
        assert stored[b.id].status == "glosa"
        assert stored[c.id].status == "pending"

    def test_name_ignores_case_and_surrounding_spaces(self, procedure_data):
        procedure_store.save_procedure(procedure_data(patient_name="  Maria Silva "))
        count = procedure_store.update_procedure_status(
            "MARIA SILVA", "15/01/2024", "CONSULTA", "paid", 0.0
        )
        assert count == 1
        assert procedure_store.get_procedures()[0].status == "paid"

    def test_name_must_match_exactly(self, procedure_data):
        procedure_store.save_procedure(procedure_data(patient_name="Maria Silva Santos"))
        assert procedure_store.update_procedure_status(
            "Maria Silva", "15/01/2024", "consulta", "paid"
        ) == 0

    def test_date_must_match_exactly(self, procedure_data):
        procedure_store.save_procedure(procedure_data(date="15/1/2024"))
        assert procedure_store.update_procedure_status(
            "Maria Silva", "15/01/2024", "consulta", "paid"
        ) == 0

    def test_glosa_amount_is_overwritten(self, procedure_data):
        procedure_store.save_procedure(procedure_data(glosa_amount=10.0))
        procedure_store.update_procedure_status("Maria Silva", "15/01/2024", "consulta", "paid")
        assert procedure_store.get_procedures()[0].glosa_amount is None

    def test_apply_report(self, procedure_data, report_item):
        procedure_store.save_procedure(procedure_data())
        procedure_store.save_procedure(procedure_data(patient_name="Ana Souza"))

        updated = procedure_store.apply_report([
            report_item(is_glosa=True, glosa_amount=150.0, total_paid=0.0),
            report_item(patient_name="Ana Souza"),
            report_item(patient_name="Ninguém"),
        ])

        stored = {p.patient_name: p for p in procedure_store.get_procedures()}
        assert updated == 2
        assert stored["Maria Silva"].status == "glosa"
        assert stored["Maria Silva"].glosa_amount == 150.0
        assert stored["Ana Souza"].status == "paid"
