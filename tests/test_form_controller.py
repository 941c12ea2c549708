"""
EntityFormController tests: load-for-edit, edits, validation, upload-then-mutate
"""
import asyncio

import pytest

from clinic_admin.api.resources import PROFILES, TREATMENTS
from clinic_admin.core import config
from clinic_admin.core.errors import ConflictError, NetworkError
from clinic_admin.screens.patients import patient_form
from clinic_admin.screens.profile import PROFILE_FORM
from clinic_admin.screens.treatments import TREATMENT_FORM
from clinic_admin.services import form_controller
from clinic_admin.services.assets import AssetUpload
from clinic_admin.services.form_controller import EntityFormController, FormPhase

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 32


def fill_patient(form):
    form.update_field("nombre", "Julia")
    form.update_field("apellido", "Benítez")
    form.update_field("dni", "35111000")
    form.update_field("email", "julia@example.com")
    form.update_field("telefono", "555-9999")


def test_start_create_uses_defaults(store):
    form = patient_form(store)
    assert form.phase is FormPhase.UNINITIALIZED
    assert form.start_create()
    assert form.phase is FormPhase.READY
    assert not form.is_editing
    assert form.value("direccion.pais") == "Argentina"
    assert form.value("preferencias.permitir_fotos") is True


def test_load_for_edit_adopts_entity(store):
    form = patient_form(store)
    assert asyncio.run(form.load_for_edit("p2"))
    assert form.phase is FormPhase.READY
    assert form.is_editing
    assert form.entity_id == "p2"
    assert form.value("nombre") == "Raúl"
    assert "id" not in form.draft
    assert form.status.is_idle


def test_load_missing_entity_is_not_found(store):
    form = patient_form(store)
    assert not asyncio.run(form.load_for_edit("nope"))
    assert form.phase is FormPhase.NOT_FOUND
    assert form.status.is_failed
    assert form.status.message == "No encontrado"
    assert not form.update_field("nombre", "x")
    assert not asyncio.run(form.submit())
    assert store.count("update") == 0


def test_load_network_error_is_error_phase(store):
    form = patient_form(store)
    store.fail("fetch_one", NetworkError(""))
    asyncio.run(form.load_for_edit("p1"))
    assert form.phase is FormPhase.ERROR
    assert form.status.message == "Error al cargar los datos del paciente"


def test_retry_after_failed_load(store):
    form = patient_form(store)
    store.fail("fetch_one", NetworkError("caído"))
    asyncio.run(form.load_for_edit("p1"))
    store.clear_failure("fetch_one")
    assert asyncio.run(form.load_for_edit("p1"))
    assert form.phase is FormPhase.READY


def test_last_load_for_edit_wins(store):
    """Loading A then B: A's late response never replaces B's draft"""
    form = patient_form(store)

    async def scenario():
        gate_a = store.gate("fetch_one", "p1")
        first = asyncio.ensure_future(form.load_for_edit("p1"))
        await asyncio.sleep(0)
        second = await form.load_for_edit("p3")
        gate_a.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert second and not first
    assert form.entity_id == "p3"
    assert form.value("nombre") == "Pedro"
    assert form.phase is FormPhase.READY


def test_start_abandons_in_flight_load(store):
    form = patient_form(store)

    async def scenario():
        gate = store.gate("fetch_one", "p1")
        pending = asyncio.ensure_future(form.load_for_edit("p1"))
        await asyncio.sleep(0)
        form.start_create()
        gate.set()
        return await pending

    assert not asyncio.run(scenario())
    assert not form.is_editing
    assert form.value("nombre") == ""
    assert form.status.is_idle


def test_update_field_coerces_and_reports(store):
    form = EntityFormController(store, TREATMENT_FORM)
    form.start_create()

    assert form.update_field("precio", "2500")
    assert form.value("precio") == 2500
    assert not form.update_field("precio", "abc")
    assert form.value("precio") == 2500
    assert form.field_errors["precio"] == "Debe ingresar un número"
    assert form.update_field("precio", "3000")
    assert "precio" not in form.field_errors


def test_update_unknown_or_read_only_field(store, profile):
    form = EntityFormController(store, PROFILE_FORM)
    form.start(entity_id="u1", draft=PROFILE_FORM.draft_from(profile))
    assert not form.update_field("email", "otro@clinica.test")
    assert form.value("email") == "ana@clinica.test"
    assert "email" in form.field_errors
    assert not form.update_field("inventado", 1)
    assert form.field_errors["inventado"] == "Campo desconocido"


def test_nested_field_edit(store):
    form = patient_form(store)
    form.start_create()
    form.update_field("direccion.ciudad", "Mendoza")
    form.update_field("preferencias.recibir_recordatorios_sms", "on")
    assert form.value("direccion.ciudad") == "Mendoza"
    assert form.value("direccion.pais") == "Argentina"
    assert form.value("preferencias.recibir_recordatorios_sms") is True


def test_list_items(store):
    form = patient_form(store)
    form.start_create()
    assert form.append_item("alergias", "  penicilina ")
    assert form.append_item("alergias", "látex")
    assert not form.append_item("alergias", "   ")
    assert not form.append_item("nombre", "x")
    assert form.value("alergias") == ["penicilina", "látex"]
    assert form.remove_item("alergias", 0)
    assert not form.remove_item("alergias", 5)
    assert form.value("alergias") == ["látex"]


def test_invalid_submit_never_calls_store(store):
    form = patient_form(store)
    form.start_create()
    form.update_field("nombre", "Julia")

    assert not asyncio.run(form.submit())
    assert form.validation_error == "El apellido es requerido"
    assert form.status.is_failed
    assert form.phase is FormPhase.READY
    assert store.count("create") == 0

    form.dismiss()
    assert form.validation_error is None
    assert form.status.is_idle


def test_create_resets_draft(store):
    form = patient_form(store)
    form.start_create()
    fill_patient(form)

    assert asyncio.run(form.submit())
    assert form.status.message == "Paciente creado con éxito"
    assert form.value("nombre") == ""
    assert not form.is_editing
    payload = store.payloads[-1]
    assert payload["nombre"] == "Julia"
    assert payload["contactoEmergencia"] == {"nombre": "", "relacion": "", "telefono": ""}
    assert payload["preferencias"]["recibirRecordatoriosEmail"] is True
    assert "_id" not in payload and "ultimaVisita" not in payload


def test_update_adopts_server_echo(store):
    form = patient_form(store)
    asyncio.run(form.load_for_edit("p3"))
    form.update_field("telefono", "555-0000")

    assert asyncio.run(form.submit())
    assert ("update", "p3") in store.calls
    assert form.status.message == "Paciente actualizado con éxito"
    assert form.value("telefono") == "555-0000"
    assert form.entity.telefono == "555-0000"
    assert form.is_editing


def test_failed_mutation_keeps_draft(store):
    form = patient_form(store)
    form.start_create()
    fill_patient(form)
    store.fail("create", ConflictError("Ya existe un paciente con ese DNI", 409))

    assert not asyncio.run(form.submit())
    assert form.status.message == "Ya existe un paciente con ese DNI"
    assert form.phase is FormPhase.READY
    assert form.value("nombre") == "Julia"

    store.clear_failure("create")
    assert asyncio.run(form.submit())


def test_second_submit_rejected_while_in_flight(store):
    form = patient_form(store)
    form.start_create()
    fill_patient(form)

    async def scenario():
        gate = store.gate("create")
        first = asyncio.ensure_future(form.submit())
        await asyncio.sleep(0)
        assert form.phase is FormPhase.SUBMITTING
        assert not form.editable
        second = await form.submit()
        gate.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert first and not second
    assert store.count("create") == 1


def test_close_during_submit_discards_result(store):
    form = patient_form(store)
    form.start_create()
    fill_patient(form)

    async def scenario():
        gate = store.gate("create")
        pending = asyncio.ensure_future(form.submit())
        await asyncio.sleep(0)
        form.close()
        gate.set()
        return await pending

    assert not asyncio.run(scenario())
    assert form.value("nombre") == "Julia"
    assert form.closed


def test_upload_then_update(store, profile):
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))

    assert asyncio.run(form.select_asset(PNG_BYTES, filename="foto.png"))
    assert form.preview.startswith("data:image/png;base64,")
    assert asyncio.run(form.submit())

    ops = [op for op, _ in store.calls]
    assert ops.index("upload_asset") < ops.index("update")
    assert store.payloads[-1]["fotoPerfil"] == "/uploads/foto.png"
    assert "email" not in store.payloads[-1]
    assert form.pending_asset is None
    assert form.preview == "/uploads/foto.png"


def test_upload_failure_blocks_mutation(store):
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))
    asyncio.run(form.select_asset(PNG_BYTES, filename="foto.png"))
    store.fail("upload_asset", NetworkError("No se pudo subir el archivo"))

    assert not asyncio.run(form.submit())
    assert store.count("update") == 0
    assert form.status.message == "No se pudo subir el archivo"
    assert form.pending_asset is not None


def test_retry_reuses_uploaded_reference(store):
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))
    asyncio.run(form.select_asset(PNG_BYTES, filename="foto.png"))
    store.fail("update", NetworkError("Error al actualizar"))

    assert not asyncio.run(form.submit())
    store.clear_failure("update")
    assert asyncio.run(form.submit())
    assert store.count("upload_asset") == 1


def test_oversized_file_rejected_before_network(store, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 16)
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))

    assert not asyncio.run(form.select_asset(PNG_BYTES, filename="foto.png"))
    assert form.field_errors["foto_perfil"].startswith("El archivo supera el tamaño máximo")
    assert form.status.is_failed
    assert form.pending_asset is None
    assert store.count("upload_asset") == 0


def test_select_asset_from_path(store, tmp_path):
    photo = tmp_path / "retrato.jpg"
    photo.write_bytes(b"jpegdata")
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))

    assert asyncio.run(form.select_asset(photo))
    assert form.pending_asset.filename == "retrato.jpg"
    assert form.pending_asset.content_type == "image/jpeg"


def test_missing_file_sets_field_error(store, tmp_path):
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))
    assert not asyncio.run(form.select_asset(tmp_path / "no-existe.png"))
    assert form.field_errors["foto_perfil"] == "No se pudo leer el archivo"


def test_remove_asset_clears_reference(store, profile):
    store.seed(PROFILES, [profile.model_copy(update={"foto_perfil": "/uploads/vieja.png"})])
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))
    assert form.preview == "/uploads/vieja.png"

    form.remove_asset()
    assert form.preview is None
    assert asyncio.run(form.submit())
    assert store.count("upload_asset") == 0
    assert store.payloads[-1]["fotoPerfil"] == ""


def test_asset_on_form_without_asset_field(store):
    form = patient_form(store)
    form.start_create()
    with pytest.raises(ValueError):
        asyncio.run(form.select_asset(PNG_BYTES))


def test_payload_uses_wire_names(store):
    form = EntityFormController(store, TREATMENT_FORM)
    form.start_create()
    form.update_field("nombre", "Mesoterapia")
    form.update_field("precio", "45000")
    form.update_field("duracion_estimada", "30")
    assert asyncio.run(form.submit())

    payload = store.payloads[-1]
    assert payload["duracionEstimada"] == 30
    assert payload["precio"] == 45000
    assert "consentimientoTemplate" not in payload
    assert "createdAt" not in payload
    assert store.collections[TREATMENTS.name][-1].id == "new-1"


def test_submit_requires_ready_phase(store):
    form = patient_form(store)
    assert not asyncio.run(form.submit())
    assert store.calls == []


def test_asset_read_finishing_during_submit_is_discarded(store, monkeypatch):
    """A file read that completes while a submit is in flight never becomes the pending asset"""
    form = EntityFormController(store, PROFILE_FORM)
    asyncio.run(form.load_for_edit("u1"))

    async def scenario():
        read_gate = asyncio.Event()

        async def slow_read(source, kind, filename=None, content_type=None):
            await read_gate.wait()
            return AssetUpload(content=source, filename=filename, content_type="image/png", kind=kind)

        monkeypatch.setattr(form_controller, "read_asset", slow_read)
        update_gate = store.gate("update")
        selecting = asyncio.ensure_future(form.select_asset(b"nueva", filename="nueva.png"))
        await asyncio.sleep(0)
        submitting = asyncio.ensure_future(form.submit())
        await asyncio.sleep(0)
        assert form.phase is FormPhase.SUBMITTING

        read_gate.set()
        selected = await selecting
        assert form.pending_asset is None
        update_gate.set()
        return selected, await submitting

    selected, saved = asyncio.run(scenario())
    assert not selected
    assert saved
    assert store.count("upload_asset") == 0
    assert form.editable


def test_remove_item_rejects_non_list_fields(store):
    form = patient_form(store)
    form.start_create()
    form.update_field("nombre", "Julia")
    assert not form.remove_item("nombre", 0)
    assert form.value("nombre") == "Julia"
    assert not form.remove_item("inventado", 0)
    assert form.field_errors["inventado"] == "Campo desconocido"


def test_dismiss_clears_validation_error_once(store):
    form = patient_form(store)
    form.start_create()
    asyncio.run(form.submit())
    seen = []
    form.subscribe(lambda f: seen.append((f.status.kind.value, f.validation_error)))

    form.dismiss()
    form.dismiss()
    assert seen == [("idle", None)]
