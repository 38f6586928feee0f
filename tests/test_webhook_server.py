import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from conftest import USER_ID, update_callback, update_texto
from Util.database import Cliente, ClienteLog
from webhook_server import crear_app, procesar_update, sincronizar_cliente
from Util.eventos import obtener_evento


@pytest.fixture
def db_session_factory(engine):
    return lambda: Session(engine)


@pytest.fixture
def client(chat, session_manager, db_session_factory):
    app = crear_app(chat, session_manager, db_session_factory, webhook_secret="secreto", admin_token="admin")
    return TestClient(app)


def headers(secret="secreto"):
    return {"X-Telegram-Bot-Api-Secret-Token": secret}


def admin(token="admin"):
    return {"X-Admin-Token": token}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_webhook_rechaza_secreto_invalido(client, telegram):
    respuesta = client.post("/webhook", json=update_texto("/start"), headers=headers("otro"))

    assert respuesta.status_code == 403
    assert telegram.enviados == []


def test_webhook_procesa_update_y_sincroniza_cliente(client, telegram, engine):
    respuesta = client.post("/webhook", json=update_texto("/start"), headers=headers())

    assert respuesta.status_code == 200
    assert respuesta.text == "EVENT_RECEIVED"
    assert len(telegram.enviados) == 1
    with Session(engine) as db:
        cliente = db.get(Cliente, USER_ID)
        assert cliente.username == "ivan"
        assert [log.text for log in db.exec(select(ClienteLog)).all()] == ["/start"]


def test_webhook_ignora_updates_sin_evento(client, telegram):
    respuesta = client.post("/webhook", json={"update_id": 9, "edited_message": {}}, headers=headers())

    assert respuesta.status_code == 200
    assert telegram.enviados == []


def test_webhook_responde_200_ante_errores_internos(client, api, telegram):
    api.obtener_similares = None  # provoca TypeError dentro del controlador

    respuesta = client.post("/webhook", json=update_texto("грипп"), headers=headers())

    assert respuesta.status_code == 200


def test_fallo_de_base_de_datos_no_interrumpe_el_evento(chat, telegram):
    def factory_rota():
        raise RuntimeError("base de datos caída")

    procesar_update(update_texto("/start"), chat, factory_rota)

    assert len(telegram.enviados) == 1


def test_sincronizar_cliente_hace_rollback_si_falla(engine):
    class SesionQueFalla(Session):
        def commit(self):
            raise RuntimeError("commit falló")

    assert sincronizar_cliente(obtener_evento(update_texto("hola")), lambda: SesionQueFalla(engine)) is False


def test_callbacks_no_se_registran_como_log(chat, engine, db_session_factory):
    procesar_update(update_callback("new_diagnosis"), chat, db_session_factory)

    with Session(engine) as db:
        assert db.exec(select(ClienteLog)).all() == []
        assert db.get(Cliente, USER_ID) is not None


def test_admin_sesiones(client, session_manager):
    client.post("/webhook", json=update_texto("/start"), headers=headers())

    sesion = client.get(f"/admin/sesiones/{USER_ID}", headers=admin()).json()
    assert sesion["user_id"] == USER_ID
    assert len(sesion["messageIds"]) == 1

    assert client.delete(f"/admin/sesiones/{USER_ID}", headers=admin()).status_code == 200
    assert session_manager.obtener(USER_ID) is None
    assert client.get(f"/admin/sesiones/{USER_ID}", headers=admin()).status_code == 404
    assert client.delete(f"/admin/sesiones/{USER_ID}", headers=admin()).status_code == 404


def test_admin_eliminar_todas_las_sesiones(client, session_manager):
    session_manager.actualizar(1, diagnostico="A")
    session_manager.actualizar(2, diagnostico="B")

    assert client.delete("/admin/sesiones", headers=admin()).json() == {"status": "success", "eliminadas": 2}
    assert session_manager.session_data == {}


def test_admin_clientes(client):
    client.post("/webhook", json=update_texto("/start"), headers=headers())

    clientes = client.get("/admin/clientes", headers=admin()).json()
    assert [c["telegram_id"] for c in clientes] == [USER_ID]
    assert client.get(f"/admin/clientes/{USER_ID}", headers=admin()).json()["first_name"] == "Иван"
    assert client.get("/admin/clientes/123", headers=admin()).status_code == 404


def test_admin_rechaza_token_invalido_o_ausente(client, session_manager):
    session_manager.actualizar(1, diagnostico="A")

    assert client.get("/admin/clientes").status_code == 403
    assert client.get("/admin/sesiones/1", headers=admin("otro")).status_code == 403
    assert client.delete("/admin/sesiones", headers=admin("otro")).status_code == 403
    assert client.get("/init-db").status_code == 403
    assert session_manager.obtener(1).diagnostico == "A"


def test_admin_deshabilitado_sin_token_configurado(chat, session_manager, db_session_factory):
    client = TestClient(crear_app(chat, session_manager, db_session_factory))

    assert client.get("/admin/clientes", headers=admin("")).status_code == 403
    assert client.delete("/admin/sesiones").status_code == 403
