from conftest import USER_ID, update_callback, update_texto
from Util.eventos import TipoEvento, obtener_evento


def test_texto_libre():
    evento = obtener_evento(update_texto("  грипп  "))

    assert evento.tipo == TipoEvento.TEXTO
    assert evento.texto == "грипп"
    assert evento.user_id == USER_ID
    assert evento.chat_id == USER_ID
    assert evento.usuario.username == "ivan"
    assert evento.usuario.last_name == "Петров"


def test_start_y_comandos():
    assert obtener_evento(update_texto("/start")).tipo == TipoEvento.START

    evento = obtener_evento(update_texto("/new_diagnosis@DocTimeBot"))
    assert evento.tipo == TipoEvento.COMANDO
    assert evento.comando == "new_diagnosis"


def test_callback():
    evento = obtener_evento(update_callback("select_section:abc"))

    assert evento.tipo == TipoEvento.CALLBACK
    assert evento.texto == "select_section:abc"
    assert evento.callback_id == "cb-2"
    assert evento.usuario.last_name is None


def test_mensaje_sin_texto_es_otro():
    update = update_texto("x")
    del update["message"]["text"]
    update["message"]["sticker"] = {"file_id": "abc"}

    assert obtener_evento(update).tipo == TipoEvento.OTRO


def test_updates_sin_usuario_se_ignoran():
    assert obtener_evento({"update_id": 1}) is None
    assert obtener_evento({"update_id": 1, "message": {"chat": {"id": 1}, "text": "hola"}}) is None
    assert obtener_evento({"update_id": 1, "edited_message": update_texto("x")["message"]}) is None
