import requests

import telegram_api
from telegram_api import TelegramAPI


class FakeResponse:
    def __init__(self, status_code, datos):
        self.status_code = status_code
        self._datos = datos

    def json(self):
        return self._datos


def test_enviar_mensaje_devuelve_message_id(monkeypatch):
    llamadas = []

    def fake_post(url, json=None, timeout=None):
        llamadas.append((url, json))
        return FakeResponse(200, {"ok": True, "result": {"message_id": 77}})

    monkeypatch.setattr(telegram_api.requests, "post", fake_post)
    teclado = {"inline_keyboard": [[{"text": "A", "callback_data": "a"}]]}

    resultado = TelegramAPI("TOKEN").enviar_mensaje(5, "<b>Hola</b>", teclado)

    assert resultado["success"] is True
    assert resultado["message_id"] == 77
    url, data = llamadas[0]
    assert url == "https://api.telegram.org/botTOKEN/sendMessage"
    assert data == {"chat_id": 5, "text": "<b>Hola</b>", "parse_mode": "HTML", "reply_markup": teclado}


def test_error_de_telegram_no_lanza(monkeypatch):
    monkeypatch.setattr(
        telegram_api.requests, "post",
        lambda url, json=None, timeout=None: FakeResponse(400, {"ok": False, "description": "Bad Request: message to delete not found"}),
    )

    resultado = TelegramAPI("TOKEN").borrar_mensaje(5, 10)

    assert resultado == {"success": False, "error": "Bad Request: message to delete not found"}


def test_error_de_red_no_lanza(monkeypatch):
    def fake_post(url, json=None, timeout=None):
        raise requests.ConnectionError("sin red")

    monkeypatch.setattr(telegram_api.requests, "post", fake_post)

    resultado = TelegramAPI("TOKEN").responder_callback("cb")

    assert resultado["success"] is False
    assert "sin red" in resultado["error"]
