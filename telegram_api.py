import logging
import requests

TELEGRAM_API_URL = "https://api.telegram.org"

logger = logging.getLogger(__name__)


class TelegramAPI:
    def __init__(self, token: str, api_url: str = TELEGRAM_API_URL):
        self.token = token
        self.api_url = api_url

    def _url(self, metodo):
        return f"{self.api_url}/bot{self.token}/{metodo}"

    def _llamar(self, metodo, data=None, timeout=None):
        try:
            response = requests.post(self._url(metodo), json=data or {}, timeout=timeout)
        except requests.RequestException as e:
            logger.error("Error de red llamando a %s: %s", metodo, e)
            return {"success": False, "error": str(e)}

        try:
            res_json = response.json()
        except ValueError as e:
            logger.error("Respuesta inválida de %s (%s): %s", metodo, response.status_code, e)
            return {"success": False, "error": str(e)}

        if response.status_code != 200 or not res_json.get("ok"):
            error = res_json.get("description", f"HTTP {response.status_code}")
            logger.warning("Telegram %s falló: %s", metodo, error)
            return {"success": False, "error": error}

        return {"success": True, "result": res_json.get("result")}

    def enviar_mensaje(self, chat_id, texto, teclado=None, parse_mode="HTML"):
        data = {"chat_id": chat_id, "text": texto}
        if parse_mode:
            data["parse_mode"] = parse_mode
        if teclado:
            data["reply_markup"] = teclado

        resultado = self._llamar("sendMessage", data)
        if resultado["success"]:
            resultado["message_id"] = resultado["result"].get("message_id")
            logger.debug("Enviado a %s (message_id=%s)", chat_id, resultado["message_id"])
        return resultado

    def borrar_mensaje(self, chat_id, message_id):
        return self._llamar("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    def responder_callback(self, callback_id, texto=None):
        data = {"callback_query_id": callback_id}
        if texto:
            data["text"] = texto
        return self._llamar("answerCallbackQuery", data)

    def obtener_updates(self, offset=None, timeout=30):
        data = {"timeout": timeout, "allowed_updates": ["message", "callback_query"]}
        if offset is not None:
            data["offset"] = offset
        return self._llamar("getUpdates", data, timeout=timeout + 10)

    def configurar_webhook(self, url, secret=None):
        data = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret:
            data["secret_token"] = secret
        return self._llamar("setWebhook", data)

    def eliminar_webhook(self):
        return self._llamar("deleteWebhook")

    def obtener_info_bot(self):
        return self._llamar("getMe")
