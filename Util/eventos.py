import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class TipoEvento(Enum):
    START = "start"
    COMANDO = "command"
    TEXTO = "text"
    CALLBACK = "callback"
    OTRO = "other"


@dataclass
class UsuarioTelegram:
    id: int
    username: str = ""
    first_name: str = ""
    last_name: Optional[str] = None


@dataclass
class Evento:
    tipo: TipoEvento
    usuario: UsuarioTelegram
    chat_id: int
    texto: str = ""
    comando: Optional[str] = None
    callback_id: Optional[str] = None

    @property
    def user_id(self):
        return self.usuario.id


def _usuario(origen):
    return UsuarioTelegram(
        id=origen["id"],
        username=origen.get("username") or "",
        first_name=origen.get("first_name") or "",
        last_name=origen.get("last_name"),
    )


def _nombre_comando(texto):
    # "/new_diagnosis@DocTimeBot argumento" -> "new_diagnosis"
    primero = texto.split()[0][1:]
    return primero.split("@", 1)[0].lower()


def obtener_evento(update: dict) -> Optional[Evento]:
    """Convierte un update de Telegram en un Evento, o None si no hay nada que procesar."""
    callback = update.get("callback_query")
    if callback:
        if "from" not in callback:
            return None
        mensaje = callback.get("message") or {}
        usuario = _usuario(callback["from"])
        chat_id = mensaje.get("chat", {}).get("id", usuario.id)
        return Evento(
            tipo=TipoEvento.CALLBACK,
            usuario=usuario,
            chat_id=chat_id,
            texto=callback.get("data", ""),
            callback_id=callback.get("id"),
        )

    mensaje = update.get("message")
    if not mensaje or "from" not in mensaje:
        logger.debug("Update ignorado: %s", list(update.keys()))
        return None

    usuario = _usuario(mensaje["from"])
    chat_id = mensaje.get("chat", {}).get("id", usuario.id)

    if "text" not in mensaje:
        return Evento(tipo=TipoEvento.OTRO, usuario=usuario, chat_id=chat_id)

    texto = mensaje["text"].strip()
    if texto.startswith("/") and len(texto) > 1:
        comando = _nombre_comando(texto)
        tipo = TipoEvento.START if comando == "start" else TipoEvento.COMANDO
        return Evento(tipo=tipo, usuario=usuario, chat_id=chat_id, texto=texto, comando=comando)

    return Evento(tipo=TipoEvento.TEXTO, usuario=usuario, chat_id=chat_id, texto=texto)
