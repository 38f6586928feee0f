import logging
from typing import Optional

from fastapi import FastAPI, Body, Depends, Header
from fastapi.responses import PlainTextResponse

from API.API import crear_router_admin, crear_verificador_admin
from Models.chat import Chat
from Services.ClienteLogService import ClienteLogService
from Services.ClienteService import ClienteService
from Util.database import get_db_session, init_db
from Util.estado import SessionManager
from Util.eventos import Evento, TipoEvento, obtener_evento

logger = logging.getLogger(__name__)


def sincronizar_cliente(evento: Evento, db_session_factory=get_db_session):
    """Registra o actualiza el cliente y guarda su texto. Si falla, solo se loguea."""
    db_session = None
    try:
        db_session = db_session_factory()
        usuario = evento.usuario
        ClienteService(db_session).sincronizar_cliente(
            usuario.id, usuario.username, usuario.first_name, usuario.last_name
        )
        if evento.texto and evento.tipo != TipoEvento.CALLBACK:
            ClienteLogService(db_session).registrar(usuario.id, evento.texto)
        return True
    except Exception:
        logger.error("No se pudo sincronizar el cliente %s", evento.user_id, exc_info=True)
        if db_session:
            db_session.rollback()
        return False
    finally:
        if db_session:
            db_session.close()


def procesar_update(update: dict, chat: Chat, db_session_factory=get_db_session):
    evento = obtener_evento(update)
    if not evento:
        return None

    logger.info("Evento %s de %s: %r", evento.tipo.value, evento.user_id, evento.texto)
    sincronizar_cliente(evento, db_session_factory)
    return chat.procesar_evento(evento)


def crear_app(chat: Chat, session_manager: SessionManager, db_session_factory=get_db_session,
              webhook_secret: Optional[str] = None, admin_token: Optional[str] = None) -> FastAPI:
    app = FastAPI(title="DocTime.MedX Bot")
    app.include_router(crear_router_admin(session_manager, db_session_factory, admin_token))

    @app.get("/")
    def root():
        return {
            "message": "Telegram Webhook Server funcionando",
            "endpoints": {
                "webhook": "/webhook",
                "health": "/health",
                "init_db": "/init-db",
                "admin": "/admin",
            },
        }

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/init-db", dependencies=[Depends(crear_verificador_admin(admin_token))])
    def init_database():
        """Crea las tablas manualmente (si no existen)."""
        try:
            init_db()
            return {
                "status": "success",
                "message": "✅ Tablas creadas correctamente",
                "tablas": ["clients", "client_logs"],
            }
        except Exception as e:
            return {
                "status": "error",
                "message": f"❌ Error al inicializar: {str(e)}",
            }

    @app.post("/webhook")
    def receive(update: dict = Body(...), x_telegram_bot_api_secret_token: Optional[str] = Header(default=None)):
        if webhook_secret and x_telegram_bot_api_secret_token != webhook_secret:
            return PlainTextResponse("Token inválido", status_code=403)

        try:
            procesar_update(update, chat, db_session_factory)
        except Exception:
            # Siempre 200: Telegram reenvía el update ante cualquier otro código.
            logger.exception("Error procesando update %s", update.get("update_id"))

        return PlainTextResponse("EVENT_RECEIVED", status_code=200)

    return app
