"""
Punto de entrada del bot.

    python main.py            # long polling (getUpdates)
    python main.py webhook    # servidor FastAPI en /webhook (uvicorn)
"""

import logging
import time
import sys

import config
from Models.chat import Chat
from Services.DiagnosticoService import DiagnosticoService
from Util.estado import SessionManager
from telegram_api import TelegramAPI

logger = logging.getLogger("main")

POLL_TIMEOUT = 30
ESPERA_TRAS_ERROR = 5


def crear_bot_instancia():
    session_manager = SessionManager(config.SESSION_FILE, max_callbacks=config.MAX_CALLBACKS)
    diagnostico_service = DiagnosticoService(config.API_BASE_URL)
    telegram = TelegramAPI(config.BOT_TOKEN)

    chat = Chat(
        session_manager=session_manager,
        diagnostico_service=diagnostico_service,
        telegram=telegram,
    )
    return chat, session_manager, telegram


def ejecutar_polling(chat, telegram):
    from webhook_server import procesar_update

    telegram.eliminar_webhook()
    offset = None
    logger.info("Бот запущен (long polling)")

    while True:
        resultado = telegram.obtener_updates(offset, timeout=POLL_TIMEOUT)
        if not resultado["success"]:
            logger.warning("getUpdates falló: %s", resultado.get("error"))
            time.sleep(ESPERA_TRAS_ERROR)
            continue

        for update in resultado["result"]:
            offset = update["update_id"] + 1
            try:
                procesar_update(update, chat)
            except Exception:
                logger.exception("Error procesando update %s", update.get("update_id"))


def ejecutar_webhook(chat, session_manager, telegram):
    import uvicorn
    from webhook_server import crear_app

    if config.WEBHOOK_URL:
        resultado = telegram.configurar_webhook(config.WEBHOOK_URL, config.WEBHOOK_SECRET or None)
        if not resultado["success"]:
            logger.error("No se pudo configurar el webhook: %s", resultado.get("error"))

    app = crear_app(
        chat,
        session_manager,
        webhook_secret=config.WEBHOOK_SECRET or None,
        admin_token=config.ADMIN_TOKEN or None,
    )
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    faltantes = config.variables_faltantes()
    if faltantes:
        for variable in faltantes:
            logger.error("Please set %s environment variable", variable)
        sys.exit(1)

    chat, session_manager, telegram = crear_bot_instancia()
    modo = argv[0] if argv else "polling"

    try:
        if modo == "webhook":
            ejecutar_webhook(chat, session_manager, telegram)
        elif modo == "polling":
            ejecutar_polling(chat, telegram)
        else:
            print(f"Modo desconocido: {modo}. Uso: python main.py [polling|webhook]")
            sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Bot detenido")


if __name__ == "__main__":
    main()
