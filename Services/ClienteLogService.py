from datetime import datetime

from Util.database import ClienteLog

LARGO_MAXIMO_TEXTO = 2048


class ClienteLogService:
    def __init__(self, db_session):
        self.db = db_session

    def registrar(self, telegram_id: int, texto: str) -> ClienteLog:
        log = ClienteLog(
            client_telegram_id=telegram_id,
            text=texto[:LARGO_MAXIMO_TEXTO],
            created_at=datetime.now(),
        )
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log
