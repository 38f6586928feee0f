import logging
from typing import List, Optional

from sqlmodel import select

from Util.database import Cliente

logger = logging.getLogger(__name__)

CAMPOS_ACTUALIZABLES = ("username", "first_name", "last_name")


class ClienteService:
    def __init__(self, db_session):
        self.db = db_session

    def _consulta(self, filtros):
        stmt = select(Cliente)
        for campo, valor in filtros.items():
            stmt = stmt.where(getattr(Cliente, campo) == valor)
        return stmt

    def obtener_todos(self, **filtros) -> List[Cliente]:
        return list(self.db.exec(self._consulta(filtros)).all())

    def obtener_uno(self, **filtros) -> Optional[Cliente]:
        return self.db.exec(self._consulta(filtros)).first()

    def crear(self, telegram_id: int, username: str, first_name: str, last_name: Optional[str] = None) -> Cliente:
        cliente = Cliente(
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
        )
        self.db.add(cliente)
        self.db.commit()
        self.db.refresh(cliente)
        return cliente

    def actualizar(self, telegram_id: int, **campos) -> Optional[Cliente]:
        cliente = self.db.get(Cliente, telegram_id)
        if not cliente:
            return None

        for campo, valor in campos.items():
            if campo not in CAMPOS_ACTUALIZABLES:
                raise ValueError(f"Campo no actualizable: {campo}")
            setattr(cliente, campo, valor)

        self.db.add(cliente)
        self.db.commit()
        self.db.refresh(cliente)
        return cliente

    def sincronizar_cliente(self, telegram_id: int, username: str, first_name: str, last_name: Optional[str] = None) -> Cliente:
        """Crea el cliente si no existe, o actualiza sus datos de Telegram."""
        cliente = self.obtener_uno(telegram_id=telegram_id)
        if not cliente:
            logger.info("Nuevo cliente %s (%s)", telegram_id, username)
            return self.crear(telegram_id, username, first_name, last_name)

        if (cliente.username, cliente.first_name, cliente.last_name) == (username, first_name, last_name):
            return cliente

        return self.actualizar(telegram_id, username=username, first_name=first_name, last_name=last_name)
