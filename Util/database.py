import logging
import psycopg2
from typing import Optional
from datetime import datetime
from sqlalchemy import BigInteger, Column, ForeignKey
from sqlmodel import SQLModel, create_engine, Session, Field

import config

DATABASE_URL = config.DATABASE_URL

engine = create_engine(DATABASE_URL, echo=config.DB_ECHO)

logger = logging.getLogger("database")


class Cliente(SQLModel, table=True):
    __tablename__ = "clients"

    telegram_id: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    username: str = Field(max_length=256)
    first_name: str = Field(max_length=256)
    last_name: Optional[str] = Field(default=None, max_length=256)
    created_at: datetime = Field(default_factory=datetime.now)


class ClienteLog(SQLModel, table=True):
    __tablename__ = "client_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.now)
    text: str = Field(max_length=2048)
    client_telegram_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("clients.telegram_id"), nullable=False)
    )


def get_db_session():
    try:
        return Session(engine)
    except Exception:
        logger.error("No se pudo obtener la sesión de base de datos", exc_info=True)
        raise


def init_db(db_engine=None):
    try:
        SQLModel.metadata.create_all(db_engine or engine)
        logger.info("Base de datos inicializada correctamente")
    except Exception:
        logger.error("Error inicializando la base de datos", exc_info=True)
        raise


def get_db_connection():
    try:
        dsn = DATABASE_URL.replace("+psycopg2", "")
        return psycopg2.connect(dsn)
    except Exception:
        logger.error("Error obteniendo conexión cruda a la base de datos", exc_info=True)
        raise


if __name__ == "__main__":
    # python -m Util.database
    logging.basicConfig(level=logging.INFO)
    get_db_connection().close()
    logger.info("Conexión a la base de datos chequeada")
    init_db()
