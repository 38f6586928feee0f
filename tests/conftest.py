import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from Models.chat import Chat
from Services.DiagnosticoService import ErrorAPI
from Util.database import Cliente, ClienteLog  # noqa: F401 (registra las tablas)
from Util.estado import SessionManager

USER_ID = 1001


class FakeTelegram:
    def __init__(self):
        self.enviados = []
        self.borrados = []
        self.callbacks_respondidos = []
        self.fallar_borrado = set()
        self.explotar_borrado = set()
        self._siguiente_id = 100

    def enviar_mensaje(self, chat_id, texto, teclado=None, parse_mode="HTML"):
        self._siguiente_id += 1
        self.enviados.append({"chat_id": chat_id, "texto": texto, "teclado": teclado, "message_id": self._siguiente_id})
        return {"success": True, "message_id": self._siguiente_id}

    def borrar_mensaje(self, chat_id, message_id):
        if message_id in self.explotar_borrado:
            raise RuntimeError("conexión perdida")
        self.borrados.append(message_id)
        if message_id in self.fallar_borrado:
            return {"success": False, "error": "message to delete not found"}
        return {"success": True}

    def responder_callback(self, callback_id, texto=None):
        self.callbacks_respondidos.append(callback_id)
        return {"success": True}

    @property
    def ultimo(self):
        return self.enviados[-1]


class FakeDiagnosticoService:
    def __init__(self):
        self.similares = {}
        self.secciones = {}
        self.contenidos = {}
        self.fallar = False
        self.llamadas = []

    def _registrar(self, *llamada):
        self.llamadas.append(llamada)
        if self.fallar:
            raise ErrorAPI("HTTP error! status: 500")

    def obtener_similares(self, diagnostico):
        self._registrar("similares", diagnostico)
        return list(self.similares.get(diagnostico, []))

    def obtener_secciones(self, diagnostico):
        self._registrar("secciones", diagnostico)
        return list(self.secciones.get(diagnostico, []))

    def obtener_seccion(self, diagnostico, seccion):
        self._registrar("seccion", diagnostico, seccion)
        return self.contenidos[(diagnostico, seccion)]


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "session.json"


@pytest.fixture
def session_manager(session_file):
    return SessionManager(str(session_file))


@pytest.fixture
def telegram():
    return FakeTelegram()


@pytest.fixture
def api():
    return FakeDiagnosticoService()


@pytest.fixture
def chat(session_manager, api, telegram):
    return Chat(session_manager=session_manager, diagnostico_service=api, telegram=telegram)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


def update_texto(texto, user_id=USER_ID, update_id=1):
    return {
        "update_id": update_id,
        "message": {
            "message_id": 5,
            "from": {"id": user_id, "is_bot": False, "first_name": "Иван", "last_name": "Петров", "username": "ivan"},
            "chat": {"id": user_id, "type": "private"},
            "date": 1700000000,
            "text": texto,
        },
    }


def update_callback(data, user_id=USER_ID, update_id=2):
    return {
        "update_id": update_id,
        "callback_query": {
            "id": f"cb-{update_id}",
            "from": {"id": user_id, "is_bot": False, "first_name": "Иван", "username": "ivan"},
            "message": {"message_id": 7, "chat": {"id": user_id, "type": "private"}},
            "data": data,
        },
    }
