"""
Estado de navegación por usuario (diagnóstico, secciones, mensajes visibles
y el mapeo hash -> texto original de los botones).

Se persiste en un archivo JSON que se reescribe completo en cada cambio.
Formato en disco (versión 2):

    {"version": 2, "users": {"<user_id>": {"diagnosis": ..., "sections": [...],
     "currentSection": ..., "messageIds": [...], "callbackMap": {...}}}}

Los archivos sin "version" son del formato anterior (user_id -> estado, con
callbackMap como lista de pares) y se migran al cargarlos.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from Util.hash_util import generar_hash, clave_callback

logger = logging.getLogger(__name__)

VERSION_FORMATO = 2
MAX_CALLBACKS = 200


class EstadoUsuario(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    diagnostico: Optional[str] = Field(default=None, alias="diagnosis")
    secciones: Optional[List[str]] = Field(default=None, alias="sections")
    seccion_actual: Optional[str] = Field(default=None, alias="currentSection")
    message_ids: List[int] = Field(default_factory=list, alias="messageIds")
    callback_map: Dict[str, str] = Field(default_factory=dict, alias="callbackMap")

    def resolver_callback(self, tipo: str, hash_valor: str) -> Optional[str]:
        return self.callback_map.get(clave_callback(tipo, hash_valor))

    def registrar_callbacks(self, tipo: str, valores: List[str], limite: int = MAX_CALLBACKS) -> List[str]:
        """
        Agrega al mapa los hashes de `valores` y devuelve los hashes en el mismo orden.
        Antes se descartan las entradas viejas del mismo tipo: sus botones ya no
        están visibles. Si el mapa supera `limite`, se eliminan las más antiguas,
        nunca las de `valores`: el mapa puede quedar por encima del límite.
        """
        prefijo = f"{tipo}:"
        mapa = {k: v for k, v in self.callback_map.items() if not k.startswith(prefijo)}

        hashes = []
        for valor in valores:
            hash_valor = generar_hash(valor)
            mapa[clave_callback(tipo, hash_valor)] = valor
            hashes.append(hash_valor)

        # Las entradas de otros tipos van primero, en orden de inserción.
        sobrantes = len(mapa) - limite
        for clave in [k for k in mapa if not k.startswith(prefijo)][:max(sobrantes, 0)]:
            del mapa[clave]

        self.callback_map = mapa
        return hashes


def _migrar_estado_legacy(datos: dict) -> dict:
    callback_map = datos.get("callbackMap")
    if isinstance(callback_map, list):
        datos = dict(datos)
        datos["callbackMap"] = {clave: valor for clave, valor in callback_map}
    return datos


class SessionManager:
    def __init__(self, session_file: str = "session.json", max_callbacks: int = MAX_CALLBACKS):
        self.session_file = Path(session_file)
        self.max_callbacks = max_callbacks
        self.session_data: Dict[int, EstadoUsuario] = {}
        # Los updates del webhook se atienden en varios hilos.
        self._lock = threading.RLock()
        self._cargar_sesiones()

    def _cargar_sesiones(self):
        if not self.session_file.exists():
            return

        try:
            with open(self.session_file, "r", encoding="utf-8") as f:
                contenido = json.load(f)
        except (OSError, ValueError):
            logger.error("Error al cargar sesiones desde %s", self.session_file, exc_info=True)
            self.session_data = {}
            return

        if not isinstance(contenido, dict):
            logger.error("Formato de sesiones inválido en %s", self.session_file)
            return

        if "version" in contenido:
            usuarios = contenido.get("users", {})
        else:
            logger.info("Migrando archivo de sesiones del formato anterior")
            usuarios = {k: _migrar_estado_legacy(v) for k, v in contenido.items() if isinstance(v, dict)}

        for user_id, datos in usuarios.items():
            try:
                self.session_data[int(user_id)] = EstadoUsuario.model_validate(datos)
            except (ValueError, ValidationError):
                logger.warning("Sesión inválida para el usuario %s, se descarta", user_id)

        logger.info("Sesiones cargadas desde %s (%d usuarios)", self.session_file, len(self.session_data))

    def _guardar_sesiones(self):
        with self._lock:
            datos = {
                "version": VERSION_FORMATO,
                "users": {
                    str(user_id): estado.model_dump(by_alias=True)
                    for user_id, estado in self.session_data.items()
                },
            }

            try:
                directorio = self.session_file.parent
                directorio.mkdir(parents=True, exist_ok=True)
                fd, ruta_temporal = tempfile.mkstemp(dir=directorio, suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(datos, f, ensure_ascii=False, indent=2)
                    os.replace(ruta_temporal, self.session_file)
                except BaseException:
                    os.unlink(ruta_temporal)
                    raise
            except OSError:
                logger.error("Error al guardar sesiones en %s", self.session_file, exc_info=True)

    def obtener(self, user_id: int) -> Optional[EstadoUsuario]:
        return self.session_data.get(user_id)

    def obtener_o_crear(self, user_id: int) -> EstadoUsuario:
        """Estado del usuario o uno vacío (no se persiste hasta el primer cambio)."""
        return self.session_data.get(user_id) or EstadoUsuario()

    def guardar(self, user_id: int, estado: EstadoUsuario):
        with self._lock:
            self.session_data[user_id] = estado
            self._guardar_sesiones()

    def actualizar(self, user_id: int, **cambios) -> EstadoUsuario:
        """Reemplaza solo los campos indicados (merge superficial) y persiste."""
        with self._lock:
            actual = self.session_data.get(user_id) or EstadoUsuario()
            nuevo = actual.model_copy(update=cambios)
            self.session_data[user_id] = nuevo
            self._guardar_sesiones()
            return nuevo

    def eliminar(self, user_id: int) -> bool:
        with self._lock:
            if user_id not in self.session_data:
                return False
            del self.session_data[user_id]
            self._guardar_sesiones()
            return True

    def limpiar_todo(self) -> int:
        """Borra todas las sesiones y devuelve cuántas había."""
        with self._lock:
            cantidad = len(self.session_data)
            self.session_data = {}
            self._guardar_sesiones()
            return cantidad
