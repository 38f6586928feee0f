import logging
from typing import List, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class ErrorAPI(Exception):
    """Fallo al consultar la API de contenido (red, HTTP no 2xx o JSON inválido)."""


class DiagnosticoService:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, endpoint: str, params=None) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(
                url,
                params=params,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ErrorAPI(f"Error de red: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ErrorAPI(f"HTTP error! status: {response.status_code}")

        try:
            datos = response.json()
        except ValueError as e:
            raise ErrorAPI("Respuesta JSON inválida") from e

        if not isinstance(datos, dict):
            raise ErrorAPI("Respuesta JSON inválida")
        return datos

    def obtener_similares(self, diagnostico: str) -> List[str]:
        try:
            datos = self._get("/diagnoses/similar", {"diagnosis": diagnostico})
        except ErrorAPI:
            logger.error("API Error - obtener_similares(%r)", diagnostico, exc_info=True)
            raise
        return list(datos.get("diagnoses") or [])

    def obtener_secciones(self, diagnostico: str) -> List[str]:
        try:
            datos = self._get(f"/diagnoses/{quote(diagnostico, safe='')}/sections")
        except ErrorAPI:
            logger.error("API Error - obtener_secciones(%r)", diagnostico, exc_info=True)
            raise
        return list(datos.get("sections") or [])

    def obtener_seccion(self, diagnostico: str, seccion: str) -> str:
        try:
            datos = self._get(
                f"/diagnoses/{quote(diagnostico, safe='')}/sections/{quote(seccion, safe='')}"
            )
        except ErrorAPI:
            logger.error("API Error - obtener_seccion(%r, %r)", diagnostico, seccion, exc_info=True)
            raise
        return datos.get("content") or ""
