import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from Services.DiagnosticoService import DiagnosticoService, ErrorAPI
from Util.estado import SessionManager
from Util.eventos import Evento, TipoEvento
from Util.hash_util import TIPO_DIAGNOSTICO, TIPO_SECCION
from Util.menus import (
    CALLBACK_NUEVO_DIAGNOSTICO,
    CALLBACK_VOLVER_SECCIONES,
    PREFIJO_DIAGNOSTICO,
    PREFIJO_SECCION,
    TEXTO_INGRESAR_DIAGNOSTICO,
    ordenar_secciones,
    teclado_contenido_seccion,
    teclado_diagnosticos,
    teclado_nuevo_diagnostico,
    teclado_secciones,
)
from Util.texto_util import dividir_texto, escapar, limpiar_encabezados

logger = logging.getLogger(__name__)

TEXTO_BIENVENIDA = (
    "👋 Здравствуйте, доктор!\n"
    "Я — DocTime.MedX, ваша медицинская база знаний.\n"
    "Задайте вопрос — и я помогу найти актуальные клинические рекомендации, "
    "проверить протокол или подсказать по диагностике и лечению.\n\n"
    "🩺 Давайте начнём: какой запрос хотите разобрать?"
)
TEXTO_PEDIR_DIAGNOSTICO = "Введите название диагноза, который вас интересует:"
TEXTO_BUSCANDO = "Ищу похожие диагнозы..."
TEXTO_SIN_RESULTADOS = (
    "По вашему запросу ничего не найдено. "
    "Попробуйте ввести другой диагноз или уточнить формулировку."
)
TEXTO_DIAGNOSTICOS_ENCONTRADOS = "Найдены следующие диагнозы. Выберите подходящий:"
TEXTO_DIAGNOSTICO_SELECCIONADO = "Выбран диагноз: <b>{diagnostico}</b>\n\nЗагружаю информацию..."
TEXTO_SIN_INFORMACION = "Для выбранного диагноза нет доступной информации."
TEXTO_SECCIONES = "Доступные разделы:"
TEXTO_MENSAJE_NO_SOPORTADO = (
    "Пожалуйста, используйте текстовые сообщения для ввода диагноза или команды меню."
)

TEXTO_DIAGNOSTICO_NO_ENCONTRADO = "Ошибка: диагноз не найден. Пожалуйста, попробуйте снова."
TEXTO_SECCION_NO_ENCONTRADA = "Ошибка: раздел не найден. Пожалуйста, попробуйте снова."
TEXTO_SECCION_FUERA_DE_LISTA = "Раздел не найден."
TEXTO_EMPEZAR_DE_NUEVO = "Информация не найдена. Пожалуйста, начните сначала."

TEXTO_ERROR_BUSQUEDA = "Произошла ошибка при поиске диагнозов. Попробуйте позже."
TEXTO_ERROR_INFORMACION = "Произошла ошибка при загрузке информации. Попробуйте позже."
TEXTO_ERROR_SECCION = "Произошла ошибка при загрузке раздела. Попробуйте позже."


class Chat:
    """
    Controlador de la conversación.

    Cada evento entrante se resuelve contra una única tabla de transiciones
    (comandos por nombre, callbacks por patrón, texto libre y el resto).
    Antes de ejecutar la acción se borran los mensajes del paso anterior, así
    el chat solo muestra los mensajes del paso actual.
    """

    def __init__(self, session_manager: SessionManager, diagnostico_service: DiagnosticoService, telegram):
        self.sesiones = session_manager
        self.api = diagnostico_service
        self.telegram = telegram

        self.comandos: Dict[str, Callable] = {
            "start": self.iniciar,
            "new_diagnosis": self.pedir_diagnostico,
        }

        self.callbacks: List[Tuple[re.Pattern, Callable]] = [
            (re.compile(rf"^{PREFIJO_DIAGNOSTICO}(.+)$"), self.seleccionar_diagnostico),
            (re.compile(rf"^{PREFIJO_SECCION}(.+)$"), self.seleccionar_seccion),
            (re.compile(rf"^{CALLBACK_NUEVO_DIAGNOSTICO}$"), self.pedir_diagnostico),
            (re.compile(rf"^{CALLBACK_VOLVER_SECCIONES}$"), self.volver_a_secciones),
        ]

    # ── Despacho ───────────────────────────────────────────────────────────

    def resolver_transicion(self, evento: Evento) -> Optional[Tuple[Callable, tuple]]:
        """Devuelve (acción, argumentos) para el evento, o None si no corresponde responder."""
        if evento.tipo in (TipoEvento.START, TipoEvento.COMANDO):
            accion = self.comandos.get(evento.comando)
            return (accion, ()) if accion else None

        if evento.tipo == TipoEvento.CALLBACK:
            for patron, accion in self.callbacks:
                match = patron.match(evento.texto)
                if match:
                    return accion, match.groups()
            return None

        if evento.tipo == TipoEvento.TEXTO:
            return self.buscar_diagnostico, (evento.texto,)

        return self.mensaje_no_soportado, ()

    def procesar_evento(self, evento: Evento):
        if evento.tipo == TipoEvento.CALLBACK and evento.callback_id:
            self._responder_callback(evento)

        transicion = self.resolver_transicion(evento)
        if transicion is None:
            logger.debug("Evento sin transición: %s %r", evento.tipo.value, evento.texto)
            return None

        accion, argumentos = transicion
        self.limpiar_mensajes_previos(evento)
        return accion(evento, *argumentos)

    # ── Efectos secundarios sin resultado relevante ───────────────────────

    def _responder_callback(self, evento: Evento):
        resultado = self.telegram.responder_callback(evento.callback_id)
        if not resultado.get("success"):
            logger.info("No se pudo responder el callback %s: %s", evento.callback_id, resultado.get("error"))

    def limpiar_mensajes_previos(self, evento: Evento):
        estado = self.sesiones.obtener_o_crear(evento.user_id)
        if not estado.message_ids:
            return

        for message_id in estado.message_ids:
            try:
                resultado = self.telegram.borrar_mensaje(evento.chat_id, message_id)
            except Exception:
                logger.warning("No se pudo borrar el mensaje %s", message_id, exc_info=True)
                continue
            if not resultado.get("success"):
                logger.info("No se pudo borrar el mensaje %s: %s", message_id, resultado.get("error"))

        self.sesiones.actualizar(evento.user_id, message_ids=[])

    # ── Envío ──────────────────────────────────────────────────────────────

    def _enviar(self, evento: Evento, texto: str, teclado=None):
        resultado = self.telegram.enviar_mensaje(evento.chat_id, texto, teclado)
        message_id = resultado.get("message_id")

        if resultado.get("success") and message_id is not None:
            estado = self.sesiones.obtener_o_crear(evento.user_id)
            self.sesiones.actualizar(evento.user_id, message_ids=estado.message_ids + [message_id])
        else:
            logger.error("No se pudo enviar mensaje a %s: %s", evento.chat_id, resultado.get("error"))

        return resultado

    # ── Acciones ───────────────────────────────────────────────────────────

    def iniciar(self, evento: Evento):
        return self._enviar(evento, TEXTO_BIENVENIDA, teclado_nuevo_diagnostico(TEXTO_INGRESAR_DIAGNOSTICO))

    def pedir_diagnostico(self, evento: Evento):
        return self._enviar(evento, TEXTO_PEDIR_DIAGNOSTICO)

    def mensaje_no_soportado(self, evento: Evento):
        return self._enviar(evento, TEXTO_MENSAJE_NO_SOPORTADO)

    def buscar_diagnostico(self, evento: Evento, consulta: str):
        self._enviar(evento, TEXTO_BUSCANDO)

        try:
            similares = self.api.obtener_similares(consulta)
        except ErrorAPI:
            return self._enviar(evento, TEXTO_ERROR_BUSQUEDA, teclado_nuevo_diagnostico())

        if not similares:
            return self._enviar(evento, TEXTO_SIN_RESULTADOS, teclado_nuevo_diagnostico())

        estado = self.sesiones.obtener_o_crear(evento.user_id)
        hashes = estado.registrar_callbacks(TIPO_DIAGNOSTICO, similares, self.sesiones.max_callbacks)
        self.sesiones.actualizar(evento.user_id, callback_map=estado.callback_map)

        return self._enviar(evento, TEXTO_DIAGNOSTICOS_ENCONTRADOS, teclado_diagnosticos(similares, hashes))

    def seleccionar_diagnostico(self, evento: Evento, hash_valor: str):
        estado = self.sesiones.obtener_o_crear(evento.user_id)
        diagnostico = estado.resolver_callback(TIPO_DIAGNOSTICO, hash_valor)

        if not diagnostico:
            return self._enviar(evento, TEXTO_DIAGNOSTICO_NO_ENCONTRADO, teclado_nuevo_diagnostico())

        self.sesiones.actualizar(evento.user_id, diagnostico=diagnostico)
        self._enviar(evento, TEXTO_DIAGNOSTICO_SELECCIONADO.format(diagnostico=escapar(diagnostico)))

        return self._mostrar_secciones(evento, diagnostico)

    def volver_a_secciones(self, evento: Evento):
        estado = self.sesiones.obtener_o_crear(evento.user_id)
        if not estado.diagnostico:
            return self._enviar(evento, TEXTO_EMPEZAR_DE_NUEVO, teclado_nuevo_diagnostico())

        return self._mostrar_secciones(evento, estado.diagnostico)

    def _mostrar_secciones(self, evento: Evento, diagnostico: str):
        try:
            secciones = self.api.obtener_secciones(diagnostico)
        except ErrorAPI:
            return self._enviar(evento, TEXTO_ERROR_INFORMACION, teclado_nuevo_diagnostico())

        visibles = ordenar_secciones(secciones)
        if not visibles:
            return self._enviar(evento, TEXTO_SIN_INFORMACION, teclado_nuevo_diagnostico())

        estado = self.sesiones.obtener_o_crear(evento.user_id)
        hashes = estado.registrar_callbacks(TIPO_SECCION, visibles, self.sesiones.max_callbacks)
        self.sesiones.actualizar(evento.user_id, secciones=secciones, callback_map=estado.callback_map)

        return self._enviar(evento, TEXTO_SECCIONES, teclado_secciones(visibles, hashes))

    def seleccionar_seccion(self, evento: Evento, hash_valor: str):
        estado = self.sesiones.obtener_o_crear(evento.user_id)
        titulo = estado.resolver_callback(TIPO_SECCION, hash_valor)

        if not titulo:
            return self._enviar(evento, TEXTO_SECCION_NO_ENCONTRADA, teclado_nuevo_diagnostico())

        if not estado.diagnostico or not estado.secciones:
            return self._enviar(evento, TEXTO_EMPEZAR_DE_NUEVO, teclado_nuevo_diagnostico())

        if titulo not in estado.secciones:
            return self._enviar(evento, TEXTO_SECCION_FUERA_DE_LISTA, teclado_nuevo_diagnostico())

        try:
            contenido = self.api.obtener_seccion(estado.diagnostico, titulo)
        except ErrorAPI:
            return self._enviar(evento, TEXTO_ERROR_SECCION, teclado_nuevo_diagnostico())

        self.sesiones.actualizar(evento.user_id, seccion_actual=titulo)

        partes = dividir_texto(f"{titulo}\n\n{limpiar_encabezados(contenido)}")
        titulo_escapado = escapar(titulo)
        if partes[0].startswith(titulo_escapado):
            partes[0] = f"<b>{titulo_escapado}</b>" + partes[0][len(titulo_escapado):]

        resultado = None
        for i, parte in enumerate(partes):
            es_ultima = i == len(partes) - 1
            resultado = self._enviar(evento, parte, teclado_contenido_seccion() if es_ultima else None)
        return resultado
