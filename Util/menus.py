"""Teclados inline de Telegram para los distintos pasos de la conversación."""

from typing import List

SECCION_EXCLUIDA = "МКБ"
SECCIONES_PRIORITARIAS = ("Лечение", "Диагностика")

TEXTO_NUEVO_DIAGNOSTICO = "Ввести новый диагноз"
TEXTO_INGRESAR_DIAGNOSTICO = "Ввести диагноз"
TEXTO_VOLVER_SECCIONES = "⬅️ Назад к разделам"

CALLBACK_NUEVO_DIAGNOSTICO = "new_diagnosis"
CALLBACK_VOLVER_SECCIONES = "back_to_sections"
PREFIJO_DIAGNOSTICO = "select_diagnosis:"
PREFIJO_SECCION = "select_section:"

BOTONES_POR_FILA = 2


def boton(texto, callback_data):
    return {"text": texto, "callback_data": callback_data}


def teclado(filas):
    return {"inline_keyboard": filas}


def boton_nuevo_diagnostico(texto=TEXTO_NUEVO_DIAGNOSTICO):
    return boton(texto, CALLBACK_NUEVO_DIAGNOSTICO)


def teclado_nuevo_diagnostico(texto=TEXTO_NUEVO_DIAGNOSTICO):
    return teclado([[boton_nuevo_diagnostico(texto)]])


def ordenar_secciones(secciones: List[str]) -> List[str]:
    """Quita la sección excluida y pone primero las prioritarias, respetando el orden original."""
    visibles = [s for s in secciones if s != SECCION_EXCLUIDA]
    return sorted(visibles, key=lambda s: 0 if s in SECCIONES_PRIORITARIAS else 1)


def teclado_diagnosticos(diagnosticos, hashes):
    filas = [
        [boton(diagnostico, f"{PREFIJO_DIAGNOSTICO}{hash_valor}")]
        for diagnostico, hash_valor in zip(diagnosticos, hashes)
    ]
    filas.append([boton_nuevo_diagnostico()])
    return teclado(filas)


def teclado_secciones(secciones, hashes):
    botones = [
        boton(seccion, f"{PREFIJO_SECCION}{hash_valor}")
        for seccion, hash_valor in zip(secciones, hashes)
    ]
    filas = [botones[i:i + BOTONES_POR_FILA] for i in range(0, len(botones), BOTONES_POR_FILA)]
    filas.append([boton_nuevo_diagnostico()])
    return teclado(filas)


def teclado_contenido_seccion():
    return teclado([
        [boton(TEXTO_VOLVER_SECCIONES, CALLBACK_VOLVER_SECCIONES)],
        [boton_nuevo_diagnostico()],
    ])
