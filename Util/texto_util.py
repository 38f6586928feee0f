import re
from html import escape

# Telegram admite hasta 4096 caracteres por mensaje; se deja margen para el formato.
LIMITE_MENSAJE = 4000

PATRON_ENCABEZADO = re.compile(r"### ?")


def limpiar_encabezados(contenido: str) -> str:
    """Quita los marcadores de encabezado markdown ("### ") del contenido de una sección."""
    return PATRON_ENCABEZADO.sub("", contenido)


def escapar(texto: str) -> str:
    return escape(texto, quote=False)


def _cortar_linea(linea, limite):
    piezas = []
    while len(escapar(linea)) > limite:
        n = limite
        while n > 1 and len(escapar(linea[:n])) > limite:
            # cada carácter escapado ocupa como máximo 5 ("&amp;")
            exceso = len(escapar(linea[:n])) - limite
            n = max(1, n - (exceso + 4) // 5)
        espacio = linea.rfind(" ", 0, n)
        if espacio > n // 2:
            n = espacio + 1
        piezas.append(linea[:n])
        linea = linea[n:]
    piezas.append(linea)
    return piezas


def dividir_texto(texto: str, limite: int = LIMITE_MENSAJE):
    """
    Divide `texto` en partes cuyo largo ya escapado para HTML no supera `limite`.
    Corta en saltos de línea cuando es posible. Devuelve las partes escapadas.
    """
    partes = []
    actual = []
    largo_actual = 0

    for linea in texto.split("\n"):
        for j, pieza in enumerate(_cortar_linea(linea, limite)):
            pieza_escapada = escapar(pieza)
            largo = len(pieza_escapada) + (1 if actual else 0)
            # la continuación de una línea cortada siempre empieza una parte nueva
            if actual and (j > 0 or largo_actual + largo > limite):
                partes.append("\n".join(actual))
                actual = []
                largo_actual = 0
                largo = len(pieza_escapada)
            actual.append(pieza_escapada)
            largo_actual += largo

    if actual or not partes:
        partes.append("\n".join(actual))
    return partes
