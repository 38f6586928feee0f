import hashlib

LARGO_HASH = 32

TIPO_DIAGNOSTICO = "diagnosis"
TIPO_SECCION = "section"


def generar_hash(texto: str) -> str:
    """Hash corto y determinístico para usar dentro de callback_data (máx. 64 bytes en Telegram)."""
    return hashlib.sha256(texto.encode("utf-8")).hexdigest()[:LARGO_HASH]


def clave_callback(tipo: str, hash_valor: str) -> str:
    return f"{tipo}:{hash_valor}"
