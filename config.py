"""
Configuración del bot DocTime.MedX.
Lee las variables de entorno (y el archivo .env si existe).
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# ── Telegram ───────────────────────────────────────────────────────────────
BOT_TOKEN = os.getenv("BOT_TOKEN", "")
WEBHOOK_URL = os.getenv("WEBHOOK_URL", "")
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET", "")
# Sin ADMIN_TOKEN los endpoints /admin y /init-db responden 403.
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")
PORT = int(os.getenv("PORT", "8000"))

# ── API de contenido ───────────────────────────────────────────────────────
API_BASE_URL = os.getenv("API_BASE_URL", "")

# ── Base de datos ──────────────────────────────────────────────────────────
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "doctimeai")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")

# ── Sesiones ───────────────────────────────────────────────────────────────
SESSION_FILE = os.getenv("SESSION_FILE", str(BASE_DIR / "session.json"))
MAX_CALLBACKS = int(os.getenv("MAX_CALLBACKS", "200"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def construir_database_url():
    url = os.getenv("DATABASE_URL")
    if url:
        if url.startswith("postgresql://") and "+psycopg2" not in url:
            url = url.replace("postgresql://", "postgresql+psycopg2://", 1)
        return url

    credenciales = DB_USER
    if DB_PASSWORD:
        credenciales = f"{DB_USER}:{DB_PASSWORD}"
    return f"postgresql+psycopg2://{credenciales}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


DATABASE_URL = construir_database_url()


def variables_faltantes():
    """Devuelve las variables obligatorias que no están configuradas."""
    faltantes = []
    if not BOT_TOKEN:
        faltantes.append("BOT_TOKEN")
    if not API_BASE_URL:
        faltantes.append("API_BASE_URL")
    return faltantes
