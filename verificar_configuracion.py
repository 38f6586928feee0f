"""
Script para verificar la configuración del bot de Telegram y de la API de contenido
"""

import config
from telegram_api import TelegramAPI
from Services.DiagnosticoService import DiagnosticoService, ErrorAPI

def verificar_configuracion():
    """Verifica la configuración del bot."""
    print("="*60)
    print("🔍 Verificando configuración de DocTime.MedX")
    print("="*60)
    
    faltantes = config.variables_faltantes()
    if faltantes:
        print(f"\n❌ Faltan variables de entorno: {', '.join(faltantes)}")
        return False
    
    # Verificar token del bot
    print("\n1️⃣ Verificando token del bot...")
    resultado = TelegramAPI(config.BOT_TOKEN).obtener_info_bot()
    if resultado["success"]:
        bot = resultado["result"]
        print(f"   ✅ Token válido")
        print(f"   🤖 Bot: @{bot.get('username', 'N/A')}")
        print(f"   📝 Nombre: {bot.get('first_name', 'N/A')}")
    else:
        print(f"   ❌ Error con el token: {resultado.get('error', 'Error desconocido')}")
        return False
    
    # Verificar API de contenido
    print("\n2️⃣ Verificando API de contenido...")
    print(f"   🌐 API_BASE_URL: {config.API_BASE_URL}")
    try:
        similares = DiagnosticoService(config.API_BASE_URL, timeout=10).obtener_similares("грипп")
        print(f"   ✅ API accesible ({len(similares)} diagnósticos para la consulta de prueba)")
    except ErrorAPI as e:
        print(f"   ❌ No se pudo consultar la API: {e}")
        return False
    
    # Verificar archivo de sesiones
    print("\n3️⃣ Archivo de sesiones...")
    print(f"   📁 {config.SESSION_FILE}")
    
    print("\n" + "="*60)
    print("✅ Configuración verificada correctamente!")
    print("="*60)
    
    return True

if __name__ == "__main__":
    verificar_configuracion()
