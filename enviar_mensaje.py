"""
Script simple para enviar un mensaje de prueba por Telegram
"""

import sys
import config
from telegram_api import TelegramAPI

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Uso: python enviar_mensaje.py <chat_id> <mensaje>")
        print("\nEjemplo:")
        print('  python enviar_mensaje.py 123456789 "Hola, este es un mensaje de prueba"')
        print("\nEl chat_id es el ID de Telegram del usuario (debe haber iniciado el bot con /start).")
        sys.exit(1)
    
    if not config.BOT_TOKEN:
        print("❌ Falta la variable de entorno BOT_TOKEN")
        sys.exit(1)
    
    chat_id = sys.argv[1]
    mensaje = " ".join(sys.argv[2:])
    
    print(f"📤 Enviando mensaje a {chat_id}...")
    print(f"💬 Mensaje: {mensaje}\n")
    
    resultado = TelegramAPI(config.BOT_TOKEN).enviar_mensaje(chat_id, mensaje, parse_mode=None)
    
    if resultado.get('success'):
        print("✅ Mensaje enviado exitosamente!")
        print(f"📨 Message ID: {resultado.get('message_id')}")
    else:
        print("❌ Error al enviar mensaje:")
        print(f"   {resultado.get('error', 'Error desconocido')}")
        sys.exit(1)
