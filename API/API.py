from fastapi import APIRouter, HTTPException, Depends, Header
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime

from Services.ClienteService import ClienteService
from Util.database import get_db_session, Session
from Util.estado import SessionManager


class ClienteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    telegram_id: int
    username: str
    first_name: str
    last_name: Optional[str] = None
    created_at: datetime


class SesionResponse(BaseModel):
    user_id: int
    diagnosis: Optional[str] = None
    sections: Optional[List[str]] = None
    currentSection: Optional[str] = None
    messageIds: List[int] = []
    callbackMap: Dict[str, str] = {}


def crear_verificador_admin(admin_token: Optional[str]):
    """Dependencia que exige el header X-Admin-Token."""
    def verificar_admin(x_admin_token: Optional[str] = Header(default=None)):
        if not admin_token or x_admin_token != admin_token:
            raise HTTPException(status_code=403, detail="Token de administración inválido")

    return verificar_admin


def crear_router_admin(session_manager: SessionManager, db_session_factory=get_db_session,
                       admin_token: Optional[str] = None) -> APIRouter:
    """Endpoints de administración: clientes registrados y sesiones guardadas."""
    router = APIRouter(
        prefix="/admin",
        tags=["admin"],
        dependencies=[Depends(crear_verificador_admin(admin_token))],
    )

    def get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    @router.get("/clientes", response_model=List[ClienteResponse])
    def obtener_todos_los_clientes(db: Session = Depends(get_db)):
        return ClienteService(db).obtener_todos()

    @router.get("/clientes/{telegram_id}", response_model=ClienteResponse)
    def obtener_cliente_por_id(telegram_id: int, db: Session = Depends(get_db)):
        cliente = ClienteService(db).obtener_uno(telegram_id=telegram_id)
        if not cliente:
            raise HTTPException(status_code=404, detail=f"Cliente con ID {telegram_id} no encontrado")
        return cliente

    @router.get("/sesiones/{user_id}", response_model=SesionResponse)
    def obtener_sesion(user_id: int):
        estado = session_manager.obtener(user_id)
        if not estado:
            raise HTTPException(status_code=404, detail=f"Sesión del usuario {user_id} no encontrada")
        return SesionResponse(user_id=user_id, **estado.model_dump(by_alias=True))

    @router.delete("/sesiones/{user_id}")
    def eliminar_sesion(user_id: int):
        if not session_manager.eliminar(user_id):
            raise HTTPException(status_code=404, detail=f"Sesión del usuario {user_id} no encontrada")
        return {"status": "success", "user_id": user_id}

    @router.delete("/sesiones")
    def eliminar_todas_las_sesiones():
        cantidad = session_manager.limpiar_todo()
        return {"status": "success", "eliminadas": cantidad}

    return router
