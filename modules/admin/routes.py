"""
Admin Module - System Routes
==============================
Runtime switches for the terminal.

Endpoints:
  GET /api/system/connectivity   - Current online flag
  PUT /api/system/connectivity   - Set online flag (stamped as `synced` on new records)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from common.connectivity import connectivity
from modules.auth.deps import require_actor, require_permission

router = APIRouter(prefix="/api/system", tags=["system"])


class ConnectivityRequest(BaseModel):
    online: bool


@router.get("/connectivity")
async def get_connectivity(actor=Depends(require_actor)):
    return {"online": connectivity.is_online()}


@router.put("/connectivity")
async def set_connectivity(body: ConnectivityRequest, actor=Depends(require_permission("accessSettings"))):
    connectivity.set_online(body.online)
    return {"online": connectivity.is_online()}
