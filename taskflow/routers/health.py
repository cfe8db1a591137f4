from fastapi import APIRouter, Depends
from taskflow.realtime.broadcaster import Broadcaster, get_broadcaster

router = APIRouter()

@router.get("/z")
def healthz(broadcaster: Broadcaster = Depends(get_broadcaster)):
    # Check si l'API est up + nb de clients temps réel
    return {"status": "ok", "connections": len(broadcaster.connections)}
