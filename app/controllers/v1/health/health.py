from fastapi import APIRouter, Depends

from app.database.backends.base import utc_now
from app.database.store import get_store
from app.services.auth.guards import require
from app.services.auth.policies import PUBLIC
from config import APP_ENV, SERVER_CONFIG

router = APIRouter()


@router.get("/health", dependencies=[Depends(require(PUBLIC))])
async def health():
    return {
        "success": True,
        "message": f"{SERVER_CONFIG['APP_NAME']} is running",
        "timestamp": utc_now().isoformat(),
        "environment": APP_ENV,
        "backend": get_store().backend,
    }


@router.get("/", dependencies=[Depends(require(PUBLIC))])
async def welcome():
    return {
        "success": True,
        "message": f"Welcome to {SERVER_CONFIG['APP_NAME']}",
        "version": SERVER_CONFIG["VERSION"],
        "endpoints": {
            "auth": "/api/auth",
            "projects": "/api/projects",
            "health": "/health",
            "uploads": "/uploads",
        },
    }
