from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    return {"status": "ok"}


@router.get("/db")
def db_health(request: Request):
    """Check that the patient store answers"""
    if request.app.state.database.ping():
        return {"status": "ok"}
    return JSONResponse({"status": "unavailable"}, status_code=503)
