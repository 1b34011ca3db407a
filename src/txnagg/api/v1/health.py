from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Basic health check, with the reconciliation worker's state when it runs."""
    body = {"status": "ok"}
    worker = getattr(request.app.state, "reconciliation_worker", None)
    if worker is not None:
        body["reconciliation"] = {
            "state": worker.state.value,
            "cycles_completed": worker.cycles_completed,
            "failures": worker.failures,
            "last_cycle_changes": worker.last_cycle_changes,
        }
    return body


@router.get("/health/ready")
async def health_ready(db: AsyncSession = Depends(get_db)):
    """Readiness check with database connection."""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "database": "disconnected", "error": type(e).__name__},
        )
