from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from sqlpatch.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/liveness/", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe: is the process alive and responsive?
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Process unhealthy", "data": failures},
        )
    return True


@router.get("/health-check/", response_model=None)
async def health_check(request: Request) -> bool | JSONResponse:
    """
    Readiness probe: templates loaded and output directory writable.
    Returns 200 with true when ready; 503 otherwise.
    """
    state = request.app.state
    ok, failures = readiness_check(
        getattr(state, "registry", None), getattr(state, "store", None)
    )
    if not ok:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "message": "Service Unavailable",
                "data": failures,
            },
        )
    return True
