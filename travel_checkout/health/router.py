from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from travel_checkout.health.service import health_backend_info
from travel_checkout.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/backend")
async def health_backend(request: Request):
    info = await health_backend_info()
    info["rate_limit"] = rate_limit_health_info(request)
    return JSONResponse(info)
