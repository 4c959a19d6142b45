"""Outbound notification routes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.schemas.settings import SmsRequest
from restaurant_pos.services.sms_service import get_sms_service

router = APIRouter()


@router.post("/send-sms")
@limiter.limit("10/minute")
def send_sms(request: Request, data: SmsRequest):
    """Send a raw SMS through the gateway."""
    result = get_sms_service().send(data.phone_number, data.message)
    if not result["success"]:
        return JSONResponse(status_code=500, content=result)
    return result
