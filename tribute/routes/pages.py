from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from tribute.config import get_settings
from tribute.deps import get_redemption_service
from tribute.services.redemption import RedemptionService
from tribute.utils.errors import AppError, BalanceUnavailable

router = APIRouter(tags=["Pages"])
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

GALLERY_SIZE = 6


async def _read_balance(service: RedemptionService) -> Optional[int]:
    try:
        return await service.get_balance()
    except BalanceUnavailable:
        return None


def _render(
    request: Request,
    service: RedemptionService,
    balance: Optional[int],
    message: Optional[Dict[str, str]] = None,
    form: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    settings = get_settings()
    context = {
        "title": settings.page_title,
        "balance": balance,
        "categories": service.catalog.by_category(),
        "timeline": settings.timeline,
        "gallery": range(1, GALLERY_SIZE + 1),
        "preferred_time_required": settings.preferred_time_required,
        "message": message,
        "form": form or {},
    }
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, service: RedemptionService = Depends(get_redemption_service)):
    balance = await _read_balance(service)
    return _render(request, service, balance)


@router.post("/redeem", response_class=HTMLResponse)
async def redeem(
    request: Request,
    background_tasks: BackgroundTasks,
    gift_id: str = Form(...),
    delivery_address: str = Form(""),
    delivery_instructions: str = Form(""),
    preferred_time: str = Form(""),
    balance: Optional[int] = Form(None),
    service: RedemptionService = Depends(get_redemption_service),
):
    """
    Form post from the gift section. Re-renders the page with a titled
    message; on success the form is cleared and the balance re-read.
    """
    try:
        confirmation = await service.redeem(
            gift_id=gift_id,
            delivery_address=delivery_address,
            delivery_instructions=delivery_instructions,
            preferred_time=preferred_time,
            balance=balance,
        )
    except AppError as e:
        submitted = {
            "gift_id": gift_id,
            "delivery_address": delivery_address,
            "delivery_instructions": delivery_instructions,
            "preferred_time": preferred_time,
        }
        return _render(
            request,
            service,
            await _read_balance(service),
            message={"kind": "error", "title": e.title, "text": e.message},
            form=submitted,
            status_code=e.http_status,
        )

    background_tasks.add_task(service.notify_owner, confirmation.notification)
    return _render(
        request,
        service,
        confirmation.balance,
        message={
            "kind": "success",
            "title": "Gift Redeemed!",
            "text": f"Your {confirmation.gift_name} has been ordered.",
        },
    )
