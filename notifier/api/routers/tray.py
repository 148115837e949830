"""
/tray — what the tray currently shows, banner actions and screen lock.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import BannerOut, ScreenLockIn, TrayStateOut
from ...notifications.service import NotificationService

router = APIRouter(prefix="/tray", tags=["tray"])


def _get_service(request: Request) -> NotificationService:
    return request.app.state.service


def _state(service: NotificationService) -> TrayStateOut:
    tray = service.tray
    banner = tray.banner
    return TrayStateOut(
        tray_mode_active=service.tray_mode is not None and service.tray_mode.active,
        do_not_disturb_visible=tray.do_not_disturb_visible,
        auto_expand_suppressed=tray.auto_expand_suppressed,
        message_banners_overridden=tray.message_banners_overridden,
        screen_locked=service.screen_shield is not None,
        banner=BannerOut(
            notification_id=banner.notification.id,
            title=banner.title,
            body=banner.body,
            expanded=banner.expanded,
            actions=banner.action_labels(),
        ) if banner is not None else None,
    )


@router.get("", response_model=TrayStateOut)
def get_tray(service=Depends(_get_service)):
    return _state(service)


@router.post("/banner/actions/{index}", response_model=TrayStateOut)
def click_banner_action(index: int, service=Depends(_get_service)):
    """Press a button on the banner currently on screen."""
    banner = service.tray.banner
    if banner is None or not 0 <= index < len(banner.buttons):
        raise HTTPException(status_code=404, detail="No such banner action")
    banner.buttons[index].click()
    return _state(service)


@router.put("/screen-lock", response_model=TrayStateOut)
def set_screen_lock(req: ScreenLockIn, service=Depends(_get_service)):
    service.set_screen_locked(req.locked)
    return _state(service)
