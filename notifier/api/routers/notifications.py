"""
/notifications — list live timer notifications and act on them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import IssueIn, NotificationListOut, NotificationOut, SourceOut
from ...notifications.notification import PomodoroNotification
from ...notifications.service import NotificationService
from ...notifications.tray import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _get_service(request: Request) -> NotificationService:
    return request.app.state.service


def _to_out(service: NotificationService, n: Notification) -> NotificationOut:
    kind = getattr(n, "kind", None)
    return NotificationOut(
        id=n.id,
        kind=kind.value if kind is not None else None,
        state=n.state.value if isinstance(n, PomodoroNotification) else None,
        title=n.title,
        body=n.body,
        urgency=n.urgency.name,
        resident=n.resident,
        transient=n.transient,
        shown=service.tray.is_shown(n),
    )


def _find(service: NotificationService, notification_id: int) -> Notification:
    notification = service.find(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationListOut)
def list_notifications(service=Depends(_get_service)):
    source = service.registry.current
    return NotificationListOut(
        source=SourceOut(
            title=source.title, icon_name=source.icon_name, count=source.count,
        ) if source is not None else None,
        notifications=[_to_out(service, n) for n in service.notifications()],
    )


@router.get("/{notification_id}", response_model=NotificationOut)
def get_notification(notification_id: int, service=Depends(_get_service)):
    return _to_out(service, _find(service, notification_id))


@router.post("/{notification_id}/dismiss")
def dismiss_notification(notification_id: int, service=Depends(_get_service)):
    _find(service, notification_id).destroy()
    return {"status": "dismissed"}


@router.post("/{notification_id}/activate")
def activate_notification(notification_id: int, service=Depends(_get_service)):
    _find(service, notification_id).activate()
    return {"status": "activated"}


@router.post("/{notification_id}/extend", response_model=NotificationOut)
def extend_notification(notification_id: int, service=Depends(_get_service)):
    """"+1 Minute" on the phase this notification follows."""
    notification = _find(service, notification_id)
    if not isinstance(notification, PomodoroNotification):
        raise HTTPException(status_code=409, detail="Notification does not follow the timer")
    notification.extend()
    return _to_out(service, notification)


@router.post("/issue", response_model=NotificationOut, status_code=201)
def report_issue(issue: IssueIn, service=Depends(_get_service)):
    return _to_out(service, service.report_issue(issue.message))
