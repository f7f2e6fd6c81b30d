import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.deps import get_dispatcher, get_notifier
from app.core.errors import StoreUnavailableError
from app.schemas.context import UserContext
from app.schemas.notification import Capability, PermissionStatus, ReminderCheckResult
from app.services.auth_service import AuthService
from app.services.publisher_service import NotificationSink
from app.services.reminders import ReminderDispatcher

logger = logging.getLogger("tasktrack.notifications")

router = APIRouter()

UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]
NotifierDep = Annotated[NotificationSink, Depends(get_notifier)]
DispatcherDep = Annotated[ReminderDispatcher, Depends(get_dispatcher)]


@router.get("/notifications/permission", response_model=PermissionStatus)
async def get_permission_endpoint(user: UserDep, notifier: NotifierDep):
    permission = notifier.probe()
    return PermissionStatus(
        permission=permission,
        supported=permission is not Capability.UNSUPPORTED,
        requested=notifier.requested,
    )


@router.post("/notifications/permission", response_model=PermissionStatus)
async def request_permission_endpoint(user: UserDep, notifier: NotifierDep, dispatcher: DispatcherDep):
    permission = await notifier.request_permission()
    if permission is Capability.GRANTED:
        # appena concesso si controllano subito le scadenze
        try:
            await dispatcher.run(user.user_id)
        except StoreUnavailableError as e:
            # il permesso resta concesso, il controllo riparte alla prossima modifica
            logger.warning("Controllo scadenze saltato: %s", e)
    return PermissionStatus(
        permission=permission,
        supported=permission is not Capability.UNSUPPORTED,
        requested=notifier.requested,
    )


@router.post("/notifications/check", response_model=ReminderCheckResult)
async def check_deadlines_endpoint(user: UserDep, dispatcher: DispatcherDep):
    try:
        return await dispatcher.run(user.user_id)
    except StoreUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to reach the assignment store. Please try again.",
        )
