from fastapi import HTTPException, status

from app.core.exceptions import LimitExceededError
from app.services.plan_limits import UPGRADE_SUGGESTIONS


def limit_exceeded_response(e: LimitExceededError) -> HTTPException:
    """403 carrying the quota that was hit, shaped for the admin UI's upgrade banner"""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": e.message,
            "resource": e.resource,
            "limit": e.limit,
            "current": e.current,
            "plan": e.plan,
            "action": UPGRADE_SUGGESTIONS.get(e.resource, "Upgrade your plan."),
        },
    )
