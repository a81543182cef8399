from typing import Any

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ..services.scheduling import OperationResult, SchedulingService
from ..utils.error_handlers import create_error_response


def scheduling_service(db: Session, background_tasks: BackgroundTasks | None = None) -> SchedulingService:
    # Notifications go out after the response when a request is available.
    if background_tasks is not None:
        return SchedulingService(db, dispatch=background_tasks.add_task)
    return SchedulingService(db)


def respond(result: OperationResult, data: Any = None):
    if not result.success:
        return create_error_response(result.status_code, result.message, result.details or None)
    return {
        "success": True,
        "message": result.message,
        "data": result.data if data is None else data,
    }
