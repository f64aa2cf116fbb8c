"""
Moderation Endpoints.

Moderators work through the queue of open reports and decide on each one.
The decision is applied immediately; both parties are e-mailed after the
response has been sent.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from thinky.core.logging_config import get_logger
from thinky.core.models.io import ModerationActionRequest, ReportRead
from thinky.server.services.deps import ModeratorUser, RepoDep
from thinky.server.services.mailer import EmailService, get_email_service
from thinky.server.services.moderation import ModerationError, ModerationService, notify_moderation_outcome
from thinky.server.services.presenters import moderation_items

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/admin/moderation",
    summary="Moderation Queue",
    description="Open reports, newest first, with the content and people involved.",
)
async def moderation_queue(moderator: ModeratorUser, repos: RepoDep):
    reports = await repos.reports.list_open()
    return {"reports": await moderation_items(repos, reports)}


@router.put(
    "/admin/moderation/{report_id}/action",
    summary="Act on Report",
    description="Apply a moderation decision to a report and notify both parties.",
    responses={
        400: {"description": "Unknown action"},
        404: {"description": "Report, content or reported user not found"},
    },
)
async def moderation_action(
    report_id: str,
    body: ModerationActionRequest,
    moderator: ModeratorUser,
    repos: RepoDep,
    background_tasks: BackgroundTasks,
    mailer: EmailService = Depends(get_email_service),
):
    """
    Decide on a report.

    ``until`` applies to the timed actions (ban, restrict, suspend_author,
    hide_content, mute, ban_chat). It accepts an ISO timestamp or a duration
    such as ``24h``, ``7d``, ``2w``, ``45m`` or ``permanent``; a blank or
    unreadable value means permanent.
    """
    service = ModerationService(repos)
    try:
        outcome = await service.take_action(
            report_id,
            moderator_id=moderator.id,
            action=body.action,
            until=body.until,
            note=body.note,
        )
    except ModerationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    logger.info(f"Moderator {moderator.id} applied '{outcome.action}' to report {report_id}")
    background_tasks.add_task(notify_moderation_outcome, mailer, outcome)
    return {"ok": True, "report": ReportRead.model_validate(outcome.report).model_dump(mode="json")}
