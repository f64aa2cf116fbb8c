"""
Chat Endpoints.

Rooms are identified by ``chat_type``: ``general`` is the shared room and
``private`` holds one-to-one conversations. There is no push channel; the
browser polls the history and the unread counters.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from thinky.core.database import as_utc, utc_now
from thinky.core.database.entities.messages import Message
from thinky.core.database.entities.reports import Report
from thinky.core.logging_config import get_logger
from thinky.core.models import to_iso
from thinky.core.models.io import MessageCreate, MessageRead, ReportRead, ReportRequest, UnreadCounts
from thinky.server.core import constant
from thinky.server.services.chat_filter import contains_blacklisted
from thinky.server.services.deps import CurrentUser, RepoDep
from thinky.server.services.pagination import message_limit
from thinky.server.services.presenters import messages_with_senders
from thinky.server.services.security import is_active

logger = get_logger(__name__)

router = APIRouter()

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_since(value: Optional[str]) -> datetime:
    """Read a client ISO timestamp as UTC; anything unreadable means the epoch."""
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return as_utc(parsed)


@router.get(
    "/messages/private-inbox",
    summary="Private Inbox",
    description="Private messages addressed to the caller, newest first.",
)
async def private_inbox(user: CurrentUser, repos: RepoDep, limit: Optional[str] = None):
    messages = await repos.messages.list_inbox(user.id, message_limit(limit, constant.DEFAULT_INBOX_LIMIT))
    return {"messages": await messages_with_senders(repos, messages)}


@router.get(
    "/messages/unread",
    summary="Unread Counts",
    description="Messages newer than the client's last-seen timestamps.",
    response_model=UnreadCounts,
)
async def unread_counts(
    user: CurrentUser,
    repos: RepoDep,
    last_seen_general: Optional[str] = Query(default=None, alias="lastSeenGeneral"),
    last_seen_private: Optional[str] = Query(default=None, alias="lastSeenPrivate"),
):
    general = await repos.messages.count_general_since(user.id, _parse_since(last_seen_general))
    private = await repos.messages.count_private_since(user.id, _parse_since(last_seen_private))
    return UnreadCounts(general=general, private=private)


@router.get(
    "/messages/item/{message_id}",
    summary="Get Message",
    description="A single message, used to render the quoted part of a reply.",
    responses={404: {"description": "Message not found"}},
)
async def get_message(message_id: str, user: CurrentUser, repos: RepoDep):
    message = await repos.messages.get_by_id(message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return {"message": (await messages_with_senders(repos, [message]))[0]}


@router.get(
    "/messages/{chat_type}",
    summary="Chat History",
    description="The newest messages of a room or private conversation, oldest first.",
    responses={400: {"description": "Private chat without a partner"}},
)
async def chat_history(
    chat_type: str,
    user: CurrentUser,
    repos: RepoDep,
    limit: Optional[str] = None,
    with_user: Optional[str] = Query(default=None, alias="with"),
):
    if chat_type == constant.PRIVATE_CHAT:
        if not with_user:
            raise HTTPException(status_code=400, detail='Missing "with" query param for private chat')
        messages = await repos.messages.list_conversation(user.id, with_user, message_limit(limit))
    else:
        messages = await repos.messages.list_room(chat_type, message_limit(limit))
    messages.reverse()
    return {"messages": await messages_with_senders(repos, messages)}


@router.post(
    "/messages",
    summary="Send Message",
    description="Post a message to a room or to another user.",
    responses={
        400: {"description": "Missing fields, bad recipient or blocked words"},
        403: {"description": "Caller is banned from chat or muted"},
    },
)
async def send_message(body: MessageCreate, user: CurrentUser, repos: RepoDep):
    """
    Send a chat message.

    Messages containing blocked words are rejected and count as a warning.
    Reaching the warning limit mutes the sender for an hour and starts the
    count again.
    """
    text = (body.message or "").strip()
    if not text or not body.chat_type:
        raise HTTPException(status_code=400, detail="Message and chat type are required")

    now = utc_now()
    if is_active(user.chat_banned_until, now):
        raise HTTPException(
            status_code=403,
            detail={"error": "You are banned from chat", "banned_until": to_iso(user.chat_banned_until)},
        )
    if is_active(user.muted_until, now):
        raise HTTPException(
            status_code=403,
            detail={"error": "You are muted", "muted_until": to_iso(user.muted_until)},
        )

    recipient_id = None
    if body.chat_type == constant.PRIVATE_CHAT:
        recipient_id = body.recipient_id
        if not recipient_id:
            raise HTTPException(status_code=400, detail="Recipient is required for private messages")
        if recipient_id == user.id:
            raise HTTPException(status_code=400, detail="Cannot send a private message to yourself")

    if contains_blacklisted(text):
        user.chat_warnings = (user.chat_warnings or 0) + 1
        if user.chat_warnings >= constant.MAX_CHAT_WARNINGS:
            user.chat_warnings = 0
            user.muted_until = now + timedelta(minutes=constant.CHAT_MUTE_MINUTES)
            await repos.users.update(user)
            logger.info(f"User {user.id} muted after repeated blocked messages")
            raise HTTPException(
                status_code=403,
                detail={
                    "error": "You have been muted for sending inappropriate messages",
                    "muted_until": to_iso(user.muted_until),
                },
            )
        await repos.users.update(user)
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Your message contains inappropriate language",
                "warnings": user.chat_warnings,
                "maxWarnings": constant.MAX_CHAT_WARNINGS,
            },
        )

    message = await repos.messages.create(
        Message(
            user_id=user.id,
            username=user.username,
            message=text[: constant.MAX_MESSAGE_LENGTH],
            chat_type=body.chat_type,
            recipient_id=recipient_id,
            reply_to=body.reply_to or None,
        )
    )
    logger.debug(f"Message {message.id} posted to {message.chat_type}")
    return {"message": MessageRead.model_validate(message).model_dump(mode="json")}


@router.post(
    "/messages/{message_id}/report",
    summary="Report Message",
    description="Flag a chat message for moderation.",
    responses={400: {"description": "Missing report type"}, 404: {"description": "Message not found"}},
)
async def report_message(message_id: str, body: ReportRequest, user: CurrentUser, repos: RepoDep):
    if not body.report_type:
        raise HTTPException(status_code=400, detail="report_type is required")
    message = await repos.messages.get_by_id(message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")

    report = await repos.reports.create(
        Report(
            type="chat",
            message_id=message.id,
            reported_user_id=message.user_id,
            reporter_id=user.id,
            report_type=body.report_type,
            details=body.details,
        )
    )
    logger.info(f"User {user.id} reported message {message.id} ({body.report_type})")
    return {"ok": True, "report": ReportRead.model_validate(report).model_dump(mode="json")}
