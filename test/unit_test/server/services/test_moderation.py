"""Unit tests for the moderation workflow."""

from datetime import datetime, timedelta, timezone

import pytest

from thinky.core.database.entities.messages import Message
from thinky.core.database.entities.reactions import Reaction
from thinky.core.database.entities.reports import Report
from thinky.server.services.moderation import (
    ModerationError,
    ModerationOutcome,
    ModerationService,
    Recipient,
    decision_text,
    notify_moderation_outcome,
    parse_until,
    permanent_until,
)

UTC = timezone.utc
NOW = datetime(2026, 1, 31, 10, 0, 0, tzinfo=UTC)


class TestParseUntil:
    @pytest.mark.parametrize("value", [None, "", "   ", "permanent", "PERMANENT", "not a date"])
    def test_blank_or_unreadable_is_permanent(self, value):
        assert parse_until(value, NOW) == datetime(2126, 1, 31, 10, 0, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("12h", NOW + timedelta(hours=12)),
            ("3d", NOW + timedelta(days=3)),
            ("2w", NOW + timedelta(weeks=2)),
            ("45m", NOW + timedelta(minutes=45)),
            ("99m", NOW + timedelta(minutes=99)),
            ("1m", datetime(2026, 2, 28, 10, 0, 0, tzinfo=UTC)),
            ("100m", datetime(2034, 5, 31, 10, 0, 0, tzinfo=UTC)),
        ],
    )
    def test_durations(self, value, expected):
        assert parse_until(value, NOW) == expected

    def test_iso_timestamp_is_converted_to_utc(self):
        assert parse_until("2026-02-01T12:00:00+02:00", NOW) == datetime(2026, 2, 1, 10, 0, 0, tzinfo=UTC)
        assert parse_until("2026-02-01T12:00:00Z", NOW) == datetime(2026, 2, 1, 12, 0, 0, tzinfo=UTC)

    def test_naive_input_is_read_as_utc(self):
        naive_now = datetime(2026, 1, 31, 10, 0, 0)
        assert parse_until("2026-02-01T12:00:00", naive_now) == datetime(2026, 2, 1, 12, 0, 0, tzinfo=UTC)
        assert parse_until("3d", naive_now) == NOW + timedelta(days=3)

    def test_permanent_until_handles_leap_day(self):
        assert permanent_until(datetime(2028, 2, 29, tzinfo=UTC)) == datetime(2128, 2, 29, tzinfo=UTC)
        assert permanent_until(datetime(2024, 2, 29, tzinfo=UTC)) == datetime(2124, 2, 29, tzinfo=UTC)


class TestDecisionText:
    @pytest.mark.parametrize(
        "action, until, expected",
        [
            ("dismiss", None, "Dismissed"),
            ("delete_user", None, "User account deleted"),
            ("ban", datetime(2126, 1, 1, tzinfo=UTC), "Permanently banned"),
            ("ban", datetime(2026, 2, 3, 8, 30, tzinfo=UTC), "Banned until 2026-02-03 08:30 UTC"),
            ("restrict", datetime(2026, 2, 3, tzinfo=UTC), "Restricted from posting until 2026-02-03 00:00 UTC"),
            ("suspend_author", datetime(2026, 2, 3, tzinfo=UTC), "Restricted from posting until 2026-02-03 00:00 UTC"),
            ("warn_reviewer", None, "Warning issued"),
            ("warn_message", None, "Warning issued"),
            ("delete_content", None, "Content removed"),
            ("delete_message", None, "Content removed"),
            ("hide_content", datetime(2026, 2, 3, tzinfo=UTC), "Content hidden until 2026-02-03 00:00 UTC"),
            ("mute", datetime(2026, 2, 3, tzinfo=UTC), "Muted until 2026-02-03 00:00 UTC"),
            ("ban_chat", datetime(2026, 2, 3, tzinfo=UTC), "Banned from chat until 2026-02-03 00:00 UTC"),
        ],
    )
    def test_texts(self, action, until, expected):
        assert decision_text(action, until, NOW) == expected


@pytest.mark.asyncio
class TestModerationService:
    async def _reviewer_report(self, repos, make_user, make_reviewer):
        author = await make_user("author")
        reporter = await make_user("reporter")
        reviewer = await make_reviewer(author)
        report = await repos.reports.create(
            Report(
                type="reviewer",
                reviewer_id=reviewer.id,
                reported_user_id=author.id,
                reporter_id=reporter.id,
                report_type="spam",
            )
        )
        return author, reporter, reviewer, report

    async def test_unknown_report(self, repos):
        with pytest.raises(ModerationError) as exc_info:
            await ModerationService(repos).take_action("missing", "mod", "dismiss")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Report not found"

    async def test_invalid_action(self, repos, make_user, make_reviewer):
        _, _, _, report = await self._reviewer_report(repos, make_user, make_reviewer)
        with pytest.raises(ModerationError) as exc_info:
            await ModerationService(repos).take_action(report.id, "mod", "explode")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid action"

    async def test_ban_sets_deadline_and_resolves_report(self, repos, make_user, make_reviewer):
        author, reporter, _, report = await self._reviewer_report(repos, make_user, make_reviewer)

        outcome = await ModerationService(repos).take_action(
            report.id, "mod-1", "ban", until="3d", note="repeated spam", now=NOW
        )

        assert (await repos.users.get_by_id(author.id)).banned_until == NOW + timedelta(days=3)
        assert outcome.report.status == "resolved"
        assert outcome.report.action_taken == "ban - repeated spam"
        assert outcome.report.action_taken_by == "mod-1"
        assert outcome.report.action_taken_at == NOW
        assert outcome.report.resolved_at == NOW
        assert outcome.decision == "Banned until 2026-02-03 10:00 UTC"
        assert outcome.reported == Recipient(email=author.email, username="author")
        assert outcome.reporter == Recipient(email=reporter.email, username="reporter")
        assert outcome.reviewer_title == "Cell structure"

    async def test_dismiss_changes_nothing_but_the_report(self, repos, make_user, make_reviewer):
        author, _, _, report = await self._reviewer_report(repos, make_user, make_reviewer)

        outcome = await ModerationService(repos).take_action(report.id, "mod", "dismiss", now=NOW)

        assert outcome.report.status == "dismissed"
        assert outcome.report.action_taken == "dismiss"
        assert (await repos.users.get_by_id(author.id)).banned_until is None

    async def test_warn_increments_warning_count(self, repos, make_user, make_reviewer):
        author, _, _, report = await self._reviewer_report(repos, make_user, make_reviewer)
        await ModerationService(repos).take_action(report.id, "mod", "warn_reviewer", now=NOW)
        assert (await repos.users.get_by_id(author.id)).warning_count == 1

    async def test_restrict_without_until_is_permanent(self, repos, make_user, make_reviewer):
        author, _, _, report = await self._reviewer_report(repos, make_user, make_reviewer)
        await ModerationService(repos).take_action(report.id, "mod", "restrict", until="", now=NOW)
        assert (await repos.users.get_by_id(author.id)).blocked_from_creating_until == datetime(2126, 1, 31, 10, tzinfo=UTC)

    async def test_hide_content(self, repos, make_user, make_reviewer):
        _, _, reviewer, report = await self._reviewer_report(repos, make_user, make_reviewer)
        await ModerationService(repos).take_action(report.id, "mod", "hide_content", until="1d", now=NOW)
        assert (await repos.reviewers.get_by_id(reviewer.id)).hidden_until == NOW + timedelta(days=1)

    async def test_delete_content_keeps_report(self, repos, make_user, make_reviewer):
        author, reporter, reviewer, report = await self._reviewer_report(repos, make_user, make_reviewer)
        await repos.reactions.create(Reaction(reviewer_id=reviewer.id, user_id=reporter.id))

        outcome = await ModerationService(repos).take_action(report.id, "mod", "delete_content", now=NOW)

        assert await repos.reviewers.get_by_id(reviewer.id) is None
        assert await repos.reactions.list_for_reviewer(reviewer.id) == []
        kept = await repos.reports.get_by_id(report.id)
        assert kept is not None
        assert kept.reviewer_id is None
        assert outcome.reviewer_title == "Cell structure"

    async def test_delete_user_snapshots_recipients_first(self, repos, make_user, make_reviewer):
        author, _, _, report = await self._reviewer_report(repos, make_user, make_reviewer)

        outcome = await ModerationService(repos).take_action(report.id, "mod", "delete_user", now=NOW)

        assert await repos.users.get_by_id(author.id) is None
        assert outcome.reported is not None
        assert outcome.reported.email == author.email
        assert outcome.decision == "User account deleted"

    async def test_reviewer_action_on_deleted_reviewer(self, repos, make_user, make_reviewer):
        _, _, reviewer, report = await self._reviewer_report(repos, make_user, make_reviewer)
        await repos.reviewers.delete(reviewer.id)

        with pytest.raises(ModerationError) as exc_info:
            await ModerationService(repos).take_action(report.id, "mod", "hide_content")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Reviewer not found"

    async def test_chat_actions(self, repos, make_user):
        sender = await make_user("sender")
        reporter = await make_user("reporter")
        message = await repos.messages.create(
            Message(user_id=sender.id, username=sender.username, message="rude", chat_type="general")
        )

        def report_for(msg_id):
            return Report(
                type="chat", message_id=msg_id, reported_user_id=sender.id, reporter_id=reporter.id, report_type="abuse"
            )

        service = ModerationService(repos)
        mute_report = await repos.reports.create(report_for(message.id))
        await service.take_action(mute_report.id, "mod", "mute", until="2h", now=NOW)
        ban_report = await repos.reports.create(report_for(message.id))
        await service.take_action(ban_report.id, "mod", "ban_chat", until="7d", now=NOW)

        refreshed = await repos.users.get_by_id(sender.id)
        assert refreshed.muted_until == NOW + timedelta(hours=2)
        assert refreshed.chat_banned_until == NOW + timedelta(days=7)

        delete_report = await repos.reports.create(report_for(message.id))
        outcome = await service.take_action(delete_report.id, "mod", "delete_message", now=NOW)
        assert await repos.messages.get_by_id(message.id) is None
        assert outcome.decision == "Content removed"

        gone_report = await repos.reports.create(report_for(message.id))
        with pytest.raises(ModerationError) as exc_info:
            await service.take_action(gone_report.id, "mod", "delete_message")
        assert exc_info.value.message == "Message not found"


@pytest.mark.asyncio
async def test_notify_moderation_outcome_emails_both_parties(mailer):
    outcome = ModerationOutcome(
        report=Report(id="r1", type="reviewer", report_type="spam", action_taken_at=NOW),
        action="ban",
        decision="Permanently banned",
        until=datetime(2126, 1, 31, tzinfo=UTC),
        note="spam",
        reviewer_title="Cells",
        reported=Recipient(email="author@example.com", username="author"),
        reporter=Recipient(email="reporter@example.com", username="reporter"),
    )

    await notify_moderation_outcome(mailer, outcome)

    reported, reporter = mailer.sent
    assert reported.to == "author@example.com"
    assert reported.subject == "Moderation decision regarding your content on Thinky"
    assert reported.template == "moderation_decision_reported"
    assert reported.variables["decision"] == "Permanently banned"
    assert reported.variables["reason"] == "spam"
    assert reported.variables["action_taken_at"] == "2026-01-31 10:00 UTC"
    assert reporter.to == "reporter@example.com"
    assert reporter.subject == "Update on your report to Thinky moderation"
    assert reporter.variables["reporter"] == "reporter"


@pytest.mark.asyncio
async def test_notify_skips_missing_recipients_and_survives_failures(mailer):
    mailer.ok = False
    outcome = ModerationOutcome(
        report=Report(id="r1", type="chat", report_type="abuse"),
        action="dismiss",
        decision="Dismissed",
        until=None,
        note="",
        reviewer_title="",
        reported=None,
        reporter=Recipient(email="reporter@example.com", username="reporter"),
    )

    await notify_moderation_outcome(mailer, outcome)

    assert [s.to for s in mailer.sent] == ["reporter@example.com"]
