import pytest

pytestmark = pytest.mark.asyncio


async def _create(client, subject_id, **extra):
    payload = {"subject_id": subject_id, "title": "Cells", "content": "<p>All about cells</p>", **extra}
    return await client.post("/api/reviewers", json=payload)


class TestCreateReviewer:
    async def test_create_with_flashcards_text(self, login_as, make_user, make_subject):
        alice = await make_user("alice")
        subject = await make_subject(alice)
        client = await login_as(alice)

        response = await _create(client, subject.id, flashcards_text="ATP, energy, currency\n\nDNA,genes\nlonely")

        assert response.status_code == 200
        reviewer = response.json()["reviewer"]
        assert reviewer["is_public"] is True
        assert [(c["front"], c["back"]) for c in reviewer["flashcards"]] == [
            ("ATP", "energy, currency"),
            ("DNA", "genes"),
            ("lonely", ""),
        ]
        assert all(c["uploader_id"] == alice.id for c in reviewer["flashcards"])

    async def test_create_with_flashcards_list(self, login_as, make_user, make_subject):
        alice = await make_user("alice")
        subject = await make_subject(alice)
        client = await login_as(alice)

        response = await _create(
            client,
            subject.id,
            is_public=False,
            flashcards=[{"front": "Q", "back": "A"}],
            flashcards_text="ignored,when list given",
        )

        reviewer = response.json()["reviewer"]
        assert reviewer["is_public"] is False
        assert len(reviewer["flashcards"]) == 1
        assert reviewer["flashcards"][0]["front"] == "Q"
        assert reviewer["flashcards"][0]["id"]

    async def test_create_requires_fields(self, login_as, make_user, make_subject):
        alice = await make_user("alice")
        subject = await make_subject(alice)
        client = await login_as(alice)

        response = await _create(client, subject.id, content="")
        assert response.status_code == 400
        assert response.json() == {"error": "Subject, title, and content are required"}

    async def test_create_in_someone_elses_subject(self, login_as, make_user, make_subject):
        subject = await make_subject(await make_user("bob"))
        client = await login_as(await make_user("alice"))

        response = await _create(client, subject.id)
        assert response.status_code == 404
        assert response.json() == {"error": "Subject not found"}

    async def test_restricted_user_cannot_create(self, login_as, make_user, make_subject, repos, later):
        alice = await make_user("alice")
        subject = await make_subject(alice)
        client = await login_as(alice)
        alice.blocked_from_creating_until = later(days=2)
        await repos.users.update(alice)

        response = await _create(client, subject.id)
        assert response.status_code == 403
        body = response.json()
        assert body["status"] == "restricted"
        assert body["blocked_from_creating_until"].endswith("Z")


class TestReadReviewer:
    async def test_get_includes_author_and_subject(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        client = await login_as(await make_user("bob"))

        body = (await client.get(f"/api/reviewers/{reviewer.id}")).json()["reviewer"]
        assert body["users"]["username"] == "alice"
        assert body["subjects"]["name"] == "Biology"
        assert body["flashcards"] == []

    async def test_private_reviewer_visibility(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice, is_public=False)
        stranger = await login_as(await make_user("bob"))
        moderator = await login_as(await make_user("mod", role="moderator"))
        author = await login_as(alice)

        assert (await stranger.get(f"/api/reviewers/{reviewer.id}")).status_code == 404
        assert (await moderator.get(f"/api/reviewers/{reviewer.id}")).status_code == 200
        assert (await author.get(f"/api/reviewers/{reviewer.id}")).status_code == 200

    async def test_missing_reviewer(self, login_as, make_user):
        client = await login_as(await make_user("alice"))

        response = await client.get("/api/reviewers/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Reviewer not found"}

    async def test_public_feed_excludes_hidden(self, login_as, make_user, make_reviewer, later):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await make_reviewer(alice, title="Visible")
        await make_reviewer(alice, title="Private", is_public=False)
        await make_reviewer(alice, title="Hidden", hidden_until=later(days=1))
        await make_reviewer(bob, title="Bob's")
        client = await login_as(bob)

        titles = {r["title"] for r in (await client.get("/api/reviewers/public")).json()["reviewers"]}
        assert titles == {"Visible", "Bob's"}

        only_alice = (await client.get("/api/reviewers/public", params={"student": alice.id})).json()["reviewers"]
        assert [r["title"] for r in only_alice] == ["Visible"]

    async def test_public_feed_requires_login(self, client):
        assert (await client.get("/api/reviewers/public")).status_code == 401

    async def test_guest_feed(self, client, make_user, make_reviewer):
        alice = await make_user("alice")
        for i in range(3):
            await make_reviewer(alice, title=f"Topic {i}")

        page = (await client.get("/api/reviewers/public-guest", params={"limit": "2"})).json()
        assert page["count"] == 3
        assert page["limit"] == 2
        assert page["offset"] == 0
        assert len(page["reviewers"]) == 2

        searched = (await client.get("/api/reviewers/public-guest", params={"search": "topic 1"})).json()
        assert searched["count"] == 1


class TestUpdateDeleteReviewer:
    async def test_update_replaces_flashcards(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice, flashcards=[{"id": "1", "front": "old", "back": "card"}])
        client = await login_as(alice)

        response = await client.put(
            f"/api/reviewers/{reviewer.id}", json={"title": "Cells v2", "flashcards_text": "new,card"}
        )
        body = response.json()["reviewer"]
        assert body["title"] == "Cells v2"
        assert [c["front"] for c in body["flashcards"]] == ["new"]

        cleared = await client.put(f"/api/reviewers/{reviewer.id}", json={"flashcards": []})
        assert cleared.json()["reviewer"]["flashcards"] == []

    async def test_blank_flashcards_text_keeps_cards(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice, flashcards=[{"id": "1", "front": "keep", "back": "me"}])
        client = await login_as(alice)

        body = (await client.put(f"/api/reviewers/{reviewer.id}", json={"flashcards_text": "  \n  "})).json()
        assert [c["front"] for c in body["reviewer"]["flashcards"]] == ["keep"]

    async def test_move_to_unowned_subject(self, login_as, make_user, make_subject, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        foreign = await make_subject(await make_user("bob"))
        client = await login_as(alice)

        response = await client.put(f"/api/reviewers/{reviewer.id}", json={"subject_id": foreign.id})
        assert response.status_code == 404

    async def test_only_author_updates_and_deletes(self, login_as, make_user, make_reviewer, repos):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        stranger = await login_as(await make_user("bob"))
        author = await login_as(alice)

        assert (await stranger.put(f"/api/reviewers/{reviewer.id}", json={"title": "x"})).status_code == 404
        assert (await stranger.delete(f"/api/reviewers/{reviewer.id}")).status_code == 404

        response = await author.delete(f"/api/reviewers/{reviewer.id}")
        assert response.json() == {"message": "Reviewer deleted successfully"}
        assert await repos.reviewers.get_by_id(reviewer.id) is None


class TestReactions:
    async def test_toggle_and_count(self, login_as, make_user, make_reviewer, client):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        bob = await login_as(await make_user("bob"))

        first = await bob.post(f"/api/reviewers/{reviewer.id}/reactions")
        assert first.json() == {"count": 1, "reacted": True}
        assert (await bob.get(f"/api/reviewers/{reviewer.id}/reactions")).json() == {"count": 1, "reacted": True}
        # Anonymous callers see the count only.
        assert (await client.get(f"/api/reviewers/{reviewer.id}/reactions")).json() == {"count": 1, "reacted": False}

        second = await bob.post(f"/api/reviewers/{reviewer.id}/reactions", json={"reaction_type": "heart"})
        assert second.json() == {"count": 0, "reacted": False}

    async def test_legacy_reaction_key(self, login_as, make_user, make_reviewer):
        reviewer = await make_reviewer(await make_user("alice"))
        bob = await login_as(await make_user("bob"))

        response = await bob.post(f"/api/reviewers/{reviewer.id}/reactions", json={"reaction": "star"})
        assert response.json() == {"count": 1, "reacted": True}
        # Only hearts count as "reacted" in the summary.
        assert (await bob.get(f"/api/reviewers/{reviewer.id}/reactions")).json() == {"count": 1, "reacted": False}

    async def test_author_cannot_react(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        client = await login_as(alice)

        response = await client.post(f"/api/reviewers/{reviewer.id}/reactions")
        assert response.status_code == 403
        assert response.json() == {"error": "Cannot react to your own reviewer", "count": 0, "reacted": False}

    async def test_unknown_reviewer(self, login_as, make_user):
        client = await login_as(await make_user("bob"))

        response = await client.post("/api/reviewers/nope/reactions")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid reviewer"}


class TestReportReviewer:
    async def test_report(self, login_as, make_user, make_reviewer):
        alice = await make_user("alice")
        reviewer = await make_reviewer(alice)
        bob = await make_user("bob")
        client = await login_as(bob)

        response = await client.post(
            f"/api/reviewers/{reviewer.id}/report", json={"report_type": "spam", "details": "ads everywhere"}
        )
        body = response.json()
        assert body["ok"] is True
        report = body["report"]
        assert report["type"] == "reviewer"
        assert report["reported_user_id"] == alice.id
        assert report["reporter_id"] == bob.id
        assert report["status"] == "open"

    async def test_report_validation(self, login_as, make_user, make_reviewer):
        reviewer = await make_reviewer(await make_user("alice"))
        client = await login_as(await make_user("bob"))

        missing_type = await client.post(f"/api/reviewers/{reviewer.id}/report", json={})
        assert missing_type.json() == {"error": "report_type is required"}
        unknown = await client.post("/api/reviewers/nope/report", json={"report_type": "spam"})
        assert unknown.status_code == 404
