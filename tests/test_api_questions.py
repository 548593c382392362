"""
CodeQ Backend - Question & Answer API Tests
===========================================

What we test:
    ✅ Ask → list → detail round through HTTP, with X-Total-Count
    ✅ Query validation (limit bounds, sort) → 400
    ✅ Ownership on edit/delete, admin pin/lock, locked-question rules
    ✅ Nested answers, accept/un-accept with reputation, expert verify
"""

import pytest

from codeq.config import settings

QUESTION = {
    "title": "Why is my asyncio task never awaited?",
    "body": "I create a task with create_task and it silently disappears.",
    "tags": ["Python", "asyncio"],
}


async def ask(client, author, **overrides):
    response = await client.post("/api/questions", json={**QUESTION, **overrides}, headers=author.headers)
    assert response.status_code == 201, response.text
    return response.json()


async def answer(client, author, question_id, body="Keep a reference to the task."):
    response = await client.post(
        f"/api/questions/{question_id}/answers", json={"body": body}, headers=author.headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestQuestionEndpoints:

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, test_client):
        response = await test_client.post("/api/questions", json=QUESTION)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_list_and_detail(self, test_client, make_user):
        alice = await make_user("alice")
        created = await ask(test_client, alice)

        assert created["tags"] == ["python", "asyncio"]
        assert created["asker"]["username"] == "alice"
        assert created["votes"] == 0
        assert created["answer_count"] == 0

        listing = await test_client.get("/api/questions", params={"tags": "asyncio,rust"})
        assert listing.status_code == 200
        assert listing.headers["X-Total-Count"] == "1"
        assert listing.json()["questions"][0]["id"] == created["id"]

        detail = await test_client.get(f"/api/questions/{created['id']}")
        assert detail.status_code == 200
        assert detail.json()["answers"] == []
        assert detail.json()["comments"] == []

    @pytest.mark.asyncio
    async def test_short_title_is_400(self, test_client, make_user):
        alice = await make_user("alice")
        response = await test_client.post(
            "/api/questions", json={**QUESTION, "title": "Hi"}, headers=alice.headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params", [{"limit": 0}, {"limit": settings.max_page_size + 1}, {"page": 0}, {"sort": "random"}]
    )
    async def test_bad_listing_params_are_400(self, test_client, params):
        response = await test_client.get("/api/questions", params=params)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_views_count_signed_in_users_once(self, test_client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        question = await ask(test_client, alice)
        url = f"/api/questions/{question['id']}"

        await test_client.get(url, headers=bob.headers)
        await test_client.get(url, headers=bob.headers)
        await test_client.get(url)
        final = await test_client.get(url, headers=alice.headers)

        assert final.json()["views"] == 2

    @pytest.mark.asyncio
    async def test_only_owner_edits(self, test_client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        question = await ask(test_client, alice)
        url = f"/api/questions/{question['id']}"

        forbidden = await test_client.put(url, json={"title": "Hijacked title"}, headers=bob.headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["error"] == "permission_denied"

        ok = await test_client.put(url, json={"title": "Clarified title"}, headers=alice.headers)
        assert ok.status_code == 200
        assert ok.json()["title"] == "Clarified title"

    @pytest.mark.asyncio
    async def test_delete_then_404(self, test_client, make_user):
        alice = await make_user("alice")
        question = await ask(test_client, alice)
        url = f"/api/questions/{question['id']}"

        deleted = await test_client.delete(url, headers=alice.headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Question deleted"
        assert (await test_client.get(url)).status_code == 404

    @pytest.mark.asyncio
    async def test_pin_requires_admin(self, test_client, make_user):
        alice = await make_user("alice")
        admin = await make_user("root", role="admin")
        question = await ask(test_client, alice)
        url = f"/api/questions/{question['id']}/pin"

        assert (await test_client.put(url, json={"is_pinned": True}, headers=alice.headers)).status_code == 403
        pinned = await test_client.put(url, json={"is_pinned": True}, headers=admin.headers)
        assert pinned.status_code == 200
        assert pinned.json()["is_pinned"] is True

    @pytest.mark.asyncio
    async def test_locked_question_blocks_answers_and_comments(self, test_client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        admin = await make_user("root", role="admin")
        question = await ask(test_client, alice)
        qid = question["id"]

        locked = await test_client.put(
            f"/api/questions/{qid}/lock", json={"is_locked": True}, headers=admin.headers
        )
        assert locked.json()["is_locked"] is True

        blocked_answer = await test_client.post(
            f"/api/questions/{qid}/answers", json={"body": "Too late"}, headers=bob.headers
        )
        blocked_comment = await test_client.post(
            "/api/comments",
            json={"body": "Hmm", "target_type": "question", "target_id": qid},
            headers=bob.headers,
        )
        admin_comment = await test_client.post(
            "/api/comments",
            json={"body": "Locked as duplicate", "target_type": "question", "target_id": qid},
            headers=admin.headers,
        )

        assert blocked_answer.status_code == 403
        assert blocked_comment.status_code == 403
        assert admin_comment.status_code == 201


class TestAnswerEndpoints:

    @pytest.mark.asyncio
    async def test_answer_on_missing_question_is_404(self, test_client, make_user):
        bob = await make_user("bob")
        response = await test_client.post(
            "/api/questions/00000000-0000-0000-0000-000000000000/answers",
            json={"body": "Anyone?"},
            headers=bob.headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_accept_flow_moves_reputation(self, test_client, make_user, reload_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        carol = await make_user("carol")
        question = await ask(test_client, alice)
        bobs = await answer(test_client, bob, question["id"])
        carols = await answer(test_client, carol, question["id"], body="Use asyncio.gather.")

        not_asker = await test_client.put(f"/api/answers/{bobs['id']}/accept", headers=bob.headers)
        assert not_asker.status_code == 403

        accepted = await test_client.put(f"/api/answers/{bobs['id']}/accept", headers=alice.headers)
        assert accepted.status_code == 200
        assert accepted.json()["is_accepted"] is True
        assert (await reload_user(bob.user.id)).reputation == settings.accept_reputation_bonus

        await test_client.put(f"/api/answers/{carols['id']}/accept", headers=alice.headers)
        assert (await reload_user(bob.user.id)).reputation == 0
        assert (await reload_user(carol.user.id)).reputation == settings.accept_reputation_bonus

        detail = (await test_client.get(f"/api/questions/{question['id']}")).json()
        assert detail["accepted_answer_id"] == carols["id"]
        assert detail["answers"][0]["id"] == carols["id"]
        assert detail["answer_count"] == 2

        withdrawn = await test_client.delete(
            f"/api/answers/{carols['id']}/accept", headers=alice.headers
        )
        assert withdrawn.status_code == 200
        assert (await reload_user(carol.user.id)).reputation == 0

        again = await test_client.delete(f"/api/answers/{carols['id']}/accept", headers=alice.headers)
        assert again.status_code == 400

    @pytest.mark.asyncio
    async def test_verify_requires_expert(self, test_client, make_user):
        alice = await make_user("alice")
        expert = await make_user("sarah", role="expert")
        question = await ask(test_client, alice)
        posted = await answer(test_client, alice, question["id"])
        url = f"/api/answers/{posted['id']}/verify"

        assert (await test_client.put(url, headers=alice.headers)).status_code == 403

        verified = await test_client.put(url, headers=expert.headers)
        assert verified.status_code == 200
        assert verified.json()["is_verified"] is True
        assert verified.json()["verified_by_id"] == expert.id

        cleared = await test_client.delete(url, headers=expert.headers)
        assert cleared.json()["is_verified"] is False

    @pytest.mark.asyncio
    async def test_edit_and_delete_answer(self, test_client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        admin = await make_user("root", role="admin")
        question = await ask(test_client, alice)
        posted = await answer(test_client, bob, question["id"])
        url = f"/api/answers/{posted['id']}"

        assert (await test_client.put(url, json={"body": "mine now"}, headers=alice.headers)).status_code == 403
        edited = await test_client.put(url, json={"body": "Keep a strong reference."}, headers=bob.headers)
        assert edited.json()["body"] == "Keep a strong reference."

        assert (await test_client.delete(url, headers=admin.headers)).status_code == 200
        assert (await test_client.get(url)).status_code == 404
        listing = await test_client.get(f"/api/questions/{question['id']}/answers")
        assert listing.json() == []
