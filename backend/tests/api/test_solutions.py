"""Solution Routes — public catalogue, form submission, votes and reviews.

Invariants:
    - Listings only show published solutions, rating is the review average
    - Form values are JSON-decoded when possible; invalid forms answer 400 with details
    - Votes are atomic increments; total_votes == upvotes + downvotes
    - One review per user per solution
"""

import json

from sqlalchemy import select

from aixchange.core.domain_types import ANONYMOUS_USER_ID, PLACEHOLDER_IMAGE
from aixchange.models import AuditLog, Review, Solution


def as_form(payload: dict) -> dict:
    return {k: v if isinstance(v, str) else json.dumps(v) for k, v in payload.items()}


async def _review(test_db, solution, user, rating):
    test_db.add(Review(solution_id=solution.id, user_id=user.id, rating=rating))
    await test_db.commit()


# --- listing ---------------------------------------------------------------

async def test_list_hides_unpublished(client, make_solution):
    await make_solution("Shown")
    await make_solution("Hidden", published=False)

    res = await client.get("/api/solutions")

    assert res.status_code == 200
    assert [s["title"] for s in res.json()] == ["Shown"]


async def test_list_includes_author_and_review_stats(
    client, make_solution, test_db, member, other_member,
):
    solution = await make_solution()
    await _review(test_db, solution, member, 5)
    await _review(test_db, solution, other_member, 2)

    item = (await client.get("/api/solutions")).json()[0]

    assert item["author"]["name"] == "Member"
    assert item["reviewCount"] == 2
    assert item["rating"] == 3.5


async def test_search_matches_title_and_exact_tag(client, make_solution):
    await make_solution("Vision API", tags=["vision"])
    await make_solution("Chat Bot", description="Talks to customers", tags=["nlp"])

    by_title = (await client.get("/api/solutions", params={"search": "chat"})).json()
    by_tag = (await client.get("/api/solutions", params={"search": "vision"})).json()
    partial_tag = (await client.get("/api/solutions", params={"search": "nl"})).json()

    assert [s["title"] for s in by_title] == ["Chat Bot"]
    assert [s["title"] for s in by_tag] == ["Vision API"]
    assert partial_tag == []


async def test_category_and_provider_filters(client, make_solution):
    await make_solution("A", category="NLP", provider="Acme")
    await make_solution("B", category="NLP", provider="Globex")
    await make_solution("C", category="Vision", provider="Acme")

    res = await client.get("/api/solutions", params={"category": "NLP", "provider": "Acme"})

    assert [s["title"] for s in res.json()] == ["A"]


async def test_sort_by_rating(client, make_solution, test_db, member):
    low = await make_solution("Low")
    high = await make_solution("High")
    await _review(test_db, low, member, 1)
    await _review(test_db, high, member, 5)

    res = await client.get("/api/solutions", params={"sort": "rating"})

    assert [s["title"] for s in res.json()] == ["High", "Low"]


async def test_sort_popular_by_review_count(
    client, make_solution, test_db, member, other_member,
):
    quiet = await make_solution("Quiet")
    busy = await make_solution("Busy")
    await _review(test_db, quiet, member, 5)
    await _review(test_db, busy, member, 3)
    await _review(test_db, busy, other_member, 3)

    res = await client.get("/api/solutions", params={"sort": "popular"})

    assert [s["title"] for s in res.json()][0] == "Busy"


async def test_get_solution(client, make_solution):
    solution = await make_solution()
    res = await client.get(f"/api/solutions/{solution.id}")
    assert res.status_code == 200
    assert res.json()["id"] == solution.id


async def test_get_unpublished_solution_is_not_found(client, make_solution):
    solution = await make_solution(published=False)
    res = await client.get(f"/api/solutions/{solution.id}")
    assert res.status_code == 404
    assert res.json()["code"] == "RESOURCE_NOT_FOUND"


# --- form submission -------------------------------------------------------

async def test_anonymous_form_submission(client, submission, test_db):
    res = await client.post("/api/solutions", data=as_form(submission()))

    assert res.status_code == 201
    body = res.json()
    assert body["authorId"] == ANONYMOUS_USER_ID
    assert body["status"] == "ACTIVE"
    assert body["isPublished"] is True
    assert body["imageUrl"] == PLACEHOLDER_IMAGE
    assert body["tags"] == ["speech", "audio"]
    assert body["resourceConfig"]["memory"] == "4GB"
    assert body["publishedAt"] is not None

    actions = (await test_db.execute(
        select(AuditLog.action).where(AuditLog.entity_id == body["id"]),
    )).scalars().all()
    assert actions == ["CREATE"]


async def test_form_submission_keeps_given_image(client, submission):
    payload = submission(imageUrl="/api/external-images/solutions/x.png")
    res = await client.post("/api/solutions", data=as_form(payload))
    assert res.json()["imageUrl"] == "/api/external-images/solutions/x.png"


async def test_authenticated_form_submission(client, submission, member, member_headers):
    res = await client.post("/api/solutions", data=as_form(submission()), headers=member_headers)
    assert res.status_code == 201
    assert res.json()["authorId"] == member.id


async def test_second_anonymous_submission_reuses_anonymous_user(client, submission):
    first = await client.post("/api/solutions", data=as_form(submission()))
    second = await client.post("/api/solutions", data=as_form(submission(title="Other Tool")))
    assert first.status_code == second.status_code == 201
    assert second.json()["authorId"] == ANONYMOUS_USER_ID


async def test_form_submission_validation_details(client, submission):
    payload = submission(title="ab", launchUrl="not a url", tags=[])
    res = await client.post("/api/solutions", data=as_form(payload))

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in body["details"]}
    assert {"title", "launchUrl", "tags"} <= fields


# --- votes -----------------------------------------------------------------

async def test_votes_are_counted(client, make_solution, member_headers, test_db):
    solution = await make_solution()
    url = f"/api/solutions/{solution.id}/vote"

    await client.post(url, json={"vote": "up"}, headers=member_headers)
    await client.post(url, json={"vote": "up"}, headers=member_headers)
    res = await client.post(url, json={"vote": "down"}, headers=member_headers)

    assert res.status_code == 200
    assert res.json() == {"upvotes": 2, "downvotes": 1, "totalVotes": 3}
    row = (await test_db.execute(
        select(Solution.upvotes, Solution.downvotes, Solution.total_votes)
        .where(Solution.id == solution.id),
    )).one()
    assert tuple(row) == (2, 1, 3)


async def test_vote_requires_session(client, make_solution):
    solution = await make_solution()
    res = await client.post(f"/api/solutions/{solution.id}/vote", json={"vote": "up"})
    assert res.status_code == 401


async def test_vote_unknown_solution(client, member_headers):
    res = await client.post("/api/solutions/missing/vote", json={"vote": "up"}, headers=member_headers)
    assert res.status_code == 404


async def test_vote_rejects_unknown_direction(client, make_solution, member_headers):
    solution = await make_solution()
    res = await client.post(
        f"/api/solutions/{solution.id}/vote", json={"vote": "sideways"}, headers=member_headers,
    )
    assert res.status_code == 400


# --- reviews ---------------------------------------------------------------

async def test_create_review(client, make_solution, member, member_headers, test_db):
    solution = await make_solution()

    res = await client.post(
        f"/api/solutions/{solution.id}/reviews",
        json={"rating": 4, "comment": "Solid"},
        headers=member_headers,
    )

    assert res.status_code == 201
    body = res.json()
    assert body["rating"] == 4
    assert body["userId"] == member.id
    action = (await test_db.execute(
        select(AuditLog.action).where(AuditLog.entity_id == solution.id),
    )).scalar_one()
    assert action == "CREATE_REVIEW"


async def test_second_review_is_rejected(client, make_solution, member_headers):
    solution = await make_solution()
    url = f"/api/solutions/{solution.id}/reviews"

    await client.post(url, json={"rating": 4}, headers=member_headers)
    res = await client.post(url, json={"rating": 2}, headers=member_headers)

    assert res.status_code == 400
    assert res.json()["code"] == "ALREADY_REVIEWED"


async def test_review_rating_out_of_range(client, make_solution, member_headers):
    solution = await make_solution()
    res = await client.post(
        f"/api/solutions/{solution.id}/reviews", json={"rating": 6}, headers=member_headers,
    )
    assert res.status_code == 400


async def test_review_unknown_solution(client, member_headers):
    res = await client.post("/api/solutions/missing/reviews", json={"rating": 3}, headers=member_headers)
    assert res.status_code == 404
