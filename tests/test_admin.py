from sqlalchemy import update

from conftest import ADMIN_KEY, bearer
from justone.models.response import Response

ADMIN_HEADERS = {"x-admin-key": ADMIN_KEY}


async def _submit_as(client, sign_in, email, answers, version="v1", photo=None):
    body = await sign_in(email)
    payload = {"answers": answers, "questionnaire_version": version}
    if photo:
        payload["photo"] = photo
    r = await client.post(
        "/api/submit-responses", json=payload, headers=bearer(body["session"]["access_token"])
    )
    assert r.status_code == 200, r.text
    return body["user_id"]


async def _export(client, **params):
    return await client.get("/api/admin-get-responses", params=params, headers=ADMIN_HEADERS)


async def test_requires_admin_key(client):
    r = await client.get("/api/admin-get-responses")
    assert r.status_code == 401
    assert r.json()["error"] == "invalid_admin_key"

    r = await client.get("/api/admin-get-responses", headers={"x-admin-key": "nope"})
    assert r.status_code == 401


async def test_admin_key_not_configured(client, settings):
    settings.ADMIN_API_KEY = None
    r = await _export(client)
    assert r.status_code == 500
    assert r.json()["error"] == "admin_not_configured"


async def test_export_returns_exactly_what_was_submitted(client, sign_in):
    answers = {"q1": "Sunday mornings", "nested": {"scale": 7, "tags": ["a", "b"]}, "emoji": "🙂"}
    user_id = await _submit_as(client, sign_in, "maya@ashoka.edu.in", answers)

    r = await _export(client)

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    [item] = body["data"]
    assert item["answers"] == answers
    assert item["user_id"] == user_id
    assert item["campus_id"] == "ashoka-sonipat"
    assert item["decryption_error"] is False
    assert item["photo"] is None
    assert body["pagination"] == {"total": 1, "limit": 100, "offset": 0}


async def test_newest_first_with_pagination(client, sign_in):
    first = await _submit_as(client, sign_in, "a@ashoka.edu.in", {"n": 1})
    second = await _submit_as(client, sign_in, "b@jgu.edu.in", {"n": 2})
    third = await _submit_as(client, sign_in, "c@christuniversity.in", {"n": 3})

    r = await _export(client, limit=2)
    body = r.json()
    assert [i["user_id"] for i in body["data"]] == [third, second]
    assert body["pagination"]["total"] == 3

    r = await _export(client, limit=2, offset=2)
    assert [i["user_id"] for i in r.json()["data"]] == [first]


async def test_filters(client, sign_in):
    ashoka = await _submit_as(client, sign_in, "a@ashoka.edu.in", {"n": 1})
    await _submit_as(client, sign_in, "b@jgu.edu.in", {"n": 2})

    r = await _export(client, campus_id="jindal-sonipat")
    body = r.json()
    assert [i["campus_id"] for i in body["data"]] == ["jindal-sonipat"]
    assert body["pagination"]["total"] == 1

    r = await _export(client, user_id=ashoka)
    assert [i["user_id"] for i in r.json()["data"]] == [ashoka]


async def test_photo_only_when_asked(client, sign_in):
    photo = "data:image/jpeg;base64,/9j/4AAQ"
    await _submit_as(client, sign_in, "a@ashoka.edu.in", {"n": 1}, photo=photo)

    assert (await _export(client)).json()["data"][0]["photo"] is None
    assert (await _export(client, include_photo="true")).json()["data"][0]["photo"] == photo


async def test_corrupted_row_is_flagged_not_dropped(client, sign_in, session_factory):
    broken = await _submit_as(client, sign_in, "a@ashoka.edu.in", {"n": 1})
    healthy = await _submit_as(client, sign_in, "b@ashoka.edu.in", {"n": 2})

    async with session_factory() as db:
        await db.execute(
            update(Response).where(Response.user_id == broken).values(answers_encrypted="Zm9vYmFy" * 8)
        )
        await db.commit()

    data = {i["user_id"]: i for i in (await _export(client)).json()["data"]}

    assert data[broken]["decryption_error"] is True
    assert data[broken]["answers"] is None
    assert data[healthy]["decryption_error"] is False
    assert data[healthy]["answers"] == {"n": 2}


async def test_rotated_secret_flags_old_rows(client, sign_in, settings):
    await _submit_as(client, sign_in, "a@ashoka.edu.in", {"n": 1})
    settings.ENCRYPTION_KEY = "rotated-secret"

    [item] = (await _export(client)).json()["data"]
    assert item["decryption_error"] is True


async def test_limit_bounds(client):
    r = await _export(client, limit=0)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"

    r = await _export(client, limit=501)
    assert r.status_code == 400
