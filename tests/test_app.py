async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}

    r = await client.get("/")
    assert r.json()["status"] == "ok"


async def test_malformed_body_uses_error_shape(client):
    r = await client.post("/api/send-otp", content=b"{not json", headers={"Content-Type": "application/json"})

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "invalid_request"


async def test_cors_preflight(client):
    r = await client.options(
        "/api/send-otp",
        headers={
            "Origin": "https://justonematch.in",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert r.status_code == 200
    assert "access-control-allow-origin" in r.headers
