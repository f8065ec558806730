"""Tests for the SMS endpoints."""

from __future__ import annotations

from sqlalchemy import select

from coinsms.models import SmsHistory
from coinsms.services.gateway import GatewayResponseError, GatewayTimeout
from coinsms.services.ledger import CoinLedger

SEND_URL = "/api/v1/sms/send"
CUBA = "+5351234567"


def send(client, headers, phone=CUBA, message="hola"):
    return client.post(SEND_URL, json={"phoneNumber": phone, "message": message}, headers=headers)


def test_send_requires_authorization(client, fake_gateway):
    response = client.post(SEND_URL, json={"phoneNumber": CUBA, "message": "hola"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert fake_gateway.calls == []


def test_send_rejects_unverifiable_token(client, account):
    response = send(client, {"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


def test_send_rejects_token_signed_with_other_secret(client, account, token_factory):
    token = token_factory(account.id, secret="some-other-secret-of-enough-length")
    response = send(client, {"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


def test_successful_send(client, auth_headers, account, fake_gateway):
    response = send(client, auth_headers, phone="+53 5 123 4567")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "SMS sent successfully",
        "destination": CUBA,
        "cost": 1,
        "country": "CU",
        "remaining_coins": 9,
        "parts": 1,
    }
    assert fake_gateway.calls == [(CUBA, "hola")]


def test_eleventh_send_in_a_minute_is_rate_limited(client, auth_headers, clock):
    for _ in range(10):
        assert send(client, auth_headers).status_code == 200

    clock.advance(20)
    response = send(client, auth_headers)

    assert response.status_code == 429
    body = response.json()
    assert body["error"] == "Rate limit exceeded"
    assert body["retryAfter"] == 40
    assert response.headers["Retry-After"] == "40"


def test_rate_limit_applies_before_body_validation(client, auth_headers, fake_gateway):
    for _ in range(10):
        assert client.post(SEND_URL, json={}, headers=auth_headers).status_code == 400

    response = client.post(SEND_URL, json={}, headers=auth_headers)
    assert response.status_code == 429
    assert fake_gateway.calls == []


def test_rate_limit_window_resets(client, make_profile, headers_for, clock):
    profile = make_profile(20)
    headers = headers_for(profile.id, profile.email)
    for _ in range(10):
        send(client, headers)
    assert send(client, headers).status_code == 429

    clock.advance(61)
    assert send(client, headers).status_code == 200


def test_missing_fields(client, auth_headers):
    response = client.post(SEND_URL, json={"message": "hola"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: phoneNumber and message"


def test_oversized_message(client, auth_headers, db_session, account):
    response = send(client, auth_headers, message="x" * 481)
    assert response.status_code == 400
    assert CoinLedger(db_session).balance_of(account.id) == 10


def test_insufficient_coins(client, make_profile, headers_for, fake_gateway):
    profile = make_profile(2)
    response = send(client, headers_for(profile.id), phone="+81901234567")

    assert response.status_code == 402
    body = response.json()
    assert body["error"] == "Insufficient coins"
    assert body["required"] == 3
    assert body["available"] == 2
    assert fake_gateway.calls == []


def test_send_without_profile(client, headers_for):
    response = send(client, headers_for("unregistered-account"))
    assert response.status_code == 404
    assert response.json()["error"] == "User profile not found"


def test_gateway_rejection(client, auth_headers, account, db_session, fake_gateway):
    fake_gateway.respond({"error_code": 12, "message": "Destination blocked"})

    response = send(client, auth_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Destination blocked"
    assert body["gateway_error"]["error_code"] == 12
    assert CoinLedger(db_session).balance_of(account.id) == 10


def test_gateway_timeout(client, auth_headers, account, db_session, fake_gateway):
    fake_gateway.fail(GatewayTimeout("slow"))

    response = send(client, auth_headers)

    assert response.status_code == 504
    assert response.json()["error"] == "Request timeout - API took too long to respond"
    assert CoinLedger(db_session).balance_of(account.id) == 10


def test_gateway_http_error(client, auth_headers, account, db_session, fake_gateway):
    fake_gateway.fail(GatewayResponseError("SMS gateway responded with 500", status_code=500))

    response = send(client, auth_headers)

    assert response.status_code == 502
    assert response.json()["upstream_status"] == 500
    assert CoinLedger(db_session).balance_of(account.id) == 10
    assert db_session.scalars(select(SmsHistory)).first() is None


def test_quote_is_public(client):
    response = client.post(
        "/api/v1/sms/quote", json={"phoneNumber": "+44 7700 900123", "message": "x" * 320}
    )
    assert response.status_code == 200
    assert response.json() == {
        "destination": "+447700900123",
        "parts": 2,
        "price_per_part": 2,
        "cost": 4,
    }


def test_quote_rejects_bad_destination(client):
    response = client.post("/api/v1/sms/quote", json={"phoneNumber": "123", "message": "hi"})
    assert response.status_code == 400


def test_rates_lists_tiers(client):
    body = client.get("/api/v1/sms/rates").json()
    prefixes = {tier["prefix"]: tier["coins_per_part"] for tier in body["tiers"]}
    assert prefixes["+53"] == 1
    assert prefixes["+1"] == 1
    assert prefixes["+34"] == 2
    assert body["default_price"] == 3
    assert body["part_length"] == 160
    assert body["max_parts"] == 3


def test_history_is_newest_first_and_private(client, auth_headers, make_profile, headers_for):
    send(client, auth_headers, message="first")
    send(client, auth_headers, message="second")
    other = make_profile(10)
    send(client, headers_for(other.id), message="someone else")

    response = client.get("/api/v1/sms/history", headers=auth_headers)

    assert response.status_code == 200
    items = response.json()
    assert [item["message"] for item in items] == ["second", "first"]
    assert items[0]["status"] == "sent"
    assert items[0]["cost"] == 1

    older = client.get(
        "/api/v1/sms/history", params={"before": items[0]["id"]}, headers=auth_headers
    ).json()
    assert [item["message"] for item in older] == ["first"]


def test_history_requires_authorization(client):
    assert client.get("/api/v1/sms/history").status_code == 401


def test_malformed_body_without_credential_is_unauthorized(client):
    response = client.post(
        SEND_URL, content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_malformed_bodies_count_against_the_window(client, auth_headers, fake_gateway):
    headers = {**auth_headers, "Content-Type": "application/json"}
    statuses = [
        client.post(SEND_URL, content=b"{not json", headers=headers).status_code
        for _ in range(11)
    ]

    assert statuses == [400] * 10 + [429]
    assert fake_gateway.calls == []


def test_malformed_body_after_admission_is_a_bad_request(client, auth_headers):
    response = client.post(
        SEND_URL,
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_wrongly_typed_field_is_a_bad_request(client, auth_headers, fake_gateway):
    response = client.post(
        SEND_URL, json={"phoneNumber": 5351234567, "message": "hola"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert fake_gateway.calls == []
