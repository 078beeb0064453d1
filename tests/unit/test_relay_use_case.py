import asyncio
from datetime import UTC, datetime, timedelta, timezone

import pytest

from domain_request.clients.stub import StubAdminPanelClient
from domain_request.domain.errors import (
    UpstreamConnectionError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from domain_request.domain.use_cases.relay import (
    SUCCESS_MESSAGE,
    build_relay_record,
    parse_admin_response,
    relay_submission,
)
from domain_request.settings import RelaySettings

ADMIN_URL = "https://admin.example.test/api/applications"

DEV_SETTINGS = RelaySettings(admin_api_url=ADMIN_URL, admin_api_key="secret", app_env="development")
PROD_SETTINGS = RelaySettings(admin_api_url=ADMIN_URL, admin_api_key="secret")
MISSING = "Missing required fields. Please provide name, email, purpose, and platform_link."


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": "Ana",
        "email": "ana@x.com",
        "purpose": "blog",
        "platform_link": "https://x.com",
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
def test_valid_submission_is_forwarded_with_normalized_record() -> None:
    admin = StubAdminPanelClient()
    before = datetime.now(UTC) - timedelta(seconds=1)

    result = asyncio.run(
        relay_submission(
            _payload(name="  Ana  ", email=" Ana@X.com ", user_id="user-1"),
            settings=DEV_SETTINGS,
            admin_client=admin,
        )
    )

    assert result.status_code == 200
    assert result.success is True
    assert result.body is not None
    assert result.body["message"] == SUCCESS_MESSAGE
    assert result.body["data"]["admin_response"] == {"received": True}

    assert len(admin.calls) == 1
    call = admin.calls[0]
    assert call["url"] == ADMIN_URL
    assert call["api_key"] == "secret"
    assert call["timeout_seconds"] == 10.0
    forwarded = call["payload"]
    assert forwarded["name"] == "Ana"
    assert forwarded["email"] == "ana@x.com"
    assert forwarded["user_id"] == "user-1"
    assert forwarded["source"] == "vinnesia_domain_form"
    assert forwarded["submitted_at"] == result.body["data"]["submitted_at"]

    submitted_at = datetime.fromisoformat(str(forwarded["submitted_at"]).replace("Z", "+00:00"))
    assert before <= submitted_at <= datetime.now(UTC) + timedelta(seconds=1)


@pytest.mark.unit
def test_missing_configuration_short_circuits() -> None:
    admin = StubAdminPanelClient()
    result = asyncio.run(
        relay_submission(_payload(), settings=RelaySettings(admin_api_url=ADMIN_URL), admin_client=admin)
    )

    assert result.status_code == 500
    assert result.body == {"success": False, "error": "Server configuration error. Please contact administrator."}
    assert admin.calls == []


@pytest.mark.unit
@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ({"name": "Ana", "email": "ana@x.com"}, MISSING),
        (_payload(email="not-an-email"), "Invalid email format."),
        (_payload(platform_link="ftp://x.com"), "Invalid platform URL format."),
        (_payload(name="a" * 101), "Name is too long (maximum 100 characters)."),
        (None, MISSING),
        (["not", "an", "object"], MISSING),
    ],
)
def test_invalid_payload_is_rejected_without_upstream_call(payload: object, error: str) -> None:
    admin = StubAdminPanelClient()
    result = asyncio.run(relay_submission(payload, settings=DEV_SETTINGS, admin_client=admin))

    assert result.status_code == 400
    assert result.body == {"success": False, "error": error}
    assert admin.calls == []


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status_code", "error"),
    [
        (401, "Authentication failed with admin panel"),
        (403, "Access denied by admin panel"),
        (429, "Too many requests. Please try again later"),
        (500, "Admin panel server error"),
        (404, "Failed to submit to admin panel"),
    ],
)
def test_upstream_rejection_mirrors_status(status_code: int, error: str) -> None:
    admin = StubAdminPanelClient(status_code=status_code, text="upstream said no", reason_phrase="Nope")
    result = asyncio.run(relay_submission(_payload(), settings=DEV_SETTINGS, admin_client=admin))

    assert result.status_code == status_code
    assert result.body == {"success": False, "error": error, "details": "upstream said no"}


@pytest.mark.unit
def test_details_are_hidden_in_production() -> None:
    admin = StubAdminPanelClient(status_code=500, text="stack trace here")
    result = asyncio.run(relay_submission(_payload(), settings=PROD_SETTINGS, admin_client=admin))

    assert result.status_code == 500
    assert result.body == {"success": False, "error": "Admin panel server error"}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "status_code", "message"),
    [
        (UpstreamConnectionError("dns failure"), 502, "Failed to connect to admin panel"),
        (UpstreamUnavailableError("refused"), 503, "Admin panel is currently unavailable"),
        (UpstreamTimeoutError("slow"), 408, "Request timeout. Please try again"),
    ],
)
def test_transport_failures_are_classified(error: Exception, status_code: int, message: str) -> None:
    admin = StubAdminPanelClient(error=error)  # type: ignore[arg-type]
    result = asyncio.run(relay_submission(_payload(), settings=DEV_SETTINGS, admin_client=admin))

    assert result.status_code == status_code
    assert result.body is not None
    assert result.body["error"] == message
    assert result.body["details"] == str(error)


@pytest.mark.unit
def test_unexpected_client_failure_is_internal_error() -> None:
    class ExplodingClient:
        async def submit(self, **kwargs: object) -> object:
            raise RuntimeError("boom")

    result = asyncio.run(relay_submission(_payload(), settings=PROD_SETTINGS, admin_client=ExplodingClient()))

    assert result.status_code == 500
    assert result.body == {"success": False, "error": "Internal server error occurred"}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", {}),
        ("<html>ok</html>", {"message": "Response received but not parseable"}),
        ('{"id": 7}', {"id": 7}),
        ("[1, 2]", {"data": [1, 2]}),
        ('{"id": NaN}', {"message": "Response received but not parseable"}),
        ("[Infinity, -Infinity]", {"message": "Response received but not parseable"}),
        ("[" * 100_000 + "]" * 100_000, {"message": "Response received but not parseable"}),
    ],
)
def test_admin_response_parsing_degrades(text: str, expected: dict[str, object]) -> None:
    assert parse_admin_response(text) == expected


@pytest.mark.unit
def test_unparseable_upstream_success_is_still_success() -> None:
    admin = StubAdminPanelClient(text="thanks!")
    result = asyncio.run(relay_submission(_payload(), settings=DEV_SETTINGS, admin_client=admin))

    assert result.status_code == 200
    assert result.body is not None
    assert result.body["data"]["admin_response"] == {"message": "Response received but not parseable"}


@pytest.mark.unit
def test_record_timestamp_is_utc_with_millisecond_precision() -> None:
    local = datetime(2025, 1, 5, 16, 30, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    record = build_relay_record(_payload(user_id="   "), now=local)

    assert record.submitted_at == "2025-01-05T14:30:00.123Z"
    assert record.user_id is None


@pytest.mark.unit
def test_identical_requests_are_forwarded_twice() -> None:
    admin = StubAdminPanelClient()

    async def scenario() -> None:
        await relay_submission(_payload(), settings=DEV_SETTINGS, admin_client=admin)
        await relay_submission(_payload(), settings=DEV_SETTINGS, admin_client=admin)

    asyncio.run(scenario())
    assert len(admin.calls) == 2
