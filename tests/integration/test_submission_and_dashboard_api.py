from fastapi.testclient import TestClient
import pytest

from domain_request.api.handlers.deps import ApiDeps
from domain_request.api.http_app import build_app
from domain_request.clients.stub import StubAdminPanelClient, StubIdentityProvider, StubRelayNotifier
from domain_request.domain.errors import RepositoryError
from domain_request.domain.models import IdentityUser, SubmissionStatus
from domain_request.repositories.stub import InMemorySubmissionRepository
from domain_request.roles import validate_role
from domain_request.services.bootstrap import build_runtime_container
from domain_request.services.dashboard import DashboardService
from domain_request.services.submission_flow import RELAY_WARNING, SubmissionFlow
from domain_request.settings import ClientSettings, RelaySettings

ANA = IdentityUser(user_id="user-ana", email="ana@x.com")
BOB = IdentityUser(user_id="user-bob", email="bob@x.com")
FORM = {"name": "Ana Maria", "email": "ana@x.com", "purpose": "blog", "platform_link": "https://x.com"}


def _client_app(repository: InMemorySubmissionRepository, relay: StubRelayNotifier):
    deps = ApiDeps(
        relay_settings=RelaySettings(admin_api_url="https://admin.example.test/api", admin_api_key="secret"),
        admin_client=StubAdminPanelClient(),
        identity=StubIdentityProvider(users={"token-ana": ANA, "token-bob": BOB}),
        submission_flow=SubmissionFlow(repository=repository, relay=relay),
        dashboard=DashboardService(repository=repository),
    )
    return build_app(role="api", run_id="integration-client", api_deps=deps)


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.integration
def test_submit_then_see_it_on_dashboard() -> None:
    repository = InMemorySubmissionRepository()
    relay = StubRelayNotifier()

    with TestClient(_client_app(repository, relay)) as client:
        submitted = client.post("/submissions", json=FORM, headers=_auth("token-ana"))
        dashboard = client.get("/dashboard", headers=_auth("token-ana"))
        other_dashboard = client.get("/dashboard", headers=_auth("token-bob"))

    assert submitted.status_code == 200
    body = submitted.json()
    assert body["success"] is True
    assert body["redirect_to"] == "dashboard"
    assert body["submission_id"].startswith("sub_")
    assert "warning" not in body
    assert len(relay.calls) == 1

    view = dashboard.json()
    assert view["counts"] == {"total": 1, "pending": 1, "approved": 0, "rejected": 0}
    assert view["rows"][0]["submission_id"] == body["submission_id"]
    assert view["rows"][0]["status_class"] == "status-pending"
    assert view["empty"] is False

    assert other_dashboard.json()["rows"] == []
    assert other_dashboard.json()["empty"] is True


@pytest.mark.integration
def test_admin_decision_is_reflected_in_counts() -> None:
    repository = InMemorySubmissionRepository()

    with TestClient(_client_app(repository, StubRelayNotifier())) as client:
        first = client.post("/submissions", json=FORM, headers=_auth("token-ana")).json()
        client.post("/submissions", json=FORM, headers=_auth("token-ana"))
        repository.apply_admin_status(submission_id=first["submission_id"], status=SubmissionStatus.APPROVED)
        view = client.get("/dashboard", headers=_auth("token-ana")).json()

    assert view["counts"] == {"total": 2, "pending": 1, "approved": 1, "rejected": 0}


@pytest.mark.integration
def test_signed_out_requests_are_rejected() -> None:
    repository = InMemorySubmissionRepository()
    relay = StubRelayNotifier()

    with TestClient(_client_app(repository, relay)) as client:
        submitted = client.post("/submissions", json=FORM)
        unknown_token = client.post("/submissions", json=FORM, headers=_auth("expired"))
        dashboard = client.get("/dashboard")

    assert submitted.status_code == 401
    assert submitted.json()["message"] == "Please login first to submit the form"
    assert unknown_token.status_code == 401
    assert dashboard.status_code == 401
    assert dashboard.json() == {"detail": "Please login to access your dashboard"}
    assert repository.rows == {}
    assert relay.calls == []


@pytest.mark.integration
def test_invalid_form_is_rejected() -> None:
    with TestClient(_client_app(InMemorySubmissionRepository(), StubRelayNotifier())) as client:
        response = client.post(
            "/submissions",
            json={**FORM, "platform_link": "not a url"},
            headers=_auth("token-ana"),
        )

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid"
    assert response.json()["message"] == "Please enter a valid platform URL"


@pytest.mark.integration
def test_runtime_container_serves_client_flow_with_relay_warning() -> None:
    role = validate_role("api")
    # No admin panel configured: the row is stored but the relay reports a failure.
    container = build_runtime_container(role, relay_settings=RelaySettings(), client_settings=ClientSettings())
    assert isinstance(container.identity, StubIdentityProvider)
    container.identity.users["token-ana"] = ANA

    app = build_app(
        role=role.name,
        run_id="integration-container",
        api_deps=container.api_deps,
        on_startup=container.on_startup,
        on_shutdown=container.on_shutdown,
    )

    with TestClient(app) as client:
        ready = client.get("/ready").json()
        submitted = client.post("/submissions", json=FORM, headers=_auth("token-ana"))
        view = client.get("/dashboard", headers=_auth("token-ana")).json()

    assert ready["client_flow_enabled"] is True
    assert submitted.status_code == 200
    assert submitted.json()["warning"] == RELAY_WARNING
    assert view["counts"]["total"] == 1


@pytest.mark.integration
def test_relay_role_does_not_expose_client_routes() -> None:
    role = validate_role("relay")
    container = build_runtime_container(role, relay_settings=RelaySettings(), client_settings=ClientSettings())
    app = build_app(role=role.name, run_id="integration-relay-only", api_deps=container.api_deps)

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok", "role": "relay"}
        assert client.get("/dashboard").status_code == 404
        assert client.post("/submissions", json=FORM).status_code in (404, 405)


@pytest.mark.integration
def test_overlong_name_gets_the_form_message() -> None:
    repository = InMemorySubmissionRepository()

    with TestClient(_client_app(repository, StubRelayNotifier())) as client:
        response = client.post(
            "/submissions",
            json={**FORM, "name": "a" * 1500},
            headers=_auth("token-ana"),
        )

    assert response.status_code == 400
    assert response.json()["message"] == "Name is too long (maximum 100 characters)"
    assert repository.rows == {}


@pytest.mark.integration
def test_storage_outage_is_reported_in_the_envelope() -> None:
    repository = InMemorySubmissionRepository(fail_inserts_with="database is unavailable: connection refused")
    relay = StubRelayNotifier()

    with TestClient(_client_app(repository, relay)) as client:
        response = client.post("/submissions", json=FORM, headers=_auth("token-ana"))

    assert response.status_code == 502
    assert response.json()["kind"] == "error"
    assert response.json()["message"] == "Submission failed: database is unavailable: connection refused"
    assert relay.calls == []


@pytest.mark.integration
def test_dashboard_storage_outage_is_service_unavailable() -> None:
    class UnreachableRepository(InMemorySubmissionRepository):
        async def list_submissions(self, *, query):
            raise RepositoryError("database is unavailable: connection refused")

    with TestClient(_client_app(UnreachableRepository(), StubRelayNotifier())) as client:
        response = client.get("/dashboard", headers=_auth("token-ana"))

    assert response.status_code == 503
    assert response.json() == {"detail": "dashboard is temporarily unavailable"}
