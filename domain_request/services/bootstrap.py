from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from domain_request.api.handlers.deps import ApiDeps
from domain_request.clients.admin_panel import HttpxAdminPanelClient
from domain_request.clients.relay import HttpRelayNotifier, LocalRelayNotifier
from domain_request.clients.stub import StubIdentityProvider
from domain_request.clients.supabase import SupabaseIdentityProvider
from domain_request.domain.contracts import IdentityProvider, RelayNotifier, SubmissionRepository
from domain_request.repositories.postgres import AsyncpgPoolManager, PostgresSubmissionRepository
from domain_request.repositories.stub import InMemorySubmissionRepository
from domain_request.roles import RuntimeRole
from domain_request.services.auth import AuthSession
from domain_request.services.dashboard import DashboardRefresher, DashboardService
from domain_request.services.submission_flow import SubmissionFlow
from domain_request.settings import (
    ClientSettings,
    RelaySettings,
    client_settings_from_env,
    relay_settings_from_env,
)

LifecycleHook = Callable[[], Awaitable[None]]


@dataclass
class RuntimeContainer:
    relay_settings: RelaySettings
    client_settings: ClientSettings
    admin_client: HttpxAdminPanelClient
    repository: SubmissionRepository | None
    identity: IdentityProvider | None
    relay_notifier: RelayNotifier | None
    api_deps: ApiDeps
    on_startup: LifecycleHook | None
    on_shutdown: LifecycleHook | None

    def dashboard_refresher(self, auth: AuthSession) -> DashboardRefresher:
        if self.api_deps.dashboard is None:
            raise RuntimeError("dashboard is only available in the api role")
        return DashboardRefresher(
            service=self.api_deps.dashboard,
            auth=auth,
            interval_ms=self.client_settings.dashboard_refresh_interval_ms,
        )


def build_runtime_container(
    role: RuntimeRole,
    *,
    relay_settings: RelaySettings | None = None,
    client_settings: ClientSettings | None = None,
) -> RuntimeContainer:
    """Construct every collaborator once; nothing below reads the environment again."""
    relay_settings = relay_settings or relay_settings_from_env()
    client_settings = client_settings or client_settings_from_env()
    admin_client = HttpxAdminPanelClient()

    startup_hooks: list[LifecycleHook] = [admin_client.startup]
    shutdown_hooks: list[LifecycleHook] = [admin_client.shutdown]

    repository: SubmissionRepository | None = None
    identity: IdentityProvider | None = None
    relay_notifier: RelayNotifier | None = None
    submission_flow: SubmissionFlow | None = None
    dashboard: DashboardService | None = None

    if role.serves_client_flow:
        if client_settings.database_url:
            pool_manager = AsyncpgPoolManager(dsn=client_settings.database_url)
            repository = PostgresSubmissionRepository(pool_manager=pool_manager)
            startup_hooks.append(pool_manager.startup)
            shutdown_hooks.insert(0, pool_manager.shutdown)
        else:
            repository = InMemorySubmissionRepository()

        if client_settings.supabase_url and client_settings.supabase_anon_key:
            identity = SupabaseIdentityProvider(
                base_url=client_settings.supabase_url,
                anon_key=client_settings.supabase_anon_key,
            )
        else:
            identity = StubIdentityProvider()

        if client_settings.relay_endpoint_url:
            relay_notifier = HttpRelayNotifier(
                endpoint_url=client_settings.relay_endpoint_url,
                timeout_seconds=client_settings.relay_timeout_ms / 1000,
            )
        else:
            relay_notifier = LocalRelayNotifier(settings=relay_settings, admin_client=admin_client)

        submission_flow = SubmissionFlow(repository=repository, relay=relay_notifier)
        dashboard = DashboardService(repository=repository)

    api_deps = ApiDeps(
        relay_settings=relay_settings,
        admin_client=admin_client,
        identity=identity,
        submission_flow=submission_flow,
        dashboard=dashboard,
    )

    async def on_startup() -> None:
        for hook in startup_hooks:
            await hook()

    async def on_shutdown() -> None:
        for hook in shutdown_hooks:
            await hook()

    return RuntimeContainer(
        relay_settings=relay_settings,
        client_settings=client_settings,
        admin_client=admin_client,
        repository=repository,
        identity=identity,
        relay_notifier=relay_notifier,
        api_deps=api_deps,
        on_startup=on_startup,
        on_shutdown=on_shutdown,
    )
