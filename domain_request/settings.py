from __future__ import annotations

import os
from dataclasses import dataclass

PRODUCTION_ENV = "production"


@dataclass(frozen=True)
class RelaySettings:
    admin_api_url: str = ""
    admin_api_key: str = ""
    timeout_ms: int = 10000
    app_env: str = PRODUCTION_ENV

    @property
    def is_configured(self) -> bool:
        return bool(self.admin_api_url) and bool(self.admin_api_key)

    @property
    def is_production(self) -> bool:
        return self.app_env == PRODUCTION_ENV

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass(frozen=True)
class ClientSettings:
    database_url: str | None = None
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    relay_endpoint_url: str | None = None
    relay_timeout_ms: int = 15000
    dashboard_refresh_interval_ms: int = 30000


def relay_settings_from_env() -> RelaySettings:
    return RelaySettings(
        admin_api_url=os.getenv("ADMIN_API_URL", "").strip(),
        admin_api_key=os.getenv("ADMIN_API_KEY", "").strip(),
        timeout_ms=_env_int("ADMIN_API_TIMEOUT_MS", 10000),
        app_env=os.getenv("APP_ENV", PRODUCTION_ENV).strip().lower() or PRODUCTION_ENV,
    )


def client_settings_from_env() -> ClientSettings:
    return ClientSettings(
        database_url=_env_str("DATABASE_URL"),
        supabase_url=_env_str("SUPABASE_URL"),
        supabase_anon_key=_env_str("SUPABASE_ANON_KEY"),
        relay_endpoint_url=_env_str("RELAY_ENDPOINT_URL"),
        relay_timeout_ms=_env_int("RELAY_TIMEOUT_MS", 15000),
        dashboard_refresh_interval_ms=_env_int("DASHBOARD_REFRESH_INTERVAL_MS", 30000),
    )


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default
