from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging

from domain_request.domain.contracts import IdentityProvider
from domain_request.domain.errors import DomainValidationError
from domain_request.domain.models import AuthEvent, IdentitySession, IdentityUser

SUPPORTED_PROVIDERS = ("google", "github", "facebook")

AuthListener = Callable[[AuthEvent, IdentitySession | None], None]
logger = logging.getLogger("client")


@dataclass(eq=False)
class Subscription:
    session: AuthSession
    listener: AuthListener
    active: bool = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.session._remove(self)


@dataclass(eq=False)
class AuthSession:
    """Current sign-in state plus explicit change notifications.

    Listeners are registered with subscribe() and receive the event together
    with the new session (None after sign-out). They must unsubscribe on
    teardown.
    """

    provider: IdentityProvider
    session: IdentitySession | None = None
    _subscriptions: list[Subscription] = field(default_factory=list)

    def current_user(self) -> IdentityUser | None:
        return self.session.user if self.session is not None else None

    def subscribe(self, listener: AuthListener) -> Subscription:
        subscription = Subscription(session=self, listener=listener)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def login_with_provider(self, provider: str, *, redirect_to: str) -> str:
        """Return the provider authorization URL the user has to be sent to."""
        if provider not in SUPPORTED_PROVIDERS:
            supported = ", ".join(SUPPORTED_PROVIDERS)
            raise DomainValidationError(f"Unsupported login provider '{provider}'. Supported providers: {supported}")
        return self.provider.authorize_url(provider=provider, redirect_to=redirect_to)

    async def restore(self, *, access_token: str) -> IdentityUser | None:
        """Resolve a token coming back from the provider redirect into a session."""
        user = await self.provider.get_user(access_token=access_token)
        if user is None:
            return None
        self.set_session(IdentitySession(access_token=access_token, user=user))
        return user

    def set_session(self, session: IdentitySession) -> None:
        self.session = session
        self._emit(AuthEvent.SIGNED_IN, session)

    async def logout(self) -> None:
        session = self.session
        if session is None:
            return
        await self.provider.sign_out(access_token=session.access_token)
        self.session = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    def _emit(self, event: AuthEvent, session: IdentitySession | None) -> None:
        logger.info("auth state changed", extra={"event": event.value})
        for subscription in list(self._subscriptions):
            try:
                subscription.listener(event, session)
            except Exception:
                logger.exception("auth listener failed", extra={"event": event.value})
