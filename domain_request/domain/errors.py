from __future__ import annotations


class DomainError(Exception):
    pass


class DomainValidationError(DomainError):
    pass


class DomainDependencyError(DomainError):
    pass


class RepositoryError(DomainDependencyError):
    pass


class UpstreamTransportError(DomainDependencyError):
    """Forwarding call to the admin panel failed below the HTTP status level."""


class UpstreamConnectionError(UpstreamTransportError):
    pass


class UpstreamUnavailableError(UpstreamTransportError):
    pass


class UpstreamTimeoutError(UpstreamTransportError):
    pass
