"""
Domain errors raised by the pipeline, metrics and alert services.

These are business-rule violations, not technical failures. The HTTP layer
maps them to status codes in one place (see ``main.create_app``).
"""


class SolarHubError(ValueError):
    """Base class for domain errors."""

    status_code = 400


class InvalidStatus(SolarHubError):
    """Transition requested with a value outside the project status enum."""

    status_code = 422


class TransitionNotAllowed(SolarHubError):
    """Transition rejected by the strict pipeline policy."""

    status_code = 409


class AlreadyResolved(SolarHubError):
    """Resolve requested on an alert that is already resolved."""

    status_code = 409


class InvalidWindow(SolarHubError):
    """Aggregation window outside the configured choices."""

    status_code = 422


class InvalidFilter(SolarHubError):
    """Alert filter mode outside active/all/resolved."""

    status_code = 422


class MissingReference(SolarHubError):
    """A referenced client or project no longer resolves in the store."""

    status_code = 404
