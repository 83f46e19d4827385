"""Exception hierarchy shared by config loading, catalog access and the play-count chain."""


class PlayRateError(Exception):
    """Base exception for all playrate errors."""


class ConfigurationError(PlayRateError):
    """Raised when configuration loading or parsing fails."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        """Initialize the configuration error.

        Args:
            message: Error description
            config_path: Path to the config file that caused the error

        """
        super().__init__(message)
        self.config_path = config_path


class CatalogError(PlayRateError):
    """Raised when the catalog provider cannot complete a search or lookup."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize the catalog error.

        Args:
            message: Error description
            status: HTTP status returned by the catalog, if any

        """
        super().__init__(message)
        self.status = status


class CatalogAuthError(CatalogError):
    """Raised when the catalog rejects our access token (401-class)."""


class PlayCountSourceError(PlayRateError):
    """Base for failures inside the play-count source chain.

    These never escape the chain; they are absorbed into an absent value.
    """


class RateLimitedError(PlayCountSourceError):
    """Provider answered 429 for the current credential."""


class CredentialRejectedError(PlayCountSourceError):
    """Provider rejected the current credential (401/403)."""


class UpstreamUnavailableError(PlayCountSourceError):
    """Network error, timeout or 5xx from the provider."""


class MalformedResponseError(PlayCountSourceError):
    """Provider returned a body that is not the expected JSON shape."""


class RetryError(PlayRateError):
    """Base for errors raised by retry loops."""


class RetryExhaustionError(RetryError):
    """Every attempt of a retry loop failed."""

    def __init__(self, message: str, attempts: int, last_error: Exception | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
