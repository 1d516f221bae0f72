class DropShareError(Exception):
    """Base exception for all application-specific errors.

    Attributes:
        rate_limit (RateLimitDecision | None):
            Quota metadata computed before the error occurred, if any.
    """

    error_code = 'app:dropshare_error'
    rate_limit = None


class ConfigurationError(DropShareError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class ValidationError(DropShareError):
    """Raised when a create-link request body is malformed or incomplete.

    Carries every violation found, never just the first one.
    """

    error_code = 'INVALID_REQUEST'

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__('Invalid request body: ' + '; '.join(self.violations))


class RateLimitExceededError(DropShareError):
    """Raised when a client address exhausts its link creation quota."""

    error_code = 'RATE_LIMIT_EXCEEDED'

    def __init__(self, decision):
        self.rate_limit = decision
        super().__init__(f'Rate limit of {decision.limit} requests exceeded.')


class ShareNotFoundError(DropShareError):
    """Raised when a share is missing or has expired."""

    error_code = 'SHARE_NOT_FOUND'
