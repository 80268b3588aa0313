"""Custom exceptions for the build agent server utilities."""

from typing import Optional


class BuildAgentError(Exception):
    """Base exception for all build agent errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class DeploymentTypeError(BuildAgentError):
    """Deployment type related errors."""
    pass


class DeploymentTypeNotDeterminedError(DeploymentTypeError):
    """Deployment type was read before it was determined."""

    def __init__(self, message: str = "Deployment type has not been determined"):
        super().__init__(message, code="deployment_type_not_determined")


class UnrecognizedDeploymentTypeError(DeploymentTypeError):
    """Stored deployment type is not a known kind."""

    def __init__(self, deployment_type: object):
        super().__init__(
            f"Unable to recognize deployment type: '{deployment_type}'",
            code="deployment_type_unrecognized",
        )
        self.deployment_type = deployment_type


class LocationServerError(BuildAgentError):
    """Location service communication error."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, code=code)
        self.status_code = status_code


class ServerConnectionError(LocationServerError):
    """Server could not be reached."""
    pass


class AuthenticationError(LocationServerError):
    """Authentication failed."""
    pass


class ConfigurationError(BuildAgentError):
    """Configuration error."""
    pass
