"""Keycloak-specific exceptions for error handling."""


class KeycloakError(Exception):
    """Base exception for all Keycloak operations."""
    pass


class KeycloakAPIError(KeycloakError):
    """HTTP error from Keycloak Admin API.
    
    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class KeycloakAuthError(KeycloakAPIError):
    """The token endpoint refused the service's own credentials (or none are configured)."""
    pass


class KeycloakUnavailableError(KeycloakAPIError):
    """Keycloak could not be reached (connection refused, timeout)."""
    
    def __init__(self, message: str, endpoint: str):
        super().__init__(503, message, endpoint)


class MissingLocationError(KeycloakError):
    """Create call succeeded but returned no Location header to read the id from."""
    pass
