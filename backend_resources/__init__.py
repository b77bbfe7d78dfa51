"""backend-resources: user management REST API backed by Keycloak.

To use the Flask app:
    from backend_resources.flask_app import create_app

To use Keycloak services:
    from backend_resources.core.keycloak import KeycloakClient, KeycloakUserAdmin
"""
# flask_app is not imported here so scripts/users.py can use
# backend_resources.core without building an app.
