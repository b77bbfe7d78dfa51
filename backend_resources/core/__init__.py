"""Domain layer: request/response models, validation, mapping and the user service."""
from .exceptions import ApplicationError, ValidationError
from .models import UserRequest, UserResponse
from .user_service import UserService

__all__ = ["ApplicationError", "ValidationError", "UserRequest", "UserResponse", "UserService"]
