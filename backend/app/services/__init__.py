"""Service layer exports."""
from app.services import (
    auth_service,
    character_service,
    user_service,
)

__all__ = [
    "auth_service",
    "character_service",
    "user_service",
]
