"""Domain services."""

from src.domain.services.applications import ApplicationService, TransitionResult
from src.domain.services.auth_service import AuthService, hash_password, verify_password
from src.domain.services.courses import CourseService
from src.domain.services.reviews import ReviewService

__all__ = [
    "ApplicationService",
    "AuthService",
    "CourseService",
    "ReviewService",
    "TransitionResult",
    "hash_password",
    "verify_password",
]
