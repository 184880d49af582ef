from src.domain.models import User, sentinel_admin_profile

__all__ = ["User", "sentinel_admin_profile"]
