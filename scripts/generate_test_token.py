#!/usr/bin/env python3
"""Generate JWT tokens for manual API testing."""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.auth import create_access_token
from src.infrastructure.db.models import SENTINEL_ADMIN_ID

user_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1

# Built-in administrator
admin_token = create_access_token(SENTINEL_ADMIN_ID, roles=["admin"])
print(f"Admin Token:\n{admin_token}\n")

user_token = create_access_token(user_id, roles=["user"])
print(f"User {user_id} Token:\n{user_token}")
