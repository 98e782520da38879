from authapi.models.refresh_token import RefreshToken
from authapi.models.revoked_token import RevokedToken
from authapi.models.user import User

__all__ = [
    "RefreshToken",
    "RevokedToken",
    "User",
]
