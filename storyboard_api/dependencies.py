from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storyboard_api.exceptions import UnauthorizedError
from storyboard_api.logging_config import get_logger
from storyboard_api.utils.jwt import decode_access_token

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Resolve the caller's user id from the bearer token's ``sub`` claim."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected invalid token: {e}")
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")
    return str(user_id)
