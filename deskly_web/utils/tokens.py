import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError

from deskly_web.config import get_settings
from deskly_web.schemas.auth import IdentityClaims, TokenPayload

logger = logging.getLogger(__name__)


def display_name_for(claims: IdentityClaims) -> str:
    if claims.first_name:
        if claims.last_name:
            return f"{claims.first_name} {claims.last_name}"
        return claims.first_name
    return claims.email.split("@")[0]


def issue_token(claims: IdentityClaims, expires_delta: timedelta | None = None) -> str:
    """Sign a session token for the given provider identity.

    Tokens live for ``token_ttl_days`` unless ``expires_delta`` is given.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.token_ttl_days)
    to_encode = {
        "sub": claims.id,
        "email": claims.email,
        "name": display_name_for(claims),
        "picture": claims.profile_picture_url,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenPayload | None:
    """
    Decode and validate a session token.

    Returns None for every kind of failure (malformed, expired, bad
    signature, unexpected claims) so callers cannot tell them apart.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": True},
        )
        claims = TokenPayload(**payload)
    except (JWTError, ValidationError, TypeError) as e:
        logger.debug("Rejected session token: %s", e)
        return None

    # jose only rejects exp < now; a token is valid strictly before exp
    if claims.exp <= int(datetime.now(timezone.utc).timestamp()):
        logger.debug("Rejected session token: expired")
        return None
    return claims
