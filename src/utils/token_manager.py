"""JWT issuing and verification.

Access and refresh tokens are stateless: nothing is stored server-side, so a
token stays valid until it expires. Each token class is signed with its own
secret and also carries a ``type`` claim, so a token of one class never
verifies as the other.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    JWT_ACCESS_SECRET,
    JWT_ALGORITHM,
    JWT_REFRESH_SECRET,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from core.exceptions import TokenInvalidError
from schemas.user import TokenIdentity, TokenPair
from utils.timeutils import utc_now

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenManager:
    """Issues and verifies access/refresh token pairs."""

    def __init__(
        self,
        access_secret: str = JWT_ACCESS_SECRET,
        refresh_secret: str = JWT_REFRESH_SECRET,
        algorithm: str = JWT_ALGORITHM,
        access_ttl: Optional[timedelta] = None,
        refresh_ttl: Optional[timedelta] = None,
    ):
        """Initialize TokenManager.

        Args:
            access_secret: Signing secret for access tokens.
            refresh_secret: Signing secret for refresh tokens.
            algorithm: JWS algorithm.
            access_ttl: Access token lifetime. Defaults to
                ACCESS_TOKEN_EXPIRE_MINUTES.
            refresh_ttl: Refresh token lifetime. Defaults to
                REFRESH_TOKEN_EXPIRE_DAYS.
        """
        if access_secret == refresh_secret:
            logger.warning("Access and refresh tokens share the same signing secret")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = refresh_ttl or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)

    def issue_token_pair(self, identity: TokenIdentity) -> TokenPair:
        """Create a new access/refresh token pair for ``identity``."""
        return TokenPair(
            access_token=self._encode(
                identity, ACCESS_TOKEN_TYPE, self.access_secret, self.access_ttl
            ),
            refresh_token=self._encode(
                identity, REFRESH_TOKEN_TYPE, self.refresh_secret, self.refresh_ttl
            ),
        )

    def verify_access(self, token: str) -> TokenIdentity:
        """Verify an access token.

        Raises:
            TokenInvalidError: If the token is expired, malformed, badly signed
                or not an access token.
        """
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> TokenIdentity:
        """Verify a refresh token.

        Raises:
            TokenInvalidError: Same conditions as verify_access, for refresh
                tokens.
        """
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)

    def _encode(
        self,
        identity: TokenIdentity,
        token_type: str,
        secret: str,
        ttl: timedelta,
    ) -> str:
        now = utc_now()
        claims = {
            "userId": identity.user_id,
            "email": identity.email,
            "role": identity.role.value,
            "type": token_type,
            "jti": secrets.token_hex(8),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str, token_type: str) -> TokenIdentity:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except JWTError:
            raise TokenInvalidError()

        if payload.get("type") != token_type:
            raise TokenInvalidError()
        try:
            return TokenIdentity(
                user_id=payload.get("userId"),
                email=payload.get("email"),
                role=payload.get("role"),
            )
        except PydanticValidationError:
            raise TokenInvalidError()
