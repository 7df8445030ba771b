# marketplace/services/identity_service.py
from datetime import datetime, timedelta, timezone

import jwt

from marketplace.domain.errors import AuthenticationError
from marketplace.domain.policy import Identity, Role
from marketplace.utils.settings import JWT_ALGORITHM, JWT_EXPIRES_SECONDS, JWT_SECRET


class IdentityResolver:
    """
    Zamienia naglowek Authorization: Bearer <token> na Identity(user_id, role).
    Tokeny wystawia zewnetrzny serwis auth, tutaj tylko weryfikacja podpisu i claimow.
    """

    def __init__(self, secret: str | None = None, algorithm: str | None = None):
        self.secret = secret or JWT_SECRET
        self.algorithm = algorithm or JWT_ALGORITHM

    def resolve(self, authorization: str | None) -> Identity:
        token = self._extract_token(authorization)
        if not token:
            raise AuthenticationError("Authentication required")

        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid or expired token")

        try:
            return Identity(user_id=int(claims["sub"]), role=Role(claims["role"]))
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid or expired token")

    def issue_token(self, user_id: int, role: Role | str, expires_in: int | None = None) -> str:
        #uzywane przez seed i testy
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in or JWT_EXPIRES_SECONDS),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    @staticmethod
    def _extract_token(authorization: str | None) -> str | None:
        if not authorization:
            return None
        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            return None
        return parts[1]
