"""
Session Authentication

Resolves the acting user from the backend-issued access token and exposes
FastAPI dependencies for identity and capability checks.
"""

import time
import logging
from typing import Optional

import jwt
from fastapi import Header, HTTPException, Depends, Request

from ..core.config import settings
from .roles import AppRole, Capability, Identity, has_capability

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Decodes session access tokens into identities"""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = "authenticated",
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def resolve(self, token: Optional[str]) -> Optional[Identity]:
        """Return the token's identity, or None if it is missing or invalid"""
        if not token:
            return None

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired access token")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected invalid access token: {e}")
            return None

        user_id = claims.get("sub")
        if not user_id:
            logger.warning("Access token has no subject")
            return None

        app_metadata = claims.get("app_metadata") or {}
        raw_role = app_metadata.get("role") or claims.get("user_role")
        try:
            role = AppRole(raw_role) if raw_role else AppRole.BUYER
        except ValueError:
            logger.warning(f"Unknown role {raw_role!r} for user {user_id}")
            return None

        return Identity(user_id=user_id, role=role, email=claims.get("email"))


def create_access_token(
    user_id: str,
    role: AppRole = AppRole.BUYER,
    email: Optional[str] = None,
    expires_in: int = 3600,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    audience: Optional[str] = "authenticated",
) -> str:
    """
    Issue an access token in the shape the backend's auth service signs.

    Used for local development and tests; production tokens come from
    the auth service itself.
    """
    now = int(time.time())
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + expires_in,
        "app_metadata": {"role": role.value},
    }
    if audience:
        claims["aud"] = audience
    if email:
        claims["email"] = email

    return jwt.encode(
        claims,
        secret or settings.auth_jwt_secret,
        algorithm=algorithm or settings.auth_jwt_algorithm,
    )


def get_identity_resolver(request: Request) -> IdentityResolver:
    app_settings = getattr(request.app.state, "settings", settings)
    return IdentityResolver(
        secret=app_settings.auth_jwt_secret,
        algorithm=app_settings.auth_jwt_algorithm,
        audience=app_settings.auth_jwt_audience,
    )


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an Authorization header value"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Optional[Identity]:
    """Resolve the acting user, or None for anonymous requests"""
    return resolver.resolve(bearer_token(authorization))


async def get_authenticated_user(
    identity: Optional[Identity] = Depends(get_current_user),
) -> Identity:
    """Any signed-in user, whatever the role"""
    if identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity


class RoleDependency:
    """
    FastAPI dependency requiring a capability.

    Raises 401 without an identity and 403 when the identity's role lacks
    the capability.
    """

    def __init__(self, *capabilities: Capability):
        self.capabilities = capabilities

    async def __call__(
        self,
        identity: Optional[Identity] = Depends(get_current_user),
    ) -> Identity:
        if identity is None:
            raise HTTPException(status_code=401, detail="Authentication required")

        if not any(has_capability(identity, c) for c in self.capabilities):
            raise HTTPException(
                status_code=403,
                detail=f"Role '{identity.role.value}' is not allowed to do this",
            )

        return identity


require_order_access = RoleDependency(
    Capability.VIEW_OWN_ORDERS,
    Capability.MANAGE_ORDERS,
    Capability.ACCEPT_DELIVERY,
)
require_status_update = RoleDependency(Capability.MANAGE_ORDERS, Capability.UPDATE_DELIVERY)
require_courier = RoleDependency(Capability.ACCEPT_DELIVERY)
require_catalog_manager = RoleDependency(Capability.MANAGE_PRODUCTS)
