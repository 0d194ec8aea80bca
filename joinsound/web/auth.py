"""
Caller verification for the private routes.

The app is given a callable that turns a request into a verified member ID.
subject_verifier() builds one from any token decoder that returns the
token's claims; auth0_decoder() is the decoder used in production.
"""

import logging
from typing import Callable, Optional

import jwt

from joinsound.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

CallerVerifier = Callable[[object], int]


def member_id_from_subject(subject: Optional[str]) -> int:
    """
    Extract the Discord member ID from a token subject.

    Subjects look like "oauth2|discord|123456789012345678"; the member ID is
    the last component.
    """
    parts = (subject or "").split("|")
    if len(parts) < 3:
        raise UnauthenticatedError("invalid token subject format")
    try:
        return int(parts[-1])
    except ValueError as e:
        raise UnauthenticatedError("invalid user ID in token") from e


def bearer_token(request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Missing bearer token")
    return token.strip()


def subject_verifier(decode_token: Callable[[str], dict]) -> CallerVerifier:
    """
    Build a verifier from a token decoder.

    decode_token must verify the token and return its claims, raising any
    exception when the token is not acceptable.
    """
    def verify(request) -> int:
        token = bearer_token(request)
        try:
            claims = decode_token(token)
        except UnauthenticatedError:
            raise
        except Exception as e:
            logger.warning("Encountered error while validating JWT: %s", e)
            raise UnauthenticatedError("Failed to validate JWT.") from e
        return member_id_from_subject(claims.get("sub"))

    return verify


def reject_all(request) -> int:
    """Verifier used when no token decoder is configured."""
    raise UnauthenticatedError("Authentication is not configured")


def auth0_decoder(domain: str, audience: str, leeway: int = 60) -> Callable[[str], dict]:
    """
    Token decoder for an Auth0 tenant.

    Verifies the RS256 signature against the tenant's JWKS (keys cached for
    five minutes), the issuer and the audience, allowing `leeway` seconds of
    clock skew.
    """
    issuer = f"https://{domain}/"
    jwks_client = jwt.PyJWKClient(f"{issuer}.well-known/jwks.json", lifespan=300)

    def decode(token: str) -> dict:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=audience,
            issuer=issuer,
            leeway=leeway,
        )

    return decode


def verifier_from_config(config) -> Optional[CallerVerifier]:
    """Build the caller verifier from AUTH0_DOMAIN/AUTH0_AUDIENCE, if both are set."""
    if not config.AUTH0_DOMAIN or not config.AUTH0_AUDIENCE:
        return None
    return subject_verifier(auth0_decoder(config.AUTH0_DOMAIN, config.AUTH0_AUDIENCE))
