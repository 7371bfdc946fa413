"""
Security utilities: Clerk session token verification and role access codes.
"""

import hmac
import logging

import httpx
from cachetools import TTLCache
from jose import jwt, JWTError

from campus_assistant.config import Settings, get_settings

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = {"admin", "faculty"}
VALID_ROLES = {"student", "faculty", "admin"}

# JWKS cache: a single entry keyed by URL, TTL set from config on first use
_jwks_cache: TTLCache | None = None


# ── Clerk session tokens ─────────────────────────────────
async def _fetch_jwks(settings: Settings) -> dict:
    """Fetch (and cache) the Clerk JSON Web Key Set."""
    global _jwks_cache
    if _jwks_cache is None:
        _jwks_cache = TTLCache(maxsize=4, ttl=settings.JWKS_CACHE_TTL_SECONDS)

    cached = _jwks_cache.get(settings.CLERK_JWKS_URL)
    if cached is not None:
        return cached

    headers = {}
    if settings.CLERK_SECRET_KEY:
        headers["Authorization"] = f"Bearer {settings.CLERK_SECRET_KEY}"

    async with httpx.AsyncClient(timeout=settings.IDENTITY_TIMEOUT) as client:
        response = await client.get(settings.CLERK_JWKS_URL, headers=headers)
        response.raise_for_status()
        jwks = response.json()

    _jwks_cache[settings.CLERK_JWKS_URL] = jwks
    return jwks


async def verify_session_token(token: str, settings: Settings | None = None) -> dict | None:
    """Verify a Clerk session JWT. Returns the claims or None if invalid.

    The header is parsed before any key lookup, so malformed tokens are
    rejected without touching the network.
    """
    settings = settings or get_settings()
    try:
        jwt.get_unverified_header(token)
        key = settings.CLERK_JWT_KEY or await _fetch_jwks(settings)
        payload = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"❌ Could not load Clerk JWKS: {e}")
        return None

    parties = settings.authorized_parties
    if parties and payload.get("azp") not in parties:
        logger.info(f"Rejected session token from unauthorized party: {payload.get('azp')}")
        return None

    return payload


# ── Role access codes ────────────────────────────────────
def verify_access_code(role: str, code: str | None, settings: Settings | None = None) -> bool:
    """Check the shared access code for a privileged role.

    Students need no code. An unset secret disables the role entirely.
    The comparison is constant-time; the scheme itself is still a weak
    admission control (one shared secret per role, sent in the request body).
    """
    if role not in PRIVILEGED_ROLES:
        return True

    settings = settings or get_settings()
    secret = settings.ADMIN_SECRET if role == "admin" else settings.FACULTY_SECRET
    if not secret or not code:
        return False
    return hmac.compare_digest(code.encode("utf-8"), secret.encode("utf-8"))
