"""App-level authentication: the RS256 JWT GitHub expects from an App.

The JWT only authorises ``/app/...`` endpoints. Repository calls use an
installation token minted with it (see ``client.get_installation_token``).
"""

import time
from typing import Optional

import jwt

from ghdefaults.core.config import get_settings
from ghdefaults.errors import AuthConfigInvalid

# GitHub rejects JWTs living longer than 10 minutes or issued in the future.
JWT_BACKDATE_SECONDS = 60
JWT_LIFETIME_SECONDS = 9 * 60


def create_app_jwt(now: Optional[int] = None) -> str:
    """Sign a short-lived JWT with the App private key from settings.

    Raises:
        AuthConfigInvalid: App ID or private key is missing, or the key
            cannot produce an RS256 signature.
    """
    settings = get_settings()
    app_id, private_key = settings.github_app_id, settings.github_private_key

    if not app_id or not private_key:
        raise AuthConfigInvalid(
            "GitHub App credentials not configured. "
            "Set GITHUB_APP_ID and GITHUB_PRIVATE_KEY."
        )

    issued = int(time.time()) if now is None else now
    claims = {
        "iat": issued - JWT_BACKDATE_SECONDS,
        "exp": issued + JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }

    try:
        return jwt.encode(claims, private_key, algorithm="RS256")
    except (ValueError, TypeError, jwt.PyJWTError) as exc:
        # Not chained: key parsing errors can quote the key.
        raise AuthConfigInvalid(
            f"GitHub App private key is unusable: {type(exc).__name__}"
        ) from None
