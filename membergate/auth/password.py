from __future__ import annotations

import hmac

from membergate.auth.config import AuthConfig


def verify_password(cfg: AuthConfig, candidate: object) -> bool:
    """
    Check a submitted password against the shared membership password.

    Exact match (case-sensitive, no trimming) using a constant-time comparison.

    Args:
        cfg: Auth configuration holding the membership password
        candidate: Password from user input

    Returns:
        True if the password matches, False otherwise
    """
    if not isinstance(candidate, str) or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), cfg.membership_password.encode("utf-8"))
