"""Service layer exports."""

from .credential_manager import AuthorizationContext, CredentialManager, CredentialState
from .token_refresher import Freshness, TokenRefresher

__all__ = [
    "AuthorizationContext",
    "CredentialManager",
    "CredentialState",
    "Freshness",
    "TokenRefresher",
]
