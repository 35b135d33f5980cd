"""User accounts and login tokens."""

from timeclonk.auth.service import AuthCallbacks, OrgAuthService, RegistrationData

__all__ = ["AuthCallbacks", "OrgAuthService", "RegistrationData"]
