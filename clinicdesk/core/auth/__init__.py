from .clinic_auth import get_current_session, require_clinic_user, require_operator

__all__ = ["get_current_session", "require_clinic_user", "require_operator"]
