"""Role and scope checks for staff actions."""

from marketplace.models.resource import UserProfile
from marketplace.utils.normalize import normalize_text

INTERNAL_ROLES = frozenset(
    {"root", "owner", "staff_manager", "staff_editor", "staff_support"}
)
SUPERUSER_ROLES = frozenset({"root", "owner"})

RESERVATIONS_WRITE_SCOPE = "reservations.write"

# Legacy scope names granting the same permission
SCOPE_ALIASES: dict[str, frozenset[str]] = {
    RESERVATIONS_WRITE_SCOPE: frozenset({"bookings.write", "reservation.write"}),
}


def has_scope(profile: UserProfile, scope_key: str) -> bool:
    """Check a profile for a scope, honoring wildcard and legacy aliases."""
    target = normalize_text(scope_key, 80).lower()
    if not target:
        return True
    if profile.normalized_role in SUPERUSER_ROLES:
        return True

    scopes = profile.scope_set
    if "*" in scopes or target in scopes:
        return True
    return bool(scopes & SCOPE_ALIASES.get(target, frozenset()))


def can_write_reservations(profile: UserProfile) -> bool:
    """Enabled internal staff, or anyone holding reservations.write."""
    if not profile.enabled:
        return False
    if profile.normalized_role in INTERNAL_ROLES:
        return True
    return has_scope(profile, RESERVATIONS_WRITE_SCOPE)
