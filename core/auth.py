from typing import Optional

from core.errors import AuthRequired, Forbidden, ValidationError
from models.asset import GalleryPolicy


def passwords_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Case-insensitive plaintext comparison; gallery passwords are share-link gates."""
    if provided is None or expected is None:
        return False
    return provided.upper() == expected.upper()


def require_view_access(policy: Optional[GalleryPolicy], password: Optional[str]) -> None:
    if policy is None or not policy.view_password:
        return
    if not password:
        raise AuthRequired("Password required")
    if not passwords_match(password, policy.view_password):
        raise Forbidden("Invalid password")


def require_delete_access(policy: GalleryPolicy, password: Optional[str], target: str = "Photo") -> None:
    if not password:
        raise ValidationError("Password is required")
    if not policy.delete_password:
        raise Forbidden(f"{target} does not have a delete password configured")
    if not passwords_match(password, policy.delete_password):
        raise Forbidden("Invalid password")
