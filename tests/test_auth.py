import pytest

from core.auth import passwords_match, require_delete_access, require_view_access
from core.errors import AuthRequired, Forbidden, ValidationError
from models.asset import GalleryPolicy


def test_passwords_match_ignores_case():
    assert passwords_match("abc123", "ABC123")
    assert not passwords_match("abc124", "ABC123")
    assert not passwords_match(None, "ABC123")
    assert not passwords_match("x", None)


def test_open_gallery_needs_no_view_password():
    require_view_access(None, None)
    require_view_access(GalleryPolicy(name="Open"), None)


def test_view_access_errors():
    policy = GalleryPolicy(name="Closed", view_password="ABC123")
    with pytest.raises(AuthRequired):
        require_view_access(policy, None)
    with pytest.raises(Forbidden):
        require_view_access(policy, "WRONG")
    require_view_access(policy, "abc123")


def test_delete_access_errors():
    with pytest.raises(ValidationError):
        require_delete_access(GalleryPolicy(name="g", delete_password="pw"), "")
    with pytest.raises(Forbidden, match="does not have a delete password"):
        require_delete_access(GalleryPolicy(name="g"), "pw")
    with pytest.raises(Forbidden, match="Invalid password"):
        require_delete_access(GalleryPolicy(name="g", delete_password="pw"), "nope")
    require_delete_access(GalleryPolicy(name="g", delete_password="pw"), "PW")
