import pytest
from projecthub.utils.group_permissions import (
    GROUP_DEFAULTS,
    can_move_user_between_groups,
    can_set_document_visibility,
    can_view_document,
    get_allowed_groups,
    get_default_document_visibility,
    get_group_display_name,
    get_visibility_display_name,
    normalize_member_group,
    validate_group,
    validate_visibility,
)

ROLES = ["owner", "admin", "editor", "viewer"]
GROUPS = ["consulting", "client"]


def test_both_is_visible_to_every_group_and_role():
    for group in GROUPS:
        for role in ROLES:
            assert can_view_document(group, "both", role) is True


def test_owner_sees_everything():
    for group in GROUPS + [None]:
        for visibility in ["consulting_only", "client_only", "both", "weird"]:
            assert can_view_document(group, visibility, "owner") is True


def test_group_only_visibility():
    assert can_view_document("consulting", "consulting_only", "viewer") is True
    assert can_view_document("client", "consulting_only", "admin") is False
    assert can_view_document("client", "client_only", "editor") is True
    assert can_view_document("consulting", "client_only", "admin") is False


def test_unknown_visibility_is_hidden_from_non_owner():
    assert can_view_document("consulting", "secret", "admin") is False
    assert can_view_document("consulting", None) is False


def test_default_visibility_per_group():
    assert get_default_document_visibility("consulting") == "consulting_only"
    assert get_default_document_visibility("client") == "both"
    assert get_default_document_visibility(None) == "both"
    assert get_default_document_visibility("vendors") == "both"


@pytest.mark.parametrize("role,expected", [("owner", True), ("admin", True), ("editor", False), ("viewer", False), (None, False)])
def test_visibility_and_group_moves_need_manage_role(role, expected):
    for group in GROUPS:
        assert can_set_document_visibility(role, group) is expected
    assert can_move_user_between_groups(role) is expected


def test_defaults_table():
    assert GROUP_DEFAULTS.legacy_member_group == "consulting"
    assert GROUP_DEFAULTS.invitation_group == "client"
    assert GROUP_DEFAULTS.unknown_group_visibility == "both"
    with pytest.raises(TypeError):
        GROUP_DEFAULTS.visibility_by_group["client"] = "client_only"


def test_normalize_member_group_reads_legacy_as_consulting():
    assert normalize_member_group(None) == "consulting"
    assert normalize_member_group("") == "consulting"
    assert normalize_member_group("client") == "client"


def test_validators():
    for group in GROUPS:
        validate_group(group)
    with pytest.raises(ValueError, match="Invalid group 'vendors'"):
        validate_group("vendors")
    validate_visibility("both")
    with pytest.raises(ValueError, match="Invalid visibility 'all'"):
        validate_visibility("all")
    assert get_allowed_groups() == {"consulting", "client"}


def test_display_names():
    assert get_group_display_name("consulting") == "Consulting Group"
    assert get_group_display_name("client") == "Client Group"
    assert get_visibility_display_name("both") == "All"
    assert get_visibility_display_name("consulting_only") == "Consulting Only"
    assert get_visibility_display_name("other") == "other"
