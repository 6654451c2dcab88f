"""Tests for role ID encoding, decoding and legacy ID upgrade."""

from unittest.mock import patch

import pytest

from consul_roles.exceptions import (
    InternalInvariantError,
    MalformedIdentifierError,
    ValidationError,
)
from consul_roles.identity import (
    RoleId,
    backend_from_path,
    is_legacy_id,
    role_name_from_path,
    role_path,
    upgrade_legacy_id,
)

# ============================================================================
# Test role_path
# ============================================================================


class TestRolePath:
    """Tests for building role paths."""

    def test_simple(self):
        """Backend and name are joined with /roles/."""
        assert role_path("consul", "app") == "consul/roles/app"

    def test_trims_backend_slashes(self):
        """Leading and trailing slashes on the backend are dropped."""
        assert role_path("/foo/", "bar") == role_path("foo", "bar") == "foo/roles/bar"

    def test_nested_backend(self):
        """Inner slashes of the backend are kept."""
        assert role_path("/teams/ops/consul/", "app") == "teams/ops/consul/roles/app"

    def test_name_embedded_verbatim(self):
        """Names are not validated or escaped."""
        assert role_path("consul", "a/b c") == "consul/roles/a/b c"


# ============================================================================
# Test decoding
# ============================================================================


class TestDecode:
    """Tests for role_name_from_path and backend_from_path."""

    def test_decode_name(self):
        assert role_name_from_path("foo/roles/bar") == "bar"

    def test_decode_backend(self):
        assert backend_from_path("foo/roles/bar") == "foo"

    def test_name_with_slash(self):
        """Names containing slashes survive decoding."""
        path = role_path("consul", "team/app")
        assert role_name_from_path(path) == "team/app"
        assert backend_from_path(path) == "consul"

    @pytest.mark.parametrize(
        "backend,name",
        [
            ("consul", "app"),
            ("a/b/c", "role-1"),
            ("consul-dc2", "x.y_z"),
            ("c", "n/with/slashes"),
        ],
    )
    def test_decode_inverts_encode(self, backend, name):
        """Decoding a built path gives back both parts."""
        path = role_path(backend, name)
        assert backend_from_path(path) == backend
        assert role_name_from_path(path) == name

    @pytest.mark.parametrize(
        "path",
        ["no-roles-segment", "consul/roles/", "/roles/app", "consul/role/app", ""],
    )
    def test_malformed_name(self, path):
        """Paths without two non-empty segments around /roles/ are rejected."""
        with pytest.raises(MalformedIdentifierError) as exc_info:
            role_name_from_path(path)
        assert exc_info.value.operation == "decode-name"
        assert exc_info.value.identifier == path

    @pytest.mark.parametrize(
        "path",
        ["no-roles-segment", "consul/roles/", "/roles/app", "consul/role/app", ""],
    )
    def test_malformed_backend(self, path):
        with pytest.raises(MalformedIdentifierError) as exc_info:
            backend_from_path(path)
        assert exc_info.value.operation == "decode-parent"
        assert exc_info.value.details == {"identifier": path, "operation": "decode-parent"}

    def test_malformed_is_validation_error(self):
        """Malformed identifiers are validation errors with a stable code."""
        with pytest.raises(ValidationError) as exc_info:
            role_name_from_path("no-roles-segment")
        assert exc_info.value.code == "MALFORMED_IDENTIFIER"

    def test_repeated_separator_splits_at_last(self):
        """With /roles/ inside a part, both decoders split at the last one."""
        path = role_path("a/roles/b", "c")
        assert backend_from_path(path) == "a/roles/b"
        assert role_name_from_path(path) == "c"

        path = role_path("a", "b/roles/c")
        assert backend_from_path(path) == "a/roles/b"
        assert role_name_from_path(path) == "c"

    def test_unexpected_group_count(self):
        """A pattern yielding extra groups raises InternalInvariantError."""
        import re

        with patch("consul_roles.identity._NAME_FROM_PATH", re.compile(r"(.+)/roles/(.+)")):
            with pytest.raises(InternalInvariantError) as exc_info:
                role_name_from_path("foo/roles/bar")
        assert exc_info.value.code == "INTERNAL_INVARIANT_VIOLATION"
        assert exc_info.value.details["operation"] == "decode-name"


# ============================================================================
# Test legacy ID upgrade
# ============================================================================


class TestUpgradeLegacyId:
    """Tests for upgrade_legacy_id."""

    def test_upgrade(self):
        assert upgrade_legacy_id("foo,bar") == "foo/roles/bar"

    def test_upgrade_trims_backend(self):
        assert upgrade_legacy_id("/foo/,bar") == "foo/roles/bar"

    def test_current_id_unchanged(self):
        """Already-current IDs pass through."""
        assert upgrade_legacy_id("foo/roles/bar") == "foo/roles/bar"

    @pytest.mark.parametrize("role_id", ["a,b,c", "noseparator", "", ",bar", "foo,", ","])
    def test_other_shapes_unchanged(self, role_id):
        """Only exactly two non-empty comma-separated parts are legacy IDs."""
        assert upgrade_legacy_id(role_id) == role_id
        assert is_legacy_id(role_id) is False

    def test_idempotent(self):
        once = upgrade_legacy_id("consul,app")
        assert upgrade_legacy_id(once) == once

    @pytest.mark.parametrize("backend,name", [("consul", "app"), ("/x/y/", "z"), ("m", "a/b")])
    def test_encoded_paths_are_not_legacy(self, backend, name):
        path = role_path(backend, name)
        assert upgrade_legacy_id(path) == path


# ============================================================================
# Test RoleId
# ============================================================================


class TestRoleId:
    """Tests for the two-field role identity."""

    def test_path(self):
        assert RoleId(backend="consul", name="app").path == "consul/roles/app"

    def test_backend_is_trimmed(self):
        role_id = RoleId(backend="/consul/", name="app")
        assert role_id.backend == "consul"
        assert role_id == RoleId(backend="consul", name="app")

    def test_from_path(self):
        assert RoleId.from_path("consul/roles/app") == RoleId("consul", "app")

    def test_parse_legacy(self):
        """parse() accepts the old comma form."""
        assert RoleId.parse("consul,app") == RoleId("consul", "app")

    def test_parse_malformed(self):
        with pytest.raises(MalformedIdentifierError):
            RoleId.parse("a,b,c")

    def test_str_is_path(self):
        assert str(RoleId("consul", "app")) == "consul/roles/app"

    def test_hashable(self):
        """RoleId is frozen and usable as a dict key."""
        ids = {RoleId("consul", "app"): 1}
        assert ids[RoleId("/consul", "app")] == 1
        with pytest.raises(AttributeError):
            RoleId("consul", "app").name = "other"  # type: ignore[misc]
