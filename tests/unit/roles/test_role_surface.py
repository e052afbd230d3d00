"""Unit tests for role surfaces and the decorator chain.

Tests cover:
- Base surface answers from platform-granted roles
- Decorator short-circuit and fallthrough
- Monotonic OR composition and order independence
- grant() / granted_roles() helpers
"""

from unittest.mock import MagicMock

from src.rolefilters.roles.surface import (
    FixedRoleRule,
    RequestRoleSurface,
    RoleDecorator,
    RoleSurface,
    grant,
    granted_roles,
    iter_layers,
)
from tests.conftest import make_facts, make_surface


def mock_surface(answer: bool) -> MagicMock:
    """Inner surface whose role queries can be asserted on."""
    inner = MagicMock()
    inner.facts = make_facts()
    inner.is_in_role.return_value = answer
    return inner


class TestRequestRoleSurface:
    """Tests for the base surface."""

    def test_granted_role_is_held(self):
        surface = make_surface(granted={"staff"})
        assert surface.is_in_role("staff") is True

    def test_other_role_is_not_held(self):
        surface = make_surface(granted={"staff"})
        assert surface.is_in_role("admin") is False

    def test_roles_are_case_sensitive(self):
        surface = make_surface(granted={"Staff"})
        assert surface.is_in_role("staff") is False

    def test_satisfies_protocol(self):
        assert isinstance(make_surface(), RoleSurface)


class TestRoleDecorator:
    """Tests for a single decorator layer."""

    def test_own_rule_grants_role(self):
        surface = RoleDecorator(make_surface(), FixedRoleRule("beta"))
        assert surface.is_in_role("beta") is True

    def test_match_short_circuits_inner(self):
        inner = mock_surface(answer=False)
        surface = RoleDecorator(inner, FixedRoleRule("beta"))

        assert surface.is_in_role("beta") is True
        inner.is_in_role.assert_not_called()

    def test_non_match_delegates_to_inner(self):
        inner = mock_surface(answer=True)
        surface = RoleDecorator(inner, FixedRoleRule("beta"))

        assert surface.is_in_role("staff") is True
        inner.is_in_role.assert_called_once_with("staff")

    def test_grants_role_inner_would_deny(self):
        inner = mock_surface(answer=False)
        surface = RoleDecorator(inner, FixedRoleRule("beta"))
        assert surface.is_in_role("beta") is True

    def test_exposes_inner_facts(self):
        base = make_surface(remote_host="10.1.2.3")
        surface = RoleDecorator(base, FixedRoleRule("beta"))
        assert surface.facts is base.facts

    def test_decorating_does_not_change_inner(self):
        base = make_surface()
        RoleDecorator(base, FixedRoleRule("beta"))
        assert base.is_in_role("beta") is False


class TestComposition:
    """Tests for multi-layer chains."""

    def test_union_of_all_layers(self):
        surface = grant(make_surface(granted={"staff"}), "beta", "mobile")

        assert surface.is_in_role("staff") is True
        assert surface.is_in_role("beta") is True
        assert surface.is_in_role("mobile") is True
        assert surface.is_in_role("admin") is False

    def test_fallthrough_equals_base_answer(self):
        base = make_surface(granted={"staff"})
        surface = grant(base, "beta", "mobile")

        for role in ("staff", "admin", ""):
            assert surface.is_in_role(role) == base.is_in_role(role)

    def test_order_does_not_change_answers(self):
        base = make_surface()
        forward = grant(base, "a", "b", "c")
        backward = grant(base, "c", "b", "a")

        for role in ("a", "b", "c", "d"):
            assert forward.is_in_role(role) == backward.is_in_role(role)

    def test_later_layers_never_revoke(self):
        surface = grant(make_surface(), "beta")
        surface = grant(surface, "other", "another")
        assert surface.is_in_role("beta") is True

    def test_duplicate_grant_is_harmless(self):
        once = grant(make_surface(), "beta")
        twice = grant(once, "beta")

        for role in ("beta", "gamma"):
            assert once.is_in_role(role) == twice.is_in_role(role)

    def test_grant_without_roles_returns_same_surface(self):
        base = make_surface()
        assert grant(base) is base


class TestChainInspection:
    """Tests for iter_layers() and granted_roles()."""

    def test_iter_layers_outermost_first(self):
        base = make_surface()
        surface = grant(base, "a", "b")

        layers = list(iter_layers(surface))

        assert len(layers) == 3
        assert layers[-1] is base
        assert layers[0].rule == FixedRoleRule("b")

    def test_granted_roles_lists_fixed_and_base_roles(self):
        surface = grant(make_surface(granted={"staff"}), "a", "b", "a")
        assert granted_roles(surface) == ["a", "b", "staff"]

    def test_granted_roles_skips_rule_layers(self):
        class AlwaysRule:
            def matches(self, role, facts):
                return True

        surface = RoleDecorator(grant(make_surface(), "a"), AlwaysRule())
        assert granted_roles(surface) == ["a"]

    def test_base_surface_alone(self):
        surface = RequestRoleSurface(facts=make_facts(), granted=frozenset({"x"}))
        assert granted_roles(surface) == ["x"]
