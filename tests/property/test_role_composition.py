"""Property tests for role chain composition.

Whatever roles the assigners add and in whatever order they run, a chain
answers like the union of its layers and never revokes a role.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from src.rolefilters.config.settings import RoleRedirectionSettings, StaticRoleSettings
from src.rolefilters.roles.assigners import KnownUnknownRoleAssigner, StaticRoleAssigner
from src.rolefilters.roles.redirector import RedirectAction, RoleRedirector
from src.rolefilters.roles.surface import grant
from tests.property.conftest import base_surfaces, role_names, role_sets


class TestChainUnion:
    """Chains behave as the union of their layers."""

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces(), added=st.lists(role_names, max_size=6), query=role_names)
    def test_answer_is_union(self, base, added, query):
        surface = grant(base, *added)
        assert surface.is_in_role(query) == (query in added or base.is_in_role(query))

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces(), first=role_sets(), second=role_sets(), query=role_names)
    def test_adding_layers_never_revokes(self, base, first, second, query):
        inner = grant(base, *sorted(first))
        outer = grant(inner, *sorted(second))

        if inner.is_in_role(query):
            assert outer.is_in_role(query)

    @settings(max_examples=100, deadline=None)
    @given(
        base=base_surfaces(),
        added=st.lists(role_names, max_size=6),
        query=role_names,
        data=st.data(),
    )
    def test_order_independent(self, base, added, query, data):
        shuffled = data.draw(st.permutations(added))
        assert grant(base, *added).is_in_role(query) == grant(base, *shuffled).is_in_role(query)


class TestAssignerProperties:
    """Assigner-specific invariants."""

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces())
    def test_login_roles_exclusive(self, base):
        surface = KnownUnknownRoleAssigner().decorate(base)
        known = surface.is_in_role("known-user") and "known-user" not in base.granted
        unknown = surface.is_in_role("unknown-user") and "unknown-user" not in base.granted
        assert not (known and unknown)
        assert known or unknown or base.granted & {"known-user", "unknown-user"}

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces(), roles=st.lists(role_names, max_size=5), query=role_names)
    def test_static_idempotent(self, base, roles, query):
        assigner = StaticRoleAssigner(StaticRoleSettings(roles=tuple(roles)))
        once = assigner.decorate(base)
        twice = assigner.decorate(once)
        assert once.is_in_role(query) == twice.is_in_role(query)


class TestRedirectorProperties:
    """Redirect resolution invariants."""

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces(authenticated=False), roles=role_sets(min_size=1))
    def test_unauthorized_always_first(self, base, roles):
        redirect_settings = RoleRedirectionSettings(
            unauthorized_location="/login",
            locations=tuple((role, f"/{i}") for i, role in enumerate(sorted(roles))),
            default_location="/home",
        )
        decision = RoleRedirector(redirect_settings).resolve(grant(base, *sorted(roles)))
        assert decision.location == "/login"

    @settings(max_examples=100, deadline=None)
    @given(base=base_surfaces(authenticated=True), roles=role_sets())
    def test_outcome_is_total(self, base, roles):
        redirect_settings = RoleRedirectionSettings(
            locations=tuple((role, f"/{i}") for i, role in enumerate(sorted(roles)))
        )
        decision = RoleRedirector(redirect_settings).resolve(base)

        if decision.action is RedirectAction.REDIRECT:
            assert any(base.is_in_role(role) for role in roles)
        else:
            assert decision.action is RedirectAction.PASS
            assert not any(base.is_in_role(role) for role in roles)
