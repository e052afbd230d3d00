"""Hypothesis strategies for property testing.

Provides reusable composite strategies for role names, fixed-role chains
and request facts.
"""

from hypothesis import strategies as st

from src.rolefilters.roles.surface import RequestRoleSurface
from tests.conftest import make_facts

role_names = st.text(
    alphabet=st.characters(min_codepoint=0x21, max_codepoint=0x7E),
    min_size=1,
    max_size=12,
)


@st.composite
def role_sets(draw, min_size=0, max_size=6):
    """Generate a frozenset of role names."""
    return frozenset(draw(st.lists(role_names, min_size=min_size, max_size=max_size)))


@st.composite
def base_surfaces(draw, authenticated=None):
    """Generate a base surface with random platform roles.

    Args:
        draw: Hypothesis draw function
        authenticated: Force the identity on (True) or off (False); random if None

    Returns:
        RequestRoleSurface: Base of a role chain
    """
    if authenticated is None:
        authenticated = draw(st.booleans())
    remote_user = draw(role_names) if authenticated else None
    return RequestRoleSurface(
        facts=make_facts(remote_user=remote_user),
        granted=draw(role_sets()),
    )
