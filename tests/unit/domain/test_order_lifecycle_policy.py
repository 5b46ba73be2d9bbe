"""Tests for order status transitions."""

import pytest

from swiftroute.domain.errors import ValidationError
from swiftroute.domain.policies.order_lifecycle import can_transition, ensure_transition
from swiftroute.domain.value_objects.enums import OrderStatus as S


@pytest.mark.parametrize(
    "current,target",
    [
        (S.PENDING, S.ASSIGNED),
        (S.PENDING, S.CANCELLED),
        (S.ASSIGNED, S.PICKED),
        (S.ASSIGNED, S.PENDING),
        (S.PICKED, S.DELIVERED),
        (S.PICKED, S.CANCELLED),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.PENDING, S.PICKED),
        (S.PENDING, S.DELIVERED),
        (S.PICKED, S.ASSIGNED),
        (S.DELIVERED, S.PENDING),
        (S.CANCELLED, S.ASSIGNED),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(ValidationError, match="Cannot change order status"):
        ensure_transition(current, target)


def test_terminal_states_have_no_exits():
    for target in S:
        assert not can_transition(S.DELIVERED, target)
        assert not can_transition(S.CANCELLED, target)
