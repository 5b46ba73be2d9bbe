"""Tests for AssignOrderUseCase against the in-memory store."""

import pytest

from swiftroute.adapters.llm.rule_based_adapter import RuleBasedSuggester
from swiftroute.adapters.persistence.memory import InMemoryPartnerRepository
from swiftroute.application.use_cases.assign_order import AssignOrderUseCase
from swiftroute.application.use_cases.suggest_assignment import SuggestAssignmentUseCase
from swiftroute.domain.errors import (
    ConfigurationError,
    NotFoundError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.value_objects.enums import AssignmentStatus, OrderStatus, PartnerStatus


class TimingOutPartnerRepository(InMemoryPartnerRepository):
    async def increment_load_if_below(self, partner_id, ceiling):
        raise TimeoutError("canceling statement due to statement timeout")


def _use_case(repos, fixed_clock, with_suggester=True):
    suggest = SuggestAssignmentUseCase(RuleBasedSuggester(clock=fixed_clock)) if with_suggester else None
    return AssignOrderUseCase(
        repos.orders, repos.partners, repos.assignments, repos.tx,
        suggest=suggest, clock=fixed_clock,
    )


async def _seed(repos, orders=(), partners=()):
    for p in partners:
        await repos.partners.save(p)
    for o in orders:
        await repos.orders.save(o)
    repos.store.commit()


@pytest.mark.asyncio
async def test_explicit_assignment_commits_all_three_changes(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1")], [make_partner("p1", load=1)])

    outcome = await _use_case(repos, fixed_clock).execute("o1", "p1")
    repos.store.rollback()

    assert outcome.committed is True
    assert outcome.partner_id == "p1"
    order = await repos.orders.get_by_id("o1")
    assert order.status == OrderStatus.ASSIGNED
    assert order.assigned_partner_id == "p1"
    assert (await repos.partners.get_by_id("p1")).current_load == 2
    latest = await repos.assignments.get_latest_for_order("o1")
    assert latest.id == outcome.assignment_id
    assert latest.status == AssignmentStatus.ACTIVE
    assert latest.created_at == fixed_clock()


@pytest.mark.asyncio
async def test_assignment_via_suggestion(repos, make_order, make_partner, fixed_clock):
    await _seed(
        repos,
        [make_order("o1", area="Westside")],
        [make_partner("p1", areas=["Downtown"]), make_partner("p2", areas=["Westside"], load=3)],
    )

    outcome = await _use_case(repos, fixed_clock).execute("o1")

    assert outcome.committed is True
    assert outcome.partner_id == "p2"
    assert outcome.suggestion.suggestion_made is True


@pytest.mark.asyncio
async def test_no_suggestion_leaves_order_pending(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1", area="Koramangala")], [make_partner("p1")])

    outcome = await _use_case(repos, fixed_clock).execute("o1")

    assert outcome.committed is False
    assert outcome.partner_id is None
    assert "Koramangala" in outcome.suggestion.reason
    assert (await repos.orders.get_by_id("o1")).status == OrderStatus.PENDING
    assert await repos.assignments.get_latest_for_order("o1") is None


@pytest.mark.asyncio
async def test_only_pending_orders_can_be_assigned(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1", status=OrderStatus.CANCELLED)], [make_partner("p1")])
    with pytest.raises(ValidationError, match="only pending orders"):
        await _use_case(repos, fixed_clock).execute("o1", "p1")


@pytest.mark.asyncio
async def test_partner_at_capacity_is_rejected_without_changes(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1")], [make_partner("p1", load=5)])

    with pytest.raises(ValidationError, match="maximum load"):
        await _use_case(repos, fixed_clock).execute("o1", "p1")

    assert (await repos.orders.get_by_id("o1")).status == OrderStatus.PENDING
    assert (await repos.partners.get_by_id("p1")).current_load == 5


@pytest.mark.asyncio
async def test_inactive_partner_is_rejected(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1")], [make_partner("p1", status=PartnerStatus.ON_BREAK)])
    with pytest.raises(ValidationError, match="not active"):
        await _use_case(repos, fixed_clock).execute("o1", "p1")


@pytest.mark.asyncio
async def test_missing_order_and_partner(repos, make_order, fixed_clock):
    await _seed(repos, [make_order("o1")])
    uc = _use_case(repos, fixed_clock)

    with pytest.raises(NotFoundError):
        await uc.execute("nope", "p1")
    with pytest.raises(NotFoundError, match="Partner"):
        await uc.execute("o1", "ghost")


@pytest.mark.asyncio
async def test_without_backend_requires_explicit_partner(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1")], [make_partner("p1")])
    uc = _use_case(repos, fixed_clock, with_suggester=False)

    with pytest.raises(ConfigurationError):
        await uc.execute("o1")

    outcome = await uc.execute("o1", "p1")
    assert outcome.committed is True


@pytest.mark.asyncio
async def test_store_timeout_is_reported_as_timeout(repos, make_order, make_partner, fixed_clock):
    await _seed(repos, [make_order("o1")], [make_partner("p1", load=1)])
    uc = AssignOrderUseCase(
        repos.orders, TimingOutPartnerRepository(repos.store), repos.assignments, repos.tx,
        clock=fixed_clock,
    )

    with pytest.raises(UpstreamTimeoutError, match="Timed out persisting the assignment"):
        await uc.execute("o1", "p1")

    assert (await repos.orders.get_by_id("o1")).status == OrderStatus.PENDING
    assert (await repos.partners.get_by_id("p1")).current_load == 1
    assert await repos.assignments.get_latest_for_order("o1") is None
