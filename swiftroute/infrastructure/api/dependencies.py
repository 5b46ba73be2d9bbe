"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from swiftroute.adapters.csv_loader.seeder import seed_from_csv
from swiftroute.adapters.llm.gemini_adapter import GeminiAdapter
from swiftroute.adapters.llm.openai_adapter import OpenAIAdapter
from swiftroute.adapters.llm.rule_based_adapter import RuleBasedSuggester
from swiftroute.adapters.persistence.database import get_session_factory
from swiftroute.adapters.persistence.memory import (
    InMemoryAssignmentRepository,
    InMemoryLoadAdjustmentRepository,
    InMemoryOrderRepository,
    InMemoryPartnerRepository,
    InMemoryStore,
    InMemoryTransaction,
)
from swiftroute.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlLoadAdjustmentRepository,
    SqlOrderRepository,
    SqlPartnerRepository,
    SqlTransaction,
)
from swiftroute.application.ports.assignment_repo import AssignmentRepository
from swiftroute.application.ports.load_adjustment_repo import LoadAdjustmentRepository
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.suggester_port import PartnerSuggester
from swiftroute.application.ports.transaction import TransactionPort
from swiftroute.application.use_cases.assign_order import AssignOrderUseCase
from swiftroute.application.use_cases.reconcile_loads import ReconcileLoadsUseCase
from swiftroute.application.use_cases.report_failure import ReportFailureUseCase
from swiftroute.application.use_cases.suggest_assignment import SuggestAssignmentUseCase
from swiftroute.application.use_cases.update_order_status import UpdateOrderStatusUseCase
from swiftroute.config import Settings, settings
from swiftroute.domain.clock import local_clock
from swiftroute.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    return settings


# ─── Storage ─────────────────────────────────────────────────────────


@dataclass
class Storage:
    """Repositories sharing one unit of work for the duration of a request."""

    orders: OrderRepository
    partners: PartnerRepository
    assignments: AssignmentRepository
    adjustments: LoadAdjustmentRepository
    tx: TransactionPort
    session: AsyncSession | None = None

    @classmethod
    def sql(cls, session: AsyncSession) -> "Storage":
        return cls(
            orders=SqlOrderRepository(session),
            partners=SqlPartnerRepository(session),
            assignments=SqlAssignmentRepository(session),
            adjustments=SqlLoadAdjustmentRepository(session),
            tx=SqlTransaction(session),
            session=session,
        )

    @classmethod
    def in_memory(cls, store: InMemoryStore) -> "Storage":
        return cls(
            orders=InMemoryOrderRepository(store),
            partners=InMemoryPartnerRepository(store),
            assignments=InMemoryAssignmentRepository(store),
            adjustments=InMemoryLoadAdjustmentRepository(store),
            tx=InMemoryTransaction(store),
        )


_demo_store: InMemoryStore | None = None


async def get_demo_store(cfg: Settings) -> InMemoryStore:
    """Process-wide in-memory store, seeded from CSV on first use."""
    global _demo_store
    if _demo_store is None:
        store = InMemoryStore()
        demo = Storage.in_memory(store)
        await seed_from_csv(Path(cfg.csv_data_path), demo.partners, demo.orders)
        store.commit()
        _demo_store = store
        logger.info("In-memory demo store ready")
    return _demo_store


async def get_storage(cfg: Settings = Depends(get_settings)) -> AsyncIterator[Storage]:
    if cfg.storage_backend == "memory":
        yield Storage.in_memory(await get_demo_store(cfg))
        return
    async with get_session_factory()() as session:
        yield Storage.sql(session)


# ─── Suggestion backend ──────────────────────────────────────────────


def build_suggester(cfg: Settings) -> PartnerSuggester:
    """Construct the configured backend; raises ConfigurationError on missing keys."""
    clock = local_clock(cfg.dispatch_timezone)
    if cfg.suggester_backend == "rules":
        return RuleBasedSuggester(clock=clock)
    if cfg.suggester_backend == "gemini":
        return GeminiAdapter(
            api_key=cfg.google_api_key,
            model=cfg.gemini_model,
            timeout=cfg.llm_timeout_seconds,
            clock=clock,
        )
    return OpenAIAdapter(
        api_key=cfg.openai_api_key,
        model=cfg.openai_model,
        timeout=cfg.llm_timeout_seconds,
        clock=clock,
    )


def get_suggester(cfg: Settings = Depends(get_settings)) -> PartnerSuggester:
    return build_suggester(cfg)


# ─── Use cases ───────────────────────────────────────────────────────


def get_suggest_uc(suggester: PartnerSuggester = Depends(get_suggester)) -> SuggestAssignmentUseCase:
    return SuggestAssignmentUseCase(suggester)


def _optional_suggest_uc(cfg: Settings) -> SuggestAssignmentUseCase | None:
    # Explicit assignments work without a suggestion backend.
    try:
        return SuggestAssignmentUseCase(build_suggester(cfg))
    except ConfigurationError as e:
        logger.warning("Suggestions unavailable: %s", e.message)
        return None


def get_assign_order_uc(
    storage: Storage = Depends(get_storage),
    cfg: Settings = Depends(get_settings),
) -> AssignOrderUseCase:
    return AssignOrderUseCase(
        order_repo=storage.orders,
        partner_repo=storage.partners,
        assignment_repo=storage.assignments,
        tx=storage.tx,
        suggest=_optional_suggest_uc(cfg),
    )


def get_update_order_status_uc(
    storage: Storage = Depends(get_storage),
    assign_order: AssignOrderUseCase = Depends(get_assign_order_uc),
) -> UpdateOrderStatusUseCase:
    return UpdateOrderStatusUseCase(
        order_repo=storage.orders,
        partner_repo=storage.partners,
        assignment_repo=storage.assignments,
        tx=storage.tx,
        assign_order=assign_order,
    )


def get_report_failure_uc(storage: Storage = Depends(get_storage)) -> ReportFailureUseCase:
    return ReportFailureUseCase(
        order_repo=storage.orders,
        partner_repo=storage.partners,
        assignment_repo=storage.assignments,
        adjustment_repo=storage.adjustments,
        tx=storage.tx,
    )


def get_reconcile_loads_uc(storage: Storage = Depends(get_storage)) -> ReconcileLoadsUseCase:
    return ReconcileLoadsUseCase(
        partner_repo=storage.partners,
        adjustment_repo=storage.adjustments,
        tx=storage.tx,
    )
