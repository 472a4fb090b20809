"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Query

from coursereg.audit import AuditTrail
from coursereg.config import Settings
from coursereg.enrollment import Actor, InscriptionManager, Role
from coursereg.errors import PermissionDeniedError, ValidationError
from coursereg.invoicing import InvoiceManager
from coursereg.registry import (
    CourseCatalog,
    DiscountRegistry,
    ParticipantRegistry,
    VoucherRegistry,
)
from coursereg.reports import ReportAggregator
from coursereg.store import EntityStore


@dataclass
class Services:
    """Every manager, sharing one injected store and audit trail."""

    settings: Settings
    store: EntityStore
    audit: AuditTrail
    catalog: CourseCatalog
    participants: ParticipantRegistry
    vouchers: VoucherRegistry
    discounts: DiscountRegistry
    inscriptions: InscriptionManager
    invoices: InvoiceManager
    reports: ReportAggregator

    @classmethod
    def build(cls, settings: Settings, audit: AuditTrail | None = None) -> Services:
        """Open the store named by settings and wire every manager to it."""
        store = EntityStore(settings.db_path, busy_timeout=settings.busy_timeout)
        audit = audit if audit is not None else AuditTrail.with_log_sink()
        participants = ParticipantRegistry(store)
        return cls(
            settings=settings,
            store=store,
            audit=audit,
            catalog=CourseCatalog(store, audit),
            participants=participants,
            vouchers=VoucherRegistry(store),
            discounts=DiscountRegistry(store),
            inscriptions=InscriptionManager(store, audit, participants),
            invoices=InvoiceManager(store, audit),
            reports=ReportAggregator(store),
        )

    def close(self) -> None:
        self.store.close()


# Global Services instance (initialized on app startup)
_services: Services | None = None


def init_services(settings: Settings | None = None) -> Services:
    """Initialize the global Services instance."""
    global _services  # noqa: PLW0603
    _services = Services.build(settings if settings is not None else Settings())
    return _services


def close_services() -> None:
    """Close the global Services instance."""
    global _services  # noqa: PLW0603
    if _services is not None:
        _services.close()
        _services = None


def get_services() -> Generator[Services, None, None]:
    """Dependency that provides the Services instance."""
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    yield _services


# Type alias for dependency injection
ServicesDep = Annotated[Services, Depends(get_services)]


def get_actor(x_role: Annotated[str | None, Header()] = None) -> Actor:
    """Actor from the X-Role header. Missing header means staff."""
    if x_role is None:
        return Actor()
    try:
        return Actor(role=Role(x_role.strip().lower()))
    except ValueError as e:
        raise PermissionDeniedError(f"Unknown role {x_role!r}") from e


ActorDep = Annotated[Actor, Depends(get_actor)]


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int


def get_pagination(
    services: ServicesDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
) -> Pagination:
    """Page parameters, with the configured default and upper bound applied."""
    settings = services.settings
    size = page_size if page_size is not None else settings.default_page_size
    if size > settings.max_page_size:
        raise ValidationError(f"page_size cannot exceed {settings.max_page_size}")
    return Pagination(page=page, page_size=size)


PaginationDep = Annotated[Pagination, Depends(get_pagination)]
