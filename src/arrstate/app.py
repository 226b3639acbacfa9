"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from arrstate.adapters.registry import create_adapter
from arrstate.config import ConfigurationError
from arrstate.domain.reconciliation import Deadline, ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from arrstate.domain.model import DesiredState, HealthStatus, ServiceInfo
    from arrstate.domain.ports import ServiceAdapter
    from arrstate.domain.reconciliation import ReconcileReport, ReconciliationPlan

AdapterFactory = Callable[[str], "ServiceAdapter"]


log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ServiceOutcome:
    """Result of reconciling one service; exactly one of ``report``/``error`` is set."""

    app: str
    report: ReconcileReport | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.report is not None and self.report.success


def plan_service(
    desired: DesiredState,
    *,
    adapter: ServiceAdapter | None = None,
) -> ReconciliationPlan:
    """Compute the pending changes for the service ``desired`` targets."""

    effective_adapter = adapter or create_adapter(desired.app)
    return ReconciliationEngine(effective_adapter).plan(desired)


def reconcile_service(
    desired: DesiredState,
    *,
    adapter: ServiceAdapter | None = None,
    timeout_seconds: float | None = None,
) -> ReconcileReport:
    """Converge one service towards ``desired``."""

    effective_adapter = adapter or create_adapter(desired.app)
    cancel = Deadline(timeout_seconds) if timeout_seconds is not None else None
    log.info(f"Starting reconciliation of {desired.app}: timeout={timeout_seconds}")
    report = ReconciliationEngine(effective_adapter).reconcile(desired, cancel=cancel)
    log.info(
        f"Finished reconciliation of {desired.app}: applied={report.result.applied}, "
        f"failed={report.result.failed}, skipped={report.result.skipped}"
    )
    return report


def reconcile_services(
    targets: Sequence[DesiredState],
    *,
    adapter_factory: AdapterFactory = create_adapter,
    timeout_seconds: float | None = None,
    max_workers: int = 4,
) -> list[ServiceOutcome]:
    """Reconcile several services concurrently, one independent pass each.

    A failure of one pass is captured in its outcome and does not affect the
    others. Outcomes are returned in ``targets`` order.
    """

    apps = [desired.app for desired in targets]
    duplicates = sorted({app for app in apps if apps.count(app) > 1})
    if duplicates:
        raise ConfigurationError(f"More than one desired state for: {', '.join(duplicates)}")

    def run(desired: DesiredState) -> ServiceOutcome:
        try:
            report = reconcile_service(
                desired,
                adapter=adapter_factory(desired.app),
                timeout_seconds=timeout_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            log.error(f"Reconciliation of {desired.app} failed: {exc}")
            return ServiceOutcome(app=desired.app, error=exc)
        return ServiceOutcome(app=desired.app, report=report)

    if len(targets) <= 1:
        return [run(desired) for desired in targets]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(run, targets))


def check_health(app: str, *, adapter: ServiceAdapter | None = None) -> HealthStatus:
    return (adapter or create_adapter(app)).health()


def service_status(app: str, *, adapter: ServiceAdapter | None = None) -> ServiceInfo:
    return (adapter or create_adapter(app)).connect()
