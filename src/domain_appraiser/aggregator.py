"""
Report Aggregator for the domain appraiser.

Coordinates report fetches for the domain currently held by a ReportSession.
Every report kind is fetched, cached and failed independently:

    IDLE -> LOADING -> LOADED | ERRORED

Submitting a new domain clears all cells and bumps the session generation.
A fetch remembers the generation it was issued for; if the session has moved
on by the time the result arrives, the result is discarded instead of being
written into the new domain's cell.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from .audit_logger import AuditLogger
from .enums import DomainValidationErrorCode, LogLevel, ReportKind, ReportState
from .exceptions import UpstreamServiceError, ValidationError
from .models import DomainName, ReportCell, ReportResult, ReportSession
from .report_service import ReportService


@dataclass
class AggregateResult:
    """Outcome of analyzing one domain across several report kinds."""

    domain: DomainName
    cells: dict[ReportKind, ReportCell]

    @property
    def loaded(self) -> list[ReportKind]:
        return [kind for kind, cell in self.cells.items() if cell.state == ReportState.LOADED]

    @property
    def errors(self) -> dict[ReportKind, str]:
        return {
            kind: cell.error or ""
            for kind, cell in self.cells.items()
            if cell.state == ReportState.ERRORED
        }


class ReportAggregator:
    """
    Per-session report cache and fetch coordinator.

    The aggregator is the only writer of ReportSession cells.
    """

    def __init__(
        self,
        service: ReportService,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            service: Report service that produces results per kind
            logger: Optional audit logger
        """
        self._service = service
        self._logger = logger

    def submit(self, session: ReportSession, raw_domain: Any) -> DomainName:
        """
        Validate a new domain and reset the session for it.

        Raises:
            ValidationError: If the domain is invalid; the session is unchanged
        """
        try:
            domain = self._service.domain_validator.parse(raw_domain)
        except ValidationError as e:
            self._log(LogLevel.WARN, "Domain rejected", {
                "raw_input": repr(raw_domain),
                "code": e.code,
            })
            raise

        session.reset(domain)
        self._log(LogLevel.INFO, "Domain submitted", {
            "domain": domain.full,
            "generation": session.generation,
        })
        return domain

    async def fetch(self, session: ReportSession, kind: ReportKind) -> Optional[ReportCell]:
        """
        Fetch one report kind for the session's current domain.

        A LOADED cell is returned as-is and a LOADING cell is returned without
        issuing a duplicate request.

        Returns:
            The cell after the fetch, or None if the session moved to another
            domain while the fetch was in flight
        """
        if session.domain is None:
            raise ValidationError(
                code=DomainValidationErrorCode.MISSING_DOMAIN.value,
                message="No domain has been submitted",
            )

        cell = session.cell(kind)
        if cell.state == ReportState.LOADED:
            self._log(LogLevel.DEBUG, "Cache hit", {
                "domain": session.domain.full,
                "kind": kind.value,
            })
            return cell
        if cell.state == ReportState.LOADING:
            return cell

        domain = session.domain
        generation = session.generation
        cell.state = ReportState.LOADING
        cell.domain = domain.full
        cell.error = None

        result: Optional[ReportResult] = None
        error: Optional[UpstreamServiceError] = None
        try:
            result = await self._service.generate(kind, domain)
        except UpstreamServiceError as e:
            error = e
        except Exception as e:
            self._abandon(session, kind, generation, ReportState.ERRORED, str(e) or type(e).__name__)
            raise
        except BaseException:
            # Cancelled: leave the cell fetchable again
            self._abandon(session, kind, generation, ReportState.IDLE, None)
            raise

        if session.generation != generation:
            self._log(LogLevel.INFO, "Discarded stale result", {
                "domain": domain.full,
                "kind": kind.value,
                "current_domain": session.domain.full if session.domain else None,
            })
            return None

        cell = session.cell(kind)
        if error is not None:
            cell.state = ReportState.ERRORED
            cell.error = error.message
            self._log(LogLevel.ERROR, "Report failed", {
                "domain": domain.full,
                "kind": kind.value,
                "code": error.code,
                "reason": error.message,
            })
        else:
            cell.state = ReportState.LOADED
            cell.result = result
            self._log(LogLevel.INFO, "Report loaded", {
                "domain": domain.full,
                "kind": kind.value,
                "source": result.source.value,
            })
        return cell

    async def fetch_all(
        self,
        session: ReportSession,
        kinds: Optional[Iterable[ReportKind]] = None,
    ) -> dict[ReportKind, ReportCell]:
        """
        Fetch several kinds concurrently; one failure never blocks the others.

        Every fetch runs to completion before an unexpected exception from any
        of them is re-raised.
        """
        selected = list(kinds) if kinds is not None else list(ReportKind)
        outcomes = await asyncio.gather(
            *(self.fetch(session, kind) for kind in selected),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return {kind: session.cell(kind) for kind in selected}

    async def analyze(
        self,
        session: ReportSession,
        raw_domain: Any,
        kinds: Optional[Iterable[ReportKind]] = None,
    ) -> AggregateResult:
        """Submit a domain and fetch the requested kinds (all by default)."""
        domain = self.submit(session, raw_domain)
        cells = await self.fetch_all(session, kinds)
        return AggregateResult(domain=domain, cells=cells)

    def can_export(self, session: ReportSession) -> bool:
        """Export requires the Basic report."""
        return session.domain is not None and session.is_loaded(ReportKind.BASIC)

    def results(self, session: ReportSession) -> dict[ReportKind, ReportResult]:
        return {
            kind: cell.result
            for kind, cell in session.cells.items()
            if cell.state == ReportState.LOADED and cell.result is not None
        }

    def _abandon(
        self,
        session: ReportSession,
        kind: ReportKind,
        generation: int,
        state: ReportState,
        reason: Optional[str],
    ) -> None:
        """Settle a cell whose fetch ended with an unexpected exception or cancellation."""
        if session.generation != generation:
            return
        cell = session.cell(kind)
        cell.state = state
        cell.error = reason
        if state == ReportState.IDLE:
            cell.domain = None
        self._log(LogLevel.WARN if state == ReportState.IDLE else LogLevel.ERROR, "Fetch abandoned", {
            "domain": session.domain.full if session.domain else None,
            "kind": kind.value,
            "state": state.value,
            "reason": reason,
        })

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "aggregator", message, data)
