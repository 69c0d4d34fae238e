from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceMatcher
from ..common.concurrency import QueryRunner
from ..common.datetime_utils import now_utc
from ..core.deadline import Deadline
from ..core.enums import ReportErrorKind
from ..core.exceptions import DeadlineExceeded, EmptyInputError, NotFoundError, ReportCancelled
from ..cycles.service import CycleService
from ..roster.model import RosterFilters
from ..roster.service import RosterService
from .aggregator import build_event_summaries, build_pilot_rows, build_qualification_rows, build_squadron_rows
from .excel_writer import build_workbook, report_filename, workbook_bytes
from .model import CycleSheetData, ReportArtifact, ReportResult
from .settings import ReportSettings
from .summary_export import summaries_to_csv, summary_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutput:
    sheet: CycleSheetData
    records: list[AttendanceRecord]


class AttendanceReportService:
    """Cycle attendance report pipeline.

    Stages run strictly in order: cycle/events, active roster, attendance
    matching, aggregation, spreadsheet emission. Public methods never raise;
    they return a `ReportResult`.
    """

    def __init__(
        self,
        cycles: CycleService,
        roster: RosterService,
        matcher: AttendanceMatcher,
        *,
        settings: Optional[ReportSettings] = None,
    ):
        self._cycles = cycles
        self._roster = roster
        self._matcher = matcher
        self._settings = settings or ReportSettings()

    def new_deadline(self) -> Deadline:
        return Deadline(self._settings.deadline_seconds)

    def build_sheet_data(
        self,
        cycle_id: str,
        *,
        deadline: Optional[Deadline] = None,
        filters: Optional[RosterFilters] = None,
    ) -> PipelineOutput:
        """Run stages 1-4. Raises domain errors; use `generate()` for a result."""

        deadline = deadline or self.new_deadline()
        with QueryRunner(
            deadline=deadline,
            max_workers=self._settings.max_workers,
            query_timeout=self._settings.query_timeout_seconds,
        ) as runner:
            logger.info("Fetching cycle data for %s", cycle_id)
            cycle, events = self._cycles.resolve(cycle_id, runner=runner)

            deadline.check()
            logger.info("Fetching active pilots for %s - %s", cycle.start_date, cycle.end_date)
            pilots = self._roster.resolve_active_pilots(cycle.start_date, cycle.end_date, runner=runner, filters=filters)

            deadline.check()
            logger.info("Fetching attendance data")
            records = self._matcher.match(events, runner=runner)

        deadline.check()
        logger.info("Building pilot, qualification and squadron rows")
        sheet = CycleSheetData(
            cycle=cycle,
            events=events,
            pilots=pilots,
            pilot_rows=build_pilot_rows(pilots, events, records),
            qualification_rows=build_qualification_rows(pilots, events, records),
            squadron_rows=build_squadron_rows(pilots, events, records),
        )
        return PipelineOutput(sheet=sheet, records=records)

    def generate(
        self,
        cycle_id: str,
        *,
        now: Optional[datetime] = None,
        deadline: Optional[Deadline] = None,
        filters: Optional[RosterFilters] = None,
    ) -> ReportResult:
        """Generate the attendance workbook for one cycle."""

        def _emit(out: PipelineOutput) -> ReportArtifact:
            wb = build_workbook(out.sheet, now=now or now_utc(), tz_name=self._settings.timezone)
            return ReportArtifact(filename=report_filename(out.sheet.cycle.name), content=workbook_bytes(wb))

        return self._run(cycle_id, _emit, deadline=deadline, filters=filters)

    def generate_summary_csv(
        self,
        cycle_id: str,
        *,
        deadline: Optional[Deadline] = None,
        filters: Optional[RosterFilters] = None,
    ) -> ReportResult:
        """Per-event attendance summary for one cycle, as CSV."""

        def _emit(out: PipelineOutput) -> ReportArtifact:
            summaries = build_event_summaries(out.sheet.pilots, out.sheet.events, out.records)
            return ReportArtifact(
                filename=summary_filename(out.sheet.cycle.name),
                content=summaries_to_csv(summaries),
                mimetype="text/csv",
            )

        return self._run(cycle_id, _emit, deadline=deadline, filters=filters)

    def _run(
        self,
        cycle_id: str,
        emit: Callable[[PipelineOutput], ReportArtifact],
        *,
        deadline: Optional[Deadline],
        filters: Optional[RosterFilters],
    ) -> ReportResult:
        logger.info("Generating attendance report for cycle %s", cycle_id)
        try:
            out = self.build_sheet_data(cycle_id, deadline=deadline, filters=filters)
            artifact = emit(out)
        except NotFoundError as e:
            logger.error("Aborting report for cycle %s: %s", cycle_id, e)
            return ReportResult.failure(ReportErrorKind.NOT_FOUND, str(e))
        except EmptyInputError as e:
            logger.warning("Aborting report for cycle %s: %s", cycle_id, e)
            return ReportResult.failure(ReportErrorKind.EMPTY_INPUT, str(e))
        except DeadlineExceeded as e:
            logger.error("Aborting report for cycle %s: %s", cycle_id, e)
            return ReportResult.failure(ReportErrorKind.TIMEOUT, str(e))
        except ReportCancelled as e:
            logger.warning("Report for cycle %s cancelled", cycle_id)
            return ReportResult.failure(ReportErrorKind.CANCELLED, str(e))
        except Exception as e:
            logger.exception("Unexpected error generating report for cycle %s", cycle_id)
            return ReportResult.failure(ReportErrorKind.UNEXPECTED, f"{type(e).__name__}: {e}")

        logger.info("Report generated: %s (%d bytes)", artifact.filename, len(artifact.content))
        return ReportResult.success(artifact)
