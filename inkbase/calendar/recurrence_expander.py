"""Recurring event expansion for calendar widgets and the calendar API.

Turns raw feed records (some carrying RRULEs) into concrete occurrences that
overlap ``[now, now + horizon]``. Repeat rules are evaluated with dateutil; a
rule that dateutil rejects is skipped and reported as a warning so the rest
of the feed still expands.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional, Union

from dateutil.relativedelta import relativedelta
from dateutil.rrule import rruleset, rrulestr
from pydantic import ValidationError

from ..core.config_manager import MAX_OCCURRENCES_PER_RULE
from ..core.timezone_utils import ensure_aware, now_utc, resolve_timezone
from ..exceptions import RecurrenceExpansionError
from ..models import (
    CalendarEvent,
    DetailedEventInstance,
    EventInstance,
    Horizon,
    Projection,
    RenderWarning,
    SimpleEventInstance,
    StructuredLocation,
)

logger = logging.getLogger(__name__)

DEFAULT_EVENT_DURATION = timedelta(hours=1)

_UNTIL_PATTERN = re.compile(r"UNTIL=(\d{8}(?:T\d{6})?)(Z?)", re.IGNORECASE)

HORIZON_DELTAS: dict[Horizon, relativedelta] = {
    Horizon.ONE_DAY: relativedelta(days=1),
    Horizon.THREE_DAYS: relativedelta(days=3),
    Horizon.ONE_WEEK: relativedelta(weeks=1),
    Horizon.ONE_MONTH: relativedelta(months=1),
}


@dataclass
class ExpansionResult:
    """Expanded instances plus any non-fatal warnings collected on the way."""

    instances: list[EventInstance] = field(default_factory=list)
    warnings: list[RenderWarning] = field(default_factory=list)

    def serialize(self) -> list[dict[str, Any]]:
        return serialize_instances(self.instances)


def parse_horizon(value: Any) -> tuple[Horizon, Optional[RenderWarning]]:
    """Coerce a horizon value, falling back to one day when unrecognized."""
    if value is None or value == "":
        return Horizon.ONE_DAY, None
    try:
        return Horizon(value), None
    except ValueError:
        logger.warning("Unknown horizon %r, using %s", value, Horizon.ONE_DAY.value)
        return Horizon.ONE_DAY, RenderWarning(
            source="horizon", code="unknown_horizon", message=f"Unknown horizon {value!r}"
        )


def parse_projection(value: Any) -> Projection:
    if isinstance(value, Projection):
        return value
    return Projection.DETAILED if str(value or "").lower() == Projection.DETAILED.value else Projection.SIMPLE


def compute_end_limit(now: datetime, horizon: Union[str, Horizon]) -> datetime:
    """Add the horizon to ``now`` using calendar-aware day/week/month arithmetic."""
    resolved = horizon if isinstance(horizon, Horizon) else parse_horizon(horizon)[0]
    return now + HORIZON_DELTAS[resolved]


def serialize_instances(instances: Iterable[EventInstance]) -> list[dict[str, Any]]:
    return [instance.model_dump(mode="json") for instance in instances]


class RecurrenceExpander:
    """Expands calendar events into concrete instances inside a time window."""

    def __init__(
        self,
        max_occurrences: int = MAX_OCCURRENCES_PER_RULE,
        time_provider: Callable[[], datetime] = now_utc,
        default_timezone: Optional[str] = None,
    ) -> None:
        self.max_occurrences = max_occurrences
        self.time_provider = time_provider
        self.default_tz = resolve_timezone(default_timezone)

    def expand(
        self,
        events: Iterable[Union[CalendarEvent, dict[str, Any]]],
        horizon: Union[str, Horizon, None] = Horizon.ONE_DAY,
        projection: Union[str, Projection] = Projection.SIMPLE,
        now: Optional[datetime] = None,
    ) -> ExpansionResult:
        """Expand ``events`` into instances overlapping ``[now, now + horizon]``.

        Args:
            events: Raw calendar records (models or mappings)
            horizon: One of 1d, 3d, 1w, 1m; unknown values fall back to 1d
            projection: "simple" or "detailed" instance shape
            now: Override for the window start (defaults to the time provider)

        Returns:
            ExpansionResult with instances sorted by start time
        """
        result = ExpansionResult()

        resolved_horizon, horizon_warning = parse_horizon(horizon)
        if horizon_warning is not None:
            result.warnings.append(horizon_warning)
        shape = parse_projection(projection)

        window_start = ensure_aware(now or self.time_provider())
        end_limit = compute_end_limit(window_start, resolved_horizon)

        for index, raw in enumerate(events):
            event = self._coerce_event(raw, index, result)
            if event is None:
                continue

            try:
                result.instances.extend(self._expand_event(event, window_start, end_limit, shape))
            except RecurrenceExpansionError as e:
                logger.warning("Skipping event %r: %s", event.uid or event.summary, e)
                result.warnings.append(
                    RenderWarning(
                        source=event.uid or event.summary,
                        code="invalid_rrule" if event.rrule else "invalid_event",
                        message=str(e),
                    )
                )

        result.instances.sort(key=lambda instance: instance.start)

        logger.debug(
            "Expanded %d instances (horizon=%s, projection=%s, warnings=%d)",
            len(result.instances),
            resolved_horizon.value,
            shape.value,
            len(result.warnings),
        )
        return result

    def _coerce_event(
        self, raw: Union[CalendarEvent, dict[str, Any]], index: int, result: ExpansionResult
    ) -> Optional[CalendarEvent]:
        if isinstance(raw, CalendarEvent):
            return raw
        try:
            return CalendarEvent.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed calendar event #%d: %s", index, e.error_count())
            result.warnings.append(
                RenderWarning(source=f"event[{index}]", code="invalid_event", message=str(e))
            )
            return None

    def _expand_event(
        self, event: CalendarEvent, window_start: datetime, end_limit: datetime, shape: Projection
    ) -> list[EventInstance]:
        """Instances of one event overlapping ``[window_start, end_limit]``.

        Raises:
            RecurrenceExpansionError: If the rule cannot be evaluated or the
                event's span falls outside the representable date range
        """
        try:
            start = ensure_aware(event.start, self.default_tz)
            end = ensure_aware(event.end, self.default_tz) if event.end else start + DEFAULT_EVENT_DURATION
            duration = max(end - start, timedelta(0))

            if not event.rrule:
                if end >= window_start and start <= end_limit:
                    return [self._project(event, start, end, shape)]
                return []

            instances = []
            for occurrence_start in self._occurrences(event, start, window_start - duration, end_limit):
                occurrence_end = occurrence_start + duration
                if occurrence_end >= window_start and occurrence_start <= end_limit:
                    instances.append(self._project(event, occurrence_start, occurrence_end, shape))
            return instances
        except OverflowError as e:
            raise RecurrenceExpansionError(f"Event span is out of range: {e}") from e

    def _occurrences(
        self, event: CalendarEvent, dtstart: datetime, lower: datetime, upper: datetime
    ) -> Iterator[datetime]:
        """Yield occurrence starts in ``[lower, upper]`` for the event's rule.

        A rule whose UNTIL is a date or a floating time is evaluated on the
        wall clock of ``dtstart``'s timezone, and the zone is attached to each
        occurrence afterwards.

        Raises:
            RecurrenceExpansionError: If the rule or its exclusions cannot be evaluated
        """
        tz = dtstart.tzinfo or self.default_tz
        floating = _has_floating_until(event.rrule)
        if floating:
            dtstart, lower, upper = (_wall_clock(value, tz) for value in (dtstart, lower, upper))

        try:
            rules = rrulestr(event.rrule, dtstart=dtstart, forceset=True)
            if not isinstance(rules, rruleset):  # pragma: no cover - forceset guarantees a set
                wrapped = rruleset()
                wrapped.rrule(rules)
                rules = wrapped
            for exdate in event.exdates:
                excluded = ensure_aware(exdate, tz)
                rules.exdate(_wall_clock(excluded, tz) if floating else excluded)

            count = 0
            for occurrence in rules.xafter(lower, inc=True):
                if occurrence > upper:
                    break
                if count >= self.max_occurrences:
                    logger.warning(
                        "Event %r limited to %d occurrences", event.uid or event.summary, self.max_occurrences
                    )
                    break
                count += 1
                yield occurrence.replace(tzinfo=tz) if floating else occurrence
        except (ValueError, TypeError, OverflowError) as e:
            raise RecurrenceExpansionError(f"Cannot expand RRULE {event.rrule!r}: {e}") from e

    def _project(
        self, event: CalendarEvent, start: datetime, end: datetime, projection: Projection
    ) -> EventInstance:
        if projection is Projection.SIMPLE:
            return SimpleEventInstance(name=event.summary, start=start, end=end, location=event.location)

        return DetailedEventInstance(
            name=event.summary,
            start=start,
            end=end,
            location=event.location,
            duration_ms=int((end - start).total_seconds() * 1000),
            description=event.description,
            all_day=event.all_day,
            alarm_offset_minutes=_alarm_offset_minutes(event.alarms),
            organizer=event.organizer,
            structured_location=_structured_location(event),
        )


def _alarm_offset_minutes(alarms: list[timedelta]) -> Optional[int]:
    """Minutes before start for the first alarm (triggers are negative offsets)."""
    if not alarms:
        return None
    return int(-alarms[0].total_seconds() // 60)


def _structured_location(event: CalendarEvent) -> Optional[StructuredLocation]:
    if not event.location and event.geo is None:
        return None
    latitude, longitude = event.geo if event.geo is not None else (None, None)
    return StructuredLocation(display_name=event.location or "", latitude=latitude, longitude=longitude)


def _has_floating_until(rule: str) -> bool:
    """True when the rule's UNTIL is a date or a local time without a trailing Z."""
    match = _UNTIL_PATTERN.search(rule)
    return match is not None and not match.group(2)


def _wall_clock(value: datetime, tz: tzinfo) -> datetime:
    return value.astimezone(tz).replace(tzinfo=None)
