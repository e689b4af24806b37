"""ICS feed parsing into raw CalendarEvent records.

Only the properties the renderers and the calendar API use are extracted.
A VEVENT that cannot be read is skipped with a warning; a document that is
not iCalendar at all raises FeedParseError.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

from icalendar import Calendar, Event as ICalEvent

from ..core.timezone_utils import resolve_timezone
from ..exceptions import FeedParseError
from ..models import CalendarEvent, RenderWarning

logger = logging.getLogger(__name__)


@dataclass
class FeedParseResult:
    events: list[CalendarEvent] = field(default_factory=list)
    warnings: list[RenderWarning] = field(default_factory=list)


def parse_ics_feed(ics_content: str, default_timezone: Optional[str] = None) -> FeedParseResult:
    """Parse ICS text into raw calendar events.

    Args:
        ics_content: Full iCalendar document
        default_timezone: Timezone applied to floating times and date-only values

    Returns:
        FeedParseResult with events in document order

    Raises:
        FeedParseError: If the content is empty or not an iCalendar document
    """
    if not ics_content or not ics_content.strip():
        raise FeedParseError("Empty calendar feed")

    try:
        calendar = Calendar.from_ical(ics_content)
    except ValueError as e:
        raise FeedParseError(f"Invalid iCalendar content: {e}") from e

    tz = resolve_timezone(default_timezone)
    result = FeedParseResult()

    for component in calendar.walk("VEVENT"):
        uid = str(component.get("UID", "")) or None
        try:
            result.events.append(_parse_event(component, tz))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Skipping unreadable VEVENT %s: %s", uid, e)
            result.warnings.append(
                RenderWarning(source=uid or "VEVENT", code="invalid_vevent", message=str(e))
            )

    logger.debug("Parsed %d events (%d skipped)", len(result.events), len(result.warnings))
    return result


def _parse_event(component: ICalEvent, tz: Any) -> CalendarEvent:
    dtstart = component.get("DTSTART")
    if dtstart is None:
        raise ValueError("Event missing DTSTART")

    start_value = dtstart.dt
    all_day = not isinstance(start_value, datetime)
    start = _to_datetime(start_value, tz)

    dtend = component.get("DTEND")
    duration = component.get("DURATION")
    if dtend is not None:
        end = _to_datetime(dtend.dt, tz)
    elif duration is not None and isinstance(duration.dt, timedelta):
        end = start + duration.dt
    elif all_day:
        end = start + timedelta(days=1)
    else:
        end = None

    rrule_prop = component.get("RRULE")
    rrule = rrule_prop.to_ical().decode("utf-8") if rrule_prop is not None else None

    location = component.get("LOCATION")
    description = component.get("DESCRIPTION")
    geo = component.get("GEO")

    return CalendarEvent(
        uid=str(component.get("UID")) if component.get("UID") else None,
        summary=str(component.get("SUMMARY", "No Title")),
        start=start,
        end=end,
        all_day=all_day,
        location=str(location) if location else None,
        geo=(float(geo.latitude), float(geo.longitude)) if geo is not None else None,
        rrule=rrule,
        exdates=[_to_datetime(value, tz) for value in _exdate_values(component)],
        description=str(description) if description else None,
        organizer=_organizer_name(component.get("ORGANIZER")),
        alarms=_alarm_offsets(component),
    )


def _to_datetime(value: Any, tz: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=tz)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)
    raise TypeError(f"Unsupported date value {value!r}")


def _exdate_values(component: ICalEvent) -> list[Any]:
    """Flatten EXDATE, which icalendar returns as one list or a list of lists."""
    prop = component.get("EXDATE")
    if prop is None:
        return []
    props = prop if isinstance(prop, list) else [prop]
    return [entry.dt for item in props for entry in getattr(item, "dts", [])]


def _organizer_name(organizer: Any) -> Optional[str]:
    if not organizer:
        return None
    params = getattr(organizer, "params", {})
    name = params.get("CN") if params else None
    if name:
        return str(name)
    value = str(organizer)
    return value[7:] if value.lower().startswith("mailto:") else value


def _alarm_offsets(component: ICalEvent) -> list[timedelta]:
    offsets = []
    for alarm in component.walk("VALARM"):
        trigger = alarm.get("TRIGGER")
        if trigger is not None and isinstance(trigger.dt, timedelta):
            offsets.append(trigger.dt)
    return offsets
