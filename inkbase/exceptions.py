"""Exception hierarchy for inkbase.

Only the HTTP layer and the feed parser let these escape. The rendering and
expansion code catches them at the per-widget / per-event boundary and turns
them into ``RenderWarning`` entries so one bad item never blocks the rest.
"""


class InkbaseError(Exception):
    """Base exception for all inkbase errors."""


class FeedParseError(InkbaseError):
    """A calendar feed could not be read at all.

    Raised when:
    - The ICS text is empty or not an iCalendar document
    - The icalendar library rejects the top-level structure

    Broken individual VEVENTs do not raise this; they are skipped.
    """


class RecurrenceExpansionError(InkbaseError):
    """A single repeat rule could not be expanded.

    Raised when:
    - The RRULE string cannot be parsed by dateutil
    - UNTIL and DTSTART disagree on timezone awareness

    The expander skips the event and reports a warning instead.
    """


class WidgetDataError(InkbaseError):
    """Provider data for one widget is malformed.

    Caught by the overlay composer, which then renders a placeholder string.
    """


class LayoutError(InkbaseError):
    """Unknown slot layout type requested."""
