"""Calendar feed parsing and recurrence expansion."""

from .feed_parser import FeedParseResult, parse_ics_feed
from .recurrence_expander import (
    ExpansionResult,
    RecurrenceExpander,
    compute_end_limit,
    parse_horizon,
    parse_projection,
    serialize_instances,
)

__all__ = [
    "ExpansionResult",
    "FeedParseResult",
    "RecurrenceExpander",
    "compute_end_limit",
    "parse_horizon",
    "parse_ics_feed",
    "parse_projection",
    "serialize_instances",
]
