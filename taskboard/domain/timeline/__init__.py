"""Timeline domain - read-only projection of project history.

Functions:
    build_timeline - Merge status history and activity log
    event_label - Human text for an event
    filter_timeline - Narrow by type or date range
    annotate_durations - Gaps between visible events
    format_duration - Render a gap in days/months/years
    export_timeline - Plain-text export
    export_document - Export headed with the project name
"""

from .projection import (
    EVENT_FILTERS,
    STATUS_CHANGE,
    STATUS_LABELS,
    TEAM_FILTER,
    AnnotatedEvent,
    TimelineEvent,
    annotate_durations,
    build_timeline,
    event_label,
    export_document,
    export_timeline,
    filter_timeline,
    format_duration,
    format_timestamp,
)

__all__ = [
    "EVENT_FILTERS",
    "STATUS_CHANGE",
    "STATUS_LABELS",
    "TEAM_FILTER",
    "AnnotatedEvent",
    "TimelineEvent",
    "annotate_durations",
    "build_timeline",
    "event_label",
    "export_document",
    "export_timeline",
    "filter_timeline",
    "format_duration",
    "format_timestamp",
]
