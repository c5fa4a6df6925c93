"""Log sink and display surface collaborators."""

from .base import DisplaySurface, LogSink, NullDisplay, SinkError
from .display import StatusLineDisplay, render_status
from .file import FileLogSink, format_record

__all__ = [
    "DisplaySurface",
    "FileLogSink",
    "LogSink",
    "NullDisplay",
    "SinkError",
    "StatusLineDisplay",
    "format_record",
    "render_status",
]
