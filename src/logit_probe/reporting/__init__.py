"""Report rendering and emission for logit-probe."""

from logit_probe.reporting.escape import escape_token_text
from logit_probe.reporting.formatter import RowReport, format_report
from logit_probe.reporting.reporter import TopKReporter, debug_print_logits, default_reporter
from logit_probe.reporting.sinks import LoggingSink, ReportSink, SinkRegistry, StreamSink

__all__ = [
    "LoggingSink",
    "ReportSink",
    "RowReport",
    "SinkRegistry",
    "StreamSink",
    "TopKReporter",
    "debug_print_logits",
    "default_reporter",
    "escape_token_text",
    "format_report",
]
