import sys
from typing import Optional, TextIO

from bounded_verify.types import AnalysisOutcome, CounterexampleTrace, Inconclusive, Proved, Refuted
from bounded_verify.utils.logger import VerifierLogger, get_logger

DEFAULT_REPORT_PATH = "verification-result.txt"

SUCCESS_LINE = "VERIFICATION SUCCEEDED: No errors found."
FAILURE_LINE = "VERIFICATION FAILED: Program does not satisfy its contract in the following situation:"
INCONCLUSIVE_PREFIX = "VERIFICATION INCONCLUSIVE:"


def render_report(outcome: AnalysisOutcome, trace: Optional[CounterexampleTrace] = None) -> str:
    """Text of the single report produced for one verification attempt."""
    if isinstance(outcome, Proved):
        return SUCCESS_LINE + "\n"
    if isinstance(outcome, Refuted):
        return FAILURE_LINE + "\n" + (trace.format() if trace is not None else "")
    if isinstance(outcome, Inconclusive):
        return f"{INCONCLUSIVE_PREFIX} {outcome.reason} (contract not verified)\n"
    raise TypeError(f"not an analysis outcome: {outcome!r}")


class FileReportSink:
    """Writes each report to a file, replacing the previous one."""

    def __init__(self, path: str = DEFAULT_REPORT_PATH):
        self.path = path

    def write(self, text: str):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    def __repr__(self) -> str:
        return f"FileReportSink({self.path!r})"


class ConsoleReportSink:

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def write(self, text: str):
        out = self.stream or sys.stdout
        out.write(text)
        out.flush()

    def __repr__(self) -> str:
        return "ConsoleReportSink()"


class Reporter:
    """Emits reports to one or more sinks. Sink failures never propagate."""

    def __init__(self, *sinks, logger: Optional[VerifierLogger] = None):
        self.sinks = list(sinks) if sinks else [FileReportSink()]
        self.logger = logger or get_logger()

    def emit(self, outcome: AnalysisOutcome, trace: Optional[CounterexampleTrace] = None) -> bool:
        """Write the report everywhere; returns False if any sink failed."""
        text = render_report(outcome, trace)
        ok = True
        for sink in self.sinks:
            try:
                sink.write(text)
            except (OSError, ValueError) as e:
                # closed streams and unencodable text raise ValueError
                ok = False
                message = f"could not write verification report to {sink!r}: {e}"
                self.logger.warning(message)
                outcome.diagnostics.append(message)
        return ok
