"""
Bounded verification of one annotated method against its contract.

    subject = AnnotatedClass("src/", "main.util.Pair")
    request = VerificationRequest.create(subject, "add", ["main.util.Node"])
    verifier = BoundedVerifier(request, Z3Engine())
    if not verifier.verify() and verifier.state is VerificationState.REFUTED:
        print(verifier.counterexample().format())

`verify()` answers True only when the contract was proved within bounds.
Refuted and inconclusive runs both answer False; `state`, `outcome` and
the written report tell them apart.
"""
from typing import Optional, Sequence, Tuple

from bounded_verify.config_builder import build_configuration, method_identifier
from bounded_verify.engine.base import BoundedVerificationEngine
from bounded_verify.errors import UsageError
from bounded_verify.extractor import extract_counterexample
from bounded_verify.interpreter import interpret
from bounded_verify.reporter import Reporter
from bounded_verify.types import (
    AnalysisOutcome, CounterexampleTrace, Inconclusive, Proved, Refuted,
    VerificationRequest, VerificationState,
)
from bounded_verify.utils.logger import VerifierLogger, get_logger

_TERMINAL = {
    "PROVED": VerificationState.PROVED,
    "REFUTED": VerificationState.REFUTED,
    "INCONCLUSIVE": VerificationState.INCONCLUSIVE,
}


class BoundedVerifier:

    def __init__(self, request: VerificationRequest, engine: BoundedVerificationEngine,
                 reporter: Optional[Reporter] = None, logger: Optional[VerifierLogger] = None):
        self.request = request
        self.engine = engine
        self.logger = logger or get_logger()
        self.reporter = reporter or Reporter(logger=self.logger)
        self.state = VerificationState.NOT_STARTED
        self.outcome: Optional[AnalysisOutcome] = None
        self.trace: Optional[CounterexampleTrace] = None

    @property
    def dependencies(self) -> Tuple[str, ...]:
        """The class under verification followed by its dependencies."""
        return self.request.dependencies

    def merged_relevant_classes(self) -> str:
        return self.request.merged_dependencies()

    @property
    def method_id(self) -> str:
        return method_identifier(self.request.method)

    def verify(self) -> bool:
        """Run one bounded verification attempt and report it.

        Returns:
            True iff the method satisfies its contract within the bounds.
        """
        if self.state is VerificationState.RUNNING:
            raise UsageError("verification already in progress")
        self.outcome = None
        self.trace = None
        self.state = VerificationState.RUNNING
        try:
            return self._run()
        except BaseException:
            if self.state is VerificationState.RUNNING:
                self.state = VerificationState.NOT_STARTED
            raise

    def _run(self) -> bool:
        request = self.request
        if request.subject is None or not request.method:
            raise UsageError("program or method is null")
        if not request.subject.is_valid():
            raise UsageError("program does not compile")

        subject = request.subject.class_name
        self.logger.step(f"Verifying {subject}.{request.method}")
        configuration = build_configuration(request)
        self.logger.options(configuration)

        outcome = interpret(self.engine, configuration)
        trace = None
        if isinstance(outcome, Refuted):
            trace = extract_counterexample(outcome.model, self.dependencies, subject, self.method_id)
            self.logger.info(f"Counterexample found ({len(trace)} bindings)")
        elif isinstance(outcome, Inconclusive):
            self.logger.warning(f"Verification inconclusive: {outcome.reason}")
        else:
            self.logger.success(f"{subject}.{request.method} satisfies its contract")

        self.outcome = outcome
        self.trace = trace
        self.state = _TERMINAL[outcome.status]
        self.reporter.emit(outcome, trace)
        return isinstance(outcome, Proved)

    def counterexample(self, context: Optional[Sequence[str]] = None,
                       class_name: Optional[str] = None,
                       method: Optional[str] = None) -> CounterexampleTrace:
        """Counterexample trace of the last refuted verification.

        Defaults to the request's dependency list, subject class and method.
        Raises UsageError unless the last verify() ended REFUTED.
        """
        if self.state is VerificationState.NOT_STARTED:
            raise UsageError("verification must be performed to obtain a counterexample")
        if self.state is not VerificationState.REFUTED:
            raise UsageError(f"verification must fail to obtain a counterexample (state: {self.state.value})")
        if context is None and class_name is None and method is None and self.trace is not None:
            return self.trace
        return extract_counterexample(
            self.outcome.model,
            tuple(context) if context is not None else self.dependencies,
            class_name or self.request.subject.class_name,
            method_identifier(method) if method else self.method_id,
        )
