"""
Outcome Interpreter

Runs the engine once and maps what comes back onto an AnalysisOutcome.
Engine failures that mean "could not decide" become Inconclusive; any other
exception is left to the caller.
"""
from typing import Any, Dict

from bounded_verify.engine.base import BoundedVerificationEngine
from bounded_verify.errors import SemanticValidityError, UnsupportedFeatureError
from bounded_verify.types import AnalysisOutcome, Inconclusive, Proved, Refuted


def interpret(engine: BoundedVerificationEngine, configuration: Dict[str, Any]) -> AnalysisOutcome:
    try:
        result = engine.analyze(configuration)
    except UnsupportedFeatureError as e:
        # well formed contract, but the engine cannot translate it
        return Inconclusive(
            kind="unsupported",
            reason=f"contract uses a feature the engine does not support: {e}",
            diagnostics=[str(e)],
        )
    except SemanticValidityError as e:
        return Inconclusive(
            kind="semantic",
            reason=f"contract is semantically invalid: {e}",
            diagnostics=[str(e)],
        )

    if result.is_sat():
        return Refuted(model=result.model, time_ms=result.time_ms)
    return Proved(time_ms=result.time_ms)
