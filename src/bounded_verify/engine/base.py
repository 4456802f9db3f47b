"""
Bounded verification engine interface.

An engine takes the flat option mapping produced by the configuration
builder, checks the method against its contract within the configured
bounds and returns an AnalysisResult. It signals untranslatable or
semantically invalid input by raising UnsupportedFeatureError or
SemanticValidityError instead of returning.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence


class SolvedModel(ABC):
    """Opaque handle on a satisfying assignment found by the engine."""

    @abstractmethod
    def snapshot(self, context: Sequence[str], class_name: str, method_id: str) -> Dict[str, Any]:
        """Variable name -> solved value, restricted to one invocation site.

        Args:
            context: classes in scope for the analysis (static state of
                classes outside it is left out)
            class_name: qualified class declaring the method
            method_id: method identifier including its invocation-site suffix
        """


@dataclass
class AnalysisResult:
    satisfiable: bool
    model: Optional[SolvedModel] = None
    time_ms: float = 0.0

    def is_sat(self) -> bool:
        return self.satisfiable

    def is_unsat(self) -> bool:
        return not self.satisfiable


class BoundedVerificationEngine(ABC):

    @abstractmethod
    def analyze(self, configuration: Dict[str, Any]) -> AnalysisResult:
        """Run one bounded check. Blocking; may take a long time."""
