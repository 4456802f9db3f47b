"""
Bounded contract verification of annotated methods, with readable
counterexamples for refuted contracts.
"""

from .config_builder import ANALYSIS_TOGGLES, build_configuration
from .engine import AnalysisResult, BoundedVerificationEngine, SolvedModel, Z3Engine, create_engine
from .errors import (
    EngineConfigurationError, EngineError, RequestError, SemanticValidityError,
    UnsupportedFeatureError, UsageError, VerifierError,
)
from .extractor import DUMP_MAX_BREADTH, DUMP_MAX_DEPTH, dump, extract_counterexample
from .reporter import ConsoleReportSink, FileReportSink, Reporter, render_report
from .subject import AnnotatedClass
from .types import (
    AnalysisOutcome, CounterexampleTrace, Inconclusive, Proved, Refuted,
    VerificationRequest, VerificationState,
)
from .verifier import BoundedVerifier

__version__ = "0.4.0"

__all__ = [
    'ANALYSIS_TOGGLES',
    'AnalysisOutcome',
    'AnalysisResult',
    'AnnotatedClass',
    'BoundedVerificationEngine',
    'BoundedVerifier',
    'ConsoleReportSink',
    'CounterexampleTrace',
    'DUMP_MAX_BREADTH',
    'DUMP_MAX_DEPTH',
    'EngineConfigurationError',
    'EngineError',
    'FileReportSink',
    'Inconclusive',
    'Proved',
    'Refuted',
    'Reporter',
    'RequestError',
    'SemanticValidityError',
    'SolvedModel',
    'UnsupportedFeatureError',
    'UsageError',
    'VerificationRequest',
    'VerificationState',
    'VerifierError',
    'Z3Engine',
    'build_configuration',
    'create_engine',
    'dump',
    'extract_counterexample',
    'render_report',
]
