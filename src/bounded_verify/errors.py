"""Exception taxonomy for the bounded verifier.

Construction and usage errors are programming errors and propagate to the
caller. Engine failures are caught at the orchestration boundary and turned
into an inconclusive outcome.
"""


class VerifierError(Exception):
    """Base class for every error raised by this package."""


class RequestError(VerifierError, ValueError):
    """A verification request could not be built (missing or invalid subject/method)."""


class UsageError(VerifierError, RuntimeError):
    """An operation was called in a state that does not allow it."""


class EngineError(VerifierError):
    """Base class for failures signalled by a bounded verification engine."""


class UnsupportedFeatureError(EngineError):
    """The construct is well formed but the engine cannot translate it."""


class SemanticValidityError(EngineError):
    """The construct is well formed syntax but invalid under the contract language rules."""


class EngineConfigurationError(EngineError):
    """No engine could be created from the given configuration."""
