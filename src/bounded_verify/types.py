from enum import Enum
from typing import Any, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from bounded_verify.errors import RequestError
from bounded_verify.subject import AnnotatedClass


class VerificationState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    PROVED = "PROVED"
    REFUTED = "REFUTED"
    INCONCLUSIVE = "INCONCLUSIVE"


def _check_subject(subject: Optional[AnnotatedClass]) -> AnnotatedClass:
    if subject is None:
        raise RequestError("program is null")
    if not subject.is_valid():
        raise RequestError("program does not compile")
    return subject


class VerificationRequest(BaseModel):
    """One method of one annotated class, plus the classes it depends on.

    `dependencies` always starts with the subject class name; extra classes
    follow in the order given, duplicates included.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    subject: AnnotatedClass
    method: str = Field(min_length=1)
    dependencies: Tuple[str, ...]
    scope: Optional[str] = None

    @classmethod
    def create(cls, subject: Optional[AnnotatedClass], method: Optional[str],
               extra_dependencies: Sequence[str] = (), scope: Optional[str] = None) -> "VerificationRequest":
        subject = _check_subject(subject)
        if method is None:
            raise RequestError("method is null")
        if not method.strip():
            raise RequestError("method is empty")
        deps = (subject.class_name,) + tuple(extra_dependencies)
        return cls(subject=subject, method=method, dependencies=deps, scope=scope)

    def with_subject(self, subject: Optional[AnnotatedClass]) -> "VerificationRequest":
        """Same request against a different subject class."""
        subject = _check_subject(subject)
        deps = (subject.class_name,) + self.dependencies[1:]
        return self.model_copy(update={"subject": subject, "dependencies": deps})

    def with_scope(self, scope: Optional[str]) -> "VerificationRequest":
        return self.model_copy(update={"scope": scope})

    def merged_dependencies(self) -> str:
        return ",".join(self.dependencies)


class Proved(BaseModel):
    status: Literal["PROVED"] = "PROVED"
    diagnostics: List[str] = []
    time_ms: float = 0.0


class Refuted(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Literal["REFUTED"] = "REFUTED"
    model: Any = None  # engine's solved model handle
    diagnostics: List[str] = []
    time_ms: float = 0.0


class Inconclusive(BaseModel):
    status: Literal["INCONCLUSIVE"] = "INCONCLUSIVE"
    kind: Literal["unsupported", "semantic"]
    reason: str
    diagnostics: List[str] = []
    time_ms: float = 0.0


AnalysisOutcome = Union[Proved, Refuted, Inconclusive]


class CounterexampleTrace(BaseModel):
    """Ordered (display name, value text) bindings; receiver first when present."""
    model_config = ConfigDict(frozen=True)

    entries: Tuple[Tuple[str, str], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def lines(self) -> List[str]:
        return [f"{name} = {value}" for name, value in self.entries]

    def format(self) -> str:
        return "".join(line + "\n" for line in self.lines())
