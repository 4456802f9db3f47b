import textwrap
from typing import List

import pytest

from bounded_verify.engine.base import AnalysisResult, BoundedVerificationEngine, SolvedModel
from bounded_verify.subject import AnnotatedClass
from bounded_verify.utils.logger import VerifierLogger, set_logger

COUNTER_MODEL = """
class: main.util.Counter
fields:
  count: int
static_fields:
  LIMIT: int
invariant: "count >= 0"
methods:
  add:
    params: {n: int}
    requires: "n >= 0"
    effects: {count: "count + n"}
    ensures: "count == old(count) + n"
  decrement:
    effects: {count: "count - 1"}
    ensures: "count == old(count) - 1"
  bump:
    params: {n: int}
    requires: "n > 0"
    effects: {count: "count + n"}
    ensures: "count <= Config.MAX"
  clamp:
    static: true
    params: {x: int}
    returns: int
    effects: {result: "x if x <= LIMIT else LIMIT"}
    ensures: "result <= LIMIT"
  half:
    static: true
    params: {x: int}
    returns: int
    effects: {result: "x // 2"}
    ensures: "result * 2 == x"
  below:
    static: true
    params: {x: int}
    ensures: "x < 8"
  undeclared:
    ensures: "count == missing"
  notBoolean:
    ensures: "count + 1"
  linked:
    params: {next: Node}
    ensures: "True"
  setLimit:
    static: true
    params: {LIMIT: int}
    requires: "LIMIT > 0"
    effects: {LIMIT: "LIMIT"}
    ensures: "Counter.LIMIT == LIMIT and LIMIT > 0"
  sameLimit:
    static: true
    params: {LIMIT: int}
    ensures: "Counter.LIMIT == LIMIT"
"""

CONFIG_MODEL = """
class: main.util.Config
static_fields:
  MAX: int
"""


def write_class(root, class_name: str, model: str = None, source: str = None):
    base = root.joinpath(*class_name.split("."))
    base.parent.mkdir(parents=True, exist_ok=True)
    simple = class_name.rsplit(".", 1)[-1]
    base.with_suffix(".java").write_text(source or f"public class {simple} {{}}\n", encoding="utf-8")
    if model is not None:
        (base.parent / (simple + ".model.yaml")).write_text(textwrap.dedent(model), encoding="utf-8")


@pytest.fixture(autouse=True)
def quiet_logger():
    set_logger(VerifierLogger(verbose=False))
    yield
    set_logger(None)


@pytest.fixture
def source_root(tmp_path):
    """Source tree with an annotated Counter and its Config dependency."""
    root = tmp_path / "src"
    write_class(root, "main.util.Counter", COUNTER_MODEL)
    write_class(root, "main.util.Config", CONFIG_MODEL)
    return root


@pytest.fixture
def subject():
    return AnnotatedClass("src/", "main.util.Counter", compiler=lambda path: True)


class StubModel(SolvedModel):

    def __init__(self, snapshot: dict):
        self._snapshot = snapshot
        self.calls = []

    def snapshot(self, context, class_name, method_id):
        self.calls.append((tuple(context), class_name, method_id))
        return dict(self._snapshot)


class StubEngine(BoundedVerificationEngine):
    """Replays canned results; an exception instance is raised instead of returned."""

    def __init__(self, *results):
        self.results: List = list(results)
        self.configurations = []
        self.on_analyze = None

    def analyze(self, configuration):
        self.configurations.append(configuration)
        if self.on_analyze is not None:
            self.on_analyze()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def refuted(snapshot: dict) -> AnalysisResult:
    return AnalysisResult(satisfiable=True, model=StubModel(snapshot))


def proved() -> AnalysisResult:
    return AnalysisResult(satisfiable=False)


class RecordingSink:

    def __init__(self):
        self.reports = []

    def write(self, text):
        self.reports.append(text)


class BrokenSink:

    def write(self, text):
        raise OSError("disk full")
