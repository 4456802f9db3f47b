"""
Reference bounded verification engine backed by Z3.

Method bodies and contracts are read from a YAML method model stored next
to the annotated source (`<source root>/<class path>.model.yaml`):

    class: main.util.Counter
    fields: {count: int}
    static_fields: {LIMIT: int}
    invariant: "count >= 0"
    methods:
      add:
        params: {n: int}
        returns: int
        requires: "n >= 0 and count + n <= LIMIT"
        effects: {count: "count + n", result: "count + n"}
        ensures: "count == old(count) + n and result == count"

The check asks for a pre-state satisfying the precondition (and the class
invariant for instance methods) whose post-state breaks the postcondition
or the invariant. SAT is a counterexample, UNSAT means the contract holds
for every input within the integer bit width.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
import z3

from bounded_verify.engine.base import AnalysisResult, BoundedVerificationEngine, SolvedModel
from bounded_verify.engine.expressions import ClauseTranslator, coerce, declare, sort_of
from bounded_verify.engine.z3_runner import run_solver
from bounded_verify.errors import SemanticValidityError, UnsupportedFeatureError
from bounded_verify.utils.logger import get_logger

DEFAULT_INT_BITWIDTH = 4
MODEL_SUFFIX = ".model.yaml"
RECEIVER_VAR = "thiz"
SITE_SUFFIX = "_0"


@dataclass
class MethodModel:
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    is_static: bool = False
    returns: Optional[str] = None
    requires: str = "True"
    ensures: str = "True"
    effects: Dict[str, str] = field(default_factory=dict)


@dataclass
class ClassModel:
    class_name: str
    fields: Dict[str, str] = field(default_factory=dict)
    static_fields: Dict[str, str] = field(default_factory=dict)
    invariant: Optional[str] = None
    methods: Dict[str, MethodModel] = field(default_factory=dict)

    @property
    def simple_name(self) -> str:
        return self.class_name.rsplit(".", 1)[-1]


def _mapping(raw: Any, where: str) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SemanticValidityError(f"{where} must be a mapping")
    return {str(k): str(v) for k, v in raw.items()}


def parse_class_model(raw: Any, class_name: str) -> ClassModel:
    if not isinstance(raw, dict):
        raise SemanticValidityError(f"method model for {class_name} must be a mapping")
    declared = raw.get("class", class_name)
    if declared != class_name:
        raise SemanticValidityError(f"method model declares class {declared}, expected {class_name}")
    model = ClassModel(
        class_name=class_name,
        fields=_mapping(raw.get("fields"), "fields"),
        static_fields=_mapping(raw.get("static_fields"), "static_fields"),
        invariant=raw.get("invariant"),
    )
    for name, body in (raw.get("methods") or {}).items():
        body = body or {}
        if not isinstance(body, dict):
            raise SemanticValidityError(f"method {name} must be a mapping")
        model.methods[str(name)] = MethodModel(
            name=str(name),
            params=_mapping(body.get("params"), f"{name}.params"),
            is_static=bool(body.get("static", False)),
            returns=body.get("returns"),
            requires=str(body.get("requires", "True")),
            ensures=str(body.get("ensures", "True")),
            effects=_mapping(body.get("effects"), f"{name}.effects"),
        )
    return model


def load_class_model(source_root: str, class_name: str, suffix: str = MODEL_SUFFIX) -> Optional[ClassModel]:
    """Method model of `class_name`, or None when the class has none."""
    path = Path(source_root) / (class_name.replace(".", "/") + suffix)
    if not path.is_file():
        return None
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SemanticValidityError(f"unreadable method model {path}: {e}")
    return parse_class_model(raw, class_name)


def parse_type_scopes(text: Optional[str]) -> Dict[str, int]:
    """`"int:5,main.Node:3"` -> {"int": 5, "main.Node": 3}"""
    scopes: Dict[str, int] = {}
    if not text:
        return scopes
    for entry in str(text).split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, bound = entry.rpartition(":")
        if not sep or not name.strip():
            raise SemanticValidityError(f"malformed scope entry '{entry}' (expected Name:N)")
        try:
            n = int(bound)
        except ValueError:
            raise SemanticValidityError(f"scope bound for {name} is not an integer: '{bound}'")
        if n < 1:
            raise SemanticValidityError(f"scope bound for {name} must be positive")
        scopes[name.strip()] = n
    return scopes


def int_bitwidth(scopes: Dict[str, int]) -> int:
    for key in ("int", "Integer", "java.lang.Integer"):
        if key in scopes:
            return scopes[key]
    return DEFAULT_INT_BITWIDTH


class Z3SolvedModel(SolvedModel):
    """Pre-state values of one refuted invocation site."""

    def __init__(self, class_name: str, method_id: str, is_static: bool,
                 receiver_fields: Sequence[str], params: Sequence[str],
                 statics: Sequence[Tuple[str, str, str]], values: Dict[str, Any]):
        self.class_name = class_name
        self.method_id = method_id
        self.is_static = is_static
        self.receiver_fields = list(receiver_fields)
        self.params = list(params)
        # (owning class, display name, solver variable)
        self.statics = list(statics)
        self.values = values

    def snapshot(self, context: Sequence[str], class_name: str, method_id: str) -> Dict[str, Any]:
        if (class_name, method_id) != (self.class_name, self.method_id):
            return {}
        snap: Dict[str, Any] = {}
        if not self.is_static:
            snap[RECEIVER_VAR + SITE_SUFFIX] = {f: self.values[f"this.{f}"] for f in self.receiver_fields}
        for p in self.params:
            snap[p + SITE_SUFFIX] = self.values[p]
        for owner, display, var in self.statics:
            if owner in context:
                snap[display + SITE_SUFFIX] = self.values[var]
        return snap


class Z3Engine(BoundedVerificationEngine):
    """Bounded contract checker over YAML method models."""

    def __init__(self, model_suffix: str = MODEL_SUFFIX, timeout_ms: Optional[int] = None):
        self.model_suffix = model_suffix
        self.timeout_ms = timeout_ms
        self.logger = get_logger()

    def analyze(self, configuration: Dict[str, Any]) -> AnalysisResult:
        root = configuration["jmlParser.sourcePathStr"]
        class_name = configuration["classToCheck"].replace("/", ".")
        method_id = configuration["methodToCheck"]
        method_name = method_id[:-len(SITE_SUFFIX)] if method_id.endswith(SITE_SUFFIX) else method_id
        relevant = [c for c in str(configuration.get("relevantClasses", "")).split(",") if c]

        subject = load_class_model(root, class_name, self.model_suffix)
        if subject is None:
            raise UnsupportedFeatureError(f"no method model for {class_name}")
        method = subject.methods.get(method_name)
        if method is None:
            raise SemanticValidityError(f"{class_name} has no method '{method_name}'")

        dependencies = []
        seen = {class_name}
        for dep in relevant:
            # the list may repeat classes; each is modelled once
            if dep in seen:
                continue
            seen.add(dep)
            dep_model = load_class_model(root, dep, self.model_suffix)
            if dep_model is None:
                self.logger.debug(f"no method model for dependency {dep}, skipping")
                continue
            dependencies.append(dep_model)

        scopes = parse_type_scopes(configuration.get("typeScopes"))
        bits = int_bitwidth(scopes)
        self.logger.debug(f"checking {class_name}.{method_id} with int bit width {bits}")

        solver = z3.Solver()
        if self.timeout_ms:
            solver.set("timeout", int(self.timeout_ms))
        encoding = _MethodEncoding(subject, method, dependencies, bits)
        encoding.encode(solver)

        status, values, ms = run_solver(solver, encoding.model_vars)
        if status == "UNKNOWN":
            raise UnsupportedFeatureError(f"solver gave up: {values.get('_reason', 'unknown')}")
        if status == "UNSAT":
            return AnalysisResult(satisfiable=False, time_ms=ms)
        model = Z3SolvedModel(
            class_name=class_name,
            method_id=method_id,
            is_static=method.is_static,
            receiver_fields=[] if method.is_static else list(subject.fields),
            params=list(method.params),
            statics=encoding.static_vars,
            values=values,
        )
        return AnalysisResult(satisfiable=True, model=model, time_ms=ms)


class _MethodEncoding:
    """Pre/post scopes and verification condition for one method."""

    def __init__(self, subject: ClassModel, method: MethodModel,
                 dependencies: List[ClassModel], bits: int):
        self.subject = subject
        self.method = method
        self.dependencies = dependencies
        self.bits = bits
        self.model_vars: Dict[str, z3.ExprRef] = {}
        self.static_vars: List[Tuple[str, str, str]] = []

    def _var(self, name: str, type_name: str) -> z3.ExprRef:
        if name in self.model_vars:
            raise SemanticValidityError(f"'{name}' is declared twice")
        var = declare(name, type_name)
        self.model_vars[name] = var
        return var

    def _bounds(self) -> List[z3.BoolRef]:
        lo, hi = -(2 ** (self.bits - 1)), 2 ** (self.bits - 1) - 1
        return [z3.And(v >= lo, v <= hi) for v in self.model_vars.values() if z3.is_int(v)]

    def encode(self, solver: z3.Solver):
        subject, method = self.subject, self.method

        params = {p: self._var(p, t) for p, t in method.params.items()}
        fields_pre: Dict[str, z3.ExprRef] = {}
        if not method.is_static:
            fields_pre = {f: self._var(f"this.{f}", t) for f, t in subject.fields.items()}
        statics_pre: Dict[str, z3.ExprRef] = {}
        for f, t in subject.static_fields.items():
            # qualified solver name so a parameter may shadow the static
            var_name = f"{subject.simple_name}.{f}"
            statics_pre[f] = self._var(var_name, t)
            display = var_name if f in method.params else f
            self.static_vars.append((subject.class_name, display, var_name))
        owners: Dict[str, Dict[str, z3.ExprRef]] = {}
        for dep in self.dependencies:
            members = {}
            for f, t in dep.static_fields.items():
                var_name = f"{dep.simple_name}.{f}"
                members[f] = self._var(var_name, t)
                self.static_vars.append((dep.class_name, var_name, var_name))
            owners[dep.simple_name] = members

        pre_scope = self._scope(params, fields_pre, statics_pre, owners)
        pre = ClauseTranslator(pre_scope)

        fields_post = dict(fields_pre)
        statics_post = dict(statics_pre)
        result = None
        effect_terms = ClauseTranslator(pre_scope, old_scope=pre_scope)
        for target, text in method.effects.items():
            where = f"effect on '{target}'"
            term = effect_terms.translate(text, where)
            if target == "result":
                if method.returns is not None:
                    term = coerce(term, sort_of(method.returns), where)
                result = term
            elif target in fields_post:
                fields_post[target] = coerce(term, fields_pre[target].sort(), where)
            elif target in statics_post:
                statics_post[target] = coerce(term, statics_pre[target].sort(), where)
            else:
                raise SemanticValidityError(f"{where}: no such assignable location")
        if result is None and method.returns is not None:
            # unspecified return value: any value of the declared type
            result = declare("result", method.returns)

        post_scope = self._scope(params, fields_post, statics_post, owners)
        if result is not None:
            post_scope["result"] = result
        post = ClauseTranslator(post_scope, old_scope=pre_scope)

        assumptions = [pre.translate_bool(method.requires, "precondition")]
        obligations = [post.translate_bool(method.ensures, "postcondition")]
        if subject.invariant and not method.is_static:
            assumptions.append(pre.translate_bool(subject.invariant, "invariant"))
            obligations.append(post.translate_bool(subject.invariant, "invariant"))

        solver.add(*self._bounds())
        solver.add(*assumptions)
        solver.add(z3.Not(z3.And(*obligations)))

    def _scope(self, params, fields, statics, owners) -> Dict[str, Any]:
        scope: Dict[str, Any] = {}
        scope.update(statics)
        scope.update(fields)
        scope.update(params)  # parameters shadow fields
        if not self.method.is_static:
            scope["this"] = dict(fields)
        own = dict(statics)
        scope[self.subject.simple_name] = own
        for owner, members in owners.items():
            scope.setdefault(owner, members)
        return scope
