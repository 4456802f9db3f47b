"""
Contract clause translation: Python expression syntax -> Z3 terms.

Clauses are written as Python expressions over the names declared by a
method model. Supported:
  - int/bool/real literals, names, `this.f` and `Owner.f` field access
  - + - * // % / and unary -/+, `not`
  - and/or, comparison chains, `a if c else b`
  - old(e), result, implies(a, b), abs(e), min(a, b), max(a, b)

Constructs outside this set raise UnsupportedFeatureError. Names that do not
resolve and ill-typed terms raise SemanticValidityError.
"""
import ast
from typing import Any, Dict, Mapping, Optional, Union

import z3

from bounded_verify.errors import SemanticValidityError, UnsupportedFeatureError

Scope = Mapping[str, Union[z3.ExprRef, Mapping[str, z3.ExprRef]]]


class ClauseTranslator:
    """Translates clauses against a current scope and, optionally, a pre-state scope for old()."""

    def __init__(self, scope: Scope, old_scope: Optional[Scope] = None):
        self.scope = scope
        self.old_scope = old_scope

    def translate(self, text: str, where: str = "clause") -> z3.ExprRef:
        try:
            tree = ast.parse(str(text).strip(), mode="eval")
        except SyntaxError as e:
            raise SemanticValidityError(f"malformed {where} '{text}': {e.msg}")
        try:
            return self._eval(tree.body, self.scope)
        except z3.Z3Exception as e:
            raise SemanticValidityError(f"ill-typed {where} '{text}': {e}")

    def translate_bool(self, text: str, where: str = "clause") -> z3.BoolRef:
        term = self.translate(text, where)
        if not z3.is_bool(term):
            raise SemanticValidityError(f"{where} '{text}' is not a boolean expression")
        return term

    # ------------------------------------------------------------------

    def _eval(self, node: ast.expr, scope: Scope) -> Any:
        if isinstance(node, ast.Constant):
            return self._constant(node)
        if isinstance(node, ast.Name):
            return self._name(node.id, scope)
        if isinstance(node, ast.Attribute):
            return self._attribute(node, scope)
        if isinstance(node, ast.BinOp):
            return self._binop(node, scope)
        if isinstance(node, ast.UnaryOp):
            operand = self._eval(node.operand, scope)
            if isinstance(node.op, ast.USub):
                return -operand
            if isinstance(node.op, ast.UAdd):
                return operand
            if isinstance(node.op, ast.Not):
                return z3.Not(operand)
            raise UnsupportedFeatureError(f"unary operator {type(node.op).__name__} is not supported")
        if isinstance(node, ast.BoolOp):
            values = [self._eval(v, scope) for v in node.values]
            return z3.And(*values) if isinstance(node.op, ast.And) else z3.Or(*values)
        if isinstance(node, ast.Compare):
            return self._compare(node, scope)
        if isinstance(node, ast.IfExp):
            return z3.If(self._eval(node.test, scope),
                         self._eval(node.body, scope),
                         self._eval(node.orelse, scope))
        if isinstance(node, ast.Call):
            return self._call(node, scope)
        raise UnsupportedFeatureError(f"expression {type(node).__name__} is not supported")

    @staticmethod
    def _constant(node: ast.Constant):
        v = node.value
        if isinstance(v, bool):
            return z3.BoolVal(v)
        if isinstance(v, int):
            return z3.IntVal(v)
        if isinstance(v, float):
            return z3.RealVal(v)
        raise UnsupportedFeatureError(f"literal {v!r} is not supported")

    @staticmethod
    def _name(name: str, scope: Scope):
        if name not in scope:
            raise SemanticValidityError(f"unknown name '{name}'")
        value = scope[name]
        if isinstance(value, Mapping):
            raise SemanticValidityError(f"'{name}' is not a value")
        return value

    @staticmethod
    def _attribute(node: ast.Attribute, scope: Scope):
        if not isinstance(node.value, ast.Name):
            raise UnsupportedFeatureError("only single-level field access is supported")
        owner = scope.get(node.value.id)
        if not isinstance(owner, Mapping):
            raise SemanticValidityError(f"'{node.value.id}' has no fields")
        if node.attr not in owner:
            raise SemanticValidityError(f"unknown field '{node.value.id}.{node.attr}'")
        return owner[node.attr]

    def _binop(self, node: ast.BinOp, scope: Scope):
        left = self._eval(node.left, scope)
        right = self._eval(node.right, scope)
        op = node.op
        if isinstance(op, ast.Add):
            return left + right
        if isinstance(op, ast.Sub):
            return left - right
        if isinstance(op, ast.Mult):
            return left * right
        if isinstance(op, ast.FloorDiv):
            return left / right  # Int / Int is integer division in Z3
        if isinstance(op, ast.Mod):
            return left % right
        if isinstance(op, ast.Div):
            return z3.ToReal(left) / z3.ToReal(right)
        raise UnsupportedFeatureError(f"operator {type(op).__name__} is not supported")

    def _compare(self, node: ast.Compare, scope: Scope):
        left = self._eval(node.left, scope)
        parts = []
        for op, comparator in zip(node.ops, node.comparators):
            right = self._eval(comparator, scope)
            if isinstance(op, ast.Lt):
                parts.append(left < right)
            elif isinstance(op, ast.LtE):
                parts.append(left <= right)
            elif isinstance(op, ast.Gt):
                parts.append(left > right)
            elif isinstance(op, ast.GtE):
                parts.append(left >= right)
            elif isinstance(op, ast.Eq):
                parts.append(left == right)
            elif isinstance(op, ast.NotEq):
                parts.append(left != right)
            else:
                raise UnsupportedFeatureError(f"comparison {type(op).__name__} is not supported")
            left = right
        return parts[0] if len(parts) == 1 else z3.And(*parts)

    def _call(self, node: ast.Call, scope: Scope):
        if not isinstance(node.func, ast.Name) or node.keywords:
            raise UnsupportedFeatureError("only plain calls to contract helpers are supported")
        fn = node.func.id
        if fn == "old":
            if self.old_scope is None:
                raise SemanticValidityError("old() is only allowed in postconditions and effects")
            self._arity(fn, node, 1)
            return self._eval(node.args[0], self.old_scope)
        args = [self._eval(a, scope) for a in node.args]
        if fn == "implies":
            self._arity(fn, node, 2)
            return z3.Implies(args[0], args[1])
        if fn == "abs":
            self._arity(fn, node, 1)
            return z3.If(args[0] >= 0, args[0], -args[0])
        if fn in ("min", "max"):
            self._arity(fn, node, 2)
            a, b = args
            return z3.If(a <= b, a, b) if fn == "min" else z3.If(a >= b, a, b)
        raise UnsupportedFeatureError(f"call to '{fn}' is not supported")

    @staticmethod
    def _arity(fn: str, node: ast.Call, n: int):
        if len(node.args) != n:
            raise SemanticValidityError(f"{fn}() takes {n} argument(s), got {len(node.args)}")


def coerce(term: z3.ExprRef, sort: z3.SortRef, where: str) -> z3.ExprRef:
    """Fit `term` to `sort`, widening Int to Real; anything else is a type error."""
    if term.sort() == sort:
        return term
    if sort == z3.RealSort() and term.sort() == z3.IntSort():
        return z3.ToReal(term)
    raise SemanticValidityError(f"{where} has sort {term.sort()}, expected {sort}")


def declare(name: str, type_name: str) -> z3.ExprRef:
    """Z3 constant for a declared variable of a source-level type."""
    sort = sort_of(type_name)
    return z3.Const(name, sort)


SORTS: Dict[str, str] = {
    "int": "Int", "integer": "Int", "long": "Int", "short": "Int", "byte": "Int",
    "boolean": "Bool", "bool": "Bool",
    "real": "Real", "double": "Real", "float": "Real",
}


def sort_of(type_name: str) -> z3.SortRef:
    kind = SORTS.get(str(type_name).strip().lower())
    if kind is None:
        raise UnsupportedFeatureError(f"type '{type_name}' is not supported")
    if kind == "Int":
        return z3.IntSort()
    if kind == "Bool":
        return z3.BoolSort()
    return z3.RealSort()
