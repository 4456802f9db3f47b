# src/bounded_verify/engine/z3_runner.py
from time import perf_counter
from typing import Dict, Tuple

from z3 import sat, unsat


def _z3_to_py(val):
    """Best-effort conversion of Z3 values to plain Python values."""
    if val is None:
        return None
    s = str(val)

    # BoolRef -> bool
    if s == "True":
        return True
    if s == "False":
        return False

    # IntNumRef has as_long()
    if hasattr(val, "as_long"):
        try:
            return int(val.as_long())
        except Exception:
            pass
    # Rational numerals -> float when exact enough, else keep "p/q"
    if hasattr(val, "as_decimal"):
        dec = val.as_decimal(20)
        if dec.endswith("?"):
            return s
        try:
            return float(dec)
        except ValueError:
            return s

    return s


def run_solver(solver, model_vars: Dict[str, object]) -> Tuple[str, Dict[str, object], float]:
    """Check `solver`; on SAT evaluate every symbol in `model_vars`.

    Returns (status, values, elapsed_ms). For UNKNOWN, values holds the
    solver's reason under "_reason".
    """
    t0 = perf_counter()
    res = solver.check()
    ms = (perf_counter() - t0) * 1000.0

    if res == sat:
        m = solver.model()
        values = {}
        # model_completion fills in symbols the solver left unconstrained
        for name, sym in model_vars.items():
            values[name] = _z3_to_py(m.eval(sym, model_completion=True))
        return "SAT", values, ms
    if res == unsat:
        return "UNSAT", {}, ms
    return "UNKNOWN", {"_reason": solver.reason_unknown()}, ms
