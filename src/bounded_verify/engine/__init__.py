"""
Bounded Verification Engines
============================

`create_engine(cfg)` builds the engine named by the `engine` section of the
loaded configuration: the bundled Z3 backend, or any callable given as
`factory: "package.module:callable"` returning a BoundedVerificationEngine.
"""
import importlib

from bounded_verify.engine.base import AnalysisResult, BoundedVerificationEngine, SolvedModel
from bounded_verify.engine.z3_engine import Z3Engine
from bounded_verify.errors import EngineConfigurationError


def _load_factory(path: str):
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise EngineConfigurationError(f"engine factory must look like 'module:callable', got '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineConfigurationError(f"cannot import engine module '{module_name}': {e}")
    try:
        return getattr(module, attr)
    except AttributeError:
        raise EngineConfigurationError(f"'{module_name}' has no attribute '{attr}'")


def create_engine(cfg: dict) -> BoundedVerificationEngine:
    section = cfg.get("engine") or {}
    factory = section.get("factory")
    if factory:
        engine = _load_factory(factory)(section)
        if not isinstance(engine, BoundedVerificationEngine):
            raise EngineConfigurationError(f"'{factory}' did not return a BoundedVerificationEngine")
        return engine
    backend = section.get("backend", "z3")
    if backend == "z3":
        return Z3Engine(
            model_suffix=section.get("model_suffix") or ".model.yaml",
            timeout_ms=section.get("timeout_ms"),
        )
    raise EngineConfigurationError(f"unknown engine backend '{backend}'")


__all__ = [
    'AnalysisResult',
    'BoundedVerificationEngine',
    'SolvedModel',
    'Z3Engine',
    'create_engine',
]
