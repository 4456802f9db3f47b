"""
Verification Configuration Builder
==================================

Flattens a VerificationRequest into the option mapping the bounded
verification engine consumes. Same request in, same mapping out.
"""
from typing import Any, Dict

from bounded_verify.types import VerificationRequest

# Engines address a method through one canonical entry point per method.
INVOCATION_SITE_SUFFIX = "_0"

# Not user-configurable.
ANALYSIS_TOGGLES: Dict[str, Any] = {
    "relevancyAnalysis": True,
    "checkNullDereference": True,
    "useJavaArithmetic": False,
    "checkArithmeticException": False,
    "inferScope": True,
    "objectScope": 3,
    "loopUnroll": 3,
    "skolemizeInstanceInvariant": True,
    "skolemizeInstanceAbstraction": True,
    "generateUnitTestCase": True,
    "attemptToCorrectBug": False,
    "maxStrykerMethodsPerFile": 1,
    "removeQuantifiers": True,
    "useJavaSBP": False,
    "useTightUpperBounds": False,
}


def method_identifier(method: str) -> str:
    """`add` -> `add_0`"""
    return method + INVOCATION_SITE_SUFFIX


def build_configuration(request: VerificationRequest) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {
        "classToCheck": request.subject.class_name_as_path,
        "relevantClasses": request.merged_dependencies(),
        "methodToCheck": method_identifier(request.method),
        "jmlParser.sourcePathStr": request.subject.source_root,
    }
    cfg.update(ANALYSIS_TOGGLES)
    # absent key: the engine infers the scope
    if request.scope is not None:
        cfg["typeScopes"] = request.scope
    return cfg
