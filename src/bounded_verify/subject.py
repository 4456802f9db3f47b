"""
Annotated class under verification.

An AnnotatedClass points at a contract-annotated source file below a source
root. It is only usable as a verification subject when it is well formed,
which is decided by a pluggable compile check.
"""
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional, Sequence

CompileCheck = Callable[[Path], bool]

DEFAULT_SOURCE_SUFFIX = ".java"


def readable_source(path: Path) -> bool:
    """Compile check used when no compiler is configured: the file must exist and be readable."""
    return path.is_file() and os.access(path, os.R_OK)


class CommandCompileCheck:
    """Runs an external compiler on the source file; exit status 0 means well formed."""

    def __init__(self, command: Sequence[str], source_root: Optional[str] = None):
        if isinstance(command, str):
            command = shlex.split(command)
        self.command = list(command)
        self.source_root = source_root

    def __call__(self, path: Path) -> bool:
        if not readable_source(path):
            return False
        with tempfile.TemporaryDirectory() as out_dir:
            args = self.command + ["-d", out_dir]
            if self.source_root:
                args += ["-sourcepath", self.source_root]
            args.append(str(path))
            try:
                proc = subprocess.run(args, capture_output=True, text=True)
            except FileNotFoundError:
                # compiler binary missing: cannot vouch for the source
                return False
        return proc.returncode == 0


class AnnotatedClass:
    """A contract-annotated class: qualified name plus the source root it lives under."""

    def __init__(self, source_root: str, class_name: str,
                 compiler: Optional[CompileCheck] = None,
                 source_suffix: str = DEFAULT_SOURCE_SUFFIX):
        self.source_root = str(source_root)
        self.class_name = class_name
        self.source_suffix = source_suffix
        self._compiler = compiler or readable_source
        self._valid: Optional[bool] = None

    @property
    def class_name_as_path(self) -> str:
        """`main.util.Pair` -> `main/util/Pair`"""
        return self.class_name.replace(".", "/")

    @property
    def simple_name(self) -> str:
        return self.class_name.rsplit(".", 1)[-1]

    @property
    def source_file(self) -> Path:
        return Path(self.source_root) / (self.class_name_as_path + self.source_suffix)

    def is_valid(self) -> bool:
        """True iff the source file passes the compile check. Computed once."""
        if self._valid is None:
            if not self.class_name:
                self._valid = False
            else:
                self._valid = bool(self._compiler(self.source_file))
        return self._valid

    def __eq__(self, other):
        if not isinstance(other, AnnotatedClass):
            return NotImplemented
        return (self.source_root, self.class_name) == (other.source_root, other.class_name)

    def __hash__(self):
        return hash((self.source_root, self.class_name))

    def __repr__(self) -> str:
        return f"AnnotatedClass({self.source_root!r}, {self.class_name!r})"
