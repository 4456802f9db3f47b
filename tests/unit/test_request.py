import sys

import pytest

from bounded_verify.config_builder import ANALYSIS_TOGGLES, build_configuration, method_identifier
from bounded_verify.errors import RequestError
from bounded_verify.subject import AnnotatedClass, CommandCompileCheck
from bounded_verify.types import VerificationRequest

# Accepts only the argument layout a javac-style compiler expects:
#   -d <existing dir> -sourcepath <root> <file>
CHECK_ARGS = (
    "import os, sys; a = sys.argv[1:]; "
    "sys.exit(0 if a[0] == '-d' and os.path.isdir(a[1]) and a[2] == '-sourcepath' "
    "and a[3] == os.environ['EXPECTED_ROOT'] and a[4].endswith('Pair.java') else 3)"
)


@pytest.fixture
def pair_source(tmp_path):
    (tmp_path / "main").mkdir()
    path = tmp_path / "main" / "Pair.java"
    path.write_text("class Pair {}")
    return path


def test_subject_paths():
    """Qualified names map onto slash paths and a source file below the root."""
    subject = AnnotatedClass("src/", "main.util.Pair")
    assert subject.class_name_as_path == "main/util/Pair"
    assert subject.simple_name == "Pair"
    assert subject.source_file.as_posix() == "src/main/util/Pair.java"


def test_subject_valid_when_source_readable(tmp_path, pair_source):
    """Without a compiler a subject is valid exactly when its source file is readable."""
    assert AnnotatedClass(str(tmp_path), "main.Pair").is_valid()
    assert not AnnotatedClass(str(tmp_path), "main.Missing").is_valid()


def test_subject_uses_compile_check():
    """The compile check decides validity and runs only once per subject."""
    seen = []

    def compiler(path):
        seen.append(path)
        return False

    subject = AnnotatedClass("src", "a.B", compiler=compiler)
    assert not subject.is_valid()
    assert not subject.is_valid()
    assert len(seen) == 1


def test_compile_command_exit_status(tmp_path, pair_source):
    """A zero exit status means well formed, anything else means broken."""
    ok = CommandCompileCheck([sys.executable, "-c", "import sys; sys.exit(0)"])
    failing = CommandCompileCheck([sys.executable, "-c", "import sys; sys.exit(1)"])
    assert ok(pair_source) is True
    assert failing(pair_source) is False
    assert not AnnotatedClass(str(tmp_path), "main.Pair", compiler=failing).is_valid()


def test_compile_command_arguments(tmp_path, pair_source, monkeypatch):
    """The compiler gets an output directory, the source path and the file, in that order."""
    monkeypatch.setenv("EXPECTED_ROOT", str(tmp_path))
    check = CommandCompileCheck([sys.executable, "-c", CHECK_ARGS], source_root=str(tmp_path))
    assert check(pair_source) is True
    assert CommandCompileCheck([sys.executable, "-c", CHECK_ARGS], source_root="elsewhere")(pair_source) is False


def test_compile_command_string_is_split(pair_source):
    """A command given as one string is split like a shell would."""
    check = CommandCompileCheck(f'"{sys.executable}" -c "import sys; sys.exit(0)"')
    assert check.command[0] == sys.executable
    assert check(pair_source) is True


def test_missing_compiler_means_invalid(tmp_path, pair_source):
    """A compiler that cannot be started cannot vouch for the source."""
    check = CommandCompileCheck(["no-such-compiler-binary-xyz"])
    assert check(pair_source) is False
    assert not AnnotatedClass(str(tmp_path), "main.Pair", compiler=check).is_valid()


def test_compile_command_skips_missing_source(tmp_path):
    """A missing source file is invalid without running the compiler."""
    check = CommandCompileCheck([sys.executable, "-c", "import sys; sys.exit(0)"])
    assert check(tmp_path / "main" / "Missing.java") is False


def test_create_rejects_missing_subject():
    """A request needs a subject."""
    with pytest.raises(RequestError, match="program is null"):
        VerificationRequest.create(None, "add")


def test_create_rejects_subject_that_does_not_compile():
    """A subject that fails its compile check is rejected up front."""
    broken = AnnotatedClass("src", "a.B", compiler=lambda p: False)
    with pytest.raises(RequestError, match="does not compile"):
        VerificationRequest.create(broken, "add")


@pytest.mark.parametrize("method", [None, "", "   "])
def test_create_rejects_missing_method(subject, method):
    """A request needs a non-blank method name."""
    with pytest.raises(RequestError):
        VerificationRequest.create(subject, method)


def test_dependencies_start_with_subject(subject):
    """The subject heads the dependency list, followed by the needed classes in order."""
    request = VerificationRequest.create(subject, "add", ["main.D", "main.E"])
    assert request.dependencies == ("main.util.Counter", "main.D", "main.E")
    assert request.merged_dependencies() == "main.util.Counter,main.D,main.E"


def test_dependencies_keep_duplicates(subject):
    """Repeated class names are passed through unchanged."""
    request = VerificationRequest.create(subject, "add", ["main.D", "main.D", "main.util.Counter"])
    assert request.dependencies == ("main.util.Counter", "main.D", "main.D", "main.util.Counter")


def test_dependency_order_survives_later_updates(subject):
    """Replacing the subject or scope keeps the needed classes and leaves the original untouched."""
    request = VerificationRequest.create(subject, "add", ["main.D", "main.E"])
    other = AnnotatedClass("src/", "main.util.Other", compiler=lambda p: True)
    updated = request.with_scope("int:5").with_subject(other).with_scope(None)
    assert updated.dependencies == ("main.util.Other", "main.D", "main.E")
    assert request.dependencies == ("main.util.Counter", "main.D", "main.E")


def test_with_subject_validates(subject):
    """A replacement subject goes through the same validity check."""
    request = VerificationRequest.create(subject, "add")
    with pytest.raises(RequestError):
        request.with_subject(AnnotatedClass("src", "a.B", compiler=lambda p: False))


def test_request_is_immutable(subject):
    """Requests cannot be modified in place."""
    request = VerificationRequest.create(subject, "add")
    with pytest.raises(Exception):
        request.method = "remove"


def test_configuration_fields(subject):
    """The engine configuration carries the subject path, classes, method site and fixed toggles."""
    request = VerificationRequest.create(subject, "add", ["main.D"])
    cfg = build_configuration(request)
    assert cfg["classToCheck"] == "main/util/Counter"
    assert cfg["relevantClasses"] == "main.util.Counter,main.D"
    assert cfg["methodToCheck"] == "add_0"
    assert cfg["jmlParser.sourcePathStr"] == "src/"
    for key, value in ANALYSIS_TOGGLES.items():
        assert cfg[key] == value


def test_configuration_omits_scope_unless_given(subject):
    """Type scopes appear only when the request has one."""
    request = VerificationRequest.create(subject, "add")
    assert "typeScopes" not in build_configuration(request)
    scoped = build_configuration(request.with_scope("main.util.Node:4"))
    assert scoped["typeScopes"] == "main.util.Node:4"


def test_configuration_is_deterministic(subject):
    """Building twice from one request gives equal configurations."""
    request = VerificationRequest.create(subject, "add", ["main.D"], scope="int:5")
    assert build_configuration(request) == build_configuration(request)


def test_fixed_toggles():
    """Analysis toggles are fixed and the method site uses the first invocation suffix."""
    assert ANALYSIS_TOGGLES["useJavaArithmetic"] is False
    assert ANALYSIS_TOGGLES["checkArithmeticException"] is False
    assert ANALYSIS_TOGGLES["attemptToCorrectBug"] is False
    assert ANALYSIS_TOGGLES["objectScope"] == 3
    assert ANALYSIS_TOGGLES["loopUnroll"] == 3
    assert ANALYSIS_TOGGLES["maxStrykerMethodsPerFile"] == 1
    assert method_identifier("add") == "add_0"
