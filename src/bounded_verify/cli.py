from typing import List, Optional

import typer

from bounded_verify.config_loader import load_cfg
from bounded_verify.engine import create_engine
from bounded_verify.errors import EngineConfigurationError, RequestError
from bounded_verify.reporter import ConsoleReportSink, FileReportSink, Reporter
from bounded_verify.subject import AnnotatedClass, CommandCompileCheck
from bounded_verify.types import VerificationRequest
from bounded_verify.utils.logger import VerifierLogger, set_logger
from bounded_verify.verifier import BoundedVerifier

app = typer.Typer(help="Bounded verification of an annotated method against its contract")


@app.callback()
def main():
    """Bounded contract verification."""


def _split_classes(values: Optional[List[str]]) -> List[str]:
    out = []
    for value in values or []:
        out.extend(c.strip() for c in value.split(",") if c.strip())
    return out


@app.command()
def verify(
    path: str = typer.Option(..., "-p", "--path", help="qualified path e.g.: src/ or /home/jdoe/workspace/project/src/"),
    class_name: str = typer.Option(..., "-c", "--class-name", help="qualified class name e.g.: main.util.Pair"),
    method: str = typer.Option(..., "-m", "--method", help="method to verify e.g.: add"),
    needed_classes: Optional[List[str]] = typer.Option(
        None, "-n", "--needed-classes", help="class dependencies of the class given with -c (repeat or comma-separate)"),
    scope: Optional[str] = typer.Option(None, "-s", "--scope", help="scope e.g.: int:5,main.util.Node:3"),
    config: str = typer.Option("config/verifier.yaml", "--config", help="verifier settings (YAML)"),
    report: Optional[str] = typer.Option(None, "--report", help="report file (default from config)"),
    console: bool = typer.Option(False, "--console", help="also print the report"),
    verbose: Optional[bool] = typer.Option(None, "--verbose/--quiet", "-v/-q", help="progress output (default from config)"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="engine options and solver details"),
):
    """Verify METHOD of CLASS_NAME; exit 0 if proved, 1 if not, 2 on bad input."""
    cfg = load_cfg(config)
    log_cfg = cfg["logging"]
    # flags given on the command line win over the config file
    if verbose is None:
        verbose = log_cfg.get("verbose", True)
    if debug is None:
        debug = log_cfg.get("debug", False)
    logger = VerifierLogger(verbose=verbose, debug=debug)
    set_logger(logger)

    subject_cfg = cfg["subject"]
    compiler = None
    if subject_cfg.get("compile_command"):
        compiler = CommandCompileCheck(subject_cfg["compile_command"], source_root=path)
    subject = AnnotatedClass(path, class_name, compiler=compiler,
                             source_suffix=subject_cfg.get("source_suffix") or ".java")
    try:
        request = VerificationRequest.create(subject, method, _split_classes(needed_classes), scope=scope)
        engine = create_engine(cfg)
    except (RequestError, EngineConfigurationError) as e:
        logger.error(str(e))
        raise typer.Exit(code=2)

    sinks = [FileReportSink(report or cfg["report"]["path"])]
    if console or cfg["report"].get("console"):
        sinks.append(ConsoleReportSink())
    logger.section(f"Bounded verification of {class_name}.{method}")
    verifier = BoundedVerifier(request, engine, Reporter(*sinks, logger=logger), logger=logger)
    ok = verifier.verify()
    raise typer.Exit(code=0 if ok else 1)


if __name__ == "__main__":
    app()
