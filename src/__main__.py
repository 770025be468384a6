#!/usr/bin/env python3
"""
sharpbang - `#!` line directive reader

Reads a Scheme source file, collects every `#!` line directive (shebang
lines, Emacs and Vim mode lines, any other metadata line) and writes a
YAML report describing them, optionally alongside a syntax-highlighted
HTML rendering of the source.

The command line is a ChRIS plugin (chris_plugin), used here simply as a
convenient argument-parsing and directory-handling front end.

Usage:
    sharpbang inputdir/ outputdir/ --inputFile program.scm

Examples:
    # Basic report
    sharpbang . output/ --inputFile program.scm

    # Accept "#!r6rs" style directives and highlight the source
    sharpbang . output/ --inputFile program.scm --allowSpace --highlight

    # Verbose output (-vv logs every directive, -vvv traces the scanner)
    sharpbang . output/ --inputFile program.scm -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

import yaml
from chris_plugin import chris_plugin

from .config import appsettings
from .lib import (
    Reader,
    ReaderError,
    DirectiveRegistry,
    __version__,
    LOG,
    datum_write,
    directive_write,
    source_highlight,
    state_connectToLogger,
)
from .models import LineCrossingPolicy, ProgramState, WhitespacePolicy, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="sharpbang - report the #! line directives of a Scheme source file",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Scheme source file (relative to inputdir)"
)

parser.add_argument(
    "--allowSpace",
    action="store_true",
    help="Treat '#!<non-space>' (e.g. #!r6rs) as a line directive too",
)

parser.add_argument(
    "--truncate",
    action="store_true",
    help="End a directive at a datum that crosses its line instead of failing",
)

parser.add_argument(
    "--foldCase",
    action="store_true",
    help="Start reading with symbol case folding enabled",
)

parser.add_argument(
    "--highlight",
    action="store_true",
    help="Also write a syntax-highlighted HTML rendering of the source",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the source file
            - reportOutputdir: Created output directory
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.reportOutputdir = state.outputdir
    state.reportOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.reportOutputdir}", level=2)

    state.envOK = True
    return state


def source_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the source file and all of its forms and directives.

    Returns:
        ProgramState with added fields:
            - settings: AppSettings with the CLI policy flags applied
            - sourceText: Source file contents
            - forms: Top-level data
            - directives: DirectiveRecords in textual order

    Exits:
        1 if the file cannot be read or contains a reader error
    """
    state = inputstate.copy()

    updates = {}
    if state.allowSpace:
        updates["whitespace_policy"] = WhitespacePolicy.ALLOW_SPACE
    if state.truncate:
        updates["line_crossing"] = LineCrossingPolicy.TRUNCATE
    if state.foldCase:
        updates["fold_case"] = True
    state.settings = appsettings.model_copy(update=updates)
    LOG(f"Reader policy: {state.settings.directivePolicy_describe()}", level=2)

    LOG("Reading source file...", level=1)
    try:
        state.sourceText = state.inputSourceFile.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Read {len(state.sourceText)} characters from {state.inputSourceFile.name}", level=2)

    reader = Reader(state.sourceText, source_name=state.inputSourceFile.name, settings=state.settings)
    try:
        state.forms = list(reader.forms_read())
    except ReaderError as e:
        print(f"Read error: {e}", file=sys.stderr)
        if e.line is not None:
            print(f"  {reader.source.line_get(e.line)}", file=sys.stderr)
            print(f"  {' ' * e.column}^", file=sys.stderr)
        if state.settings.debug_mode:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    state.directives = reader.directives
    LOG(f"Read {len(state.forms)} forms and {len(state.directives)} directives", level=2)
    return state


def report_build(state: ProgramState) -> dict:
    """
    Build the YAML-ready report for the directives of a read source.

    Returns:
        Dict with source, policy, form count and one entry per directive
    """
    registry = DirectiveRegistry()
    entries = []
    for record in state.directives or []:
        directive = record.directive
        entries.append({
            "line": directive.position.line,
            "column": directive.position.column,
            "text": directive_write(directive),
            "datums": [datum_write(datum) for datum in directive],
            **registry.directive_describe(directive),
        })

    return {
        "source": str(state.inputSourceFile),
        "policy": {
            "whitespace": state.settings.whitespace_policy.value,
            "line_crossing": state.settings.line_crossing.value,
        },
        "forms": len(state.forms or []),
        "directives": entries,
    }


def report_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the directive report (and optional highlighted source).

    Returns:
        ProgramState with added field:
            - reportResult: Dict containing:
                - status: bool
                - report_file: str
                - highlight_file: str or None
                - directive_count: int
                - form_count: int

    Exits:
        1 if nothing has been read or the report cannot be written
    """
    state = inputstate.copy()

    if state.forms is None or state.directives is None:
        print("Error: No read source available", file=sys.stderr)
        sys.exit(1)

    LOG("Writing directive report...", level=1)
    report = report_build(state)
    report_file = state.reportOutputdir / state.settings.report_filename
    highlight_file = None
    try:
        report_file.write_text(
            yaml.safe_dump(report, sort_keys=False, allow_unicode=True), encoding="utf-8"
        )
        LOG(f"Wrote {report_file}", level=2)

        if state.highlight:
            highlight_file = state.reportOutputdir / state.settings.highlight_filename
            highlight_file.write_text(
                source_highlight(state.sourceText, title=state.inputSourceFile.name), encoding="utf-8"
            )
            LOG(f"Wrote {highlight_file}", level=2)
    except OSError as e:
        print(f"Error writing report: {e}", file=sys.stderr)
        sys.exit(1)

    state.reportResult = {
        "status": True,
        "report_file": str(report_file),
        "highlight_file": str(highlight_file) if highlight_file else None,
        "directive_count": len(report["directives"]),
        "form_count": report["forms"],
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display report results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if reportResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.reportResult:
        print("Error: Report failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Report written", level=1)
    LOG(f"  Report: {state.reportResult['report_file']}", level=1)
    if state.reportResult["highlight_file"]:
        LOG(f"  Source: {state.reportResult['highlight_file']}", level=1)
    LOG(f"  Directives: {state.reportResult['directive_count']}", level=1)
    LOG(f"  Forms: {state.reportResult['form_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="sharpbang - #! line directive reader",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - report the line directives of one Scheme source file.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. source_read: Read forms and directives
        3. report_write: Write YAML report (and HTML if requested)
        4. results_report: Display results to user

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, source_read, report_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
