"""
Directive report state and pipeline helper

ProgramState carries everything the CLI stages produce, from the parsed
arguments to the written report. pipeline() threads one state through a
sequence of stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the directive report pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, policy flags
        - env_check: inputSourceFile, reportOutputdir, envOK
        - source_read: settings, sourceText, forms, directives
        - report_write: reportResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the source file
        outputdir: Directory for the report
        verbosity: Logging verbosity level (1-3)
        inputFile: Source filename (relative to inputdir)
        allowSpace: Accept #!<non-space> as a line directive
        truncate: Truncate directives at line-crossing datums instead of failing
        foldCase: Start reading with case folding enabled
        highlight: Also write a highlighted HTML rendering of the source
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the source file
        reportOutputdir: Resolved output directory
        settings: AppSettings used for reading
        sourceText: Contents of the source file
        forms: Top-level data read from the source
        directives: DirectiveRecords logged while reading
        reportResult: Report results (report_file, highlight_file, counts, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    allowSpace: bool = field(default=False)
    truncate: bool = field(default=False)
    foldCase: bool = field(default=False)
    highlight: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    reportOutputdir: Path = field(default=Path("/"))
    settings: Optional[Any] = field(default=None)  # AppSettings at runtime
    sourceText: str = field(default="")
    forms: Optional[List[Any]] = field(default=None)
    directives: Optional[List[Any]] = field(default=None)  # List[DirectiveRecord] at runtime
    reportResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Options that are not ProgramState fields are ignored.

        Args:
            options: Parsed CLI arguments (inputFile, allowSpace, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for the report

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses

        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Shallow copy, so a stage never mutates the state it was given.

        Returns:
            New ProgramState with the same field values.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run stages in order, feeding each the state returned by the last.

    A stage takes a ProgramState and returns a new one; stages exit the
    process on unrecoverable errors instead of returning.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            source_read,
            report_write,
            results_report
        )

    Same as:
        results_report(report_write(source_read(env_check(initial_state))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
