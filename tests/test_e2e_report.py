"""
End-to-end report tests

Tests the full pipeline: Scheme source file → env_check → source_read →
report_write → results_report, and the YAML report it leaves behind.
"""

import tempfile
from argparse import Namespace
from pathlib import Path

import pytest
import yaml

from sharpbang.__main__ import env_check, report_write, results_report, source_read
from sharpbang.models import ProgramState, pipeline

PROGRAM = """#! /usr/bin/env fantastic-scheme
#! -*- mode: scheme -*- vim: set ft=scheme :
;; greeting
(define (greet name)
  #! TODO: i18n
  (display name))
(greet "world")
"""


def state_for(tmpdir: str, source: str, **options) -> ProgramState:
    """Write source into tmpdir/in and build the initial pipeline state"""
    inputdir = Path(tmpdir) / "in"
    inputdir.mkdir()
    (inputdir / "prog.scm").write_text(source, encoding="utf-8")
    namespace = Namespace(
        inputFile="prog.scm",
        allowSpace=options.get("allowSpace", False),
        truncate=options.get("truncate", False),
        foldCase=False,
        highlight=options.get("highlight", False),
        verbosity=0,
    )
    return ProgramState.state_createFromNamespace(
        options=namespace, inputdir=inputdir, outputdir=Path(tmpdir) / "out"
    )


def report_load(state: ProgramState) -> dict:
    return yaml.safe_load(Path(state.reportResult["report_file"]).read_text(encoding="utf-8"))


class TestReport:
    """Test complete report generation"""

    def test_program_report(self):
        """Every directive is reported with its classification"""
        with tempfile.TemporaryDirectory() as tmpdir:
            state = pipeline(state_for(tmpdir, PROGRAM), env_check, source_read, report_write, results_report)

            assert state.reportResult["status"] is True
            assert state.reportResult["directive_count"] == 3
            assert state.reportResult["form_count"] == 2
            assert state.reportResult["highlight_file"] is None

            report = report_load(state)
            assert report["policy"] == {"whitespace": "strict_no_space", "line_crossing": "error"}
            shebang, modeline, note = report["directives"]

            assert shebang["name"] == "shebang"
            assert shebang["interpreter"] == "fantastic-scheme"
            assert shebang["line"] == 1

            assert modeline["name"] == "emacs"
            assert modeline["variables"] == {"mode": "scheme"}
            assert modeline["text"] == "#! -*- mode: scheme -*- vim: set ft=scheme :"

            assert note["name"] == "generic"
            assert (note["line"], note["column"]) == (5, 2)
            assert note["datums"] == ["TODO:", "i18n"]

    def test_highlight_written(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = pipeline(state_for(tmpdir, PROGRAM, highlight=True), env_check, source_read, report_write)
            html = Path(state.reportResult["highlight_file"]).read_text(encoding="utf-8")
            assert "fantastic-scheme" in html

    def test_allow_space_flag(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = pipeline(state_for(tmpdir, "#!r6rs\n(x)\n", allowSpace=True), env_check, source_read, report_write)
            report = report_load(state)
            assert report["policy"]["whitespace"] == "allow_space"
            assert report["directives"][0]["datums"] == ["r6rs"]

    def test_truncate_flag(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = pipeline(state_for(tmpdir, '#! a "b\nc"\n', truncate=True), env_check, source_read)
            assert state.directives[0].directive.datums[1] == "b\nc"


class TestFailures:
    """Test pipeline exits"""

    def test_missing_input_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = state_for(tmpdir, "")
            state.inputFile = "absent.scm"
            with pytest.raises(SystemExit) as excinfo:
                env_check(state)
            assert excinfo.value.code == 1

    def test_reader_error_exits(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(SystemExit):
                pipeline(state_for(tmpdir, "#! #! nested\n"), env_check, source_read)
            err = capsys.readouterr().err
            assert "prog.scm:1:3:" in err
            assert "  #! #! nested\n     ^" in err

    def test_report_without_forms_exits(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = env_check(state_for(tmpdir, "(x)"))
            with pytest.raises(SystemExit):
                report_write(state)
