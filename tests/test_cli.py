"""Tests for the mkmsgf command-line interface.

WHY: Existing makefiles call the compiler with legacy switches and
control files, and check its exit status. Both the switch spelling and
the exit status for each failure are part of the interface.

HOW: run() is called with explicit argv lists; exit status, stderr and
the files written to tmp_path are checked.

RULES:
- All file I/O tests use tmp_path fixtures for isolation.
- The root logger is restored after each test because the CLI
  reconfigures logging on every invocation.
"""

import logging

import pytest

from msgfile_compiler import __version__
from msgfile_compiler.cli import build_parser, main, normalize_switches, run
from msgfile_compiler.core.scanner import scan_source
from msgfile_compiler.emitters.catalog import COUNTRY_STRUCT


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch):
    monkeypatch.delenv("INCLUDE", raising=False)
    monkeypatch.delenv("MSGF_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _country_fields(source, catalog):
    plan = scan_source(source)
    return COUNTRY_STRUCT.unpack(catalog.read_bytes()[plan.country_offset:plan.messages_offset])


class TestNormalizeSwitches:

    def test_legacy_slash_switch(self):
        assert normalize_switches(["/V", "/e", "/A"]) == ["-v", "-e", "-a"]

    def test_uppercase_dash_switch(self):
        assert normalize_switches(["-E", "-C"]) == ["-e", "-c"]

    def test_attached_values(self):
        assert normalize_switches(["/P850", "/L9,2", "-P437"]) == ["-p850", "-l9,2", "-p437"]

    def test_include_value_kept(self):
        assert normalize_switches(["-I/usr/include"]) == ["-i/usr/include"]

    def test_question_mark_is_help(self):
        assert normalize_switches(["/?", "-?"]) == ["-h", "-h"]

    def test_paths_untouched(self):
        argv = ["/data/app.txt", "/tmp/out.msg", "/pub", "--verbose", "in.txt"]
        assert normalize_switches(argv) == argv


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["in.txt"])
        assert args.input_file == "in.txt"
        assert args.output_file is None
        assert args.codepage is None
        assert args.extend is False

    def test_input_file_optional_for_parser(self):
        args = build_parser().parse_args(["--list-languages"])
        assert args.input_file is None
        assert args.list_languages is True

    def test_asm_and_header_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.txt", "-a", "-c"])


class TestRun:

    def test_no_arguments_prints_usage(self, capsys):
        assert run([]) == 0
        out = capsys.readouterr().out
        assert __version__ in out
        assert "usage: mkmsgf" in out

    def test_compile_catalog(self, sample_source, tmp_path, capsys):
        out = tmp_path / "out.msg"
        assert run([str(sample_source), str(out)]) == 0
        assert out.read_bytes()[:8] == b"\xffMKMSGF\x00"
        assert "Done: 4 messages" in capsys.readouterr().err

    def test_country_options(self, sample_source, tmp_path):
        out = tmp_path / "out.msg"
        argv = [str(sample_source), str(out), "-p", "850", "-P437", "-l", "9,2"]
        assert run(argv) == 0
        fields = _country_fields(sample_source, out)
        assert fields[2:5] == (9, 2, 2)
        assert fields[5:7] == (850, 437)

    def test_legacy_switches(self, sample_source, tmp_path):
        out = tmp_path / "out.msg"
        assert run([str(sample_source), str(out), "/E", "/P850"]) == 0
        data = out.read_bytes()
        assert data[0x16:0x1A] != b"\x00\x00\x00\x00"
        assert _country_fields(sample_source, out)[5] == 850

    def test_asm_output(self, sample_source, tmp_path, include_dir):
        out = tmp_path / "out.asm"
        assert run([str(sample_source), str(out), "-a", "-i", str(include_dir)]) == 0
        assert b"TXT_MSG_HELLO\tLABEL\tWORD" in out.read_bytes()

    def test_header_symbols(self, sample_source, tmp_path):
        (tmp_path / "BASEMID.H").write_text("#define MSG_ONE 1\n", encoding="latin-1")
        out = tmp_path / "out.asm"
        assert run([str(sample_source), str(out), "-c", "-i", str(tmp_path)]) == 0
        assert b"\tPUBLIC\tTXT_MSG_ONE\r\n" in out.read_bytes()

    def test_verbose_report(self, sample_source, tmp_path, capsys):
        out = tmp_path / "out.msg"
        assert run([str(sample_source), str(out), "-v", "-p", "850"]) == 0
        err = capsys.readouterr().err
        assert "Header Info" in err
        assert "Component Identifier:  ABC" in err
        assert "Number of messages:    4" in err
        assert "0x352 (850)" in err

    def test_quiet(self, sample_source, tmp_path, capsys):
        out = tmp_path / "out.msg"
        assert run([str(sample_source), str(out), "-q"]) == 0
        assert capsys.readouterr().err == ""

    def test_list_languages(self, capsys):
        assert run(["--list-languages"]) == 0
        out = capsys.readouterr().out
        assert "ENU" in out
        assert "Slovene" in out

    def test_list_languages_with_other_switches(self, capsys):
        assert run(["-v", "--list-languages"]) == 0
        assert "ENG" in capsys.readouterr().out

    def test_main_exits_with_status(self, sample_source, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main([str(sample_source), str(tmp_path / "out.msg"), "-q"])
        assert excinfo.value.code == 0


class TestExitCodes:

    def test_dbcs_rejected(self, sample_source, tmp_path, capsys):
        assert run([str(sample_source), str(tmp_path / "o.msg"), "-d", "1"]) == 2
        err = capsys.readouterr().err
        assert "Error: DBCS not supported" in err
        assert "usage: mkmsgf" in err

    def test_too_many_codepages(self, sample_source, tmp_path):
        argv = [str(sample_source), str(tmp_path / "o.msg")]
        for codepage in range(17):
            argv += ["-p", str(437 + codepage)]
        assert run(argv) == 2

    def test_second_language_rejected(self, sample_source, tmp_path):
        argv = [str(sample_source), str(tmp_path / "o.msg"), "-l", "9,1", "-l", "7,1"]
        assert run(argv) == 2

    def test_language_out_of_range(self, sample_source, tmp_path):
        assert run([str(sample_source), str(tmp_path / "o.msg"), "-l", "40,1"]) == 8

    def test_language_sub_out_of_range(self, sample_source, tmp_path):
        assert run([str(sample_source), str(tmp_path / "o.msg"), "-l", "9,7"]) == 9

    def test_missing_input(self, tmp_path):
        assert run([str(tmp_path / "none.txt"), str(tmp_path / "o.msg")]) == 3

    def test_same_input_output(self, sample_source):
        assert run([str(sample_source), str(sample_source)]) == 10

    def test_malformed_identifier(self, write_source, tmp_path, capsys):
        source = write_source(b"ABCD\r\n")
        assert run([str(source), str(tmp_path / "o.msg")]) == 4
        assert "line 1" in capsys.readouterr().err

    def test_invalid_type(self, write_source, tmp_path):
        source = write_source(b"ABC\r\nABC0001Q: x\r\n")
        assert run([str(source), str(tmp_path / "o.msg")]) == 5
        assert not (tmp_path / "o.msg").exists()

    def test_missing_separator(self, write_source, tmp_path):
        source = write_source(b"ABC\r\nABC0001E x\r\n")
        assert run([str(source), str(tmp_path / "o.msg")]) == 6

    def test_unknown_switch(self, sample_source):
        assert run([str(sample_source), "-z"]) == 2

    def test_switches_without_input_file(self, capsys):
        assert run(["-e", "-p", "850"]) == 2
        err = capsys.readouterr().err
        assert "Error: no input file specified" in err
        assert "usage: mkmsgf" in err


class TestControlFile:

    def test_runs_every_line(self, sample_source, tmp_path, write_source):
        second = write_source(b"XYZ\r\nXYZ0001I: other\r\n", name="second.txt")
        control = tmp_path / "build.ctl"
        control.write_text(
            "; compile both\n"
            "{} {}\n"
            "\n"
            "{} {} -e\n".format(
                sample_source, tmp_path / "one.msg",
                second, tmp_path / "two.msg",
            ),
            encoding="utf-8",
        )
        assert run(["@" + str(control)]) == 0
        assert (tmp_path / "one.msg").is_file()
        assert (tmp_path / "two.msg").is_file()

    def test_first_failure_status_and_later_lines_run(self, sample_source, tmp_path):
        control = tmp_path / "build.ctl"
        control.write_text(
            "{} {}\n"
            "{} {} -l 99\n"
            "{} {}\n".format(
                tmp_path / "missing.txt", tmp_path / "a.msg",
                sample_source, tmp_path / "b.msg",
                sample_source, tmp_path / "c.msg",
            ),
            encoding="utf-8",
        )
        assert run(["@" + str(control)]) == 3
        assert not (tmp_path / "a.msg").exists()
        assert not (tmp_path / "b.msg").exists()
        assert (tmp_path / "c.msg").is_file()

    def test_missing_control_file(self, tmp_path, capsys):
        assert run(["@" + str(tmp_path / "none.ctl")]) == 3
        assert "Error: cannot open" in capsys.readouterr().err
