"""Tests for gofmt_client: formatters for generated units."""

import shutil

import pytest

from autobindings.errors import FormatError
from autobindings.gofmt_client import (
    FormatResult,
    GofmtFormatter,
    SyntaxCheckFormatter,
    make_formatter,
)

VALID = "package p\n\nfunc f() int {\n\treturn 1\n}\n"
MESSY = "package p\nfunc f() int {\nreturn 1\n}\n"
BROKEN = "package p\n\nfunc f( {\n"


class TestFormatResult:
    def test_error_from_stderr(self):
        r = FormatResult(ok=False, stderr="<standard input>:3:8: expected ')'\n", returncode=2)
        assert r.error == "<standard input>:3:8: expected ')'"

    def test_error_without_stderr(self):
        assert FormatResult(ok=False, returncode=3).error == "gofmt failed with exit code 3"


class TestSyntaxCheckFormatter:
    def test_valid_text_unchanged(self):
        assert SyntaxCheckFormatter().format(VALID) == VALID

    def test_adds_trailing_newline(self):
        assert SyntaxCheckFormatter().format(VALID.rstrip("\n")) == VALID

    def test_broken_text(self):
        with pytest.raises(FormatError, match="a_bindings.go:3:"):
            SyntaxCheckFormatter().format(BROKEN, name="a_bindings.go")


class TestGofmtFormatter:
    def test_missing_binary(self, tmp_path):
        formatter = GofmtFormatter(str(tmp_path / "no-gofmt"))
        with pytest.raises(FormatError, match="Command not found"):
            formatter.format(VALID, name="a_bindings.go")


class TestMakeFormatter:
    def test_gofmt(self):
        formatter = make_formatter("gofmt", gofmt="/opt/go/bin/gofmt")
        assert isinstance(formatter, GofmtFormatter)
        assert formatter.gofmt == "/opt/go/bin/gofmt"

    def test_syntax(self):
        assert isinstance(make_formatter("syntax"), SyntaxCheckFormatter)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            make_formatter("black")


# ---------------------------------------------------------------------------
# Integration tests (require gofmt on PATH)
# ---------------------------------------------------------------------------

skip_no_gofmt = pytest.mark.skipif(
    shutil.which("gofmt") is None,
    reason="gofmt not installed",
)


@skip_no_gofmt
class TestGofmtIntegration:
    def test_formats(self):
        assert GofmtFormatter().format(MESSY) == VALID

    def test_rejects_broken(self):
        with pytest.raises(FormatError, match="a_bindings.go"):
            GofmtFormatter().format(BROKEN, name="a_bindings.go")

    def test_generated_units_are_stable(self):
        from autobindings.emitter import generate_units
        from autobindings.go_parser import parse_source

        source = """\
package mypkg

type Profile struct {
	Name  string
	Roles []ProtoRole `json:"roles" protobuf:"varint,1,rep,packed,name=roles,enum=mypkg.ProtoRole"`
}
"""
        formatter = GofmtFormatter()
        units = generate_units(parse_source(source), formatter)
        assert [u.filename for u in units] == [
            "protorole_enum_bindings.go",
            "profile_bindings.go",
        ]
        for unit in units:
            assert formatter.format(unit.text) == unit.text

    def test_non_bmp_key_is_accepted(self):
        from autobindings.emitter import generate_units
        from autobindings.go_parser import parse_source

        source = 'package mypkg\n\ntype Profile struct {\n\tName string `json:"\U0001F600"`\n}\n'
        units = generate_units(parse_source(source), GofmtFormatter())
        assert '&p.Name: "\U0001F600",' in units[0].text
