"""Tests for server: MCP tool functions called directly."""

import json

import pytest

from autobindings import server

SOURCE = """\
package mypkg

type Profile struct {
	Name   string
	Secret string `json:"-"`
	Roles  []ProtoRole `json:"roles" protobuf:"varint,1,rep,packed,name=roles,enum=mypkg.ProtoRole"`
}

type Team struct {
	Title string `json:"title"`
}
"""


@pytest.fixture
def source(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "_formatter_kind", "syntax")
    path = tmp_path / "models.go"
    path.write_text(SOURCE)
    return path


class TestListStructs:
    def test_lists_structs(self, source):
        d = json.loads(server.list_structs(str(source)))
        assert d["package"] == "mypkg"
        assert [s["name"] for s in d["structs"]] == ["Profile", "Team"]
        roles = d["structs"][0]["fields"][2]
        assert roles["is_collection"] is True
        assert roles["element"] == "ProtoRole"

    def test_missing_file(self, tmp_path):
        d = json.loads(server.list_structs(str(tmp_path / "missing.go")))
        assert "Cannot read" in d["error"]


class TestGetFieldMappings:
    def test_mappings(self, source):
        d = json.loads(server.get_field_mappings(str(source)))
        profile = d["structs"][0]
        assert profile["receiver"] == "p"
        assert profile["mappings"] == {
            "Name": {"key": "Name"},
            "Roles": {"key": "roles", "binder": "collection", "enum_type": "ProtoRole"},
        }
        assert profile["excluded"] == ["Secret"]
        assert profile["enums"] == [
            {"field": "Roles", "enum_type": "ProtoRole", "is_collection": True},
        ]


class TestPreviewBindings:
    def test_first_struct_by_default(self, source):
        d = json.loads(server.preview_bindings(str(source)))
        assert d["ok"] is True
        assert d["filename"] == "profile_bindings.go"
        assert "strings.Split" in d["text"]

    def test_named_struct(self, source, tmp_path):
        d = json.loads(server.preview_bindings(str(source), struct="Team"))
        assert d["filename"] == "team_bindings.go"
        assert '&t.Title: "title",' in d["text"]
        assert list(tmp_path.glob("*_bindings.go")) == []

    def test_named_struct_ignores_other_structs(self, tmp_path, monkeypatch):
        monkeypatch.setattr(server, "_formatter_kind", "syntax")
        path = tmp_path / "models.go"
        path.write_text(
            "package mypkg\n\n"
            "type Bad struct {\n"
            "\tRole ProtoRole `protobuf:\"varint,1,opt,enum=mypkg.ProtoRole,def=0\"`\n"
            "}\n\n"
            "type Team struct {\n\tTitle string\n}\n"
        )
        d = json.loads(server.preview_bindings(str(path), struct="Team"))
        assert d["filename"] == "team_bindings.go"

    def test_unknown_struct(self, source):
        d = json.loads(server.preview_bindings(str(source), struct="Nope"))
        assert "not found" in d["error"]

    def test_no_structs(self, tmp_path, monkeypatch):
        monkeypatch.setattr(server, "_formatter_kind", "syntax")
        path = tmp_path / "empty.go"
        path.write_text("package empty\n")
        d = json.loads(server.preview_bindings(str(path)))
        assert "No structs" in d["error"]


class TestGenerateBindings:
    def test_writes_next_to_source(self, source, tmp_path):
        d = json.loads(server.generate_bindings(str(source)))
        assert d["ok"] is True
        assert d["count"] == 3
        assert (tmp_path / "protorole_enum_bindings.go").exists()
        assert (tmp_path / "team_bindings.go").exists()

    def test_output_dir(self, source, tmp_path):
        out = tmp_path / "gen"
        d = json.loads(server.generate_bindings(str(source), output_dir=str(out)))
        assert sorted(p.rsplit("/", 1)[-1] for p in d["files"]) == [
            "profile_bindings.go",
            "protorole_enum_bindings.go",
            "team_bindings.go",
        ]

    def test_format_error(self, source, monkeypatch, tmp_path):
        monkeypatch.setattr(server, "_formatter_kind", "gofmt")
        monkeypatch.setattr(server, "_gofmt", str(tmp_path / "no-gofmt"))
        d = json.loads(server.generate_bindings(str(source)))
        assert "Command not found" in d["error"]
