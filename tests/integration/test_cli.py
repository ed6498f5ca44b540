"""
Integration tests for CLI.
"""

import io
import json

import pytest

from domdecode.cli import main, parse_args, read_snapshot

SNAPSHOT = {
    "tag": "body",
    "children": [
        {
            "tag": "div",
            "classes": ["card"],
            "positioned": True,
            "left": 10,
            "top": 10,
            "scroll_left": 2,
            "children": [
                {"tag": "button", "classes": "btn primary", "left": 5, "top": 5,
                 "width": 80, "height": 20, "text": "OK"},
                {"tag": "span", "text": "hint"},
            ],
        },
    ],
}


@pytest.fixture
def snapshot_file(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("DOMDECODE_INDENT", raising=False)
    monkeypatch.delenv("DOMDECODE_MAX_DEPTH", raising=False)
    from domdecode.config import reset_config
    reset_config()
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT))
    yield str(path)
    reset_config()


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.query == "rect"
        assert args.select == ""
        assert args.file is None

    def test_all_flags(self):
        args = parse_args(["snap.json", "--select", "0.1", "--query", "closest", "--class", "card"])
        assert args.file == "snap.json"
        assert args.select == "0.1"
        assert args.query == "closest"
        assert args.class_name == "card"

    def test_unknown_query_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--query", "nope"])


class TestReadSnapshot:
    def test_from_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({"tag": "div"})))
        assert read_snapshot(None).tag == "div"


class TestMain:
    def test_rect(self, snapshot_file, capsys):
        assert main([snapshot_file, "--select", "0.0"]) == 0
        out = json.loads(capsys.readouterr().out)
        # button 5 + card (10 - 2 scroll) + body 0
        assert out == {"top": 15.0, "left": 13.0, "width": 80.0, "height": 20.0}

    def test_tag(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.1", "-q", "tag"]) == 0
        assert json.loads(capsys.readouterr().out) == "SPAN"

    def test_classes(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.0", "-q", "classes"]) == 0
        assert json.loads(capsys.readouterr().out) == ["btn", "primary"]

    def test_text(self, snapshot_file, capsys):
        assert main([snapshot_file, "-q", "text"]) == 0
        assert json.loads(capsys.readouterr().out) == "OKhint"

    def test_children(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0", "-q", "children"]) == 0
        assert json.loads(capsys.readouterr().out) == ["BUTTON", "SPAN"]

    def test_closest(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.0", "-q", "closest", "--class", "card"]) == 0
        assert json.loads(capsys.readouterr().out) == "DIV"

    def test_closest_by_tag_and_class(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.1", "-q", "closest", "--class", "card", "--tag", "div"]) == 0
        assert json.loads(capsys.readouterr().out) == "DIV"

    def test_closest_no_match_is_null(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.0", "-q", "closest", "--tag", "table"]) == 0
        assert json.loads(capsys.readouterr().out) is None

    def test_closest_needs_predicate(self, snapshot_file, capsys):
        assert main([snapshot_file, "-q", "closest"]) == 1
        assert "needs --class" in capsys.readouterr().err

    def test_bad_select(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "4"]) == 1
        assert "No element at path" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{")
        assert main([str(path)]) == 1
        assert "Error reading snapshot" in capsys.readouterr().err

    def test_depth_limit_reported(self, snapshot_file, capsys):
        assert main([snapshot_file, "-s", "0.0", "--max-depth", "1"]) == 1
        assert "walk exceeded 1 steps" in capsys.readouterr().err
