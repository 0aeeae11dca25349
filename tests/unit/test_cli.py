"""Tests for the command-line interface."""

import json

import pytest

from code_hints.cli import build_parser, cli

JAVA_SOURCE = """public class OrderService {
    public int count(int[] xs) {
        int n = 0;
        for (int x : xs) {
            n++;
        }
        return n;
    }

    public int fib(int n) {
        if (n <= 1) return n;
        return fib(n - 1) + fib(n - 2);
    }
}
"""


@pytest.fixture
def java_file(tmp_path):
    path = tmp_path / "OrderService.java"
    path.write_text(JAVA_SOURCE, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CODE_HINTS_MAX_UNIT_SIZE", "CODE_HINTS_COMPLEXITY", "CODE_HINTS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def run(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli(argv)
    return exc_info.value.code


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["Foo.java"])

        assert args.line is None
        assert args.column == 0
        assert not args.json
        assert not args.no_security


class TestCli:
    def test_every_unit_in_file(self, java_file, capsys):
        assert run([str(java_file)]) == 0

        out = capsys.readouterr().out
        assert "java:count@2" in out
        assert "⚙️ Complexity: O(n) - single loop" in out
        assert "java:fib@10" in out
        assert "⚙️ Complexity: O(2ⁿ) - double recursion" in out

    def test_unit_at_line(self, java_file, capsys):
        assert run([str(java_file), "--line", "11"]) == 0

        out = capsys.readouterr().out
        assert "java:fib@10" in out
        assert "java:count@2" not in out

    def test_json_output(self, java_file, capsys):
        assert run([str(java_file), "-l", "5", "--json"]) == 0

        reports = json.loads(capsys.readouterr().out)
        assert len(reports) == 1
        assert reports[0]["unit_id"] == "java:count@2"
        assert reports[0]["complexity"]["time"] == "O(n)"

    def test_disabled_complexity(self, java_file, capsys):
        assert run([str(java_file), "--line", "5", "--no-complexity", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)[0]["complexity"] is None

    def test_language_override(self, tmp_path, capsys):
        path = tmp_path / "snippet.txt"
        path.write_text('fun load(id: Long) {\n    val apiToken = "abc123"\n}\n', encoding="utf-8")

        assert run([str(path), "--language", "kotlin"]) == 0
        assert "🔴 Security: Hardcoded credential" in capsys.readouterr().out

    def test_unknown_language(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")

        assert run([str(path)]) == 1
        assert "cannot determine language" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert run([str(tmp_path / "Missing.java")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_no_unit_at_line(self, java_file, capsys):
        assert run([str(java_file), "--line", "9"]) == 1
        assert "No function found" in capsys.readouterr().err

    def test_rejects_line_zero(self, java_file):
        assert run([str(java_file), "--line", "0"]) == 2

    def test_invalid_environment(self, java_file, monkeypatch):
        monkeypatch.setenv("CODE_HINTS_MAX_UNIT_SIZE", "huge")
        assert run([str(java_file)]) == 2
