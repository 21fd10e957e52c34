"""
Jack Compiler CLI Tests
"""

import logging

import pytest
from jackc import cli
from jackc.cli import main

MAIN_SOURCE = "class Main { function void main() { if (true) { } return; } }"
OTHER_SOURCE = "class Other { function void run() { while (false) { } return; } }"
BROKEN_SOURCE = "class Broken { function void f() { let x = 1; return; } }"


@pytest.fixture
def project(tmp_path):
    (tmp_path / "Main.jack").write_text(MAIN_SOURCE)
    (tmp_path / "Other.jack").write_text(OTHER_SOURCE)
    (tmp_path / "notes.txt").write_text("not jack")
    return tmp_path


class TestCompileFiles:
    """Single files and directories."""

    def test_single_file(self, project):
        assert main([str(project / "Main.jack")]) == 0
        output = (project / "Main.vm").read_text()
        assert output.splitlines()[0] == 'function Main.main 0'
        assert not (project / "Other.vm").exists()

    def test_directory(self, project):
        assert main([str(project)]) == 0
        assert (project / "Main.vm").exists()
        assert (project / "Other.vm").exists()
        assert not (project / "notes.vm").exists()

    def test_labels_unique_across_directory(self, project):
        main([str(project)])
        main_labels = (project / "Main.vm").read_text()
        other_labels = (project / "Other.vm").read_text()
        # Main.jack sorts first and takes labels 0 and 1
        assert 'label IFLABEL0' in main_labels
        assert 'label WHILELABEL2' in other_labels

    def test_output_dir(self, project, tmp_path):
        out_dir = tmp_path / "build" / "vm"
        assert main(["-o", str(out_dir), str(project / "Main.jack")]) == 0
        assert (out_dir / "Main.vm").exists()
        assert not (project / "Main.vm").exists()

    def test_stdout(self, project, capsys):
        assert main(["--stdout", str(project / "Main.jack")]) == 0
        captured = capsys.readouterr()
        assert captured.out.startswith('function Main.main 0\n')
        assert not (project / "Main.vm").exists()


class TestFailures:
    """A failing unit does not stop the others."""

    def test_broken_file_is_not_written(self, project, caplog):
        (project / "Broken.jack").write_text(BROKEN_SOURCE)
        with caplog.at_level(logging.ERROR):
            assert main([str(project)]) == 1
        assert not (project / "Broken.vm").exists()
        assert (project / "Main.vm").exists()
        assert (project / "Other.vm").exists()
        assert "Broken.jack" in caplog.text
        assert "Undefined symbol" in caplog.text

    def test_undecodable_file_does_not_stop_batch(self, project, caplog):
        (project / "Bad.jack").write_bytes(b"class Bad { }\n// \xff\n")
        with caplog.at_level(logging.ERROR):
            assert main([str(project)]) == 1
        assert not (project / "Bad.vm").exists()
        assert (project / "Main.vm").exists()
        assert (project / "Other.vm").exists()
        assert "Bad.jack" in caplog.text
        assert "UTF-8" in caplog.text

    def test_unreadable_file_does_not_stop_batch(self, project, caplog, monkeypatch):
        real_compile_file = cli.compile_file

        def compile_file(source, labels):
            if source.name == "Main.jack":
                raise PermissionError(13, "Permission denied", str(source))
            return real_compile_file(source, labels)

        monkeypatch.setattr(cli, "compile_file", compile_file)
        with caplog.at_level(logging.ERROR):
            assert main([str(project)]) == 1
        assert not (project / "Main.vm").exists()
        assert (project / "Other.vm").exists()
        assert "Permission denied" in caplog.text

    def test_not_a_jack_file(self, project):
        assert main([str(project / "notes.txt")]) == 1

    def test_empty_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert main([str(empty)]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
