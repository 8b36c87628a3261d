# tests/test_main.py
"""
Tests for the resgen command-line front end.
"""

import logging

import pytest

from resgen.compiler import ResourceGenerator
from resgen.main import (
    EXIT_ERROR,
    EXIT_INCONSISTENT,
    EXIT_OK,
    EXIT_OUTPUT,
    main,
)
from tests.conftest import write_plist


@pytest.fixture(autouse=True)
def _reset_logging():
    logger = logging.getLogger("resgen")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


TIMESTAMP = ["--timestamp", "2018.04.13 12:00:00"]


class TestMain:

    def test_success(self, resource_dir, tmp_path, capsys):
        out = tmp_path / "kern_resources.cpp"
        assert main([str(resource_dir), str(out), *TIMESTAMP]) == EXIT_OK
        stdout = capsys.readouterr().out
        assert f"Working Directory: {resource_dir}" in stdout
        assert f"Output C++ file: {out}" in stdout
        assert "Done" in stdout
        assert "2018.04.13 12:00:00" in out.read_text(encoding="utf-8")

    def test_default_indent_is_tab(self, resource_dir, tmp_path):
        out = tmp_path / "kern_resources.cpp"
        assert main([str(resource_dir), str(out)]) == EXIT_OK
        assert "\n\t" in out.read_text(encoding="utf-8")

    def test_unexpected_error_is_logged(self, resource_dir, tmp_path, monkeypatch, caplog):
        def explode(self, output):
            raise RuntimeError("boom")

        monkeypatch.setattr(ResourceGenerator, "write", explode)
        with caplog.at_level(logging.ERROR, logger="resgen"):
            code = main([str(resource_dir), str(tmp_path / "out.cpp")])
        assert code == EXIT_ERROR
        assert any("boom" in r.getMessage() for r in caplog.records)

    def test_indent_spaces(self, resource_dir, tmp_path):
        out = tmp_path / "kern_resources.cpp"
        assert main([str(resource_dir), str(out), "--indent", "4"]) == EXIT_OK
        assert "\t" not in out.read_text(encoding="utf-8")

    def test_missing_directory(self, tmp_path, capsys):
        code = main([str(tmp_path / "nope"), str(tmp_path / "out.cpp")])
        assert code == EXIT_ERROR
        assert "not a directory" in capsys.readouterr().err

    def test_load_failure(self, resource_dir, tmp_path, capsys):
        (resource_dir / "Kexts.plist").write_text("garbage")
        code = main([str(resource_dir), str(tmp_path / "out.cpp")])
        assert code == EXIT_ERROR
        assert "RESGEN-1002" in capsys.readouterr().err

    def test_inconsistent_tables(self, resource_dir, tmp_path):
        write_plist(resource_dir / "Kexts.plist", {})
        code = main([str(resource_dir), str(tmp_path / "out.cpp")])
        assert code == EXIT_INCONSISTENT
        assert not (tmp_path / "out.cpp").exists()

    def test_output_failure(self, resource_dir, tmp_path):
        assert main([str(resource_dir), str(tmp_path)]) == EXIT_OUTPUT

    def test_bad_timestamp(self, resource_dir, tmp_path):
        with pytest.raises(SystemExit) as info:
            main([str(resource_dir), str(tmp_path / "out.cpp"), "--timestamp", "yesterday"])
        assert info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert "resgen" in capsys.readouterr().out
