"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from functools import partial
from http.client import IncompleteRead
from pathlib import Path

import pytest

from spin_info import cli
from spin_info.cli import _build_parser, main
from spin_info.errors import RegistryError
from spin_info.info import InfoCommand
from spin_info.loader import ManifestLoader


def test_cli_accepts_source_without_subcommand() -> None:
    args = _build_parser().parse_args(["-f", "ghcr.io/acme/todo:1"])

    assert args.command is None
    assert args.app_source == "ghcr.io/acme/todo:1"


def test_cli_accepts_info_subcommand_options() -> None:
    args = _build_parser().parse_args(
        ["info", "--from", "ghcr.io/acme/todo:1", "--cache-dir", "/tmp/cache", "-v"]
    )

    assert args.command == "info"
    assert args.app_source == "ghcr.io/acme/todo:1"
    assert args.cache_dir == Path("/tmp/cache")
    assert args.verbose is True


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "info"])

    assert args.verbose is True
    assert args.app_source is None


def test_cli_rejects_conflicting_sources() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["--from", "a", "--from-registry", "b"])


def test_main_without_source_exits_non_zero(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 1
    assert "No application source was specified" in capsys.readouterr().err


def test_main_local_source_is_not_supported(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "spin.toml").write_text("spin_manifest_version = 2\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["info", "--from", "."])

    assert excinfo.value.code == 1
    assert "not supported yet" in capsys.readouterr().err


def test_main_reports_load_failure(tmp_path: Path, monkeypatch, capsys) -> None:
    class MissingLoader(ManifestLoader):
        async def load(self, reference: str):
            raise RegistryError(f"Not found: {reference}", status=404)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        cli, "InfoCommand", partial(InfoCommand, loader_factory=lambda config: MissingLoader())
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["--from-registry", "ghcr.io/acme/missing:1"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Failed to load application 'ghcr.io/acme/missing:1'" in err
    assert "Caused by: Not found" in err


def test_cli_accepts_log_file(tmp_path: Path) -> None:
    args = _build_parser().parse_args(["info", "--log-file", str(tmp_path / "run.log")])

    assert args.log_file == tmp_path / "run.log"


def test_main_reports_truncated_registry_download(tmp_path: Path, monkeypatch, capsys) -> None:
    def truncated_urlopen(request, timeout=None):
        raise IncompleteRead(b"partial", 100)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("spin_info.oci.client.urlopen", truncated_urlopen)

    with pytest.raises(SystemExit) as excinfo:
        main(["--from-registry", "ghcr.io/acme/todo:1", "--cache-dir", str(tmp_path / "cache")])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Failed to load application 'ghcr.io/acme/todo:1'" in err
    assert "IncompleteRead" in err


def test_main_rejects_unwritable_log_file(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    log_file = tmp_path / "missing" / "run.log"

    with pytest.raises(SystemExit) as excinfo:
        main(["--from-registry", "ghcr.io/acme/todo:1", "--log-file", str(log_file)])

    assert excinfo.value.code == 1
    assert f"cannot open log file {log_file}" in capsys.readouterr().err
