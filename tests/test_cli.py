"""
Tests for the photo-fetcher command line.
"""

import json
from unittest.mock import patch

import pytest


class TestCli:
    """Test suite for cli.main."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        import os
        for name in list(os.environ):
            if name.startswith("PHOTO_FETCHER_"):
                monkeypatch.delenv(name)

    @pytest.fixture
    def manifest(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps([
            {"ManufacturerProductNumber": f"P{i}", "PhotoUrl": f"http://x/{i}"} for i in range(4)
        ]))
        return path

    def test_download_passes_options_to_driver(self, manifest, tmp_path):
        """Test that CLI flags reach the driver and logging setup."""
        from photo_fetcher import cli

        with patch.object(cli, "BatchDriver") as driver_class, \
                patch.object(cli, "LoggerConfig") as logger_config:
            driver_class.return_value.run.return_value = {'status': 'completed'}

            code = cli.main([
                "download",
                "--manifest", str(manifest),
                "--output", str(tmp_path / "out"),
                "--renderer", "http",
                "--limit", "2",
                "--checkpoint-interval", "5",
                "--log-dir", str(tmp_path / "logs"),
            ])

        assert code == 0
        logger_config.assert_called_once_with(log_dir=str(tmp_path / "logs"))
        assert driver_class.call_args.kwargs['checkpoint_interval'] == 5
        driver_class.return_value.run.assert_called_once_with(
            str(manifest), str(tmp_path / "out"), limit=2
        )

    def test_download_failed_run_exit_code(self, manifest, tmp_path):
        from photo_fetcher import cli

        with patch.object(cli, "BatchDriver") as driver_class, patch.object(cli, "LoggerConfig"):
            driver_class.return_value.run.return_value = {'status': 'failed', 'error': 'boom'}

            code = cli.main(["download", "--manifest", str(manifest), "--output", str(tmp_path)])

        assert code == 1

    def test_missing_paths(self, capsys):
        from photo_fetcher import cli

        code = cli.main(["download"])

        assert code == 2
        assert "manifest_path is required" in capsys.readouterr().err

    def test_status(self, manifest, tmp_path, capsys):
        """Test status output for a partly processed folder."""
        from photo_fetcher import cli

        output = tmp_path / "out"
        output.mkdir()
        (output / "download_state.json").write_text('{"lastProcessedIndex": 1}')
        (output / "failed.json").write_text('[{"index": 0, "Error": "timeout"}]')

        code = cli.main(["status", "--manifest", str(manifest), "--output", str(output)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Resume index:  1" in out
        assert "50.0% (2/4)" in out
        assert "Failed items:  1" in out

    def test_status_corrupt_state(self, manifest, tmp_path, capsys):
        from photo_fetcher import cli

        (tmp_path / "download_state.json").write_text("nope")

        code = cli.main(["status", "--manifest", str(manifest), "--output", str(tmp_path)])

        assert code == 1
        assert "Error" in capsys.readouterr().err

    def test_unknown_log_level(self, manifest, tmp_path, capsys):
        """Test that a bad log level is reported as a configuration error."""
        from photo_fetcher import cli

        with patch.object(cli, "BatchDriver") as driver_class:
            code = cli.main([
                "download",
                "--manifest", str(manifest),
                "--output", str(tmp_path / "out"),
                "--log-level", "bogus",
            ])

        assert code == 2
        assert "log_level" in capsys.readouterr().err
        driver_class.assert_not_called()

    def test_unknown_log_level_from_environment(self, manifest, tmp_path, monkeypatch):
        from photo_fetcher import cli

        monkeypatch.setenv("PHOTO_FETCHER_LOG_LEVEL", "bogus")

        code = cli.main(["download", "--manifest", str(manifest), "--output", str(tmp_path)])

        assert code == 2
