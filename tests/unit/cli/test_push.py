"""Unit tests for the tfe-push push CLI command."""

from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from tfe_push.cli.commands.push import parse_target
from tfe_push.cli.main import app
from tfe_push.core.exceptions import NoVcsDetectedError
from tfe_push.core.pipeline import PushResult
from tfe_push.core.runs.tracker import PollState


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def push_result():
    return PushResult(
        workspace_id="ws-1",
        configuration_version_id="cv-1",
        run_id="run-1",
        run_url="https://tfe.example.com/app/acme/prod/runs/run-1",
        file_count=3,
        incremental=False,
    )


@pytest.fixture
def patched_pipeline(push_result, mock_env_vars):
    with patch("tfe_push.cli.commands.push.TFEClient") as mock_client_cls, patch(
        "tfe_push.cli.commands.push.push_configuration", return_value=push_result
    ) as mock_push:
        yield mock_client_cls, mock_push


class TestParseTarget:
    def test_name_shorthand(self):
        assert parse_target("acme/prod", None, None) == ("acme", "prod")

    def test_name_overrides_separate_options(self):
        assert parse_target("acme/prod", "other", "dev") == ("acme", "prod")

    def test_separate_options(self):
        assert parse_target(None, "acme", "prod") == ("acme", "prod")

    @pytest.mark.parametrize("name", ["acme", "acme/", "/prod", "a/b/c"])
    def test_malformed_name(self, name):
        with pytest.raises(typer.BadParameter):
            parse_target(name, None, None)

    def test_missing_workspace(self):
        with pytest.raises(typer.BadParameter):
            parse_target(None, "acme", None)


class TestPushCommand:
    def test_builds_config_from_options(self, runner, patched_pipeline, tmp_path: Path):
        mock_client_cls, mock_push = patched_pipeline

        result = runner.invoke(
            app,
            [
                "push",
                str(tmp_path),
                "--name",
                "acme/prod",
                "--no-vcs",
                "--no-upload-plugins",
                "--poll",
                "5",
            ],
        )

        assert result.exit_code == 0, result.output
        config = mock_push.call_args[0][0]
        assert config.root == tmp_path.resolve()
        assert (config.organization, config.workspace) == ("acme", "prod")
        assert config.policy.tracked_only is False
        assert config.policy.include_modules is True
        assert config.policy.include_local_plugins is False
        assert config.poll_interval == 5
        assert config.address == "https://tfe.example.com"
        mock_client_cls.assert_called_once_with(
            "https://tfe.example.com/api/v2", "tfe.example.com"
        )
        assert "runs/run-1" in result.output

    def test_defaults(self, runner, patched_pipeline, tmp_path: Path, monkeypatch):
        _, mock_push = patched_pipeline
        monkeypatch.setenv("TFE_ORG", "acme")
        monkeypatch.setenv("TFE_WORKSPACE", "prod")

        result = runner.invoke(app, ["push", str(tmp_path)])

        assert result.exit_code == 0, result.output
        config = mock_push.call_args[0][0]
        assert config.policy.tracked_only is True
        assert config.policy.include_modules is True
        assert config.policy.include_local_plugins is True
        assert config.poll_interval == 0

    def test_negative_poll_rejected(self, runner, patched_pipeline, tmp_path: Path):
        _, mock_push = patched_pipeline

        result = runner.invoke(
            app, ["push", str(tmp_path), "--name", "acme/prod", "--poll", "-1"]
        )

        assert result.exit_code != 0
        mock_push.assert_not_called()

    def test_push_error_exits_one(self, runner, patched_pipeline, tmp_path: Path):
        _, mock_push = patched_pipeline
        mock_push.side_effect = NoVcsDetectedError(str(tmp_path))

        result = runner.invoke(app, ["push", str(tmp_path), "--name", "acme/prod"])

        assert result.exit_code == 1
        assert "Push failed" in result.output

    def test_poll_summary_shows_lock_owner(
        self, runner, patched_pipeline, push_result, tmp_path: Path
    ):
        _, mock_push = patched_pipeline
        mock_push.return_value = PushResult(
            **{
                **push_result.__dict__,
                "poll_state": PollState(status="pending", lock_owner="run-other"),
            }
        )

        result = runner.invoke(
            app, ["push", str(tmp_path), "--name", "acme/prod", "--poll", "2"]
        )

        assert result.exit_code == 0, result.output
        assert "run-other" in result.output


class TestVersion:
    def test_version_flag(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "tfe-push v" in result.output
