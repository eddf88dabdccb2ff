"""Unit tests for scratch directory ownership and cleanup."""

from pathlib import Path
from unittest.mock import patch

import pytest

from tfe_push.core.archive.artifacts import artifact_workspace, release_artifacts


class TestReleaseArtifacts:
    def test_removes_files_and_directories(self, tmp_path: Path):
        file_path = tmp_path / "listing.txt"
        file_path.write_text("main.tf\n")
        directory = tmp_path / "scratch"
        (directory / "nested").mkdir(parents=True)
        (directory / "nested" / "archive.tar.gz").write_bytes(b"x")

        release_artifacts(file_path, directory)

        assert not file_path.exists()
        assert not directory.exists()

    def test_missing_paths_are_ignored(self, tmp_path: Path):
        release_artifacts(tmp_path / "never-created", str(tmp_path / "also-missing"))

    def test_os_error_is_logged_not_raised(self, tmp_path: Path):
        target = tmp_path / "stuck.txt"
        target.write_text("x")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")), patch(
            "tfe_push.core.archive.artifacts.log"
        ) as mock_log:
            release_artifacts(target)

        mock_log.warning.assert_called_once()


class TestArtifactWorkspace:
    def test_released_after_success(self):
        with artifact_workspace() as workdir:
            (workdir / "configuration.tar.gz").write_bytes(b"data")
            assert workdir.is_dir()

        assert not workdir.exists()

    def test_released_after_failure(self):
        with pytest.raises(RuntimeError):
            with artifact_workspace() as workdir:
                (workdir / "files.txt").write_text("main.tf\n")
                raise RuntimeError("upload failed")

        assert not workdir.exists()

    def test_concurrent_invocations_do_not_collide(self):
        with artifact_workspace() as first, artifact_workspace() as second:
            assert first != second
            assert first.name.startswith("tfe-push-")
