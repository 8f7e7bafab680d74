"""
Tests for StoreCommandRunner.

Runs real child processes through the current Python interpreter so
no Store installation is needed.
"""

import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from storescm.errors import ExternalToolFailure
from storescm.infra import StoreCommandRunner


class TestStoreCommandRunner:
    """Test StoreCommandRunner.run."""

    def test_captures_stdout(self):
        runner = StoreCommandRunner()
        output = runner.run([sys.executable, "-c", "print('A\\t1\\tDevelopment')"])
        assert output == "A\t1\tDevelopment\n"

    def test_runs_in_working_directory(self, tmp_path):
        runner = StoreCommandRunner()
        output = runner.run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert output.strip() == str(tmp_path.resolve())

    def test_arguments_are_not_shell_interpreted(self):
        runner = StoreCommandRunner()
        output = runner.run([sys.executable, "-c", "import sys; print(sys.argv[1])", "a b; echo $HOME"])
        assert output.strip() == "a b; echo $HOME"

    def test_non_zero_exit_raises(self):
        runner = StoreCommandRunner()
        script = "import sys; sys.stderr.write('repository unreachable'); sys.exit(3)"
        with pytest.raises(ExternalToolFailure) as excinfo:
            runner.run([sys.executable, "-c", script])
        assert excinfo.value.returncode == 3
        assert "repository unreachable" in excinfo.value.stderr
        assert "repository unreachable" in str(excinfo.value)

    def test_missing_executable_raises(self, tmp_path):
        runner = StoreCommandRunner()
        with pytest.raises(ExternalToolFailure):
            runner.run([str(tmp_path / "no-such-script")])

    def test_timeout_raises(self):
        runner = StoreCommandRunner(timeout=5)
        with patch("storescm.infra.command_runner.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="storeci", timeout=5)):
            with pytest.raises(ExternalToolFailure, match="timed out"):
                runner.run(["storeci"])

    def test_passes_argument_list_without_shell(self):
        result = MagicMock(returncode=0, stdout="", stderr="")
        with patch("storescm.infra.command_runner.subprocess.run", return_value=result) as mock_run:
            StoreCommandRunner().run(["storeci", "-repository", "psql"], cwd="/ws")

        args, kwargs = mock_run.call_args
        assert args[0] == ["storeci", "-repository", "psql"]
        assert kwargs["cwd"] == "/ws"
        assert kwargs.get("shell", False) is False
        assert kwargs["timeout"] is None
