"""
Unit tests for dispatch to the active toolchain.

Tests cover:
- Launching the resolved binary with GOROOT set
- Missing versions: prompt, auto-install and CI fail-fast
- Exit code translation by the system launcher
"""

import io
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from golta.core.config import GoltaConfig
from golta.core.exceptions import NotActiveError, NotInstalledError
from golta.toolchain.dispatcher import Dispatcher, SystemLauncher, prompt_yes_no
from golta.toolchain.installer import InstallResult
from golta.toolchain.pins import DefaultStore, PinStore
from golta.toolchain.registry import LocalRegistry
from tests.mocks import FakeLauncher


@pytest.fixture
def launcher():
    return FakeLauncher(exit_code=0)


@pytest.fixture
def installer(paths, install_go):
    """Installer double that creates the fake install it is asked for."""
    mock = MagicMock()

    def _install(tool, version, start_dir=None):
        binary = install_go(version)
        return InstallResult(
            tool=tool,
            version=version,
            install_path=paths.install_dir(tool, version),
            binary_path=binary,
        )

    mock.install.side_effect = _install
    return mock


@pytest.fixture
def make_dispatcher(paths, linux_platform, launcher, installer):
    def _make(environ=None, config=None, confirm=None):
        return Dispatcher(
            paths,
            config or GoltaConfig(),
            environ=environ if environ is not None else {"PATH": "/usr/bin"},
            registry=LocalRegistry(paths, linux_platform),
            installer=installer,
            launcher=launcher,
            confirm=confirm or (lambda question: pytest.fail(f"unexpected prompt: {question}")),
        )

    return _make


class TestDispatch:
    """Tests for Dispatcher.dispatch()."""

    def test_runs_pinned_version(self, make_dispatcher, launcher, paths, install_go, project_dir):
        """Test the pinned binary runs with args and GOROOT."""
        binary = install_go("1.22.3")
        install_go("1.21.0")
        DefaultStore(paths).set("go", "1.21.0")
        PinStore().write(project_dir, "go", "1.22.3")

        exit_code = make_dispatcher().dispatch("go", ["version"], project_dir)

        assert exit_code == 0
        assert launcher.binary == binary
        assert launcher.args == ["version"]
        assert launcher.env["GOROOT"] == str(paths.versions_dir / "1.22.3" / "go")
        assert launcher.env["PATH"] == "/usr/bin"

    def test_exit_code_passed_through(self, make_dispatcher, paths, install_go, project_dir):
        """Test the child's exit code is returned."""
        install_go("1.22.3")
        DefaultStore(paths).set("go", "1.22.3")
        dispatcher = make_dispatcher()
        dispatcher.launcher = FakeLauncher(exit_code=3)

        assert dispatcher.dispatch("go", ["test"], project_dir) == 3

    def test_nothing_active(self, make_dispatcher, project_dir):
        """Test NotActiveError without pin, manifest or default."""
        with pytest.raises(NotActiveError):
            make_dispatcher().dispatch("go", [], project_dir)

    def test_auxiliary_tool_gets_active_goroot(
        self, make_dispatcher, launcher, paths, install_go, install_tool, project_dir
    ):
        """Test auxiliary tools see the active Go's GOROOT."""
        install_go("1.22.3")
        binary = install_tool("gopls", "v0.15.3")
        PinStore().write(project_dir, "go", "1.22.3")
        PinStore().write(project_dir, "gopls", "v0.15.3")

        make_dispatcher().dispatch("gopls", ["version"], project_dir)

        assert launcher.binary == binary
        assert launcher.env["GOROOT"] == str(paths.versions_dir / "1.22.3" / "go")

    def test_auxiliary_tool_without_go(
        self, make_dispatcher, launcher, paths, install_tool, project_dir
    ):
        """Test the caller's environment is kept when no Go is active."""
        install_tool("dlv", "v1.22.1")
        DefaultStore(paths).set("dlv", "v1.22.1")

        make_dispatcher(environ={"GOROOT": "/opt/go"}).dispatch("dlv", [], project_dir)

        assert launcher.env["GOROOT"] == "/opt/go"


class TestMissingVersion:
    """Tests for dispatching to a version that is not installed."""

    @pytest.fixture(autouse=True)
    def pin_missing(self, project_dir):
        PinStore().write(project_dir, "go", "1.22.3")

    def test_prompt_accepted(self, make_dispatcher, launcher, installer, project_dir):
        """Test accepting the prompt installs and runs."""
        questions = []

        def confirm(question):
            questions.append(question)
            return True

        make_dispatcher(confirm=confirm).dispatch("go", ["version"], project_dir)

        assert questions == [
            "go 1.22.3 is not installed. Would you like to install it?"
        ]
        installer.install.assert_called_once_with("go", "1.22.3", start_dir=project_dir)
        assert launcher.binary.is_file()

    def test_prompt_declined(self, make_dispatcher, launcher, installer, project_dir):
        """Test declining the prompt fails without installing."""
        dispatcher = make_dispatcher(confirm=lambda question: False)

        with pytest.raises(NotInstalledError, match="golta install go@1.22.3"):
            dispatcher.dispatch("go", [], project_dir)

        installer.install.assert_not_called()
        assert launcher.binary is None

    def test_ci_fails_fast(self, make_dispatcher, installer, project_dir):
        """Test CI never prompts, even when CI is empty."""
        dispatcher = make_dispatcher(environ={"CI": ""})

        with pytest.raises(NotInstalledError, match="CI detected, not prompting"):
            dispatcher.dispatch("go", [], project_dir)

        installer.install.assert_not_called()

    def test_auto_install_env(self, make_dispatcher, installer, project_dir):
        """Test GOLTA_AUTO_INSTALL installs without asking, even on CI."""
        dispatcher = make_dispatcher(environ={"CI": "true", "GOLTA_AUTO_INSTALL": "1"})

        assert dispatcher.dispatch("go", [], project_dir) == 0
        installer.install.assert_called_once()

    def test_auto_install_config(self, make_dispatcher, installer, project_dir):
        """Test auto_install in config installs without asking."""
        dispatcher = make_dispatcher(config=GoltaConfig(auto_install=True))

        dispatcher.dispatch("go", [], project_dir)

        installer.install.assert_called_once()


class TestRunAndWhich:
    """Tests for explicit runs and binary lookup."""

    def test_run_explicit_version(self, make_dispatcher, launcher, paths, install_go, project_dir):
        """Test run ignores the active version."""
        binary = install_go("1.21.0")
        install_go("1.22.3")
        DefaultStore(paths).set("go", "1.22.3")

        make_dispatcher().run("go", "go1.21.0", ["env"], project_dir)

        assert launcher.binary == binary
        assert launcher.env["GOROOT"] == str(paths.versions_dir / "1.21.0" / "go")

    def test_run_not_installed(self, make_dispatcher, installer, project_dir):
        """Test run never installs."""
        with pytest.raises(NotInstalledError):
            make_dispatcher().run("go", "1.21.0", [], project_dir)

        installer.install.assert_not_called()

    def test_which(self, make_dispatcher, paths, install_go, project_dir):
        """Test which returns the active binary."""
        binary = install_go("1.22.3")
        DefaultStore(paths).set("go", "1.22.3")

        assert make_dispatcher().which("go", project_dir) == binary

    def test_which_not_installed(self, make_dispatcher, paths, project_dir):
        """Test which does not install."""
        DefaultStore(paths).set("go", "1.22.3")

        with pytest.raises(NotInstalledError):
            make_dispatcher().which("go", project_dir)


class TestPrompt:
    """Tests for prompt_yes_no()."""

    @pytest.mark.parametrize("answer", ["\n", "y\n", "YES\n", " yes \n"])
    def test_yes(self, answer):
        """Test empty input defaults to yes."""
        stderr = io.StringIO()

        assert prompt_yes_no("Install?", io.StringIO(answer), stderr)
        assert stderr.getvalue() == "Install? [Y/n] "

    @pytest.mark.parametrize("answer", ["n\n", "no\n", "nope\n"])
    def test_no(self, answer):
        assert not prompt_yes_no("Install?", io.StringIO(answer), io.StringIO())

    def test_eof(self):
        """Test EOF counts as no."""
        assert not prompt_yes_no("Install?", io.StringIO(""), io.StringIO())


class TestSystemLauncher:
    """Tests for SystemLauncher."""

    def test_exec_replaces_process(self):
        """Test POSIX launches hand over with execve."""
        launcher = SystemLauncher(replace_process=True)

        with patch("golta.toolchain.dispatcher.os.execve") as mock_execve:
            launcher.launch(Path("/x/go"), ["version"], {"A": "1"})

        mock_execve.assert_called_once_with("/x/go", ["/x/go", "version"], {"A": "1"})

    def test_spawn_returns_exit_code(self):
        """Test spawned children report their exit code."""
        launcher = SystemLauncher(replace_process=False)

        with patch(
            "golta.toolchain.dispatcher.subprocess.run",
            return_value=subprocess.CompletedProcess([], 2),
        ) as mock_run:
            assert launcher.launch(Path("/x/go"), ["vet"], {}) == 2

        mock_run.assert_called_once_with(["/x/go", "vet"], env={})

    def test_signal_maps_to_one(self):
        """Test termination by signal becomes exit code 1."""
        launcher = SystemLauncher(replace_process=False)

        with patch(
            "golta.toolchain.dispatcher.subprocess.run",
            return_value=subprocess.CompletedProcess([], -9),
        ):
            assert launcher.launch(Path("/x/go"), [], {}) == 1
