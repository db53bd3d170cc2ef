"""
Pytest fixtures and configuration for linthis plugin tests.
"""
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import MagicMock, patch

import pytest

from linthis.interfaces.process import ProcessResult, ProcessRunner
from linthis.plugin import PluginCache, PluginFetcher, PluginRegistry, RegistryEntry
from linthis.plugin.aliases import AliasResolver, AliasTable
from linthis.plugin.manifest import MANIFEST_FILENAME

FAKE_COMMIT = "0123456789abcdef0123456789abcdef01234567"


def make_plugin(
    root: Path,
    name: str,
    configs: Optional[Dict[str, Dict[str, str]]] = None,
    version: str = "1.0.0",
    create_files: bool = True,
) -> Path:
    """Write a flat-layout plugin (manifest plus config files) into ``root``."""
    configs = configs or {}
    root.mkdir(parents=True, exist_ok=True)

    lines = ["[plugin]", f'name = "{name}"', f'version = "{version}"', ""]
    for language, tools in configs.items():
        lines.append(f"[configs.{language}]")
        for tool, rel_path in tools.items():
            lines.append(f'{tool} = "{rel_path}"')
            if create_files:
                target = root / rel_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(f"# {name} {language}/{tool}\n")
        lines.append("")
    (root / MANIFEST_FILENAME).write_text("\n".join(lines))
    return root


class FakeGitRunner(ProcessRunner):
    """Stands in for git.

    ``remotes`` maps a URL to a local directory whose contents a clone copies.
    ``fail`` names git subcommands that exit non-zero, ``hang`` names those
    that time out.
    """

    def __init__(self, remotes: Optional[Dict[str, Path]] = None):
        self.remotes: Dict[str, Path] = dict(remotes or {})
        self.commands: List[List[str]] = []
        self.fail: Dict[str, str] = {}
        self.hang: set = set()
        self.missing = False

    def run(self, command, capture_output=True, timeout=None, check=False, cwd=None, env=None):
        if self.missing:
            raise FileNotFoundError(command[0])
        self.commands.append(list(command))
        sub = command[1]
        if sub in self.hang:
            if sub == "clone":
                # a killed clone leaves its half-written target behind
                (Path(command[-1]) / ".git").mkdir(parents=True, exist_ok=True)
            raise subprocess.TimeoutExpired(command, timeout)
        if sub in self.fail:
            return ProcessResult(returncode=128, stdout="", stderr=self.fail[sub])

        if sub == "--version":
            return ProcessResult(0, "git version 2.45.0\n", "")
        if sub == "clone":
            url, target = command[-2], Path(command[-1])
            if url not in self.remotes:
                return ProcessResult(128, "", f"fatal: repository '{url}' not found\n")
            shutil.copytree(self.remotes[url], target)
            return ProcessResult(0, "", "")
        if sub == "rev-parse":
            return ProcessResult(0, FAKE_COMMIT + "\n", "")
        return ProcessResult(0, "", "")

    def subcommands(self) -> List[str]:
        return [c[1] for c in self.commands]

    def network_calls(self) -> List[List[str]]:
        return [c for c in self.commands if c[1] in ("clone", "fetch", "ls-remote")]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point every linthis location at a scratch directory."""
    monkeypatch.setenv("LINTHIS_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("LINTHIS_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("LINTHIS_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("LINTHIS_GIT_TIMEOUT", raising=False)
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    yield tmp_path


@pytest.fixture
def cache(temp_dir):
    return PluginCache(cache_dir=temp_dir / "plugins")


@pytest.fixture
def remotes(temp_dir):
    """Two upstream plugin repositories that both configure rust/clippy."""
    a = make_plugin(
        temp_dir / "remote-a",
        "plugin-a",
        {"rust": {"clippy": "rust/clippy.toml", "rustfmt": "rust/rustfmt.toml"}},
    )
    b = make_plugin(
        temp_dir / "remote-b",
        "plugin-b",
        {"rust": {"clippy": "rust/clippy.toml"}, "python": {"ruff": "python/ruff.toml"}},
    )
    return {
        "https://github.com/acme/plugin-a.git": a,
        "https://github.com/acme/plugin-b.git": b,
    }


@pytest.fixture
def git(remotes):
    return FakeGitRunner(remotes)


@pytest.fixture
def fetcher(git):
    return PluginFetcher(runner=git, timeout=30)


@pytest.fixture
def registry():
    return PluginRegistry(
        {
            "a": RegistryEntry(url="https://github.com/acme/plugin-a.git", description="A"),
            "b": RegistryEntry(
                url="https://github.com/acme/plugin-b.git", description="B", default_ref="main"
            ),
        }
    )


@pytest.fixture
def resolver(temp_dir):
    return AliasResolver(
        AliasTable(temp_dir / "project.toml", scope="project"),
        AliasTable(temp_dir / "global.toml", scope="global"),
    )


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for testing without actual command execution."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0, stdout="git version 2.45.0\n", stderr="")
        yield mock_run
