"""
Git fetching of configuration plugins into the local cache.
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

import structlog

from linthis import paths
from linthis.backends.subprocess_runner import SubprocessRunner
from linthis.interfaces.process import ProcessResult, ProcessRunner
from linthis.logging import log_operation

from .cache import CachedPlugin, PluginCache
from .errors import CacheError, CloneFailed, GitNotInstalled, NetworkError, UpdateFailed
from .source import PluginSource, looks_like_commit_hash

log = structlog.get_logger(__name__)

# Probing availability should never take long
GIT_VERSION_TIMEOUT = 10


class PluginFetcher:
    """
    Materializes plugin repositories in a :class:`PluginCache`.

    Every git invocation goes through ``runner`` and carries a deadline of
    ``timeout`` seconds; an expired deadline is reported as ``NetworkError``.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        timeout: Optional[int] = None,
        git: str = "git",
    ):
        self.runner = runner or SubprocessRunner()
        self.timeout = timeout or paths.git_timeout()
        self.git = git

    def _git(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        timeout: Optional[int] = None,
    ) -> ProcessResult:
        command = [self.git, *args]
        log.debug("git", command=" ".join(command), cwd=str(cwd) if cwd else None)
        try:
            return self.runner.run(command, timeout=timeout or self.timeout, check=False, cwd=cwd)
        except FileNotFoundError as e:
            raise GitNotInstalled() from e
        except subprocess.TimeoutExpired as e:
            raise NetworkError(
                f"'git {' '.join(args)}' did not finish within {e.timeout}s"
            ) from e

    def check_git_available(self) -> None:
        """Raise ``GitNotInstalled`` unless ``git --version`` succeeds."""
        try:
            result = self._git(["--version"], timeout=GIT_VERSION_TIMEOUT)
        except NetworkError as e:
            raise GitNotInstalled() from e
        if not result.success:
            raise GitNotInstalled()

    def fetch(
        self,
        source: PluginSource,
        cache: PluginCache,
        force_update: bool = False,
    ) -> CachedPlugin:
        """Fetch a plugin into the cache.

        An existing checkout is reused without any network access unless
        ``force_update`` is set.
        """
        self.check_git_available()

        if not source.url:
            raise CloneFailed(source.name, "No URL provided for plugin")
        url = source.url
        cache_path = cache.url_to_cache_path(url)

        with log_operation(log, "plugin_fetch", plugin=source.name, url=url) as op_log:
            with cache.lock(cache_path):
                existing = cache.load_cache_metadata(cache_path) if cache_path.exists() else None

                if cache_path.exists() and not force_update:
                    op_log.debug("plugin_cache_hit", path=str(cache_path))
                    if existing is not None:
                        return existing
                    plugin = CachedPlugin(
                        name=source.name,
                        url=url,
                        git_ref=source.git_ref,
                        cache_path=cache_path,
                        commit_hash=self._head_commit(cache_path),
                    )
                    cache.save_cache_metadata(plugin)
                    return plugin

                if cache_path.exists():
                    op_log.info("plugin_update", ref=source.git_ref)
                    self._update_plugin(source, cache_path)
                else:
                    op_log.info("plugin_clone", ref=source.git_ref)
                    self._clone_plugin(url, cache_path, source.git_ref)

                commit = self._head_commit(cache_path)
                if existing is not None:
                    plugin = existing.touched(source.name, source.git_ref, commit)
                else:
                    plugin = CachedPlugin(
                        name=source.name,
                        url=url,
                        git_ref=source.git_ref,
                        cache_path=cache_path,
                        commit_hash=commit,
                    )
                cache.save_cache_metadata(plugin)
                return plugin

    def _clone_plugin(self, url: str, target_path: Path, git_ref: Optional[str]) -> None:
        """Shallow, single-branch clone; commit refs are checked out afterwards."""
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"Failed to create {target_path.parent}: {e}") from e

        args = ["clone", "--depth", "1", "--single-branch"]
        is_commit = git_ref is not None and looks_like_commit_hash(git_ref)
        if git_ref and not is_commit:
            args += ["--branch", git_ref]
        args += [url, str(target_path)]

        try:
            result = self._git(args)
            if not result.success:
                raise CloneFailed(url, result.error_output)
            if is_commit:
                self._checkout_commit(target_path, git_ref)
        except (CloneFailed, NetworkError):
            # A partial or wrong checkout must not be mistaken for a cache hit
            shutil.rmtree(target_path, ignore_errors=True)
            raise

    def _update_plugin(self, source: PluginSource, cache_path: Path) -> None:
        git_ref = source.git_ref
        if git_ref and looks_like_commit_hash(git_ref):
            self._checkout_commit(cache_path, git_ref, label=source.name)
            return

        fetch_args = ["fetch", "--depth", "1"]
        if git_ref:
            fetch_args += ["origin", git_ref]
        result = self._git(fetch_args, cwd=cache_path)
        if not result.success:
            raise UpdateFailed(source.name, result.error_output)

        target = f"origin/{git_ref}" if git_ref else "origin/HEAD"
        if git_ref:
            # A refspec-less single-ref fetch only updates FETCH_HEAD
            self._git(["update-ref", f"refs/remotes/origin/{git_ref}", "FETCH_HEAD"], cwd=cache_path)
        reset = self._git(["reset", "--hard", target], cwd=cache_path)
        if not reset.success:
            raise UpdateFailed(source.name, reset.error_output)

    def _checkout_commit(self, repo_path: Path, commit: str, label: Optional[str] = None) -> None:
        """Shallow clones lack history, so fetch the commit explicitly first."""
        fetched = self._git(["fetch", "--depth", "1", "origin", commit], cwd=repo_path)
        if not fetched.success:
            log.debug("commit_fetch_failed", commit=commit, stderr=fetched.error_output)

        checkout = self._git(["checkout", "--force", commit], cwd=repo_path)
        if not checkout.success:
            if label is not None:
                raise UpdateFailed(label, f"Failed to checkout commit {commit}: {checkout.error_output}")
            raise CloneFailed(commit, f"Failed to checkout commit: {checkout.error_output}")

    def _head_commit(self, repo_path: Path) -> Optional[str]:
        try:
            result = self._git(["rev-parse", "HEAD"], cwd=repo_path, timeout=GIT_VERSION_TIMEOUT)
        except NetworkError:
            return None
        if not result.success:
            return None
        return result.stdout.strip() or None

    def check_network_available(self, url: str) -> bool:
        """Cheap connectivity probe via ``git ls-remote``. Never raises."""
        try:
            result = self._git(["ls-remote", "--exit-code", "--heads", url, "HEAD"])
        except (GitNotInstalled, NetworkError):
            return False
        return result.success
