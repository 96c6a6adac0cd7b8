"""Build Executor.

This module runs the external ninja executable against the generated
script.

Design:
    - Runs in the project root so script paths resolve relative to it
    - stdout/stderr are inherited, never captured or rewritten
    - A nonzero exit status or a missing binary is a fatal build failure
    - On Ctrl-C the whole ninja process tree is terminated before re-raising
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union

import psutil

from ..errors import ExecutorInvocationFailure
from .script_generator import CACHE_DIR, SCRIPT_NAME

NINJA_ENV_VAR = "NINJAFORGE_NINJA"


def resolve_jobs(jobs: Union[int, str, None]) -> Optional[int]:
    """Resolve a job count setting.

    Args:
        jobs: Integer count, 'auto' for one job per logical CPU, or None to
            leave the choice to ninja

    Returns:
        Job count to pass with -j, or None
    """
    if jobs is None or jobs == "":
        return None
    if isinstance(jobs, str) and jobs.strip().lower() == "auto":
        return psutil.cpu_count(logical=True) or 1
    count = int(jobs)
    if count < 1:
        raise ValueError(f"Job count must be positive, got {count}")
    return count


class NinjaExecutor:
    """Invokes ninja on a generated build script."""

    def __init__(
        self,
        project_dir: Path,
        ninja: Optional[str] = None,
        jobs: Optional[int] = None,
        verbose: bool = False
    ):
        """Initialize executor.

        Args:
            project_dir: Project root containing the cache directory
            ninja: ninja executable (defaults to $NINJAFORGE_NINJA or 'ninja')
            jobs: Parallel job count passed with -j
            verbose: Ask ninja to print full command lines
        """
        self.project_dir = Path(project_dir)
        self.ninja = ninja or os.environ.get(NINJA_ENV_VAR, "ninja")
        self.jobs = jobs
        self.verbose = verbose

    def build_command(self) -> List[str]:
        cmd = [self.ninja, "-f", f"{CACHE_DIR}/{SCRIPT_NAME}"]
        if self.jobs:
            cmd.extend(["-j", str(self.jobs)])
        if self.verbose:
            cmd.append("-v")
        return cmd

    def run(self) -> int:
        """Run ninja and wait for it to finish.

        Returns:
            The executor's exit status (always 0)

        Raises:
            ExecutorInvocationFailure: If ninja cannot be started or fails
        """
        cmd = self.build_command()
        logging.debug(f"Running: {' '.join(cmd)} (cwd={self.project_dir})")

        try:
            process = subprocess.Popen(cmd, cwd=self.project_dir)
        except OSError as e:
            raise ExecutorInvocationFailure(f"Failed to start {self.ninja}: {e}") from e

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            self._terminate_tree(process.pid)
            raise

        if returncode != 0:
            raise ExecutorInvocationFailure("build failed.", returncode=returncode)
        return returncode

    @staticmethod
    def _terminate_tree(root_pid: int) -> int:
        """Terminate a process and all of its children, children first.

        Returns:
            Number of processes signalled
        """
        try:
            root = psutil.Process(root_pid)
            processes = list(reversed(root.children(recursive=True))) + [root]
        except psutil.NoSuchProcess:
            return 0

        signalled = []
        for proc in processes:
            try:
                proc.terminate()
                signalled.append(proc)
            except psutil.NoSuchProcess:
                pass

        _gone, alive = psutil.wait_procs(signalled, timeout=3)
        for proc in alive:
            try:
                proc.kill()
                logging.warning(f"Force killed stubborn process {proc.pid}")
            except psutil.NoSuchProcess:
                pass

        return len(signalled)
