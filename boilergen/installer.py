"""Interactive installation of the dependencies a template requires.

After the generation report is printed the user is asked once whether to
install everything. On yes, ``<package_manager> install <dep>`` runs once
per dependency, strictly one after another, with the child inheriting the
terminal. A failed install is reported and the queue continues.

The running child is tracked in an :class:`InstallContext`. While installs
run, a SIGINT handler on the event loop forwards the interrupt to that child
and stops the remaining queue.
"""

from __future__ import annotations

import asyncio
import shutil
import signal
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field
from rich.prompt import Confirm

from .scaffolder.dependencies import merge_dependencies
from .utils import print_error, print_info, print_success, print_warning


INSTALL_QUESTION = "Do you want to install all required dependencies?"


class InstallSummary(BaseModel):
    """What happened to each requested dependency."""

    installed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    interrupted: bool = Field(default=False, description="SIGINT stopped the queue")


class InstallContext:
    """Holds the currently running install process, if any."""

    def __init__(self) -> None:
        self.active_process: asyncio.subprocess.Process | None = None
        self.interrupted = False

    def forward_interrupt(self) -> None:
        """Mark the queue as interrupted and pass SIGINT on to the active child."""
        self.interrupted = True
        process = self.active_process
        if process is None or process.returncode is not None:
            return
        try:
            process.send_signal(signal.SIGINT)
        except ProcessLookupError:
            # Child exited between the check and the signal.
            pass


class InstallPrompter:
    """Asks whether to install dependencies and installs them sequentially."""

    def __init__(
        self,
        package_manager: str = "npm",
        assume_yes: bool = False,
        skip: bool = False,
        cwd: str | Path | None = None,
        context: InstallContext | None = None,
    ) -> None:
        self.package_manager = package_manager
        self.assume_yes = assume_yes
        self.skip = skip
        self.cwd = cwd
        self.context = context or InstallContext()

    def confirm(self) -> bool:
        if self.skip:
            return False
        if self.assume_yes:
            return True
        return Confirm.ask(INSTALL_QUESTION, default=True)

    async def prompt_install(self, dependencies: Iterable[str]) -> InstallSummary:
        """Ask once, then install every dependency or skip them all."""
        deps = merge_dependencies(dependencies)
        if not deps:
            print_info("No dependencies to install.")
            return InstallSummary()

        if not self.confirm():
            print_success("Skipped package installation.")
            return InstallSummary(skipped=deps)

        return await self.install_all(deps)

    async def install_all(self, dependencies: list[str]) -> InstallSummary:
        """Install *dependencies* in order, continuing past failures."""
        loop = asyncio.get_running_loop()
        handler_installed = self._install_sigint_handler(loop)
        summary = InstallSummary()

        try:
            for index, dep in enumerate(dependencies):
                if self.context.interrupted:
                    summary.skipped.extend(dependencies[index:])
                    break
                if await self.install_one(dep):
                    summary.installed.append(dep)
                else:
                    summary.failed.append(dep)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

        if self.context.interrupted:
            summary.interrupted = True
            print_warning("Installation interrupted.")
        return summary

    async def install_one(self, dependency: str) -> bool:
        """Run ``<package_manager> install <dependency>``; ``True`` on exit code 0."""
        print_info(f"Installing {dependency}...")
        executable = shutil.which(self.package_manager) or self.package_manager

        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                "install",
                dependency,
                cwd=str(self.cwd) if self.cwd is not None else None,
            )
        except (FileNotFoundError, PermissionError) as exc:
            print_error(f"Failed to install {dependency}: {exc}")
            return False

        self.context.active_process = process
        try:
            returncode = await process.wait()
        finally:
            self.context.active_process = None

        if returncode == 0:
            print_success(f"{dependency} installed successfully.")
            return True
        print_error(f"Failed to install {dependency} (exit code {returncode})")
        return False

    def _install_sigint_handler(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            loop.add_signal_handler(signal.SIGINT, self.context.forward_interrupt)
        except (NotImplementedError, RuntimeError):
            # Windows event loops and non-main threads cannot install handlers.
            return False
        return True
