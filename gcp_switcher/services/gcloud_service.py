"""gcloud service - wraps gcloud CLI commands with async execution.

Each named operation runs the gcloud binary as a subprocess with its own
deadline and is normalized by `run()` into exactly one outcome event. The
interactive login is the exception: it inherits the terminal and blocks.
"""

import asyncio
import logging
import shutil
import subprocess
from typing import List, Tuple

from ..config.settings import SwitcherConfig
from ..core.events import (
    AccountsLoaded,
    ActiveAccountLoaded,
    ActiveProjectLoaded,
    CommandFailed,
    Dispatch,
    Event,
    Operation,
    OperationFinished,
    ProjectsLoaded,
    ToolChecked,
)
from ..exceptions import (
    AccountNotAuthenticatedError,
    CommandError,
    CommandFailedError,
    CommandTimeoutError,
    GcpSwitcherError,
    MalformedResponseError,
    ToolNotFoundError,
)
from ..models import Account, Project, parse_accounts, parse_projects

logger = logging.getLogger(__name__)


class GcloudService:
    """Runs gcloud operations and reports their outcomes as events."""

    def __init__(self, config: SwitcherConfig) -> None:
        self.config = config

    def _describe(self, args: List[str]) -> str:
        return " ".join(["gcloud"] + args)

    async def _run_gcloud(self, args: List[str], timeout: float) -> str:
        """Run a gcloud command asynchronously.

        Args:
            args: Command arguments (without the gcloud prefix)
            timeout: Command timeout in seconds

        Returns:
            Captured stdout

        Raises:
            ToolNotFoundError: If the gcloud binary cannot be executed
            CommandTimeoutError: If the deadline passes; the process is killed
            CommandFailedError: If gcloud exits with a non-zero status
        """
        cmd = [self.config.gcloud_binary] + args
        logger.debug(f"Running gcloud command: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError() from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandTimeoutError(
                f"command timed out: {self._describe(args)}", timeout=timeout
            ) from None

        stdout_str = stdout.decode("utf-8", errors="replace")
        stderr_str = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            output = stderr_str.strip() or stdout_str.strip()
            logger.warning(f"gcloud command failed ({process.returncode}): {output}")
            message = f"command failed: {self._describe(args)}"
            if output:
                message += f"\n{output}"
            raise CommandFailedError(message, output=output, returncode=process.returncode)

        return stdout_str

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def check_tool_available(self) -> bool:
        """Check if the gcloud binary is on PATH."""
        return shutil.which(self.config.gcloud_binary) is not None

    async def get_active_account(self) -> str:
        output = await self._run_gcloud(
            ["auth", "list", "--filter=status:ACTIVE", "--format=value(account)"],
            self.config.command_timeout,
        )
        return output.strip()

    async def get_active_project(self) -> str:
        output = await self._run_gcloud(
            ["config", "get-value", "project"], self.config.command_timeout
        )
        return output.strip()

    async def list_accounts(self) -> Tuple[Account, ...]:
        """List credentialed accounts; an unreadable payload yields no accounts."""
        output = await self._run_gcloud(
            ["auth", "list", "--format=json"], self.config.command_timeout
        )
        try:
            return parse_accounts(output)
        except MalformedResponseError as e:
            logger.warning(f"Treating account list as empty: {e}")
            return ()

    async def list_projects(self) -> Tuple[Project, ...]:
        """List accessible projects; an unreadable payload yields no projects."""
        output = await self._run_gcloud(
            ["projects", "list", "--format=json"], self.config.command_timeout
        )
        try:
            return parse_projects(output)
        except MalformedResponseError as e:
            logger.warning(f"Treating project list as empty: {e}")
            return ()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def switch_account(self, account: str) -> None:
        """Make an already-authenticated account the active one.

        Raises:
            AccountNotAuthenticatedError: If gcloud holds no credentials for it
            CommandError: If the switch itself fails or times out
        """
        timeout = self.config.long_timeout
        try:
            found = await self._run_gcloud(
                ["auth", "list", f"--filter=account={account}", "--format=value(account)"],
                timeout,
            )
        except CommandFailedError as e:
            raise AccountNotAuthenticatedError(account) from e
        # Only an exact account match counts as authenticated
        if account not in (line.strip() for line in found.splitlines()):
            raise AccountNotAuthenticatedError(account)

        try:
            await self._run_gcloud(["config", "set", "account", account], timeout)
        except CommandFailedError as e:
            detail = f":\n{e.output}" if e.output else f": {e.message}"
            raise CommandFailedError(
                f"failed to switch to account {account}{detail}\n\n"
                f"Please ensure the account is authenticated. "
                f"Run 'gcloud auth login {account}' if needed.",
                output=e.output,
                returncode=e.returncode,
            ) from e
        logger.info(f"Switched active account to {account}")

    async def switch_project(self, project_id: str) -> None:
        """Make a project the active one.

        Raises:
            CommandError: If gcloud rejects the project or times out
        """
        try:
            await self._run_gcloud(
                ["config", "set", "project", project_id], self.config.command_timeout
            )
        except CommandFailedError as e:
            detail = f":\n{e.output}" if e.output else f": {e.message}"
            raise CommandFailedError(
                f"failed to switch to project {project_id}{detail}\n\n"
                f"Please ensure you have access to this project and that it exists.",
                output=e.output,
                returncode=e.returncode,
            ) from e
        logger.info(f"Switched active project to {project_id}")

    def _run_interactive(self, args: List[str]) -> None:
        cmd = [self.config.gcloud_binary] + args
        logger.debug(f"Running interactive gcloud command: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, timeout=self.config.login_timeout)
        except FileNotFoundError as e:
            raise ToolNotFoundError() from e
        except subprocess.TimeoutExpired:
            raise CommandTimeoutError(
                f"command timed out: {self._describe(args)}",
                timeout=self.config.login_timeout,
            ) from None
        if result.returncode != 0:
            raise CommandFailedError(
                f"{self._describe(args)} exited with status {result.returncode}",
                returncode=result.returncode,
            )

    def login_new_account(self) -> None:
        """Log in a new account, then refresh application-default credentials.

        Attaches the current terminal to gcloud and blocks until both
        browser-driven flows finish. The caller must release the terminal first.
        """
        self._run_interactive(["auth", "login"])
        self._run_interactive(["auth", "application-default", "login"])

    def run_login(self) -> OperationFinished:
        """Run the interactive login and report it as an operation outcome."""
        try:
            self.login_new_account()
        except GcpSwitcherError as e:
            logger.warning(f"Login failed: {e}")
            return OperationFinished(Operation.LOGIN_NEW_ACCOUNT, success=False, error=e)
        return OperationFinished(Operation.LOGIN_NEW_ACCOUNT, success=True)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def run(self, command: Dispatch) -> Event:
        """Execute one dispatched operation and return its single outcome event."""
        operation = command.operation
        try:
            return await self._execute(command)
        except GcpSwitcherError as e:
            return self._failure(operation, e)
        except Exception as e:
            logger.exception(f"Unexpected error running {operation.value}")
            return self._failure(operation, GcpSwitcherError(f"unexpected error: {e}"))

    async def _execute(self, command: Dispatch) -> Event:
        operation = command.operation
        if operation.is_mutation and operation is not Operation.LOGIN_NEW_ACCOUNT:
            if not command.target:
                raise GcpSwitcherError(f"{operation.value} requires a target")

        if operation is Operation.CHECK_TOOL:
            return ToolChecked(await self.check_tool_available())
        if operation is Operation.GET_ACTIVE_ACCOUNT:
            return ActiveAccountLoaded(await self.get_active_account())
        if operation is Operation.GET_ACTIVE_PROJECT:
            return ActiveProjectLoaded(await self.get_active_project())
        if operation is Operation.LIST_ACCOUNTS:
            return AccountsLoaded(await self.list_accounts())
        if operation is Operation.LIST_PROJECTS:
            return ProjectsLoaded(await self.list_projects())
        if operation is Operation.SWITCH_ACCOUNT:
            await self.switch_account(command.target)
            return OperationFinished(operation, success=True, account_switched=True)
        if operation is Operation.SWITCH_PROJECT:
            await self.switch_project(command.target)
            return OperationFinished(operation, success=True)
        if operation is Operation.LOGIN_NEW_ACCOUNT:
            return self.run_login()
        raise GcpSwitcherError(f"unknown operation {operation!r}")

    def _failure(self, operation: Operation, error: GcpSwitcherError) -> Event:
        if isinstance(error, CommandTimeoutError):
            logger.warning(f"{operation.value} timed out: {error}")
        elif isinstance(error, CommandError):
            logger.warning(f"{operation.value} failed: {error}")
        if operation.is_mutation:
            return OperationFinished(operation, success=False, error=error)
        return CommandFailed(operation, error)
