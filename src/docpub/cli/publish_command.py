"""PublishCommand for publish, revert and build inspection.

This module implements the workspace commands that go through the
PublishService: ``publish``, ``revert``, ``builds`` and ``status``. Builds
run inline, so each command returns once the build has finished, and the
updated state is saved before returning.
"""

import logging
from typing import Callable, Optional

from docpub.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PublishError,
    UpstreamFailureError,
)
from docpub.models import Build, BuildStatus
from docpub.state import StateError, StateFilesystemError
from docpub.storage import StorageCredentialsError

from .config import ConfigLoader
from .errors import CLIError
from .models import ExitCode
from .output import OutputHandler
from .workspace import Workspace

logger = logging.getLogger(__name__)


class PublishCommand:
    """Runs publish operations against the configured workspace.

    Each public method returns an ExitCode and never raises for
    application errors; they are reported through the OutputHandler.

    Example:
        >>> command = PublishCommand(OutputHandler())
        >>> exit_code = command.publish()
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        config_path: Optional[str] = None,
        workspace: Optional[Workspace] = None,
    ):
        """Initialize the publish command.

        Args:
            output_handler: Output handler for terminal output
            config_path: Config file path (defaults to .docpub/config.yaml)
            workspace: Pre-built workspace (for testing)
        """
        self.output = output_handler or OutputHandler()
        self.config_path = config_path or ConfigLoader.DEFAULT_CONFIG_PATH
        self._workspace = workspace

    def publish(self) -> ExitCode:
        """Publish the site's selected spaces."""
        def action(workspace: Workspace) -> ExitCode:
            with self.output.spinner("Publishing..."):
                build = workspace.service.request_publish(
                    workspace.config.site_id, workspace.config.actor_id
                )
            return self._report_build(build)

        return self._run("publish", action, save=True)

    def revert(self, target_build_id: str) -> ExitCode:
        """Make a prior successful publish live again.

        Args:
            target_build_id: Build to revert to
        """
        def action(workspace: Workspace) -> ExitCode:
            with self.output.spinner(f"Reverting to {target_build_id}..."):
                build = workspace.service.request_revert(
                    workspace.config.site_id, workspace.config.actor_id, target_build_id
                )
            return self._report_build(build)

        return self._run("revert", action, save=True)

    def builds(self, limit: Optional[int] = None) -> ExitCode:
        """List the site's builds, newest first.

        Args:
            limit: Maximum number of builds to show
        """
        def action(workspace: Workspace) -> ExitCode:
            builds = workspace.service.list_builds(workspace.config.site_id)
            if limit is not None:
                builds = builds[:limit]
            self.output.print_builds(builds)
            return ExitCode.SUCCESS

        return self._run("builds", action)

    def status(self) -> ExitCode:
        """Show the live pointer and the latest build."""
        def action(workspace: Workspace) -> ExitCode:
            site_id = workspace.config.site_id
            site = workspace.repository.get_site(site_id)
            builds = workspace.service.list_builds(site_id)
            self.output.print_status(
                site.name,
                site.hosts,
                workspace.service.current_pointer(site_id),
                builds[0] if builds else None,
            )
            return ExitCode.SUCCESS

        return self._run("status", action)

    def _report_build(self, build: Build) -> ExitCode:
        self.output.print_build(build)
        if build.status == BuildStatus.SUCCESS:
            self.output.success(f"Build {build.build_id} is live")
            return ExitCode.SUCCESS
        if build.status == BuildStatus.FAILED:
            self.output.error(f"Build {build.build_id} failed")
            return ExitCode.BUILD_FAILED
        self.output.warning(f"Build {build.build_id} is {build.status.value}")
        return ExitCode.SUCCESS

    def _run(
        self,
        operation: str,
        action: Callable[[Workspace], ExitCode],
        save: bool = False,
    ) -> ExitCode:
        """Open the workspace, run an action and translate errors to exit codes."""
        workspace: Optional[Workspace] = None
        try:
            workspace = self._workspace or Workspace.open(self.config_path)
            exit_code = action(workspace)
            if save:
                workspace.save()
            return exit_code

        except ForbiddenError as e:
            self.output.error(str(e))
            return ExitCode.AUTH_ERROR

        except StorageCredentialsError as e:
            self.output.error(str(e))
            self.output.print(
                "Set DOCPUB_STORAGE_URL and DOCPUB_STORAGE_TOKEN in the environment or a .env file."
            )
            return ExitCode.AUTH_ERROR

        except ConflictError as e:
            self.output.error(str(e))
            return ExitCode.CONFLICT

        except UpstreamFailureError as e:
            self.output.error(f"Storage error: {e}")
            return ExitCode.STORAGE_ERROR

        except (CLIError, StateError, StateFilesystemError, NotFoundError) as e:
            self.output.error(str(e))
            return ExitCode.GENERAL_ERROR

        except PublishError as e:
            self.output.error(str(e))
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception(f"Unexpected error during {operation}")
            self.output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
