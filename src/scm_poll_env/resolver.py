"""
Poll environment resolution.

Approximates the environment the previous build ran with, so that
source-control polling can expand the same variables the build would have.
"""

from collections.abc import Sequence
from typing import Any

import structlog

from .environment import Environment, MergePolicy
from .exceptions import InvalidStateError, NodeOfflineError
from .model.base import (
    AutomationServer,
    Build,
    EnvironmentContributingAction,
    Job,
    LogSink,
    NodeProperty,
    Workspace,
    workspace_to_node,
)

logger = structlog.get_logger(__name__)


class PollEnvironmentResolver:
    """
    Builds poll environments against one automation server.

    The resolver holds no state between calls; every call returns a fresh
    environment owned by the caller.
    """

    def __init__(self, server: AutomationServer | None) -> None:
        """
        Initialize the resolver.

        Args:
            server: Automation server that owns the jobs being polled
        """
        self.server = server

    def resolve(
        self,
        job: Job,
        workspace: Workspace | None,
        log: LogSink,
        reuse_last_build_environment: bool = True,
        launcher: Any = None,
    ) -> Environment:
        """
        Compute the environment to poll ``job`` with.

        Args:
            job: Job being polled
            workspace: Workspace polling happens in, if any
            log: Build log handed to node property hooks
            reuse_last_build_environment: Start from the previous build's
                node environment instead of the job's generic environment
            launcher: Opaque launcher handed to node property hooks

        Returns:
            Environment with all references resolved

        Raises:
            InvalidStateError: If the job has no previous build or the
                server is not available
        """
        build = job.get_last_build()
        if build is None:
            # Without a baseline the caller has to schedule a build instead.
            raise InvalidStateError(
                "Last build must not be None. If there really is no last build, "
                "a new build should be triggered without polling the SCM.",
                context={"job": job.name},
            )

        server = self.server
        if server is None:
            raise InvalidStateError(
                "Automation server instance is not available",
                context={"job": job.name},
            )

        env: Environment | None = None
        if reuse_last_build_environment:
            env = self._last_build_environment(build, launcher, log)
            if env is None:
                env = job.get_environment(workspace_to_node(server, workspace), log)
            job.scm.contribute_environment(build, env)
        else:
            env = job.get_environment(workspace_to_node(server, workspace), log)

        self._add_server_variables(env, server, job, build, workspace)
        _apply_node_properties(env, server.global_node_properties, build, launcher, log)
        _add_build_actions(env, build)
        _add_parameter_defaults(env, job, build)

        return env.resolve()

    def _last_build_environment(
        self, build: Build, launcher: Any, log: LogSink
    ) -> Environment | None:
        """Environment of the node the build ran on, if it is still reachable."""
        node = build.get_built_on()
        if node is None:
            logger.debug("Last build has no node", build=build.number)
            return None

        computer = node.to_computer()
        if computer is None:
            logger.debug("Last build node is not connected", node=node.name)
            return None

        try:
            env = computer.get_environment()
        except NodeOfflineError as e:
            logger.warning(
                "Node went offline, falling back to job environment",
                node=node.name,
                error=str(e),
            )
            return None

        env.override_all(build.get_characteristic_environment())
        _apply_node_properties(env, node.node_properties, build, launcher, log)
        logger.debug("Using last build node environment", node=node.name)
        return env

    @staticmethod
    def _add_server_variables(
        env: Environment,
        server: AutomationServer,
        job: Job,
        build: Build,
        workspace: Workspace | None,
    ) -> None:
        root_url = server.root_url
        if root_url:
            env["HUDSON_URL"] = root_url  # legacy
            env["JENKINS_URL"] = root_url
            env["BUILD_URL"] = _join_url(root_url, build.url_path)
            env["JOB_URL"] = _join_url(root_url, job.url_path)

        env.override("HUDSON_HOME", server.root_dir, MergePolicy.OVERRIDE_IF_ABSENT)
        env.override("JENKINS_HOME", server.root_dir, MergePolicy.OVERRIDE_IF_ABSENT)

        if workspace is not None:
            env["WORKSPACE"] = workspace.remote


def _join_url(root_url: str, path: str) -> str:
    return root_url.rstrip("/") + "/" + path.lstrip("/")


def _apply_node_properties(
    env: Environment,
    properties: Sequence[NodeProperty],
    build: Build,
    launcher: Any,
    log: LogSink,
) -> None:
    for node_property in properties:
        contribution = node_property.set_up(build, launcher, log)
        if contribution is not None:
            contribution.apply_to(env)


def _add_build_actions(env: Environment, build: Build) -> None:
    # Parameter values recorded on the build land here.
    for action in build.get_all_actions():
        if isinstance(action, EnvironmentContributingAction):
            action.build_env_vars(build, env)


def _add_parameter_defaults(env: Environment, job: Job, build: Build) -> None:
    # Defaults only fill gaps; values recorded on the build win.
    defaults = Environment()
    for definition in job.get_parameter_definitions():
        default_value = definition.get_default_parameter_value()
        if default_value is not None:
            default_value.build_environment(build, defaults)
    env.merge(defaults, MergePolicy.OVERRIDE_IF_ABSENT)


def resolve_poll_environment(
    job: Job,
    workspace: Workspace | None,
    server: AutomationServer | None,
    log: LogSink,
    reuse_last_build_environment: bool = True,
    launcher: Any = None,
) -> Environment:
    """
    Compute the environment to poll ``job`` with.

    Shortcut for :meth:`PollEnvironmentResolver.resolve`.
    """
    return PollEnvironmentResolver(server).resolve(
        job,
        workspace,
        log,
        reuse_last_build_environment=reuse_last_build_environment,
        launcher=launcher,
    )
