"""
Host object model interfaces.

These abstract classes describe the parts of the automation server that the
poll environment resolver queries: jobs, builds, nodes and their computers,
node properties, build actions and parameters. Implementations are passed
in explicitly; nothing here reaches for a global server instance.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..environment import Environment


class LogSink(ABC):
    """Build log that extension points may write to."""

    @abstractmethod
    def info(self, message: str) -> None:
        """
        Write a line to the log.

        Args:
            message: Line to write
        """
        pass

    @property
    @abstractmethod
    def lines(self) -> list[str]:
        """Lines written so far."""
        pass


class EnvironmentContribution(ABC):
    """Variables contributed by a node property for a particular build."""

    @abstractmethod
    def apply_to(self, env: Environment) -> None:
        """
        Add or override variables in ``env``.

        Args:
            env: Environment being built
        """
        pass


class NodeProperty(ABC):
    """Extension point attached to a node, or registered server-wide."""

    @abstractmethod
    def set_up(
        self, build: "Build", launcher: Any, log: LogSink
    ) -> EnvironmentContribution | None:
        """
        Prepare the property for a build.

        Args:
            build: Build the environment is computed for
            launcher: Opaque process launcher handle, may be None
            log: Build log

        Returns:
            Contribution to apply, or None when the property adds nothing
        """
        pass


class Computer(ABC):
    """Live handle on a connected node."""

    @abstractmethod
    def get_environment(self) -> Environment:
        """
        Get the environment of the node's agent process.

        Returns:
            A fresh environment owned by the caller

        Raises:
            NodeOfflineError: If the node disconnected
        """
        pass


class Node(ABC):
    """A worker that builds can run on."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Node name; empty for the built-in node."""
        pass

    @abstractmethod
    def to_computer(self) -> Computer | None:
        """Get the live computer, or None when the node is not reachable."""
        pass

    @property
    @abstractmethod
    def node_properties(self) -> Sequence[NodeProperty]:
        """Properties attached to this node, in configuration order."""
        pass


class Action(ABC):
    """Attachment recorded on a build."""

    @property
    def display_name(self) -> str:
        return type(self).__name__


class EnvironmentContributingAction(Action):
    """Build action that can add variables after the fact."""

    @abstractmethod
    def build_env_vars(self, build: "Build", env: Environment) -> None:
        """
        Contribute variables for ``build`` into ``env``.

        Args:
            build: Build the action belongs to
            env: Environment being built
        """
        pass


class ParameterValue(ABC):
    """A concrete value for a build parameter."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def build_environment(self, build: "Build", env: Environment) -> None:
        """
        Expose this value in ``env``.

        Args:
            build: Build the value belongs to
            env: Environment being built
        """
        pass


class ParameterDefinition(ABC):
    """A parameter declared on a job."""

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description

    @abstractmethod
    def get_default_parameter_value(self) -> ParameterValue | None:
        """Get the default value, or None when there is none."""
        pass


class ScmConfiguration(ABC):
    """Source-control configuration of a job."""

    def contribute_environment(self, build: "Build", env: Environment) -> None:
        """
        Add source-control specific variables, e.g. the polled revision.

        The default implementation contributes nothing.

        Args:
            build: Build the variables describe
            env: Environment being built
        """
        return None


class Build(ABC):
    """A historical run of a job."""

    @property
    @abstractmethod
    def number(self) -> int:
        pass

    @property
    @abstractmethod
    def job(self) -> "Job":
        pass

    @property
    @abstractmethod
    def url_path(self) -> str:
        """URL of the build relative to the server root URL."""
        pass

    @abstractmethod
    def get_built_on(self) -> Node | None:
        """Get the node the build ran on, or None if it no longer exists."""
        pass

    @abstractmethod
    def get_characteristic_environment(self) -> Environment:
        """Get the variables fixed when the build started."""
        pass

    @abstractmethod
    def get_all_actions(self) -> Sequence[Action]:
        """Get all actions recorded on the build, in order."""
        pass


class Job(ABC):
    """A buildable job."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Full job name, folders separated by ``/``."""
        pass

    @property
    @abstractmethod
    def url_path(self) -> str:
        """URL of the job relative to the server root URL."""
        pass

    @property
    @abstractmethod
    def scm(self) -> ScmConfiguration:
        pass

    @abstractmethod
    def get_last_build(self) -> Build | None:
        """Get the most recent build, or None if the job never ran."""
        pass

    @abstractmethod
    def get_environment(self, node: Node, log: LogSink) -> Environment:
        """
        Get the job's generic environment on ``node``.

        Args:
            node: Node to compute the environment for
            log: Build log

        Returns:
            A fresh environment owned by the caller
        """
        pass

    @abstractmethod
    def get_parameter_definitions(self) -> Sequence[ParameterDefinition]:
        """Get the active parameter definitions, empty if not parameterized."""
        pass


class AutomationServer(ABC):
    """The automation server instance that owns jobs and nodes."""

    @property
    @abstractmethod
    def root_url(self) -> str | None:
        """Configured root URL, or None when not configured."""
        pass

    @property
    @abstractmethod
    def root_dir(self) -> str:
        """Server home directory."""
        pass

    @property
    @abstractmethod
    def global_node_properties(self) -> Sequence[NodeProperty]:
        """Server-wide node properties, in registration order."""
        pass

    @property
    @abstractmethod
    def built_in_node(self) -> Node:
        pass

    @abstractmethod
    def get_node(self, name: str) -> Node | None:
        """Look up an agent node by name."""
        pass


@dataclass(frozen=True)
class Workspace:
    """A workspace directory and the node it lives on."""

    remote: str
    node_name: str | None = None


def workspace_to_node(
    server: AutomationServer, workspace: Workspace | None
) -> Node:
    """
    Find the node a workspace lives on.

    Falls back to the built-in node when there is no workspace, when it has
    no node name, or when the node is no longer known to the server.
    """
    if workspace is None or not workspace.node_name:
        return server.built_in_node
    node = server.get_node(workspace.node_name)
    if node is None:
        return server.built_in_node
    return node
