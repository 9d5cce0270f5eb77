"""
In-memory implementations of the host object model.

Used by the HTTP service, which builds them from request snapshots, and by
the test suite.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from ..environment import Environment
from ..exceptions import NodeOfflineError
from .base import (
    Action,
    AutomationServer,
    Build,
    Computer,
    EnvironmentContribution,
    Job,
    LogSink,
    Node,
    NodeProperty,
    ParameterDefinition,
    ScmConfiguration,
)

logger = structlog.get_logger(__name__)

BUILT_IN_NODE_NAME = "built-in"


class StringLogSink(LogSink):
    """Build log kept in memory."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def info(self, message: str) -> None:
        self._lines.append(message)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def getvalue(self) -> str:
        return "\n".join(self._lines)


class StaticContribution(EnvironmentContribution):
    """Contribution that overrides a fixed set of variables."""

    def __init__(self, variables: Mapping[str, str]) -> None:
        self.variables = dict(variables)

    def apply_to(self, env: Environment) -> None:
        env.override_all(self.variables)


class EnvironmentVariablesNodeProperty(NodeProperty):
    """Node property that contributes configured variables to every build."""

    def __init__(self, variables: Mapping[str, str]) -> None:
        self.variables = dict(variables)

    def set_up(
        self, build: Build, launcher: Any, log: LogSink
    ) -> EnvironmentContribution | None:
        if not self.variables:
            return None
        return StaticContribution(self.variables)


class NullScm(ScmConfiguration):
    """Job without source-control configuration."""


class StaticScm(ScmConfiguration):
    """Source-control configuration with known variables, e.g. a revision."""

    def __init__(self, variables: Mapping[str, str]) -> None:
        self.variables = dict(variables)

    def contribute_environment(self, build: Build, env: Environment) -> None:
        env.override_all(self.variables)


class InMemoryComputer(Computer):
    """Computer whose agent environment is a fixed mapping."""

    def __init__(self, node_name: str, environment: Mapping[str, str]) -> None:
        self.node_name = node_name
        self.environment = dict(environment)
        self.online = True

    def get_environment(self) -> Environment:
        if not self.online:
            raise NodeOfflineError(
                f"Node {self.node_name or BUILT_IN_NODE_NAME} is offline",
                node_name=self.node_name,
            )
        return Environment(self.environment)


class InMemoryNode(Node):
    """Node held in memory; ``connected`` controls whether it has a computer."""

    def __init__(
        self,
        name: str,
        environment: Mapping[str, str] | None = None,
        node_properties: Iterable[NodeProperty] = (),
        connected: bool = True,
    ) -> None:
        self._name = name
        self._node_properties = list(node_properties)
        self.computer = InMemoryComputer(name, environment or {})
        self.connected = connected

    @property
    def name(self) -> str:
        return self._name

    def to_computer(self) -> Computer | None:
        return self.computer if self.connected else None

    @property
    def node_properties(self) -> Sequence[NodeProperty]:
        return self._node_properties

    def __repr__(self) -> str:
        return f"InMemoryNode({self._name!r})"


class InMemoryServer(AutomationServer):
    """Automation server held in memory."""

    def __init__(
        self,
        root_dir: str,
        root_url: str | None = None,
        global_node_properties: Iterable[NodeProperty] = (),
        built_in_node: Node | None = None,
        nodes: Iterable[Node] = (),
    ) -> None:
        self._root_dir = root_dir
        self._root_url = root_url if root_url and root_url.strip() else None
        self._global_node_properties = list(global_node_properties)
        self._built_in_node = built_in_node or InMemoryNode("")
        self.nodes: dict[str, Node] = {}
        for node in nodes:
            self.add_node(node)

    @property
    def root_url(self) -> str | None:
        return self._root_url

    @property
    def root_dir(self) -> str:
        return self._root_dir

    @property
    def global_node_properties(self) -> Sequence[NodeProperty]:
        return self._global_node_properties

    @property
    def built_in_node(self) -> Node:
        return self._built_in_node

    def add_node(self, node: Node) -> None:
        self.nodes[node.name] = node

    def get_node(self, name: str) -> Node | None:
        return self.nodes.get(name)


class InMemoryBuild(Build):
    """A recorded build of an :class:`InMemoryJob`."""

    def __init__(
        self,
        job: "InMemoryJob",
        number: int,
        built_on: Node | None = None,
        actions: Iterable[Action] = (),
        url_path: str | None = None,
    ) -> None:
        self._job = job
        self._number = number
        self._built_on = built_on
        self._actions = list(actions)
        self._url_path = url_path or f"{job.url_path}{number}/"

    @property
    def number(self) -> int:
        return self._number

    @property
    def job(self) -> "InMemoryJob":
        return self._job

    @property
    def url_path(self) -> str:
        return self._url_path

    def get_built_on(self) -> Node | None:
        return self._built_on

    def get_characteristic_environment(self) -> Environment:
        env = Environment()
        env["BUILD_NUMBER"] = str(self._number)
        env["BUILD_ID"] = str(self._number)
        env["BUILD_DISPLAY_NAME"] = f"#{self._number}"
        env["JOB_NAME"] = self._job.name
        env["JOB_BASE_NAME"] = self._job.base_name
        env["BUILD_TAG"] = f"jenkins-{self._job.name.replace('/', '-')}-{self._number}"
        if self._built_on is not None:
            env["NODE_NAME"] = self._built_on.name or BUILT_IN_NODE_NAME
        return env

    def get_all_actions(self) -> Sequence[Action]:
        return self._actions

    def add_action(self, action: Action) -> None:
        self._actions.append(action)


class InMemoryJob(Job):
    """Job with its build history held in memory."""

    def __init__(
        self,
        name: str,
        scm: ScmConfiguration | None = None,
        parameter_definitions: Iterable[ParameterDefinition] = (),
        url_path: str | None = None,
    ) -> None:
        self._name = name
        self._scm = scm or NullScm()
        self._parameter_definitions = list(parameter_definitions)
        self._url_path = url_path or "".join(
            f"job/{part}/" for part in name.split("/")
        )
        self.builds: list[InMemoryBuild] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_name(self) -> str:
        return self._name.rsplit("/", 1)[-1]

    @property
    def url_path(self) -> str:
        return self._url_path

    @property
    def scm(self) -> ScmConfiguration:
        return self._scm

    def add_build(
        self,
        number: int | None = None,
        built_on: Node | None = None,
        actions: Iterable[Action] = (),
        url_path: str | None = None,
    ) -> InMemoryBuild:
        """Record a new build and return it."""
        if number is None:
            number = self.builds[-1].number + 1 if self.builds else 1
        build = InMemoryBuild(self, number, built_on, actions, url_path)
        self.builds.append(build)
        return build

    def get_last_build(self) -> Build | None:
        return self.builds[-1] if self.builds else None

    def get_environment(self, node: Node, log: LogSink) -> Environment:
        env = Environment()
        computer = node.to_computer()
        if computer is not None:
            try:
                env = computer.get_environment()
            except NodeOfflineError as e:
                logger.warning(
                    "Node went offline while reading its environment",
                    job=self._name,
                    node=e.node_name,
                )
        env["JOB_NAME"] = self._name
        env["JOB_BASE_NAME"] = self.base_name
        env["NODE_NAME"] = node.name or BUILT_IN_NODE_NAME
        return env

    def get_parameter_definitions(self) -> Sequence[ParameterDefinition]:
        return self._parameter_definitions
