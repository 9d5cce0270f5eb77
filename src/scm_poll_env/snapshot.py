"""
Serialized host model.

Pydantic models describing a server, its nodes and a job with its build
history, so that poll environments can be computed from a JSON document
instead of a live automation server.
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import SnapshotError
from .model.base import Node, ParameterDefinition, ParameterValue, Workspace
from .model.memory import (
    EnvironmentVariablesNodeProperty,
    InMemoryJob,
    InMemoryNode,
    InMemoryServer,
    StaticScm,
)
from .parameters import (
    BooleanParameterDefinition,
    BooleanParameterValue,
    ChoiceParameterDefinition,
    ParametersAction,
    StringParameterDefinition,
    StringParameterValue,
)


class NodePropertySnapshot(BaseModel):
    """Environment variables node property."""

    env: dict[str, str] = Field(
        default_factory=dict, description="Variables contributed to builds"
    )

    def to_property(self) -> EnvironmentVariablesNodeProperty:
        return EnvironmentVariablesNodeProperty(self.env)


class NodeSnapshot(BaseModel):
    """A node and, when connected, its agent environment."""

    name: str = Field(..., description="Node name, empty for the built-in node")
    connected: bool = Field(default=True, description="Whether the node is online")
    environment: dict[str, str] = Field(
        default_factory=dict, description="Agent process environment"
    )
    properties: list[NodePropertySnapshot] = Field(
        default_factory=list, description="Node properties in configuration order"
    )

    def to_node(self) -> InMemoryNode:
        return InMemoryNode(
            self.name,
            environment=self.environment,
            node_properties=[p.to_property() for p in self.properties],
            connected=self.connected,
        )


class ServerSnapshot(BaseModel):
    """Automation server identity and nodes."""

    root_url: str | None = Field(default=None, description="Configured root URL")
    root_dir: str = Field(..., description="Server home directory")
    global_properties: list[NodePropertySnapshot] = Field(
        default_factory=list, description="Global node properties in order"
    )
    built_in_node: NodeSnapshot = Field(
        default_factory=lambda: NodeSnapshot(name=""),
        description="The built-in node",
    )
    nodes: list[NodeSnapshot] = Field(default_factory=list, description="Agents")

    def to_server(self) -> InMemoryServer:
        return InMemoryServer(
            root_dir=self.root_dir,
            root_url=self.root_url,
            global_node_properties=[p.to_property() for p in self.global_properties],
            built_in_node=self.built_in_node.to_node(),
            nodes=[node.to_node() for node in self.nodes],
        )


class ParameterDefinitionSnapshot(BaseModel):
    """A parameter declared on the job."""

    type: Literal["string", "boolean", "choice"] = Field(
        default="string", description="Parameter type"
    )
    name: str = Field(..., description="Parameter name")
    default: str | bool | None = Field(default=None, description="Default value")
    choices: list[str] = Field(
        default_factory=list, description="Choices, first one is the default"
    )
    description: str = Field(default="", description="Parameter description")

    @model_validator(mode="after")
    def validate_choice_default(self) -> "ParameterDefinitionSnapshot":
        """Validate that choice parameters take their default from the choices."""
        if self.type == "choice" and self.default is not None:
            raise ValueError(
                f"Choice parameter {self.name} cannot set a default; "
                "the first choice is the default"
            )
        return self

    def to_definition(self) -> ParameterDefinition:
        if self.type == "boolean":
            return BooleanParameterDefinition(
                self.name, bool(self.default), self.description
            )
        if self.type == "choice":
            return ChoiceParameterDefinition(self.name, self.choices, self.description)
        default = None if self.default is None else _as_text(self.default)
        return StringParameterDefinition(self.name, default, self.description)


class BuildSnapshot(BaseModel):
    """A recorded build."""

    number: int = Field(..., ge=1, description="Build number")
    built_on: str | None = Field(
        default=None,
        description="Name of the node the build ran on; empty for the built-in "
        "node, null when the node no longer exists",
    )
    url_path: str | None = Field(
        default=None, description="Build URL relative to the root URL"
    )
    parameters: dict[str, str | bool] = Field(
        default_factory=dict, description="Parameter values the build ran with"
    )

    def parameter_values(self) -> list[ParameterValue]:
        values: list[ParameterValue] = []
        for name, value in self.parameters.items():
            if isinstance(value, bool):
                values.append(BooleanParameterValue(name, value))
            else:
                values.append(StringParameterValue(name, value))
        return values


class JobSnapshot(BaseModel):
    """A job and its build history."""

    name: str = Field(..., description="Full job name")
    url_path: str | None = Field(
        default=None, description="Job URL relative to the root URL"
    )
    scm_variables: dict[str, str] = Field(
        default_factory=dict, description="Variables the SCM contributes"
    )
    parameter_definitions: list[ParameterDefinitionSnapshot] = Field(
        default_factory=list, description="Active parameter definitions"
    )
    builds: list[BuildSnapshot] = Field(
        default_factory=list, description="Builds, oldest first"
    )

    @field_validator("builds")
    @classmethod
    def validate_build_order(cls, v: list[BuildSnapshot]) -> list[BuildSnapshot]:
        """Validate that build numbers increase."""
        numbers = [build.number for build in v]
        if any(a >= b for a, b in zip(numbers, numbers[1:])):
            raise ValueError("Build numbers must be strictly increasing")
        return v

    def to_job(self, server: InMemoryServer) -> InMemoryJob:
        job = InMemoryJob(
            self.name,
            scm=StaticScm(self.scm_variables),
            parameter_definitions=[
                d.to_definition() for d in self.parameter_definitions
            ],
            url_path=self.url_path,
        )
        for build in self.builds:
            actions = []
            if build.parameters:
                actions.append(ParametersAction(build.parameter_values()))
            job.add_build(
                build.number,
                built_on=_lookup_node(server, build.built_on, self.name),
                actions=actions,
                url_path=build.url_path,
            )
        return job


class WorkspaceSnapshot(BaseModel):
    """Workspace polling happens in."""

    remote: str = Field(..., description="Absolute workspace path")
    node_name: str | None = Field(
        default=None, description="Node the workspace lives on"
    )

    def to_workspace(self) -> Workspace:
        return Workspace(self.remote, self.node_name)


@dataclass
class PollModel:
    """In-memory model built from a :class:`PollRequest`."""

    server: InMemoryServer
    job: InMemoryJob
    workspace: Workspace | None


class PollRequest(BaseModel):
    """Request to compute a poll environment."""

    server: ServerSnapshot
    job: JobSnapshot
    workspace: WorkspaceSnapshot | None = None
    reuse_last_build_environment: bool | None = Field(
        default=None, description="Overrides the configured default when set"
    )

    def build(self) -> PollModel:
        """
        Turn the snapshot into an in-memory model.

        Returns:
            Server, job and workspace ready for resolution

        Raises:
            SnapshotError: If a build references an unknown node
        """
        server = self.server.to_server()
        job = self.job.to_job(server)
        workspace = self.workspace.to_workspace() if self.workspace else None
        return PollModel(server=server, job=job, workspace=workspace)


def _lookup_node(
    server: InMemoryServer, name: str | None, job_name: str
) -> Node | None:
    if name is None:
        return None
    if name == "":
        return server.built_in_node
    node = server.get_node(name)
    if node is None:
        raise SnapshotError(
            f"Build of {job_name} references unknown node {name!r}",
            context={"job": job_name, "node": name},
        )
    return node


def _as_text(value: str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value
