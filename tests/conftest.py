"""
Pytest configuration and fixtures for SCM poll environment tests.
"""

from typing import Any

import pytest

from scm_poll_env.model import (
    EnvironmentVariablesNodeProperty,
    InMemoryBuild,
    InMemoryJob,
    InMemoryNode,
    InMemoryServer,
    StaticScm,
    StringLogSink,
    Workspace,
)
from scm_poll_env.parameters import (
    ParametersAction,
    StringParameterDefinition,
    StringParameterValue,
)


@pytest.fixture
def log_sink() -> StringLogSink:
    """Empty build log."""
    return StringLogSink()


@pytest.fixture
def agent_node() -> InMemoryNode:
    """Connected agent the last build ran on."""
    return InMemoryNode(
        "linux-1",
        environment={
            "PATH": "/usr/bin",
            "HOME": "/home/agent",
            "AGENT_ONLY": "yes",
            "BUILD_NUMBER": "999",
        },
        node_properties=[
            EnvironmentVariablesNodeProperty({"NODE_PROP": "node", "SHARED": "node"})
        ],
    )


@pytest.fixture
def built_in_node() -> InMemoryNode:
    """Built-in node of the server."""
    return InMemoryNode(
        "",
        environment={"PATH": "/usr/local/bin:/usr/bin", "CONTROLLER_ONLY": "yes"},
    )


@pytest.fixture
def server(agent_node: InMemoryNode, built_in_node: InMemoryNode) -> InMemoryServer:
    """Server with a root URL, one agent and no global properties."""
    return InMemoryServer(
        root_dir="/var/lib/jenkins",
        root_url="https://ci.example.com/",
        built_in_node=built_in_node,
        nodes=[agent_node],
    )


@pytest.fixture
def job() -> InMemoryJob:
    """Parameterized job with a source-control configuration."""
    return InMemoryJob(
        "team/service",
        scm=StaticScm({"GIT_BRANCH": "origin/main"}),
        parameter_definitions=[
            StringParameterDefinition("FOO", "baz"),
            StringParameterDefinition("BAZ", "qux"),
        ],
    )


@pytest.fixture
def last_build(job: InMemoryJob, agent_node: InMemoryNode) -> InMemoryBuild:
    """Build #12 that ran on the agent with FOO=bar."""
    job.add_build(11, built_on=agent_node)
    return job.add_build(
        12,
        built_on=agent_node,
        actions=[ParametersAction([StringParameterValue("FOO", "bar")])],
    )


@pytest.fixture
def workspace() -> Workspace:
    """Workspace on the agent."""
    return Workspace("/home/agent/workspace/team/service", "linux-1")


@pytest.fixture
def sample_poll_request() -> dict[str, Any]:
    """Sample poll request payload."""
    return {
        "server": {
            "root_url": "https://ci.example.com/",
            "root_dir": "/var/lib/jenkins",
            "global_properties": [{"env": {"GLOBAL": "1"}}],
            "nodes": [
                {
                    "name": "linux-1",
                    "environment": {"PATH": "/usr/bin", "AGENT_ONLY": "yes"},
                    "properties": [{"env": {"NODE_PROP": "node"}}],
                }
            ],
        },
        "job": {
            "name": "service",
            "scm_variables": {"GIT_BRANCH": "origin/main"},
            "parameter_definitions": [
                {"name": "FOO", "default": "baz"},
                {"name": "BAZ", "default": "qux"},
                {"type": "boolean", "name": "DRY_RUN", "default": True},
            ],
            "builds": [
                {"number": 11, "built_on": "linux-1"},
                {
                    "number": 12,
                    "built_on": "linux-1",
                    "parameters": {"FOO": "bar", "VERBOSE": False},
                },
            ],
        },
        "workspace": {"remote": "/ws/service", "node_name": "linux-1"},
    }
