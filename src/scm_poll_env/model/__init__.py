"""
Host object model for the poll environment resolver.

This package provides the abstract interfaces the resolver queries and
in-memory implementations of them.
"""

from .base import (
    Action,
    AutomationServer,
    Build,
    Computer,
    EnvironmentContributingAction,
    EnvironmentContribution,
    Job,
    LogSink,
    Node,
    NodeProperty,
    ParameterDefinition,
    ParameterValue,
    ScmConfiguration,
    Workspace,
    workspace_to_node,
)
from .memory import (
    EnvironmentVariablesNodeProperty,
    InMemoryBuild,
    InMemoryJob,
    InMemoryNode,
    InMemoryServer,
    NullScm,
    StaticScm,
    StringLogSink,
)

__all__ = [
    "Action",
    "AutomationServer",
    "Build",
    "Computer",
    "EnvironmentContributingAction",
    "EnvironmentContribution",
    "Job",
    "LogSink",
    "Node",
    "NodeProperty",
    "ParameterDefinition",
    "ParameterValue",
    "ScmConfiguration",
    "Workspace",
    "workspace_to_node",
    "EnvironmentVariablesNodeProperty",
    "InMemoryBuild",
    "InMemoryJob",
    "InMemoryNode",
    "InMemoryServer",
    "NullScm",
    "StaticScm",
    "StringLogSink",
]
