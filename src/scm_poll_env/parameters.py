"""
Build parameters.

Parameter values recorded on builds, the definitions jobs declare, and the
action that carries a build's values into an environment.
"""

from collections.abc import Iterable, Sequence

from .environment import Environment
from .model.base import (
    Build,
    EnvironmentContributingAction,
    ParameterDefinition,
    ParameterValue,
)


class StringParameterValue(ParameterValue):
    """A plain string parameter value."""

    def __init__(self, name: str, value: str) -> None:
        super().__init__(name)
        self.value = value

    def build_environment(self, build: Build, env: Environment) -> None:
        env.put(self.name, self.value)

    def __repr__(self) -> str:
        return f"StringParameterValue({self.name!r}, {self.value!r})"


class BooleanParameterValue(ParameterValue):
    """A checkbox parameter value, exposed as ``true``/``false``."""

    def __init__(self, name: str, value: bool) -> None:
        super().__init__(name)
        self.value = value

    def build_environment(self, build: Build, env: Environment) -> None:
        env.put(self.name, "true" if self.value else "false")

    def __repr__(self) -> str:
        return f"BooleanParameterValue({self.name!r}, {self.value!r})"


class StringParameterDefinition(ParameterDefinition):
    """String parameter with an optional default."""

    def __init__(
        self, name: str, default_value: str | None = None, description: str = ""
    ) -> None:
        super().__init__(name, description)
        self.default_value = default_value

    def get_default_parameter_value(self) -> ParameterValue | None:
        if self.default_value is None:
            return None
        return StringParameterValue(self.name, self.default_value)


class BooleanParameterDefinition(ParameterDefinition):
    """Checkbox parameter; defaults to unchecked."""

    def __init__(
        self, name: str, default_value: bool = False, description: str = ""
    ) -> None:
        super().__init__(name, description)
        self.default_value = default_value

    def get_default_parameter_value(self) -> ParameterValue | None:
        return BooleanParameterValue(self.name, self.default_value)


class ChoiceParameterDefinition(ParameterDefinition):
    """Choice parameter; the first choice is the default."""

    def __init__(
        self, name: str, choices: Iterable[str], description: str = ""
    ) -> None:
        super().__init__(name, description)
        self.choices = list(choices)

    def get_default_parameter_value(self) -> ParameterValue | None:
        if not self.choices:
            return None
        return StringParameterValue(self.name, self.choices[0])


class ParametersAction(EnvironmentContributingAction):
    """Parameter values a build was started with."""

    def __init__(self, parameters: Sequence[ParameterValue]) -> None:
        self.parameters = list(parameters)

    @property
    def display_name(self) -> str:
        return "Parameters"

    def get_parameter(self, name: str) -> ParameterValue | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def build_env_vars(self, build: Build, env: Environment) -> None:
        for parameter in self.parameters:
            parameter.build_environment(build, env)
