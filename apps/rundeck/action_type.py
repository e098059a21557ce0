"""
Action type registration for the rundeck action.

The host looks up action types by id and runs them with raw config, secrets
and params dicts:

    action_type = get_action_type()
    result = action_type.run("my-action", config, secrets, params)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from apps.rundeck.dtos import (
    ActionExecutorOptions,
    ExecutionResult,
    RundeckActionConfig,
    RundeckActionParams,
    RundeckActionSecrets,
    ValidationError,
)
from apps.rundeck.executor import RundeckActionExecutor

logger = logging.getLogger(__name__)

__all__ = [
    "ACTION_TYPE_REGISTRY",
    "ActionType",
    "get_action_type",
]


@dataclass(frozen=True)
class ActionType:
    """Descriptor the host uses to validate and execute an action."""

    id: str
    name: str
    validate_config: Callable[[Mapping[str, Any] | None], RundeckActionConfig]
    validate_secrets: Callable[[Mapping[str, Any] | None], RundeckActionSecrets]
    validate_params: Callable[[Mapping[str, Any] | None], RundeckActionParams]
    executor: Callable[[ActionExecutorOptions], ExecutionResult] = field(repr=False)

    def run(
        self,
        action_id: str,
        config: Mapping[str, Any] | None,
        secrets: Mapping[str, Any] | None,
        params: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        """Validate raw inputs and execute the action.

        Validation failures are returned as a non-retryable error result.
        """
        try:
            options = ActionExecutorOptions(
                action_id=action_id,
                config=self.validate_config(config),
                secrets=self.validate_secrets(secrets),
                params=self.validate_params(params),
            )
        except ValidationError as e:
            logger.warning(f"invalid input for {self.name} action \"{action_id}\": {e}")
            return ExecutionResult.error(
                f'Invalid Configuration: an error occurred in {self.name} action "{action_id}": {e}'
            )

        return self.executor(options)


def get_action_type(executor: RundeckActionExecutor | None = None) -> ActionType:
    """Build the rundeck action type."""
    executor = executor or RundeckActionExecutor()
    return ActionType(
        id=".rundeck",
        name="rundeck",
        validate_config=RundeckActionConfig.from_dict,
        validate_secrets=RundeckActionSecrets.from_dict,
        validate_params=RundeckActionParams.from_dict,
        executor=executor.execute,
    )


# Registry of available action types
ACTION_TYPE_REGISTRY: dict[str, Callable[..., ActionType]] = {
    ".rundeck": get_action_type,
}
