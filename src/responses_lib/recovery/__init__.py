"""
Recovery layer - policy-driven retry and context repair.

- RecoveryPolicy: Which failures are retried, how often, and how callers are told
- ContextPruner: Resets expired container references in outgoing requests
- RecoveryOrchestrator: Runs a call, classifies failures, prunes, retries
- RecoveryOutcome / RecoveryResult: What recovery did for a call
"""

from responses_lib.recovery.orchestrator import (
    RecoveryCallback,
    RecoveryOrchestrator,
    SleepFunc,
)
from responses_lib.recovery.outcome import RecoveryOutcome, RecoveryResult
from responses_lib.recovery.policy import (
    DEFAULT_RESET_MESSAGE,
    ENV_PREFIX,
    RecoveryPolicy,
    RetryScope,
)
from responses_lib.recovery.pruner import (
    CONTAINER_TOOL_TYPES,
    ContextPruner,
    prune_expired_context,
)

__all__ = [
    "CONTAINER_TOOL_TYPES",
    "DEFAULT_RESET_MESSAGE",
    "ENV_PREFIX",
    "ContextPruner",
    "RecoveryCallback",
    "RecoveryOrchestrator",
    "RecoveryOutcome",
    "RecoveryPolicy",
    "RecoveryResult",
    "RetryScope",
    "SleepFunc",
    "prune_expired_context",
]
