"""AI provider orchestration layer.

Priority failover across interchangeable generation backends, with
per-provider quarantine, lazy and scheduled expiry, and a status view.
"""

from newsdesk.shared.providers.types import (
    AttemptFailure,
    HealthRecord,
    OrchestrationRequest,
    OrchestrationResult,
    Provider,
    ProviderConfig,
    ProviderPreferencesView,
    ProviderStatus,
    StatusSummary,
)
from newsdesk.shared.providers.policy import QuarantinePolicy
from newsdesk.shared.providers.registry import ProviderRegistry
from newsdesk.shared.providers.health import HealthTracker
from newsdesk.shared.providers.preferences import ProviderPreferences
from newsdesk.shared.providers.dispatcher import Dispatcher
from newsdesk.shared.providers.scheduler import ReactivationScheduler
from newsdesk.shared.providers.status import StatusReporter
from newsdesk.shared.providers.orchestrator import ProviderOrchestrator

__all__ = [
    "AttemptFailure",
    "Dispatcher",
    "HealthRecord",
    "HealthTracker",
    "OrchestrationRequest",
    "OrchestrationResult",
    "Provider",
    "ProviderOrchestrator",
    "ProviderConfig",
    "ProviderPreferences",
    "ProviderPreferencesView",
    "ProviderRegistry",
    "ProviderStatus",
    "QuarantinePolicy",
    "ReactivationScheduler",
    "StatusReporter",
    "StatusSummary",
]
