"""Services for probing, recording, alerting and notification."""
from .probe import ProbeService, ProbeResult
from .recorder import ResultRecorder
from .alert_manager import AlertManager, AlertDecision
from .notifier import Notifier
from .orchestrator import CheckOrchestrator, CheckOutcome, SingleFlight, build_orchestrator
from .scheduler import SchedulerService

__all__ = [
    "ProbeService",
    "ProbeResult",
    "ResultRecorder",
    "AlertManager",
    "AlertDecision",
    "Notifier",
    "CheckOrchestrator",
    "CheckOutcome",
    "SingleFlight",
    "build_orchestrator",
    "SchedulerService",
]
