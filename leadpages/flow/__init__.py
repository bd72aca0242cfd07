"""Formulaire multi-étapes : moteur, parcours historique, soumission, analytics."""
from .analytics import EVENT_TYPES, AnalyticsTracker, HttpAnalyticsSink, MemoryAnalyticsSink
from .engine import (
    FieldStore,
    FlowState,
    FormFlowEngine,
    StepResult,
    SubmitResult,
    check_flow,
    validate_values,
)
from .legacy import LEGACY_APPRAISAL_FLOW, create_legacy_engine, find_form_section
from .submission import (
    CallableSubmissionSink,
    HttpSubmissionSink,
    SubmissionContext,
    SubmissionResult,
    build_submission_payload,
)

__all__ = [
    "EVENT_TYPES", "AnalyticsTracker", "HttpAnalyticsSink", "MemoryAnalyticsSink",
    "FieldStore", "FlowState", "FormFlowEngine", "StepResult", "SubmitResult",
    "check_flow", "validate_values",
    "LEGACY_APPRAISAL_FLOW", "create_legacy_engine", "find_form_section",
    "CallableSubmissionSink", "HttpSubmissionSink", "SubmissionContext", "SubmissionResult",
    "build_submission_payload",
]
