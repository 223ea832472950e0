"""Workflow orchestration: stages, per-run reporting and scheduling."""

from .reporter import RunReporter, drain_output
from .scheduler import WorkflowScheduler, build_default_scheduler
from .stages import CONTENT_PLACEHOLDER, UNTITLED_PLACEHOLDER, PipelineStages, make_digest
from .workflow import ArticleWorkflow, Workflow

__all__ = [
    "ArticleWorkflow",
    "CONTENT_PLACEHOLDER",
    "PipelineStages",
    "RunReporter",
    "UNTITLED_PLACEHOLDER",
    "Workflow",
    "WorkflowScheduler",
    "build_default_scheduler",
    "drain_output",
    "make_digest",
]
