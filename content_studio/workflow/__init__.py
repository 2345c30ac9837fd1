"""
Workflow Orchestration
======================

Components:
- ContentPipeline: runs the stages and the scene image loop
- WorkflowStateStore: holds and publishes the workflow state
"""

from .pipeline import ContentPipeline
from .state import WorkflowStateStore

__all__ = [
    "ContentPipeline",
    "WorkflowStateStore",
]
