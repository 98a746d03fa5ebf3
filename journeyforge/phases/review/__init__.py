"""
Review - structural diffs, revision history and audits.
"""

from journeyforge.phases.review.audit import (
    CompletionAudit,
    IterationAuditLog,
    PhaseAudit,
    completion_audit,
    diff_completion,
)
from journeyforge.phases.review.differ import diff_records
from journeyforge.phases.review.revisions import RevisionHistory

__all__ = [
    "CompletionAudit",
    "IterationAuditLog",
    "PhaseAudit",
    "completion_audit",
    "diff_completion",
    "diff_records",
    "RevisionHistory",
]
