"""Plan builder: merges missing, empty and corrupt into one work list."""

from __future__ import annotations

import logging

from s3checksums.models.classification import Classification, ClassificationOutcome
from s3checksums.models.plan import ACTION_FOR, PlanItem, ProcessingPlan

logger = logging.getLogger(__name__)

PLAN_ORDER = (
    ClassificationOutcome.MISSING,
    ClassificationOutcome.EMPTY,
    ClassificationOutcome.CORRUPT,
)


def build_plan(classification: Classification) -> ProcessingPlan:
    """Build the processing plan; independent of dry-run or real execution."""
    items = tuple(
        PlanItem(key=key, classification=outcome, action=ACTION_FOR[outcome])
        for outcome in PLAN_ORDER
        for key in classification.keys_for(outcome)
    )
    plan = ProcessingPlan(
        items=items,
        already_valid=len(classification.valid),
        missing=len(classification.missing),
        empty=len(classification.empty),
        corrupt=len(classification.corrupt),
    )
    logger.info(
        "Processing plan: already valid=%d missing=%d empty=%d corrupt=%d total=%d",
        plan.already_valid, plan.missing, plan.empty, plan.corrupt, plan.total_to_process,
    )
    return plan
