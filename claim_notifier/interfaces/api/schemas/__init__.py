from .summary_job import (
    ActivityItemRead,
    ApiResponse,
    AttentionItemRead,
    ClaimCountsRead,
    DispatchSummaryRead,
    ResolutionRead,
    SchedulerJobRead,
    SchedulerStatusRead,
    SubscriberRead,
    SummaryPreviewRead,
)

__all__ = [
    "ActivityItemRead",
    "ApiResponse",
    "AttentionItemRead",
    "ClaimCountsRead",
    "DispatchSummaryRead",
    "ResolutionRead",
    "SchedulerJobRead",
    "SchedulerStatusRead",
    "SubscriberRead",
    "SummaryPreviewRead",
]
