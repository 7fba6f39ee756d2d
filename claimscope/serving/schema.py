from enum import Enum
from typing import List

from pydantic import BaseModel

from claimscope.data.models import Claim, MetricsSummary


class StatusFilter(str, Enum):
    ALL = "all"
    FRAUD = "fraud"
    NORMAL = "normal"


class DatasetSummary(BaseModel):
    source: str
    total_records: int
    has_ground_truth: bool
    metrics: MetricsSummary


class ClaimList(BaseModel):
    total: int
    shown: int
    claims: List[Claim]


class ExplanationResult(BaseModel):
    claim_id: str
    analysis: str
