import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ClaimStatus(str, Enum):
    NORMAL = "Normal"
    FRAUD = "Fraud"


class Claim(BaseModel):
    """One insurance-billing record. Frozen: created once by the generator or the importer."""

    model_config = ConfigDict(frozen=True)

    id: str
    patient_name: str
    provider_id: str
    diagnosis_code: str
    procedure_code: str
    claim_amount: float = Field(ge=0)
    date: datetime.date
    status: ClaimStatus
    risk_score: float = Field(ge=0, le=1)
    reason: Optional[str] = None

    @property
    def is_fraud(self) -> bool:
        return self.status is ClaimStatus.FRAUD

    @model_validator(mode="after")
    def _reason_only_on_fraud(self):
        if self.reason is not None and self.status is not ClaimStatus.FRAUD:
            raise ValueError("reason is only allowed on Fraud claims")
        return self


class MetricsSummary(BaseModel):
    accuracy: float = Field(ge=0, le=1)
    precision: float = Field(ge=0, le=1)
    recall: float = Field(ge=0, le=1)
    f1_score: float = Field(ge=0, le=1)
    total_samples: int = Field(ge=0)
    total_fraud: int = Field(ge=0)
    total_normal: int = Field(ge=0)

    true_positives: int = Field(ge=0)
    true_negatives: int = Field(ge=0)
    false_positives: int = Field(ge=0)
    false_negatives: int = Field(ge=0)
    threshold: float
    roc_auc: Optional[float] = None
