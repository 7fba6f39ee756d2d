import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from claimscope.config import (
    BASE_AMOUNT_RANGE,
    COMPLEX_PROCEDURE_CODE,
    DATA_RAW_DIR,
    DEFAULT_DATASET_SIZE,
    FRAUD_AMOUNT_MULTIPLIER,
    FRAUD_DIAGNOSIS_CODE,
    FRAUD_RATE,
    FRAUD_RISK_RANGE,
    NORMAL_DIAGNOSIS_CODES,
    NORMAL_RISK_RANGE,
    RANDOM_SEED,
    ROUTINE_PROCEDURE_CODE,
    SYNTHETIC_FRAUD_REASON,
    SYNTHETIC_ID_START,
    SYNTHETIC_PROVIDER_RANGE,
    SYNTHETIC_YEAR,
)
from claimscope.data.models import Claim, ClaimStatus
from claimscope.utils.logger import get_logger

logger = get_logger(__name__)

# Column names chosen so the importer's header resolution picks them up again
EXPORT_COLUMNS = [
    "claim_id",
    "patient_name",
    "provider_id",
    "diagnosis_code",
    "procedure_code",
    "claim_amount",
    "date",
    "status",
    "risk_score",
]


def generate_dataset(count: int = DEFAULT_DATASET_SIZE, *, rng: Optional[np.random.Generator] = None) -> List[Claim]:
    """
    Demo dataset with an injected fraud pattern.

    About 12% of claims are fraud. Fraud claims carry a 5x inflated amount, a
    general-exam diagnosis paired with a complex procedure, and a clean high risk score.
    Normal claims score low. Scores are drawn directly and do not go through the
    import-path simulator, so demo metrics come out strong.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    rng = rng if rng is not None else np.random.default_rng()

    is_fraud = rng.random(count) < FRAUD_RATE
    base_amount = rng.integers(*BASE_AMOUNT_RANGE, size=count)
    amount = np.where(is_fraud, base_amount * FRAUD_AMOUNT_MULTIPLIER, base_amount).astype(float)

    diagnosis = rng.choice(NORMAL_DIAGNOSIS_CODES, size=count)
    diagnosis = np.where(is_fraud, FRAUD_DIAGNOSIS_CODE, diagnosis)

    risk = np.where(
        is_fraud,
        rng.uniform(*FRAUD_RISK_RANGE, size=count),
        rng.uniform(*NORMAL_RISK_RANGE, size=count),
    )

    provider = rng.integers(*SYNTHETIC_PROVIDER_RANGE, size=count)
    month = rng.integers(1, 13, size=count)
    day = rng.integers(1, 29, size=count)

    claims = []
    for i in range(count):
        fraud = bool(is_fraud[i])
        claims.append(Claim(
            id=f"CLM-{SYNTHETIC_ID_START + i}",
            patient_name=f"Patient {i + 1}",
            provider_id=f"PROV-{provider[i]}",
            diagnosis_code=str(diagnosis[i]),
            procedure_code=COMPLEX_PROCEDURE_CODE if fraud else ROUTINE_PROCEDURE_CODE,
            claim_amount=round(float(amount[i]), 2),
            date=datetime.date(SYNTHETIC_YEAR, int(month[i]), int(day[i])),
            status=ClaimStatus.FRAUD if fraud else ClaimStatus.NORMAL,
            risk_score=float(risk[i]),
            reason=SYNTHETIC_FRAUD_REASON if fraud else None,
        ))
    return claims


def claims_to_frame(claims: Sequence[Claim]) -> pd.DataFrame:
    df = pd.DataFrame({
        "claim_id": [c.id for c in claims],
        "patient_name": [c.patient_name for c in claims],
        "provider_id": [c.provider_id for c in claims],
        "diagnosis_code": [c.diagnosis_code for c in claims],
        "procedure_code": [c.procedure_code for c in claims],
        "claim_amount": [c.claim_amount for c in claims],
        "date": [c.date.isoformat() for c in claims],
        "status": [c.status.value for c in claims],
        "risk_score": [c.risk_score for c in claims],
    })
    return df[EXPORT_COLUMNS]


def main():
    DATA_RAW_DIR.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(RANDOM_SEED)
    logger.info(f"Generating {DEFAULT_DATASET_SIZE} synthetic claims...")
    claims = generate_dataset(DEFAULT_DATASET_SIZE, rng=rng)
    df = claims_to_frame(claims)
    df.to_csv(DATA_RAW_DIR / "claims.csv", index=False)
    logger.info(f"Synthetic data written to data/raw ({int((df['status'] == 'Fraud').sum())} fraud)")


if __name__ == "__main__":
    main()
