from typing import Optional

import numpy as np

from claimscope.config import FRAUD_BASE_RISK, NORMAL_BASE_RISK, RISK_NOISE
from claimscope.data.models import ClaimStatus


def simulate_risk_score(status: ClaimStatus, rng: Optional[np.random.Generator] = None) -> float:
    """
    Stand-in for a classifier on imported data: a score pulled towards the true label
    (0.80 for fraud, 0.20 otherwise) with uniform noise of +/-0.15, clamped to [0, 1].
    Non-deterministic unless a seeded ``rng`` is passed.
    """
    rng = rng if rng is not None else np.random.default_rng()
    base = FRAUD_BASE_RISK if status is ClaimStatus.FRAUD else NORMAL_BASE_RISK
    noise = rng.uniform(-RISK_NOISE, RISK_NOISE)
    return float(np.clip(base + noise, 0.0, 1.0))
