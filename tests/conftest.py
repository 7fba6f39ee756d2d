import datetime

import numpy as np
import pytest

from claimscope.data.models import Claim, ClaimStatus


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_claim():
    counter = iter(range(1_000_000))

    def _make(status=ClaimStatus.NORMAL, risk_score=0.1, **overrides):
        n = next(counter)
        fields = dict(
            id=f"T-{n}",
            patient_name=f"Patient {n}",
            provider_id="PROV-100",
            diagnosis_code="J00",
            procedure_code="CONS-101",
            claim_amount=100.0,
            date=datetime.date(2023, 1, 1),
            status=status,
            risk_score=risk_score,
            reason="Phantom Billing" if status is ClaimStatus.FRAUD else None,
        )
        fields.update(overrides)
        return Claim(**fields)

    return _make
