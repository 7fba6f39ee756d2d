from typing import Dict, List, Optional, Sequence

import numpy as np
from sklearn.metrics import confusion_matrix, roc_auc_score

from claimscope.config import DECISION_THRESHOLD
from claimscope.data.models import Claim, ClaimStatus, MetricsSummary


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def predict_fraud(risk_scores: np.ndarray, threshold: float = DECISION_THRESHOLD) -> np.ndarray:
    # strict: a score equal to the threshold is a negative prediction
    return risk_scores > threshold


def calculate_metrics(claims: Sequence[Claim], threshold: float = DECISION_THRESHOLD) -> MetricsSummary:
    """
    Confusion matrix and derived quality metrics of the scored claims.

    Class totals (``total_fraud`` / ``total_normal``) count ground truth, not predictions.
    Every ratio with a zero denominator is reported as 0, so an empty collection gives
    an all-zero summary.
    """
    total = len(claims)
    if total == 0:
        return MetricsSummary(
            accuracy=0.0, precision=0.0, recall=0.0, f1_score=0.0,
            total_samples=0, total_fraud=0, total_normal=0,
            true_positives=0, true_negatives=0, false_positives=0, false_negatives=0,
            threshold=threshold,
        )

    y_true = np.array([c.is_fraud for c in claims], dtype=int)
    scores = np.array([c.risk_score for c in claims], dtype=float)
    y_pred = predict_fraud(scores, threshold).astype(int)

    tn, fp, fn, tp = (int(v) for v in confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel())

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)

    return MetricsSummary(
        accuracy=_ratio(tp + tn, total),
        precision=precision,
        recall=recall,
        f1_score=_ratio(2 * precision * recall, precision + recall),
        total_samples=total,
        total_fraud=tp + fn,
        total_normal=tn + fp,
        true_positives=tp,
        true_negatives=tn,
        false_positives=fp,
        false_negatives=fn,
        threshold=threshold,
        roc_auc=_roc_auc(y_true, scores),
    )


def _roc_auc(y_true: np.ndarray, scores: np.ndarray) -> Optional[float]:
    if len(np.unique(y_true)) < 2:
        return None
    return float(roc_auc_score(y_true, scores))


def class_distribution(claims: Sequence[Claim]) -> Dict[str, int]:
    counts = {status.value: 0 for status in ClaimStatus}
    for claim in claims:
        counts[claim.status.value] += 1
    return counts


def filter_claims(claims: Sequence[Claim], status: Optional[ClaimStatus] = None) -> List[Claim]:
    if status is None:
        return list(claims)
    return [c for c in claims if c.status is status]
