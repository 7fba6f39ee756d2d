import datetime
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from claimscope.data.models import Claim, ClaimStatus
from claimscope.data.schema_resolver import ColumnMapping, resolve_columns
from claimscope.scoring.risk_simulator import simulate_risk_score
from claimscope.utils.logger import get_logger

logger = get_logger(__name__)

# Labels that mean "not fraud". Phrase forms may appear inside longer labels.
NEGATIVE_LABEL_PHRASES = ("no fraud",)
NEGATIVE_LABEL_TOKENS = ("normal", "0", "false")

MIN_ROW_WIDTH_RATIO = 0.5

DEFAULT_DIAGNOSIS_CODE = "N/D"
DEFAULT_PROCEDURE_CODE = "PROC-GEN"


def clean_field(value: str) -> str:
    # One leading and one trailing double quote, no CSV quoting rules
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def split_row(line: str, delimiter: str = ",") -> List[str]:
    return [clean_field(v) for v in line.split(delimiter)]


def parse_amount(raw: Optional[str]) -> float:
    if raw is None:
        return 0.0
    try:
        amount = float(raw)
    except ValueError:
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def interpret_label(raw: Optional[str]) -> ClaimStatus:
    if raw is None:
        return ClaimStatus.NORMAL
    label = raw.strip().lower()
    if not label:
        return ClaimStatus.NORMAL
    if any(phrase in label for phrase in NEGATIVE_LABEL_PHRASES) or label in NEGATIVE_LABEL_TOKENS:
        return ClaimStatus.NORMAL
    return ClaimStatus.FRAUD


def _build_claim(
    row: Sequence[str],
    row_idx: int,
    columns: ColumnMapping,
    rng: np.random.Generator,
    today: datetime.date,
) -> Claim:
    label = columns.value(row, "status")
    status = interpret_label(label)
    return Claim(
        id=columns.value_or(row, "id", f"CLM-{1000 + row_idx}"),
        patient_name=f"Imported Patient {row_idx}",
        provider_id=columns.value_or(row, "provider", f"PROV-{100 + row_idx}"),
        diagnosis_code=columns.value_or(row, "diagnosis", DEFAULT_DIAGNOSIS_CODE),
        procedure_code=columns.value_or(row, "procedure", DEFAULT_PROCEDURE_CODE),
        claim_amount=parse_amount(columns.value(row, "amount")),
        date=today,
        status=status,
        risk_score=simulate_risk_score(status, rng),
        reason=label.strip() if status is ClaimStatus.FRAUD else None,
    )


def read_claims(
    text: str,
    *,
    rng: Optional[np.random.Generator] = None,
    today: Optional[datetime.date] = None,
    delimiter: str = ",",
) -> Tuple[List[Claim], Optional[ColumnMapping]]:
    """
    Parse delimited claim text with an unknown header into Claim records.

    The first non-empty line is the header and is resolved with ``resolve_columns``.
    Rows narrower than half the header are dropped. Unparseable amounts become 0.
    Unmapped columns fall back to placeholders. Each row is scored with the risk
    simulator against its own label.

    Fields are split on the bare delimiter, so quoted values containing the delimiter
    are not supported.

    Returns the claims together with the resolved header, or ``None`` for the header when
    the input has none. Never raises for bad content.
    """
    rng = rng if rng is not None else np.random.default_rng()
    today = today or datetime.date.today()

    lines = text.split("\n")
    if len(lines) < 2:
        return [], None

    header_pos = next((i for i, line in enumerate(lines) if line.strip()), None)
    if header_pos is None:
        return [], None

    header = split_row(lines[header_pos].strip(), delimiter)
    columns = resolve_columns(header)
    logger.debug(f"Resolved columns: {dict(columns.indices)}")
    if not columns.has("status"):
        logger.warning("No status/label column found; every row defaults to Normal and metrics will be degenerate")

    claims = []
    skipped = 0
    for row_idx, line in enumerate(lines[header_pos + 1:], start=1):
        line = line.strip()
        if not line:
            continue
        row = split_row(line, delimiter)
        if len(row) < len(header) * MIN_ROW_WIDTH_RATIO:
            skipped += 1
            continue
        claims.append(_build_claim(row, row_idx, columns, rng, today))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed rows")
    logger.info(f"Parsed {len(claims)} claims from {len(header)}-column input")
    return claims, columns


def parse_claims(
    text: str,
    *,
    rng: Optional[np.random.Generator] = None,
    today: Optional[datetime.date] = None,
    delimiter: str = ",",
) -> List[Claim]:
    """Claims only; an empty list when there is no data row."""
    claims, _ = read_claims(text, rng=rng, today=today, delimiter=delimiter)
    return claims
