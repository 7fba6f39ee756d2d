import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from claimscope.analytics.metrics import calculate_metrics
from claimscope.config import DATA_PROCESSED_DIR, DATA_RAW_DIR, DEFAULT_DATASET_SIZE, RANDOM_SEED
from claimscope.data.generate_synthetic_data import claims_to_frame, generate_dataset
from claimscope.data.import_claims import read_claims
from claimscope.data.models import Claim
from claimscope.utils.logger import get_logger

logger = get_logger(__name__)

SOURCE_SYNTHETIC = "synthetic"
SOURCE_IMPORT = "import"


class NoValidRecordsError(ValueError):
    """Raised when an import yields no claim at all."""


@dataclass
class LoadedDataset:
    source: str
    claims: List[Claim]
    has_ground_truth: bool
    # Display-only analyses keyed by claim id; discarded with the dataset
    explanations: Dict[str, str] = field(default_factory=dict)


def load_synthetic_claims(count: int = DEFAULT_DATASET_SIZE, rng: Optional[np.random.Generator] = None) -> LoadedDataset:
    claims = generate_dataset(count, rng=rng)
    logger.info(f"Generated {len(claims)} synthetic claims")
    return LoadedDataset(source=SOURCE_SYNTHETIC, claims=claims, has_ground_truth=True)


def load_imported_claims(
    text: str,
    rng: Optional[np.random.Generator] = None,
    delimiter: str = ",",
) -> LoadedDataset:
    claims, columns = read_claims(text, rng=rng, delimiter=delimiter)
    if not claims:
        raise NoValidRecordsError("No valid records could be extracted from the CSV file.")
    return LoadedDataset(source=SOURCE_IMPORT, claims=claims, has_ground_truth=columns.has("status"))


def main():
    DATA_PROCESSED_DIR.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(RANDOM_SEED)

    raw_path = DATA_RAW_DIR / "claims.csv"
    if raw_path.exists():
        logger.info(f"Importing {raw_path}...")
        dataset = load_imported_claims(raw_path.read_text(encoding="utf-8"), rng=rng)
    else:
        logger.info("No raw claims file found, generating a synthetic dataset...")
        dataset = load_synthetic_claims(rng=rng)

    metrics = calculate_metrics(dataset.claims)
    logger.info(
        f"accuracy={metrics.accuracy:.4f} precision={metrics.precision:.4f} "
        f"recall={metrics.recall:.4f} f1={metrics.f1_score:.4f} "
        f"({metrics.total_fraud} fraud / {metrics.total_samples} claims)"
    )

    claims_to_frame(dataset.claims).to_csv(DATA_PROCESSED_DIR / "scored_claims.csv", index=False)
    with open(DATA_PROCESSED_DIR / "metrics.json", "w", encoding="utf-8") as f:
        json.dump(metrics.model_dump(), f, indent=2)
    logger.info("Wrote scored claims and metrics to data/processed")


if __name__ == "__main__":
    main()
