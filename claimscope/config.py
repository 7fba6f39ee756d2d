import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_RAW_DIR = PROJECT_ROOT / "data" / "raw"
DATA_PROCESSED_DIR = PROJECT_ROOT / "data" / "processed"

# Optional seed for the batch entry points; API and library calls stay unseeded
RANDOM_SEED = os.environ.get("RANDOM_SEED")
RANDOM_SEED = int(RANDOM_SEED) if RANDOM_SEED else None

LOG_LEVEL = os.environ.get("CLAIMSCOPE_LOG_LEVEL", "INFO")

# Synthetic dataset
DEFAULT_DATASET_SIZE = 850
MAX_DATASET_SIZE = 100_000
FRAUD_RATE = 0.12
BASE_AMOUNT_RANGE = (100, 5100)   # [low, high)
FRAUD_AMOUNT_MULTIPLIER = 5
NORMAL_DIAGNOSIS_CODES = ("J00", "E11", "I10", "M54")
FRAUD_DIAGNOSIS_CODE = "Z00.0"    # general exam
ROUTINE_PROCEDURE_CODE = "CONS-101"
COMPLEX_PROCEDURE_CODE = "SURG-999"
SYNTHETIC_ID_START = 10_000
SYNTHETIC_PROVIDER_RANGE = (100, 150)
SYNTHETIC_YEAR = 2023
SYNTHETIC_FRAUD_REASON = "Amount/diagnosis mismatch"
NORMAL_RISK_RANGE = (0.0, 0.3)
FRAUD_RISK_RANGE = (0.7, 1.0)

# Risk scoring simulator (import path)
FRAUD_BASE_RISK = 0.80
NORMAL_BASE_RISK = 0.20
RISK_NOISE = 0.15

# Metrics
DECISION_THRESHOLD = 0.65

# Explanation service
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
EXPLAINER_MODEL = os.environ.get("EXPLAINER_MODEL", "gpt-4o-mini")
EXPLAINER_TIMEOUT_SECONDS = float(os.environ.get("EXPLAINER_TIMEOUT_SECONDS", "30"))
