# claimscope/serving/app.py

from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool

from claimscope.analytics.metrics import calculate_metrics, class_distribution, filter_claims
from claimscope.config import DEFAULT_DATASET_SIZE, MAX_DATASET_SIZE
from claimscope.data.models import Claim, ClaimStatus, MetricsSummary
from claimscope.pipeline.load_claims import (
    LoadedDataset,
    NoValidRecordsError,
    load_imported_claims,
    load_synthetic_claims,
)
from claimscope.serving.explainer import explain_claim
from claimscope.serving.schema import ClaimList, DatasetSummary, ExplanationResult, StatusFilter
from claimscope.utils.logger import get_logger

logger = get_logger(__name__)
app = FastAPI(title="ClaimScope API")

STATUS_BY_FILTER = {
    StatusFilter.ALL: None,
    StatusFilter.FRAUD: ClaimStatus.FRAUD,
    StatusFilter.NORMAL: ClaimStatus.NORMAL,
}

# -------------------------------------------------------------
# In-memory dataset (replaced wholesale on regenerate / import)
# -------------------------------------------------------------
dataset: Optional[LoadedDataset] = None


def get_dataset() -> LoadedDataset:
    global dataset
    if dataset is None:
        logger.info(f"Generating initial synthetic dataset of {DEFAULT_DATASET_SIZE} claims...")
        dataset = load_synthetic_claims(DEFAULT_DATASET_SIZE)
    return dataset


def set_dataset(new_dataset: LoadedDataset):
    global dataset
    dataset = new_dataset


def find_claim(claim_id: str, current: Optional[LoadedDataset] = None) -> Claim:
    current = current or get_dataset()
    for claim in current.claims:
        if claim.id == claim_id:
            return claim
    raise HTTPException(status_code=404, detail=f"Claim {claim_id} not found")


def summarize(current: LoadedDataset) -> DatasetSummary:
    return DatasetSummary(
        source=current.source,
        total_records=len(current.claims),
        has_ground_truth=current.has_ground_truth,
        metrics=calculate_metrics(current.claims),
    )


@app.get("/")
def root():
    return {"message": "ClaimScope API is running"}


@app.get("/health")
def health():
    return {"status": "ok"}


# -------------------------------------------------------------
# Dataset sources
# -------------------------------------------------------------
@app.post("/datasets/synthetic", response_model=DatasetSummary)
def generate(count: int = Query(DEFAULT_DATASET_SIZE, ge=0, le=MAX_DATASET_SIZE)):
    set_dataset(load_synthetic_claims(count))
    return summarize(get_dataset())


@app.post("/datasets/import", response_model=DatasetSummary)
async def import_csv(request: Request):
    body = await request.body()
    try:
        text = body.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=422, detail="Error reading file. Upload a UTF-8 CSV file.")

    # Parsing, scoring and metrics are CPU-bound; keep them off the event loop
    try:
        imported = await run_in_threadpool(load_imported_claims, text)
    except NoValidRecordsError as e:
        logger.warning(f"Import rejected: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    set_dataset(imported)
    return await run_in_threadpool(summarize, imported)


@app.get("/dataset", response_model=DatasetSummary)
def dataset_summary():
    return summarize(get_dataset())


@app.get("/metrics", response_model=MetricsSummary)
def metrics():
    return calculate_metrics(get_dataset().claims)


# -------------------------------------------------------------
# Claims table
# -------------------------------------------------------------
@app.get("/claims", response_model=ClaimList)
def list_claims(status: StatusFilter = StatusFilter.ALL, limit: int = Query(100, ge=0)):
    claims = filter_claims(get_dataset().claims, STATUS_BY_FILTER[status])
    shown = claims[:limit]
    return ClaimList(total=len(claims), shown=len(shown), claims=shown)


@app.get("/claims/{claim_id}", response_model=Claim)
def get_claim(claim_id: str):
    return find_claim(claim_id)


@app.get("/charts/class_distribution")
def class_distribution_chart():
    counts = class_distribution(get_dataset().claims)
    return {
        "status": list(counts.keys()),
        "count": list(counts.values()),
    }


# -------------------------------------------------------------
# Explanation service
# -------------------------------------------------------------
@app.post("/claims/{claim_id}/explain", response_model=ExplanationResult)
async def explain(claim_id: str):
    current = get_dataset()
    claim = find_claim(claim_id, current)
    analysis = await explain_claim(claim)
    # Stored on the dataset it was requested for; a replaced dataset takes it along
    current.explanations[claim.id] = analysis
    return ExplanationResult(claim_id=claim.id, analysis=analysis)


@app.get("/claims/{claim_id}/explanation", response_model=ExplanationResult)
def get_explanation(claim_id: str):
    explanations = get_dataset().explanations
    if claim_id not in explanations:
        raise HTTPException(status_code=404, detail=f"No analysis for claim {claim_id}")
    return ExplanationResult(claim_id=claim_id, analysis=explanations[claim_id])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
