"""Narrative analysis of a single flagged claim via an OpenAI-compatible chat model."""

import asyncio
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from claimscope.config import EXPLAINER_MODEL, EXPLAINER_TIMEOUT_SECONDS, OPENAI_API_KEY
from claimscope.data.models import Claim
from claimscope.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_ANALYSIS_TEXT = "Could not generate a detailed analysis."
SERVICE_FAILURE_TEXT = (
    "Could not reach the claim analysis service. Check your connection or API key."
)

PROMPT_TEMPLATE = """\
Act as a senior medical fraud auditor. Analyse the following health insurance claim, which our
heuristic scoring flagged as POTENTIAL FRAUD.

Claim data:
- Transaction ID: {id}
- Diagnosis (ICD-10): {diagnosis_code}
- Procedure: {procedure_code}
- Claimed amount: ${claim_amount}
- Computed risk score: {risk_score}
- Provider ID: {provider_id}

Give a short technical analysis (one paragraph at most) of why this pattern could indicate
fraudulent behaviour, e.g. upcoding, unnecessary services, or amounts atypical for the diagnosis.
Use a formal, technical tone.
"""

_client: Optional[AsyncOpenAI] = None


def get_client() -> Optional[AsyncOpenAI]:
    global _client
    if _client is None and OPENAI_API_KEY:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


def claim_payload(claim: Claim) -> Dict[str, Any]:
    """The only claim fields sent to the service."""
    return {
        "id": claim.id,
        "diagnosis_code": claim.diagnosis_code,
        "procedure_code": claim.procedure_code,
        "claim_amount": claim.claim_amount,
        "risk_score": f"{claim.risk_score:.2f}",
        "provider_id": claim.provider_id,
    }


def build_prompt(claim: Claim) -> str:
    return PROMPT_TEMPLATE.format(**claim_payload(claim))


async def explain_claim(
    claim: Claim,
    client: Optional[AsyncOpenAI] = None,
    model: str = EXPLAINER_MODEL,
    timeout: float = EXPLAINER_TIMEOUT_SECONDS,
) -> str:
    """
    Ask the model for a one-paragraph fraud analysis of ``claim``.

    Always returns text: failures, timeouts and a missing API key yield
    SERVICE_FAILURE_TEXT, an empty completion yields EMPTY_ANALYSIS_TEXT.
    """
    client = client or get_client()
    if client is None:
        logger.warning(f"OPENAI_API_KEY is not set; skipping analysis for claim {claim.id}")
        return SERVICE_FAILURE_TEXT

    try:
        response = await asyncio.wait_for(
            client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": build_prompt(claim)}],
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error(f"Claim analysis timed out after {timeout}s for claim {claim.id}")
        return SERVICE_FAILURE_TEXT
    except Exception as e:
        logger.error(f"Error analysing claim {claim.id}: {e}")
        return SERVICE_FAILURE_TEXT

    text = response.choices[0].message.content if response.choices else None
    return text.strip() if text and text.strip() else EMPTY_ANALYSIS_TEXT
