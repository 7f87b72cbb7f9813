"""
Analysis Pipeline: orchestrates VCF → Risk → LLM → Response.

Receives the uploaded file content + drug from the API route, runs the
extraction and resolution steps in order, and assembles an AnalysisResponse.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from pharmarisk.core.config import get_config
from pharmarisk.schemas.pharma_schema import (
    AnalysisResponse,
    DetectedVariant,
    PharmacogenomicProfile,
    RiskAssessment,
)
from pharmarisk.services.llm.explanation_service import NarrativeAdapter
from pharmarisk.services.pharmacogenomics.knowledge_base import KnowledgeBase
from pharmarisk.services.pharmacogenomics.risk_engine import normalize_drug_name, resolve_risk
from pharmarisk.services.vcf.parser import extract_variants_from_bytes

logger = logging.getLogger(__name__)


async def run_analysis_pipeline(
    patient_id: str,
    drug: str,
    vcf_bytes: bytes,
    knowledge_base: KnowledgeBase,
    narrator: Optional[NarrativeAdapter] = None,
) -> AnalysisResponse:
    """
    Full pipeline: bytes → extract variants → resolve risk → (optional) LLM → response.

    Raises VcfSourceError when the upload cannot be decoded, and its subclass
    VcfTooLargeError when gzip content inflates past the upload limit; nothing
    else fails the request.
    """
    drug_upper = normalize_drug_name(drug)
    logger.info("Starting analysis pipeline for patient %s, drug %s", patient_id, drug_upper)
    start_time = time.time()

    # ── 1. Extract pharmacogene variants ──────────────────────────────────
    # The upload cap also bounds the inflated size of gzip uploads
    variants = extract_variants_from_bytes(
        vcf_bytes, max_bytes=get_config().upload.max_upload_bytes
    )
    logger.info("Extracted %d pharmacogene variants", len(variants))

    # ── 2. Risk resolution ────────────────────────────────────────────────
    profile = resolve_risk(variants, drug_upper, knowledge_base)
    logger.info(
        "Resolved %s / %s / %s",
        drug_upper, profile.primary_gene, profile.risk_level,
    )

    # ── 3. LLM Explanation ────────────────────────────────────────────────
    explanation: Optional[str] = None
    if narrator is not None:
        result = await narrator.explain(profile, drug_upper)
        explanation = result.text
        logger.info("Narrative outcome: %s", result.outcome.value)

    # ── 4. Assemble response ──────────────────────────────────────────────
    response = AnalysisResponse(
        status="success",
        patient_id=patient_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        drug=drug_upper,
        risk_assessment=RiskAssessment(
            risk_label=profile.risk_level,
            severity=profile.severity.value,
            confidence_score=get_config().default_confidence_score,
        ),
        pharmacogenomic_profile=PharmacogenomicProfile(
            primary_gene=profile.primary_gene,
            phenotype=profile.phenotype,
        ),
        detected_variants=[DetectedVariant(**v.to_dict()) for v in variants],
        clinical_recommendation=profile.recommendation,
        llm_generated_explanation=explanation,
    )

    logger.info("Pipeline execution time: %.2fs", time.time() - start_time)
    return response
