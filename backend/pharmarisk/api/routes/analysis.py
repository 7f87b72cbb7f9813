import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from pharmarisk.api.deps import get_knowledge_base, get_narrator
from pharmarisk.core.config import get_config
from pharmarisk.schemas.pharma_schema import AnalysisResponse, KnowledgeBaseSummary
from pharmarisk.services.llm.explanation_service import NarrativeAdapter
from pharmarisk.services.pharmacogenomics.knowledge_base import KnowledgeBase
from pharmarisk.services.pipeline.analysis_pipeline import run_analysis_pipeline
from pharmarisk.services.vcf.parser import VcfTooLargeError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Analyze Pharmacogenomic Risk",
    description="Upload a VCF file and specify a drug to receive a pharmacogenomic risk assessment."
)
async def analyze_pharmacogenomics(
    drug: str = Form(..., description="The name of the drug to analyze (e.g., Codeine)"),
    vcf: UploadFile = File(..., description="Patient's VCF file containing genetic variants"),
    patient_id: str = Form("anonymous", description="Optional patient identifier"),
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    narrator: Optional[NarrativeAdapter] = Depends(get_narrator),
) -> AnalysisResponse:
    """
    Endpoint to trigger the pharmacogenomic analysis pipeline.

    - **drug**: Target drug name
    - **vcf**: Genetic data file
    - **patient_id**: Optional identifier
    """
    upload_config = get_config().upload

    if not drug.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a drug name."
        )

    filename = (vcf.filename or "").lower()
    if not filename.endswith(tuple(upload_config.allowed_extensions)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file format. Please upload a .vcf or .vcf.gz file."
        )

    # Read one byte past the limit so oversize uploads are detected without buffering them whole
    content = await vcf.read(upload_config.max_upload_bytes + 1)
    if len(content) > upload_config.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"VCF file exceeds the {upload_config.max_upload_bytes} byte limit."
        )

    try:
        return await run_analysis_pipeline(patient_id, drug, content, knowledge_base, narrator)

    except VcfTooLargeError as e:
        logger.error(f"Uploaded VCF is too large once decompressed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"VCF file exceeds the {upload_config.max_upload_bytes} byte limit."
        )
    except OSError as e:
        logger.error(f"Unable to read uploaded VCF: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to read VCF file."
        )
    except Exception as e:
        logger.exception(f"Unexpected error in analysis pipeline: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process genomic data."
        )


@router.get("/knowledge-base", response_model=KnowledgeBaseSummary)
async def knowledge_base_summary(knowledge_base: KnowledgeBase = Depends(get_knowledge_base)):
    """Genes and drugs covered by the loaded knowledge base."""
    return KnowledgeBaseSummary(
        version=knowledge_base.version,
        source=knowledge_base.source,
        genes=knowledge_base.genes,
        drugs=knowledge_base.drugs,
    )
