from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RiskAssessment(BaseModel):
    risk_label: str
    severity: str
    confidence_score: float = Field(..., ge=0.0, le=1.0)


class PharmacogenomicProfile(BaseModel):
    primary_gene: str
    phenotype: str


class DetectedVariant(BaseModel):
    gene: str
    rsid: str
    variant: str = Field(..., description="Star allele code, or 'Unknown'")
    raw_info: str


class AnalysisResponse(BaseModel):
    status: str = "success"
    patient_id: str
    timestamp: str
    drug: str
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: PharmacogenomicProfile
    detected_variants: List[DetectedVariant] = Field(default_factory=list)
    clinical_recommendation: str
    llm_generated_explanation: Optional[str] = None

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        try:
            datetime.fromisoformat(v.replace('Z', '+00:00'))
            return v
        except ValueError:
            raise ValueError("Timestamp must be a valid ISO 8601 string")


class KnowledgeBaseSummary(BaseModel):
    version: str
    source: str
    genes: List[str]
    drugs: List[str]
