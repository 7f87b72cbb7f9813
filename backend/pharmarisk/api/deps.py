from typing import Optional

from fastapi import HTTPException, Request, status

from pharmarisk.services.llm.explanation_service import NarrativeAdapter
from pharmarisk.services.pharmacogenomics.knowledge_base import KnowledgeBase


def get_knowledge_base(request: Request) -> KnowledgeBase:
    kb = getattr(request.app.state, "knowledge_base", None)
    if kb is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Knowledge base is not loaded yet.",
        )
    return kb


def get_narrator(request: Request) -> Optional[NarrativeAdapter]:
    return getattr(request.app.state, "narrator", None)
