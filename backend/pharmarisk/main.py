import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmarisk.api.router import api_router
from pharmarisk.core import logging as _logging  # noqa: F401  Initialize logging
from pharmarisk.core.config import get_config
from pharmarisk.services.llm.explanation_service import NarrativeAdapter
from pharmarisk.services.llm.groq_client import GroqClient
from pharmarisk.services.pharmacogenomics.knowledge_base import load_knowledge_base

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PharmaRisk API",
    description="Pharmacogenomic drug-risk classification from VCF uploads",
    version="1.0.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Routers
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    config = get_config()

    # Knowledge base must be fully loaded before the first request
    app.state.knowledge_base = load_knowledge_base(config.knowledge_base_path)

    app.state.groq_client = None
    app.state.narrator = None
    if config.narrative.enabled:
        if not config.narrative.groq_api_key:
            logger.warning("GROQ_API_KEY is not set; LLM explanations will use the fallback text.")
        app.state.groq_client = GroqClient(config.narrative)
        app.state.narrator = NarrativeAdapter(
            app.state.groq_client, timeout=config.narrative.timeout_seconds
        )
    else:
        logger.info("Narrative generation disabled.")


@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "groq_client", None)
    if client is not None:
        await client.aclose()


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "PharmaRisk"}
