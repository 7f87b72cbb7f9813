"""
Configuration for the PharmaRisk service.
Centralizes tunable parameters for the knowledge base, the narrative service
and the HTTP upload layer. Values are read from the environment (and a .env
file, if one is found) when the module is first imported.
"""

import json
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field

# Load .env file (walks up directories to find it)
load_dotenv(find_dotenv())

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_KNOWLEDGE_BASE_PATH = PACKAGE_DIR / "data" / "cpic_knowledge_base.json"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class NarrativeConfig(BaseModel):
    """Settings for the remote text-generation service (Groq, OpenAI-compatible)."""

    enabled: bool = Field(
        default=True,
        description="Generate an LLM explanation for non-safe risk profiles"
    )

    groq_api_key: str = Field(default="", description="Groq API key")

    groq_api_url: str = Field(
        default="https://api.groq.com/openai/v1/chat/completions",
        description="Chat completions endpoint"
    )

    groq_model: str = Field(default="llama-3.3-70b-versatile", description="Model name")

    timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="Upper bound for a single explanation request"
    )

    max_tokens: int = Field(default=150, gt=0, description="Completion token cap")

    temperature: float = Field(default=0.2, ge=0.0, le=2.0)


class UploadConfig(BaseModel):
    """Limits applied to uploaded variant files at the HTTP edge."""

    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Maximum accepted upload size (5 MB), compressed or inflated"
    )

    allowed_extensions: List[str] = Field(
        default_factory=lambda: [".vcf", ".vcf.gz"],
        description="Accepted file name suffixes"
    )


class AppConfig(BaseModel):
    """Main configuration for the PharmaRisk service."""

    knowledge_base_path: str = Field(
        default=str(DEFAULT_KNOWLEDGE_BASE_PATH),
        description="Path to the gene/allele/drug knowledge base JSON file"
    )

    narrative: NarrativeConfig = Field(default_factory=NarrativeConfig)

    upload: UploadConfig = Field(default_factory=UploadConfig)

    # Assigned by the request layer, not derived from the resolver
    default_confidence_score: float = Field(default=0.95, ge=0.0, le=1.0)

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")


def config_from_env() -> AppConfig:
    """Build a configuration from environment variables, falling back to defaults."""
    narrative = NarrativeConfig(
        enabled=_env_bool("NARRATIVE_ENABLED", True),
        groq_api_key=os.environ.get("GROQ_API_KEY", ""),
        groq_model=os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile"),
        timeout_seconds=float(os.environ.get("LLM_TIMEOUT_SECONDS", "15")),
    )
    return AppConfig(
        knowledge_base_path=os.environ.get(
            "KNOWLEDGE_BASE_PATH", str(DEFAULT_KNOWLEDGE_BASE_PATH)
        ),
        narrative=narrative,
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )


def initial_config() -> AppConfig:
    """Configuration for a fresh process: CONFIG_FILE (JSON) if set, else the environment."""
    path = os.environ.get("CONFIG_FILE")
    if path:
        with open(path, "r") as f:
            return AppConfig(**json.load(f))
    return config_from_env()


# Global configuration instance
_config: AppConfig = initial_config()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return _config


def update_config(**kwargs) -> AppConfig:
    """Update configuration parameters."""
    global _config
    current_dict = _config.model_dump()

    for key, value in kwargs.items():
        if '.' in key:
            # Handle nested keys like 'narrative.timeout_seconds'
            parts = key.split('.')
            current = current_dict
            for part in parts[:-1]:
                current = current[part]
            current[parts[-1]] = value
        else:
            current_dict[key] = value

    _config = AppConfig(**current_dict)
    return _config


def reset_config() -> AppConfig:
    """Rebuild the global configuration from CONFIG_FILE or the environment."""
    global _config
    _config = initial_config()
    return _config
