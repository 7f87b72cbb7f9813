"""
Narrative adapter - turns a resolved RiskProfile into supplementary prose.

The remote text generator is injected. Its failures never reach the caller:
every outcome is a NarrativeResult, and the risk profile is never touched.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from pharmarisk.services.pharmacogenomics.models import RiskProfile
from pharmarisk.services.llm.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

NEUTRAL_STATEMENT = (
    "No significant pharmacogenomic interactions detected for this specific drug "
    "based on the provided genetic profile."
)
FALLBACK_TEXT = "Explanation unavailable at this time due to AI service timeout."

# Risk levels explained locally without calling the remote service
LOCAL_RISK_LEVELS = frozenset({"Safe", "Unknown"})

DEFAULT_TIMEOUT_SECONDS = 15.0


class TextGenerator(Protocol):
    async def generate_text(self, prompt: str, *, timeout: float) -> Optional[str]:
        ...


class NarrativeOutcome(str, Enum):
    GENERATED = "generated"
    LOCAL = "local"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class NarrativeResult:
    text: str
    outcome: NarrativeOutcome

    @property
    def llm_generated(self) -> bool:
        return self.outcome is NarrativeOutcome.GENERATED


class NarrativeAdapter:
    """Explains a risk profile through a remote TextGenerator, with a local fallback."""

    def __init__(self, generator: TextGenerator, *, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.generator = generator
        self.timeout = timeout

    async def explain(
        self,
        profile: RiskProfile,
        drug: str,
        *,
        timeout: Optional[float] = None,
    ) -> NarrativeResult:
        if profile.risk_level in LOCAL_RISK_LEVELS:
            return NarrativeResult(NEUTRAL_STATEMENT, NarrativeOutcome.LOCAL)

        timeout = self.timeout if timeout is None else timeout
        prompt = build_prompt(profile, drug)
        start_time = time.time()

        try:
            text = await asyncio.wait_for(
                self.generator.generate_text(prompt, timeout=timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Narrative service timed out after %.1fs", timeout)
            return NarrativeResult(FALLBACK_TEXT, NarrativeOutcome.FALLBACK)
        except Exception as e:
            # Safety net: the explanation is optional, the risk profile stands
            logger.error(f"Unexpected error in narrative service: {str(e)}")
            return NarrativeResult(FALLBACK_TEXT, NarrativeOutcome.FALLBACK)

        text = (text or "").strip()
        if not text:
            logger.warning("LLM fallback triggered: empty response for %s", profile.primary_gene)
            return NarrativeResult(FALLBACK_TEXT, NarrativeOutcome.FALLBACK)

        logger.info("LLM generation time: %.2f seconds", time.time() - start_time)
        return NarrativeResult(text, NarrativeOutcome.GENERATED)
