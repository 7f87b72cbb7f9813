import logging
from typing import Optional

import backoff
import httpx

from pharmarisk.core.config import NarrativeConfig, get_config

logger = logging.getLogger(__name__)


def _is_client_error(e: Exception) -> bool:
    return isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500


class GroqClient:
    """
    Client for Groq's hosted chat completion API (OpenAI-compatible).
    Implements the TextGenerator interface used by the NarrativeAdapter.
    """

    def __init__(
        self,
        config: Optional[NarrativeConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_config().narrative
        self.api_key = self.config.groq_api_key
        self.model = self.config.groq_model
        self.api_url = self.config.groq_api_url
        self._client = http_client or httpx.AsyncClient(timeout=self.config.timeout_seconds)

    async def aclose(self):
        await self._client.aclose()

    @backoff.on_exception(
        backoff.expo,
        (httpx.RequestError, httpx.HTTPStatusError),
        max_tries=2,
        giveup=_is_client_error,
    )
    async def _post(self, payload: dict, timeout: float) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        response = await self._client.post(self.api_url, json=payload, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response

    async def generate_text(self, prompt: str, *, timeout: float) -> Optional[str]:
        """
        Generates a clinical explanation. Low temperature for consistent, factual responses.
        Returns None when the service is unreachable or answers with an error.
        """
        logger.info("Sending request to Groq", extra={"model": self.model})

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }

        try:
            response = await self._post(payload, timeout)
            data = response.json()
            generated_text = data["choices"][0]["message"]["content"]
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Error communicating with Groq: {str(e)}")
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected response shape from Groq: {str(e)}")
            return None

        logger.info("Groq request successful", extra={"response_length": len(generated_text or "")})
        return generated_text
