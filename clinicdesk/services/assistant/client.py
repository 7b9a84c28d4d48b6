"""
Client du modèle de langage (endpoint compatible OpenAI).

Fin wrapper autour de AsyncOpenAI : pas de retry, un échec est remonté une
fois sous forme d'AssistantUnavailableError.
"""

import logging
from typing import Dict, Optional, Sequence

import httpx
from openai import AsyncOpenAI, OpenAIError

from clinicdesk.core.config import settings

logger = logging.getLogger(__name__)


class AssistantUnavailableError(Exception):
    """Le modèle n'a pas répondu ou a renvoyé une réponse vide."""
    pass


class AssistantClient:
    """Complétion chat sur le modèle configuré."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            model: Optional[str] = None,
            temperature: Optional[float] = None,
            http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        api_key = api_key or settings.AI_API_KEY
        if not api_key:
            raise AssistantUnavailableError("Assistant IA non configuré (AI_API_KEY manquant)")

        self._model = model or settings.AI_MODEL
        self._temperature = settings.AI_TEMPERATURE if temperature is None else temperature
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or settings.AI_BASE_URL,
            timeout=settings.AI_TIMEOUT_SECONDS,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, messages: Sequence[Dict[str, str]]) -> str:
        """
        Retourne le texte de la réponse.

        Raises:
            AssistantUnavailableError: erreur d'appel ou réponse vide
        """
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=list(messages),
                temperature=self._temperature,
            )
        except OpenAIError as e:
            logger.error(f"❌ Appel au modèle {self._model} en échec : {e}")
            raise AssistantUnavailableError("L'assistant IA est indisponible") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.warning(f"Réponse vide du modèle {self._model}")
            raise AssistantUnavailableError("L'assistant IA n'a pas fourni de réponse")
        return content.strip()


def get_assistant_client() -> AssistantClient:
    """Dépendance FastAPI."""
    return AssistantClient()
