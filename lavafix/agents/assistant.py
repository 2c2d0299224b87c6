"""
LavaFix Service Assistant

A chat helper for appliance questions ("my washer makes a metallic
noise"). It is a single opaque call to Gemini: request in, reply out.

CRITICAL BOUNDARIES:
- NEVER reads or changes ledger state
- NEVER raises to the caller; any failure becomes a fallback reply
"""

from typing import Any, Literal, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from lavafix.config import GeminiSettings, get_settings


SYSTEM_INSTRUCTION = """Eres el asistente de LavaFix, un servicio de reparación de lavadoras y electrodomésticos.
- Responde en español, de forma breve y clara
- Da pasos de diagnóstico seguros que un cliente pueda revisar en casa
- Si el problema requiere un técnico, recomiéndalo
- No inventes precios ni datos de clientes"""

NO_ANSWER_REPLY = "Lo siento, no tengo respuesta para eso."
CONNECTION_ERROR_REPLY = "Lo siento, hubo un error de conexión."


class ChatMessage(BaseModel):
    """One turn of the conversation."""

    role: Literal["user", "model"]
    text: str


class AssistantReply(BaseModel):
    """What the assistant answered, and whether the call succeeded."""

    text: str
    success: bool = Field(
        description="False when the text is a local fallback"
    )


class ServiceAssistant:
    """
    Gemini-backed chat assistant.

    RESPONSIBILITIES:
    - Keep the conversation history format Gemini expects
    - Turn empty answers and failures into friendly Spanish replies
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        settings: Optional[GeminiSettings] = None,
    ):
        """
        Args:
            model: A preconfigured GenerativeModel (tests pass a double).
                   If None, one is built from GEMINI_* settings.
            settings: Gemini settings, loaded from the environment if None.
        """
        self._logger = structlog.get_logger()
        if model is None:
            model = self._configure_genai(settings or get_settings().gemini)
        self._model = model

    def _configure_genai(self, settings: GeminiSettings):
        """Configure Google Generative AI."""
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            },
            system_instruction=SYSTEM_INSTRUCTION,
        )

    @staticmethod
    def _to_history(history: list[ChatMessage]) -> list[dict]:
        return [
            {"role": message.role, "parts": [message.text]}
            for message in history
        ]

    def ask(self, history: list[ChatMessage], message: str) -> AssistantReply:
        """
        Send one user message with the prior conversation.

        Returns a fallback reply instead of raising.
        """
        if not message.strip():
            return AssistantReply(text="", success=False)

        try:
            chat = self._model.start_chat(history=self._to_history(history))
            response = chat.send_message(message)
            text = (response.text or "").strip()
        except Exception as e:
            self._logger.error("assistant_failed", error=str(e))
            return AssistantReply(text=CONNECTION_ERROR_REPLY, success=False)

        if not text:
            return AssistantReply(text=NO_ANSWER_REPLY, success=True)
        return AssistantReply(text=text, success=True)
