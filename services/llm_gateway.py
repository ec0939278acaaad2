import logging
from typing import Any, Optional

import httpx
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from config import Config

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a moment."
QUOTA_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits to continue."


class ConfigurationError(Exception):
    """Raised when a required credential or setting is missing"""
    pass


class GatewayError(Exception):
    """Raised when the language-model gateway call fails"""
    status_code = 500


class RateLimitError(GatewayError):
    status_code = 429

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class QuotaExhaustedError(GatewayError):
    status_code = 402

    def __init__(self, message: str = QUOTA_EXHAUSTED_MESSAGE):
        super().__init__(message)


class ChatCompletionGateway:
    """OpenAI-compatible chat completion endpoint reached over HTTP."""

    def __init__(self,
                 api_key: str,
                 url: str = Config.AI_GATEWAY_URL,
                 model: str = Config.COACH_MODEL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": Config.COACH_MAX_TOKENS,
            "temperature": Config.COACH_TEMPERATURE,
        }

        async with httpx.AsyncClient(timeout=Config.AI_GATEWAY_TIMEOUT, transport=self.transport) as client:
            response = await client.post(self.url, headers=headers, json=payload)

        if response.status_code == 429:
            raise RateLimitError()
        elif response.status_code == 402:
            raise QuotaExhaustedError()
        elif not response.is_success:
            error_text = response.text if response.content else "Unknown error"
            logging.error(f"AI gateway error: {response.status_code} - {error_text}")
            raise GatewayError(f"AI gateway error: {response.status_code}")

        return self._extract_content(response.json())

    @staticmethod
    def _extract_content(data: Any) -> str:
        """Return choices[0].message.content, or "" when any level is missing or malformed."""
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            return ""
        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""


class GeminiGateway:
    """Calls Gemini directly through the google-generativeai SDK."""

    def __init__(self, api_key: str, model: str = Config.GEMINI_MODEL):
        genai.configure(api_key=api_key)
        self.model_name = model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        model = genai.GenerativeModel(self.model_name, system_instruction=system_prompt)
        generation_config = genai.GenerationConfig(
            max_output_tokens=Config.COACH_MAX_TOKENS,
            temperature=Config.COACH_TEMPERATURE,
        )
        try:
            response = await model.generate_content_async(user_prompt, generation_config=generation_config)
        except google_exceptions.ResourceExhausted as e:
            logging.warning(f"Gemini quota or rate limit hit: {e}")
            raise RateLimitError()
        except google_exceptions.GoogleAPICallError as e:
            logging.error(f"Gemini API error: {e}")
            raise GatewayError(f"AI gateway error: {e.code}")
        return response.text or ""


def create_gateway():
    """Build the gateway selected by COACH_PROVIDER."""
    if Config.COACH_PROVIDER == "gemini":
        if not Config.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        return GeminiGateway(Config.GEMINI_API_KEY)

    if Config.COACH_PROVIDER != "gateway":
        raise ConfigurationError(f"Unknown COACH_PROVIDER: {Config.COACH_PROVIDER}")
    if not Config.AI_GATEWAY_API_KEY:
        raise ConfigurationError("AI_GATEWAY_API_KEY is not configured")
    return ChatCompletionGateway(Config.AI_GATEWAY_API_KEY)
