import structlog
from typing import Optional, List
from enum import Enum

import openai
import anthropic
import google.generativeai as genai

from ..exceptions import LLMServiceError

logger = structlog.get_logger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class LLMService:
    """Synchronous text generation with provider fallback, run from the ingestion worker thread."""

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        google_api_key: Optional[str] = None,
        openai_model_name: str = "gpt-4o-mini",
        anthropic_model_name: str = "claude-3-haiku-20240307",
        google_model_name: str = "gemini-1.5-flash"
    ):
        self.openai_model_name = openai_model_name
        self.anthropic_model_name = anthropic_model_name
        self.google_model_name = google_model_name

        self.openai_client = None
        self.anthropic_client = None
        self.google_client = None

        if openai_api_key:
            try:
                self.openai_client = openai.OpenAI(api_key=openai_api_key)
                logger.info("OpenAI client initialized")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client", error=str(e))

        if anthropic_api_key:
            try:
                self.anthropic_client = anthropic.Anthropic(api_key=anthropic_api_key)
                logger.info("Anthropic client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client", error=str(e))

        if google_api_key:
            try:
                genai.configure(api_key=google_api_key)
                self.google_client = genai.GenerativeModel(self.google_model_name)
                logger.info("Google Gemini client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Google Gemini client", error=str(e))

    def generate_with_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 20,
        preferred_provider: Optional[LLMProvider] = None
    ) -> str:
        """
        Generate a response, trying the preferred provider first and then
        OpenAI, Google and Anthropic in that order.
        """
        providers_to_try = [LLMProvider.OPENAI, LLMProvider.GOOGLE, LLMProvider.ANTHROPIC]
        if preferred_provider:
            providers_to_try.remove(preferred_provider)
            providers_to_try.insert(0, preferred_provider)

        for provider in providers_to_try:
            if not self._is_provider_available(provider):
                continue
            try:
                return self._generate_with_provider(provider, system_prompt, user_prompt, temperature, max_tokens)
            except LLMServiceError as e:
                logger.warning("LLM provider failed, trying next provider", provider=provider.value, error=str(e))

        raise LLMServiceError("All LLM providers failed or none are configured")

    def _generate_with_provider(
        self,
        provider: LLMProvider,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int
    ) -> str:
        if provider == LLMProvider.OPENAI:
            return self._generate_openai(system_prompt, user_prompt, temperature, max_tokens)
        elif provider == LLMProvider.ANTHROPIC:
            return self._generate_anthropic(system_prompt, user_prompt, temperature, max_tokens)
        elif provider == LLMProvider.GOOGLE:
            return self._generate_google(system_prompt, user_prompt, temperature, max_tokens)
        raise LLMServiceError(f"Unknown provider: {provider}")

    def _generate_openai(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = self.openai_client.chat.completions.create(
                model=self.openai_model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ]
            )
            return response.choices[0].message.content or ""
        except openai.AuthenticationError as e:
            raise LLMServiceError(f"OpenAI authentication failed: {str(e)}")
        except openai.RateLimitError as e:
            raise LLMServiceError(f"OpenAI rate limit exceeded: {str(e)}")
        except Exception as e:
            raise LLMServiceError(f"OpenAI generation failed: {str(e)}")

    def _generate_anthropic(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = self.anthropic_client.messages.create(
                model=self.anthropic_model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}]
            )
            return response.content[0].text
        except Exception as e:
            raise LLMServiceError(f"Anthropic generation failed: {str(e)}")

    def _generate_google(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            generation_config = genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens
            )
            response = self.google_client.generate_content(
                f"{system_prompt}\n\nUser: {user_prompt}",
                generation_config=generation_config
            )
            return response.text
        except Exception as e:
            raise LLMServiceError(f"Google generation failed: {str(e)}")

    def _is_provider_available(self, provider: LLMProvider) -> bool:
        if provider == LLMProvider.OPENAI:
            return self.openai_client is not None
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_client is not None
        elif provider == LLMProvider.GOOGLE:
            return self.google_client is not None
        return False

    def get_available_providers(self) -> List[LLMProvider]:
        return [p for p in LLMProvider if self._is_provider_available(p)]
