# core/ai_client.py
import logging
import os
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from core.exceptions import APIIntegrationError

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT = 60
DEFAULT_MODEL = "gpt-4o-mini"


class AIClient:
    """
    Thin wrapper around an OpenAI-compatible chat completions endpoint.

    One call, one response: the SDK's own retries are switched off and any
    failure is surfaced as APIIntegrationError for the caller to report.
    """

    def __init__(self, model: Optional[str] = None):
        self.model_override = model

        # lazy settings
        self.api_key = None
        self.base_url = None
        self.model = None
        self.timeout = DEFAULT_TIMEOUT

        self._client = None
        self._client_config = None

    def _refresh_keys(self):
        """Pull provider settings from django settings if available, else environment."""
        try:
            from django.conf import settings as django_settings
            has_settings = django_settings.configured
        except Exception:
            django_settings = None
            has_settings = False

        if has_settings:
            self.api_key = getattr(django_settings, 'OPENAI_API_KEY', None)
            self.base_url = getattr(django_settings, 'OPENAI_BASE_URL', None)
            self.model = self.model_override or getattr(django_settings, 'OPENAI_MODEL', DEFAULT_MODEL)
            self.timeout = getattr(django_settings, 'OPENAI_TIMEOUT', DEFAULT_TIMEOUT)
        else:
            self.api_key = os.environ.get("OPENAI_API_KEY")
            self.base_url = os.environ.get("OPENAI_BASE_URL")
            self.model = self.model_override or os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)
            self.timeout = float(os.environ.get("OPENAI_TIMEOUT", DEFAULT_TIMEOUT))

    def _get_client(self) -> OpenAI:
        config = (self.api_key, self.base_url, self.timeout)
        if self._client is None or self._client_config != config:
            if not self.api_key:
                raise APIIntegrationError("OpenAI API key is not configured")
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url or None,
                timeout=self.timeout,
                max_retries=0,
            )
            self._client_config = config
        return self._client

    def generate_json(self, messages: List[Dict[str, str]]) -> str:
        """
        Send one chat completion request asking for a JSON object.

        `messages` is the role/content list built by the prompt layer.

        Returns the raw text content of the single response choice. Parsing is
        left to the caller.
        """
        self._refresh_keys()
        client = self._get_client()

        logger.info(f"AIClient: requesting JSON completion from model {self.model}")
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"AIClient: provider request failed: {e}")
            raise APIIntegrationError("Error while generating the test with the AI provider.") from e

        if not response.choices:
            raise APIIntegrationError("AI provider returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise APIIntegrationError("AI provider returned an empty response")

        logger.debug(f"AIClient: received {len(content)} characters")
        return content


# module-level instance for convenience
ai_client = AIClient()
