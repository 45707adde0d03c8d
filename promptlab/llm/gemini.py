"""
Gemini Client

Pass-through to the Google Generative Language API. The upstream JSON
response (or error body) is relayed to the caller unchanged.
"""

from typing import Any, Dict, Optional
import httpx
import logging

from config.settings import get_settings
from ..errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client for the Gemini generateContent endpoint.

    Usage:
        client = GeminiClient()
        data = client.generate("Explain few-shot prompting", model="gemini-2.0-flash")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (defaults to settings)
            base_url: API base URL (defaults to settings)
            default_model: Model used when a request names none
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.default_model = default_model or settings.gemini_model
        self.timeout = timeout or settings.gemini_timeout
        self.transport = transport

    def generate(self, prompt: str, model: Optional[str] = None) -> Dict[str, Any]:
        """
        Forward a prompt and return the upstream JSON.

        Args:
            prompt: Text prompt
            model: Gemini model name (default from settings)

        Returns:
            The upstream response body

        Raises:
            ValidationError: empty prompt
            UpstreamError: missing key, network failure, or non-2xx upstream
                response (its JSON body is carried in `detail`)
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Prompt is required.")
        if not self.api_key:
            raise UpstreamError("Gemini API key is not configured", status_code=503)

        model_name = model or self.default_model
        url = f"{self.base_url}/models/{model_name}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    url,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise UpstreamError("Server error", detail=str(e)) from e

        if response.is_error:
            logger.warning(f"Gemini API error {response.status_code} for model {model_name}")
            raise UpstreamError("Gemini API Error", detail=_body(response))

        return response.json()


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
