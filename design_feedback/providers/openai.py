"""
OpenAI Vision Provider

Sends design-review requests to OpenAI's chat completions API with the
screenshot inlined as a base64 data URI.
"""

from typing import Optional

import openai

from ..errors import FailureSignal
from .base import VisionPrompt, VisionProvider


class OpenAIProvider(VisionProvider):
    """
    Vision provider using OpenAI's vision-capable chat models.

    The SDK's own retries are disabled: the analyzer owns the retry policy.

    Example:
        provider = OpenAIProvider(api_key="sk-...")
        text = await provider.complete(build_prompt("mobile"), image_data, "image/png")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        client: Optional[openai.AsyncOpenAI] = None
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (get from https://platform.openai.com/api-keys)
            model: Vision-capable model to use (default: gpt-4o)
            client: Preconfigured client, mainly for tests
        """
        self.client = client or openai.AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "openai"

    async def complete(
        self,
        prompt: VisionPrompt,
        image_data: str,
        media_type: str,
    ) -> Optional[str]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": prompt.system},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt.user},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{media_type};base64,{image_data}"}
                        }
                    ]
                }
            ],
            max_tokens=1000,
            temperature=0.7
        )

        if not response.choices:
            return None
        return response.choices[0].message.content

    def failure_signal(self, error: Exception) -> FailureSignal:
        message = str(error)

        # APITimeoutError is a subclass of APIConnectionError
        if isinstance(error, openai.APITimeoutError):
            return FailureSignal(timed_out=True, message=message)
        if isinstance(error, openai.APIStatusError):
            return FailureSignal(status_code=error.status_code, message=message)
        if isinstance(error, openai.APIConnectionError):
            return FailureSignal(network=True, message=message)

        return FailureSignal(message=message)
