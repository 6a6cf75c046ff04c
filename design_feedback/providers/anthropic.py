"""
Anthropic Claude Vision Provider

Sends design-review requests to Claude's messages API with the screenshot
as a base64 image block.
"""

from typing import Optional

import anthropic

from ..errors import FailureSignal
from .base import VisionPrompt, VisionProvider


class AnthropicProvider(VisionProvider):
    """
    Vision provider using Anthropic's Claude models.

    Example:
        provider = AnthropicProvider(api_key="sk-ant-...")
        text = await provider.complete(build_prompt("desktop"), image_data, "image/png")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-latest",
        client: Optional[anthropic.AsyncAnthropic] = None
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key (get from https://console.anthropic.com/)
            model: Claude model to use; must be vision-capable (Claude 3+)
            client: Preconfigured client, mainly for tests
        """
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = model
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "anthropic"

    async def complete(
        self,
        prompt: VisionPrompt,
        image_data: str,
        media_type: str,
    ) -> Optional[str]:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=1024,
            system=prompt.system,
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": media_type,
                            "data": image_data
                        }
                    },
                    {
                        "type": "text",
                        "text": prompt.user
                    }
                ]
            }]
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return text or None

    def failure_signal(self, error: Exception) -> FailureSignal:
        message = str(error)

        if isinstance(error, anthropic.APITimeoutError):
            return FailureSignal(timed_out=True, message=message)
        if isinstance(error, anthropic.APIStatusError):
            return FailureSignal(status_code=error.status_code, message=message)
        if isinstance(error, anthropic.APIConnectionError):
            return FailureSignal(network=True, message=message)

        return FailureSignal(message=message)
