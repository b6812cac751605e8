import logging

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class LLMClient:
    """Wrapper for the Google Gemini API.

    Exposes a single ``generate`` call. Any failure (network, quota, empty
    response) is raised to the caller, which decides how to fall back.
    """

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_prompt: str,
        contents: str,
        max_tokens: int = 800,
        temperature: float = 0.4,
        json_output: bool = False,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=max_tokens,
            temperature=temperature,
            response_mime_type="application/json" if json_output else None,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )

        text = (response.text or "").strip()
        finish = getattr(
            response.candidates[0], "finish_reason", None
        ) if response.candidates else None
        logger.info(
            f"LLM response: finish_reason={finish}, "
            f"len={len(text)}, text='{text[:200]}'"
        )
        if not text:
            raise RuntimeError("Empty response from LLM")
        return text
