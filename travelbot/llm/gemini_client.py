# Role: Minimal wrapper around Gemini API. Centralizes model name, temperature, and error handling,
# so the rest of the code only calls stream_text(system_prompt, messages).

import os
from typing import Dict, Iterator, List, Optional

from google import genai

from travelbot.core.errors import ModelInvocationError


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
    ) -> None:
        # Key lines:
        # - Reads secrets from env (no secrets in code).
        # - Model and temperature are configurable for experiments.
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ModelInvocationError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self.temperature = temperature

        self.client = genai.Client(api_key=self.api_key)

    @staticmethod
    def _to_contents(messages: List[Dict[str, str]]) -> List[dict]:
        # Gemini only knows "user" and "model" turns; system text goes into system_instruction.
        contents = []
        for message in messages:
            role = "model" if message.get("role") == "assistant" else "user"
            text = message.get("content") or ""
            if text.strip():
                contents.append({"role": role, "parts": [{"text": text}]})
        return contents

    def stream_text(self, system_prompt: str, messages: List[Dict[str, str]]) -> Iterator[str]:
        # 1) Validate input
        # 2) Open a streaming call with the system prompt as instruction
        # 3) Yield non-empty text chunks as they arrive
        contents = self._to_contents(messages)
        if not contents:
            raise ValueError("At least one non-empty message is required.")

        try:
            stream = self.client.models.generate_content_stream(
                model=self.model_name,
                contents=contents,
                config={"temperature": self.temperature, "system_instruction": system_prompt},
            )
            for chunk in stream:
                text = getattr(chunk, "text", None)
                if text:
                    yield text
        except ModelInvocationError:
            raise
        except Exception as e:
            raise ModelInvocationError(f"Gemini API call failed: {e}") from e
