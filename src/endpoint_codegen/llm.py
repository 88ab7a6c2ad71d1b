"""Single-prompt text generation through litellm.

The endpoint prompt is sent as one user message; the model name selects
the provider (Gemini by default).
"""

from litellm import completion

DEFAULT_MODEL = "gemini/gemini-2.5-flash"


class LlmClient:
    """Wrapper for LLM API calls via litellm."""

    def __init__(self, model: str | None = None, api_key: str | None = None):
        self.model = model or DEFAULT_MODEL
        self.api_key = api_key

    def generate(self, prompt: str) -> str:
        """Send a single user prompt to the LLM and return the response text."""
        kwargs = {"api_key": self.api_key} if self.api_key else {}
        response = completion(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        return response.choices[0].message.content or ""
