"""Code generator — sends the composed prompt to the LLM and cleans the reply."""

import logging
import re
from pathlib import Path

import litellm

from endpoint_codegen.errors import AuthError, GenerationError, MissingCredentialError
from endpoint_codegen.generator.prompt import DEFAULT_TEMPLATE, compose_prompt
from endpoint_codegen.llm import LlmClient
from endpoint_codegen.parser.base import ParsedData

logger = logging.getLogger(__name__)

INVALID_KEY_MARKER = "API key not valid"

_LEADING_FENCE = re.compile(r"\A```[^\n`]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*\Z")


def strip_fences(text: str) -> str:
    """Remove a leading ```lang line and a trailing ``` from an LLM reply."""
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text, count=1)


class CodeGenerator:
    """Generates source code for one endpoint from its metadata."""

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        template: str | Path = DEFAULT_TEMPLATE,
    ):
        self.api_key = api_key
        self.template = template
        self.client = LlmClient(model=model, api_key=api_key)

    def generate(self, data: ParsedData) -> str:
        """Generate code for ``data``.

        Raises MissingCredentialError without calling the LLM when no key is
        configured, AuthError when the provider rejects the key and
        GenerationError for every other failure.
        """
        if not self.api_key:
            raise MissingCredentialError()

        prompt = compose_prompt(data, template=self.template)
        logger.debug("Sending %d-char prompt to %s", len(prompt), self.client.model)
        try:
            response = self.client.generate(prompt)
        except Exception as e:
            if _is_auth_failure(e):
                logger.warning("Credential rejected by %s: %s", self.client.model, e)
                raise AuthError() from e
            logger.error("Generation failed: %s", e, exc_info=True)
            raise GenerationError() from e

        return strip_fences(response)


def _is_auth_failure(error: Exception) -> bool:
    return isinstance(error, litellm.AuthenticationError) or INVALID_KEY_MARKER in str(error)
