"""Session state holder that also runs code generation."""

import asyncio
import logging
from pathlib import Path

from endpoint_codegen.config import CredentialStore
from endpoint_codegen.errors import AuthError, CodegenError, GenerationInProgressError
from endpoint_codegen.generator.code import CodeGenerator
from endpoint_codegen.generator.prompt import DEFAULT_TEMPLATE
from endpoint_codegen.state import (
    AppState,
    CredentialChanged,
    Event,
    GenerationFailed,
    GenerationStarted,
    GenerationSucceeded,
    reduce,
)

logger = logging.getLogger(__name__)


class Session:
    """Holds one AppState snapshot and applies events to it."""

    def __init__(
        self,
        store: CredentialStore,
        model: str | None = None,
        template: str | Path = DEFAULT_TEMPLATE,
    ):
        self.store = store
        self.model = model
        self.template = template
        self.state = AppState(key_available=store.is_configured)
        self._unsubscribe = store.subscribe(self._on_credential_changed)

    def dispatch(self, event: Event) -> AppState:
        self.state = reduce(self.state, event)
        return self.state

    def close(self) -> None:
        self._unsubscribe()

    async def generate(self) -> AppState:
        """Generate code for the current record.

        Only one generation may be pending at a time. Events dispatched while
        it runs are applied normally; the result lands in the output slot of
        whatever state is current when the call returns.
        """
        if self.state.is_generating:
            raise GenerationInProgressError()
        parsed = self.state.parsed
        if parsed is None:
            return self.state

        self.dispatch(GenerationStarted())
        generator = CodeGenerator(model=self.model, api_key=self.store.get(), template=self.template)
        try:
            code = await asyncio.to_thread(generator.generate, parsed)
        except AuthError as e:
            self.store.clear()
            return self.dispatch(GenerationFailed(message=e.message, auth=True))
        except CodegenError as e:
            return self.dispatch(GenerationFailed(message=e.message))
        return self.dispatch(GenerationSucceeded(code=code))

    def _on_credential_changed(self, available: bool) -> None:
        logger.debug("Credential availability changed: %s", available)
        self.dispatch(CredentialChanged(available=available))
