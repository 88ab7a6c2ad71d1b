import asyncio
import threading
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest

from endpoint_codegen.config import CredentialStore
from endpoint_codegen.errors import AuthError, GenerationError, GenerationInProgressError
from endpoint_codegen.session import Session
from endpoint_codegen.state import FieldEdited, InputChanged, ParseRequested

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "config.yaml")


def _parsed_session(store: CredentialStore) -> Session:
    session = Session(store, model="test-model")
    session.dispatch(InputChanged(text=(FIXTURES / "post_endpoint.json").read_text(encoding="utf-8")))
    session.dispatch(ParseRequested())
    return session


class TestSessionCredential:
    def test_initial_key_availability(self, store):
        store.set("abc")
        assert Session(store).state.key_available is True

    def test_follows_store_changes(self, store):
        session = Session(store)
        store.set("abc")
        assert session.state.key_available is True
        store.clear()
        assert session.state.key_available is False

    def test_close_unsubscribes(self, store):
        session = Session(store)
        session.close()
        store.set("abc")
        assert session.state.key_available is False


class TestSessionGenerate:
    @patch("endpoint_codegen.session.CodeGenerator")
    def test_success(self, MockGen, store):
        store.set("abc")
        MockGen.return_value.generate.return_value = "final class CreateOrderRequest {}"
        session = _parsed_session(store)

        state = asyncio.run(session.generate())

        assert state.generated_code == "final class CreateOrderRequest {}"
        assert state.is_generating is False
        MockGen.assert_called_once_with(model="test-model", api_key="abc", template="swift_moya")

    def test_missing_key(self, store):
        session = _parsed_session(store)
        state = asyncio.run(session.generate())
        assert state.error == "请先设置您的Gemini API密钥。"
        assert state.generated_code == ""

    @patch("endpoint_codegen.session.CodeGenerator")
    def test_auth_error_clears_key(self, MockGen, store):
        store.set("abc")
        MockGen.return_value.generate.side_effect = AuthError()
        session = _parsed_session(store)

        state = asyncio.run(session.generate())

        assert state.key_available is False
        assert store.get() is None
        assert state.error == AuthError.default_message

    @patch("endpoint_codegen.session.CodeGenerator")
    def test_generic_error_keeps_key(self, MockGen, store):
        store.set("abc")
        MockGen.return_value.generate.side_effect = GenerationError()
        session = _parsed_session(store)

        state = asyncio.run(session.generate())

        assert state.key_available is True
        assert store.get() == "abc"
        assert state.error == GenerationError.default_message

    def test_without_record_is_noop(self, store):
        session = Session(store)
        state = asyncio.run(session.generate())
        assert state.is_generating is False
        assert state.generated_code == ""

    @patch("endpoint_codegen.session.CodeGenerator")
    def test_rejects_overlapping_generation(self, MockGen, store):
        store.set("abc")
        release = threading.Event()

        def generate(parsed):
            assert release.wait(timeout=5)
            return "final class CreateOrderRequest {}"

        MockGen.return_value = MagicMock(generate=generate)
        session = _parsed_session(store)

        async def second_call():
            try:
                return await session.generate()
            finally:
                release.set()

        async def run_both():
            return await asyncio.gather(session.generate(), second_call(), return_exceptions=True)

        first, second = asyncio.run(run_both())

        assert isinstance(second, GenerationInProgressError)
        assert first.generated_code == "final class CreateOrderRequest {}"
        assert first.is_generating is False
        assert MockGen.call_count == 1

    @patch("endpoint_codegen.session.CodeGenerator")
    def test_result_written_after_edit(self, MockGen, store):
        store.set("abc")
        session = _parsed_session(store)

        def generate(parsed):
            session.dispatch(FieldEdited(field="name", value="renamed"))
            return f"// {parsed.name}"

        MockGen.return_value = MagicMock(generate=generate)
        state = asyncio.run(session.generate())

        assert state.parsed.name == "renamed"
        assert state.generated_code == "// 创建订单"
