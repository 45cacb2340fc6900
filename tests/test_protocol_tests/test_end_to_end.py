"""End-to-end: generate modules and run them against the sample client.

The generated module is imported from a temporary directory and each of its
test coroutines is awaited directly, so failures surface as the exceptions
the generated assertions raise.
"""
from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType

import pytest

from src.protocol_tests.generator import generate, write_generated_files
from src.protocol_tests.model_loader import parse_model
from src.shared.config import GeneratorSettings
from tests.fixtures import REST_JSON

_counter = 0


def _generate_module(tmp_path: Path, document: dict, settings: GeneratorSettings) -> ModuleType:
    """Generate the restJson1 module under *tmp_path* and import it."""
    global _counter
    _counter += 1

    files = generate(parse_model(document), REST_JSON, settings)
    (path,) = write_generated_files(files, tmp_path)
    spec = importlib.util.spec_from_file_location(f"generated_protocol_tests_{_counter}", path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def _tests_of(module: ModuleType) -> dict:
    return {
        name: func
        for name, func in vars(module).items()
        if name.startswith("test_") and inspect.iscoroutinefunction(func)
    }


@pytest.mark.usefixtures("client_on_path")
class TestGeneratedModuleAgainstClient:
    @pytest.mark.asyncio
    async def test_all_generated_tests_pass(self, tmp_path, model_document, settings):
        module = _generate_module(tmp_path, model_document, settings)
        tests = _tests_of(module)
        assert sorted(tests) == [
            "test_GetResourceResponse",
            "test_GetResourceWithQuery",
            "test_ResourceNotFoundError_GetResource",
            "test_SayHelloBasic",
            "test_SayHelloResponse",
        ]
        for test in tests.values():
            await test()

    @pytest.mark.asyncio
    async def test_unlisted_keys_forbidden_still_pass(self, tmp_path, model_document):
        settings = GeneratorSettings(client_package="greeting_client", unlisted_keys="forbid")
        module = _generate_module(tmp_path, model_document, settings)
        await module.test_SayHelloBasic()
        await module.test_GetResourceWithQuery()

    @pytest.mark.asyncio
    async def test_wrong_method_fails_only_that_check(self, tmp_path, model_document, settings):
        traits = model_document["shapes"]["example.greeting#GreetingOperation"]["traits"]
        traits["smithy.test#httpRequestTests"][0]["method"] = "PUT"
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(AssertionError) as exc_info:
            await module.test_SayHelloBasic()
        message = str(exc_info.value)
        assert "1 request mismatch(es)" in message
        assert "method" in message

    @pytest.mark.asyncio
    async def test_every_wire_mismatch_is_reported(self, tmp_path, model_document, settings):
        traits = model_document["shapes"]["example.greeting#GetResource"]["traits"]
        fixture = traits["smithy.test#httpRequestTests"][0]
        fixture["uri"] = "/resources/xyz"
        fixture["queryParams"] = ["verbose=false"]
        fixture["headers"] = {"X-Request-Id": "r-2"}
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(AssertionError) as exc_info:
            await module.test_GetResourceWithQuery()
        assert "3 request mismatch(es)" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_body_mismatch(self, tmp_path, model_document, settings):
        traits = model_document["shapes"]["example.greeting#GreetingOperation"]["traits"]
        traits["smithy.test#httpRequestTests"][0]["body"] = '{"name": "moon"}'
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(AssertionError, match="body"):
            await module.test_SayHelloBasic()

    @pytest.mark.asyncio
    async def test_wrong_output_value(self, tmp_path, model_document, settings):
        traits = model_document["shapes"]["example.greeting#GetResource"]["traits"]
        traits["smithy.test#httpResponseTests"][0]["params"]["size"] = 2.5
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(AssertionError, match="size"):
            await module.test_GetResourceResponse()

    @pytest.mark.asyncio
    async def test_wrong_error_discrimination(self, tmp_path, model_document, settings):
        error = model_document["shapes"]["example.greeting#ResourceNotFound"]
        error["traits"]["smithy.test#httpResponseTests"][0]["headers"][
            "X-Amzn-Errortype"
        ] = "InvalidRequest"
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(pytest.fail.Exception, match="ResourceNotFound"):
            await module.test_ResourceNotFoundError_GetResource()

    @pytest.mark.asyncio
    async def test_wrong_error_member(self, tmp_path, model_document, settings):
        error = model_document["shapes"]["example.greeting#ResourceNotFound"]
        error["traits"]["smithy.test#httpResponseTests"][0]["params"]["message"] = "other"
        module = _generate_module(tmp_path, model_document, settings)
        with pytest.raises(AssertionError, match="message"):
            await module.test_ResourceNotFoundError_GetResource()
