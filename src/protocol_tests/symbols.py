"""Maps model shapes to names in the generated Python client."""

from __future__ import annotations

import keyword
import re
import unicodedata

from src.shared.config import GeneratorSettings
from src.shared.models.smithy import Shape

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]+")


def snake_case(name: str) -> str:
    """``GetHTTPResource`` -> ``get_http_resource``."""
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    name = _NON_IDENTIFIER.sub("_", name).strip("_").lower()
    if keyword.iskeyword(name):
        name += "_"
    return name


def function_name_for_test(label: str) -> str:
    """Turn a fixture label into a pytest function name, keeping its casing.

    Characters Python accepts in identifiers survive, non-ASCII letters
    included.  The result is NFKC-normalized, as the interpreter does with
    identifiers, so two labels that would bind the same name compare equal.
    """
    chars = [ch if ("_" + ch).isidentifier() else " " for ch in label]
    words = "".join(chars).split()
    return unicodedata.normalize("NFKC", "test_" + "_".join(words))


class SymbolProvider:
    """Resolves client, operation, shape and member names.

    The generated client is expected to expose ``<Service>Client`` from the
    client package and every structure, union and error as
    ``<client_package>.<models_module>.<ShapeName>``.
    """

    def __init__(self, settings: GeneratorSettings) -> None:
        self._settings = settings

    @property
    def models_alias(self) -> str:
        return self._settings.models_module.rpartition(".")[2]

    def client_class(self, service: Shape) -> str:
        return f"{service.name}Client"

    def client_imports(self, service: Shape) -> list[str]:
        package = self._settings.client_package
        parent, _, _ = self._settings.models_module.rpartition(".")
        models_package = f"{package}.{parent}" if parent else package
        return [
            f"from {package} import {self.client_class(service)}",
            f"from {models_package} import {self.models_alias}",
        ]

    def operation_method(self, operation: Shape) -> str:
        return snake_case(operation.name)

    def shape_type(self, shape: Shape) -> str:
        return f"{self.models_alias}.{shape.name}"

    def member_name(self, member_name: str) -> str:
        return snake_case(member_name)
