import datetime
import decimal
import enum
import json
import math
import xml.etree.ElementTree as ElementTree
from collections import Counter
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qsl, unquote

import httpx
import pytest

pytestmark = pytest.mark.asyncio

# Headers the HTTP stack adds on its own; never counted as unlisted.
_TRANSPORT_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})


class _RequestCapturedSignal(BaseException):
    """Carries the serialized request out of the client call.

    Derives from BaseException so client code catching ``Exception`` cannot
    mistake it for an ordinary failure.
    """

    def __init__(self, request: httpx.Request) -> None:
        super().__init__("request captured")
        self.request = request


@dataclass(frozen=True)
class Captured:
    """A request serialized by the client and stopped before sending."""

    request: httpx.Request


class RequestCaptureTransport(httpx.AsyncBaseTransport):
    """Transport that never sends: every request is captured instead."""

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        raise _RequestCapturedSignal(request)


class ResponseInjectionTransport(httpx.AsyncBaseTransport):
    """Transport that answers every request with one canned response."""

    def __init__(
        self,
        status_code: int,
        headers: Optional[dict] = None,
        body: bytes = b"",
    ) -> None:
        self._status_code = status_code
        self._headers = dict(headers or {})
        self._body = body

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        return httpx.Response(
            self._status_code,
            headers=self._headers,
            content=self._body,
            request=request,
        )


async def capture_request(call: Callable[[], Awaitable[Any]]) -> Captured:
    """Run *call* against a capturing client and return what it serialized.

    Only the capture signal is intercepted; any other exception raised while
    building or serializing the request propagates unchanged.
    """
    try:
        await call()
    except _RequestCapturedSignal as signal:
        return Captured(signal.request)
    raise AssertionError("Expected the client to send a request, but the call returned")


async def expect_error(call: Callable[[], Awaitable[Any]], error_type: type) -> BaseException:
    """Run *call* and return the modeled error it raised."""
    try:
        await call()
    except error_type as err:
        return err
    except Exception as err:
        pytest.fail(
            f"Expected error {error_type.__name__} to be discriminated, "
            f"but found {type(err).__name__}: {err}"
        )
    pytest.fail(f"Expected error {error_type.__name__} to be raised, but the call succeeded")


def request_path(request: httpx.Request) -> str:
    """The raw (still percent-encoded) request path without its query."""
    return request.url.raw_path.decode("ascii").partition("?")[0]


def query_segments(request: httpx.Request) -> list:
    query = request.url.query
    if isinstance(query, bytes):
        query = query.decode("ascii")
    return [segment for segment in query.split("&") if segment]


def _query_key(segment: str) -> str:
    return unquote(segment.partition("=")[0])


class WireChecks:
    """Collects wire-level mismatches and reports them all at once."""

    def __init__(self, subject: str) -> None:
        self.subject = subject
        self.failures: list = []

    def equal(self, field: str, expected: Any, actual: Any) -> None:
        if expected != actual:
            self.failures.append(
                f"Expected {self.subject} {field} to equal {expected!r}, but found {actual!r}"
            )

    def query_params(self, request: httpx.Request, expected: list) -> None:
        actual = query_segments(request)
        for param in expected:
            if param not in actual:
                self.failures.append(
                    f"Expected query parameter {param!r} in {self.subject}, but found {actual!r}"
                )

    def forbid_query_params(self, request: httpx.Request, names: list) -> None:
        keys = {_query_key(segment) for segment in query_segments(request)}
        for name in names:
            if name in keys:
                self.failures.append(
                    f"Expected query parameter {name!r} to be absent from {self.subject}"
                )

    def require_query_params(self, request: httpx.Request, names: list) -> None:
        keys = {_query_key(segment) for segment in query_segments(request)}
        for name in names:
            if name not in keys:
                self.failures.append(
                    f"Expected query parameter {name!r} to be present in {self.subject}"
                )

    def only_query_params(self, request: httpx.Request, allowed: list) -> None:
        for segment in query_segments(request):
            if _query_key(segment) not in allowed:
                self.failures.append(
                    f"Unexpected query parameter {segment!r} in {self.subject}"
                )

    def headers(self, headers: httpx.Headers, expected: dict) -> None:
        for name, value in expected.items():
            actual = headers.get(name)
            if actual != value:
                self.failures.append(
                    f"Expected {self.subject} header {name!r} to equal {value!r}, "
                    f"but found {actual!r}"
                )

    def forbid_headers(self, headers: httpx.Headers, names: list) -> None:
        for name in names:
            if name in headers:
                self.failures.append(
                    f"Expected {self.subject} header {name!r} to be absent, "
                    f"but found {headers.get(name)!r}"
                )

    def require_headers(self, headers: httpx.Headers, names: list) -> None:
        for name in names:
            if name not in headers:
                self.failures.append(
                    f"Expected {self.subject} header {name!r} to be present"
                )

    def only_headers(self, headers: httpx.Headers, allowed: list) -> None:
        allowed_names = {name.lower() for name in allowed} | _TRANSPORT_HEADERS
        for name in headers.keys():
            if name.lower() not in allowed_names:
                self.failures.append(f"Unexpected {self.subject} header {name!r}")

    def body(self, actual: bytes, expected: Optional[str], media_type: Optional[str] = None) -> None:
        if not expected:
            if actual:
                self.failures.append(
                    f"Expected {self.subject} body to be empty, but found {actual!r}"
                )
            return
        problem = compare_body(actual, expected, media_type)
        if problem is not None:
            self.failures.append(f"{self.subject} body: {problem}")

    def verify(self) -> None:
        if self.failures:
            details = "\n".join(f"  - {failure}" for failure in self.failures)
            raise AssertionError(f"{len(self.failures)} {self.subject} mismatch(es):\n{details}")


def _media_kind(media_type: Optional[str]) -> str:
    essence = (media_type or "").split(";")[0].strip().lower()
    if essence == "application/json" or essence.endswith("+json"):
        return "json"
    if essence in ("application/xml", "text/xml") or essence.endswith("+xml"):
        return "xml"
    if essence == "application/x-www-form-urlencoded":
        return "form"
    return "bytes"


def compare_body(actual: bytes, expected: str, media_type: Optional[str]) -> Optional[str]:
    """Return a mismatch description, or ``None`` when the bodies match.

    Structured media types are compared by meaning, not by bytes: JSON
    objects ignore key order, XML is canonicalized, form bodies ignore
    parameter order.  Anything else must match byte for byte.
    """
    kind = _media_kind(media_type)
    if kind == "json":
        try:
            actual_doc = json.loads(actual)
        except ValueError as exc:
            return f"expected JSON {expected!r}, but found unparsable {actual!r} ({exc})"
        expected_doc = json.loads(expected)
        if actual_doc != expected_doc:
            return (
                f"expected JSON {json.dumps(expected_doc, sort_keys=True)}, "
                f"but found {json.dumps(actual_doc, sort_keys=True)}"
            )
        return None
    if kind == "xml":
        try:
            actual_doc = ElementTree.canonicalize(actual.decode("utf-8"), strip_text=True)
        except (ElementTree.ParseError, UnicodeDecodeError) as exc:
            return f"expected XML {expected!r}, but found unparsable {actual!r} ({exc})"
        expected_doc = ElementTree.canonicalize(expected, strip_text=True)
        if actual_doc != expected_doc:
            return f"expected XML {expected_doc}, but found {actual_doc}"
        return None
    if kind == "form":
        try:
            actual_text = actual.decode("utf-8")
        except UnicodeDecodeError as exc:
            return f"expected form {expected!r}, but found undecodable {actual!r} ({exc})"
        actual_pairs = Counter(parse_qsl(actual_text, keep_blank_values=True))
        expected_pairs = Counter(parse_qsl(expected, keep_blank_values=True))
        if actual_pairs != expected_pairs:
            return f"expected form {expected!r}, but found {actual_text!r}"
        return None
    if actual != expected.encode("utf-8"):
        return f"expected {expected.encode('utf-8')!r}, but found {actual!r}"
    return None


def assert_modeled_equal(expected: Any, actual: Any) -> None:
    """Assert two modeled values are structurally equal.

    Numbers compare by value (``1 == 1.0``, NaN equals NaN), timestamps by
    instant, blobs as bytes.  Every differing field is reported.
    """
    differences: list = []
    _compare(expected, actual, "", differences)
    if differences:
        details = "\n".join(f"  - {difference}" for difference in differences)
        raise AssertionError(f"Modeled values differ:\n{details}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, decimal.Decimal)) and not isinstance(value, bool)


def _numbers_equal(expected: Any, actual: Any) -> bool:
    expected_nan = isinstance(expected, float) and math.isnan(expected)
    actual_nan = isinstance(actual, float) and math.isnan(actual)
    if expected_nan or actual_nan:
        return expected_nan and actual_nan
    return decimal.Decimal(str(expected)) == decimal.Decimal(str(actual))


def _instant(value: Any) -> Any:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return value.timestamp()
    if isinstance(value, str):
        try:
            return _instant(datetime.datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return value
    if _is_number(value):
        return float(value)
    return value


def _fields_of(value: Any) -> Optional[dict]:
    if isinstance(value, enum.Enum):
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in fields(value)}
    model_fields = getattr(type(value), "model_fields", None)
    if isinstance(model_fields, dict):
        return {name: getattr(value, name) for name in model_fields}
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    return None


def _compare(expected: Any, actual: Any, path: str, differences: list) -> None:
    label = path or "value"
    if isinstance(expected, datetime.datetime) or isinstance(actual, datetime.datetime):
        if _instant(expected) != _instant(actual):
            differences.append(f"{label}: expected {expected!r}, found {actual!r}")
        return
    if _is_number(expected) and _is_number(actual):
        if not _numbers_equal(expected, actual):
            differences.append(f"{label}: expected {expected!r}, found {actual!r}")
        return
    if isinstance(expected, (bytes, bytearray)) and isinstance(actual, (bytes, bytearray, str)):
        actual_bytes = actual.encode("utf-8") if isinstance(actual, str) else bytes(actual)
        if bytes(expected) != actual_bytes:
            differences.append(f"{label}: expected {expected!r}, found {actual!r}")
        return
    if isinstance(expected, dict) and isinstance(actual, dict):
        for key in list(expected) + [k for k in actual if k not in expected]:
            child = f"{path}[{key!r}]"
            if key not in actual:
                differences.append(f"{child}: expected {expected[key]!r}, but it is missing")
            elif key not in expected:
                differences.append(f"{child}: unexpected value {actual[key]!r}")
            else:
                _compare(expected[key], actual[key], child, differences)
        return
    if isinstance(expected, (list, tuple)) and isinstance(actual, (list, tuple)):
        if len(expected) != len(actual):
            differences.append(
                f"{label}: expected {len(expected)} items, found {len(actual)}: {actual!r}"
            )
        for i, (e, a) in enumerate(zip(expected, actual)):
            _compare(e, a, f"{path}[{i}]", differences)
        return

    expected_fields = _fields_of(expected)
    actual_fields = _fields_of(actual)
    if expected_fields is not None or actual_fields is not None:
        if type(expected) is not type(actual):
            differences.append(
                f"{label}: expected {type(expected).__name__}, found {type(actual).__name__}"
            )
            return
        for name in list(expected_fields) + [n for n in actual_fields if n not in expected_fields]:
            child = f"{path}.{name}" if path else name
            _compare(expected_fields.get(name), actual_fields.get(name), child, differences)
        return

    if expected != actual:
        differences.append(f"{label}: expected {expected!r}, found {actual!r}")
