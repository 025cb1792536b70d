import unittest
from unittest import mock

from fetchbridge.config import (
    DEFAULT_TIMEOUT,
    TYPE_FORM,
    TYPE_JSON,
    ErrorKind,
    Method,
    Mode,
    NormalizedConfig,
    ResponseType,
    Strategy,
    ValidationFailure,
    encode_body,
    normalize,
    parse_timeout,
)


class TestNormalize(unittest.TestCase):
    def test_defaults(self):
        config = normalize({"url": "http://example.com"})
        assert isinstance(config, NormalizedConfig)
        self.assertIs(config.method, Method.GET)
        self.assertIs(config.mode, Mode.CORS)
        self.assertIs(config.type, ResponseType.TEXT)
        self.assertEqual(config.headers, {})
        self.assertIsNone(config.body)
        self.assertEqual(config.timeout, 2500)

    def test_case_normalization(self):
        cases = [
            ("post", "No-Cors", "JSON"),
            ("Patch", "SAME-ORIGIN", "ArrayBuffer"),
            ("delete", "navigate", "jsonp"),
            ("HEAD", "CORS", "Text"),
        ]
        for method, mode, type_ in cases:
            with self.subTest(method=method, mode=mode, type=type_):
                config = normalize(
                    {"url": "http://x", "method": method, "mode": mode, "type": type_}
                )
                assert isinstance(config, NormalizedConfig)
                self.assertEqual(config.method.value, method.upper())
                self.assertEqual(config.mode.value, mode.lower())
                self.assertEqual(config.type.value, type_.lower())

    def test_enum_members_accepted(self):
        config = normalize({"url": "http://x", "method": Method.POST, "type": ResponseType.JSONP})
        assert isinstance(config, NormalizedConfig)
        self.assertIs(config.method, Method.POST)
        self.assertIs(config.type, ResponseType.JSONP)

    def test_invalid_method(self):
        result = normalize({"url": "http://x", "method": "FETCH"})
        assert isinstance(result, ValidationFailure)
        self.assertIs(result.kind, ErrorKind.INVALID_METHOD)
        self.assertIn('"FETCH"', result.message)

    def test_invalid_mode(self):
        result = normalize({"url": "http://x", "mode": "open"})
        assert isinstance(result, ValidationFailure)
        self.assertIs(result.kind, ErrorKind.INVALID_MODE)

    def test_invalid_type(self):
        result = normalize({"url": "http://x", "type": "blob"})
        assert isinstance(result, ValidationFailure)
        self.assertIs(result.kind, ErrorKind.INVALID_TYPE)

    def test_missing_url(self):
        for options in ({}, {"url": ""}, {"url": None}):
            with self.subTest(options=options):
                result = normalize(options)
                assert isinstance(result, ValidationFailure)
                self.assertIs(result.kind, ErrorKind.MISSING_URL)

    def test_method_checked_before_url(self):
        result = normalize({"method": "nope"})
        assert isinstance(result, ValidationFailure)
        self.assertIs(result.kind, ErrorKind.INVALID_METHOD)

    def test_options_not_mutated(self):
        options = {"url": "http://x", "body": {"a": 1}, "headers": {"X-A": "1"}}
        config = normalize(options)
        assert isinstance(config, NormalizedConfig)
        self.assertEqual(options, {"url": "http://x", "body": {"a": 1}, "headers": {"X-A": "1"}})
        self.assertEqual(config.headers, {"X-A": "1", "Content-Type": TYPE_JSON})

    def test_json_body(self):
        config = normalize({"url": "http://x", "method": "post", "body": {"a": 1}})
        assert isinstance(config, NormalizedConfig)
        self.assertEqual(config.headers["Content-Type"], "application/json;charset=UTF-8")
        self.assertEqual(config.body, '{"a":1}')

    def test_explicit_content_type_keeps_body(self):
        config = normalize(
            {"url": "http://x", "body": "a=1", "headers": {"Content-Type": "text/plain"}}
        )
        assert isinstance(config, NormalizedConfig)
        self.assertEqual(config.body, "a=1")
        self.assertEqual(config.headers, {"Content-Type": "text/plain"})

    def test_uncopyable_body_is_reported(self):
        body = (n for n in range(3))
        result = normalize({"url": "http://x", "method": "post", "body": body})
        assert isinstance(result, ValidationFailure)
        self.assertIs(result.kind, ErrorKind.INVALID_BODY)

    def test_non_mapping_headers_are_reported(self):
        for headers in ("X-A: 1", ["X-A", "1"], 42):
            with self.subTest(headers=headers):
                result = normalize({"url": "http://x", "headers": headers})
                assert isinstance(result, ValidationFailure)
                self.assertIs(result.kind, ErrorKind.MISSING_HEADERS)

    def test_empty_content_type_still_infers(self):
        config = normalize({"url": "http://x", "body": {"a": 1}, "headers": {"Content-Type": ""}})
        assert isinstance(config, NormalizedConfig)
        self.assertEqual(config.body, '{"a":1}')
        self.assertEqual(config.headers, {"Content-Type": TYPE_JSON})

    def test_strategy(self):
        jsonp = normalize({"url": "http://x", "type": "JSONP"})
        text = normalize({"url": "http://x"})
        assert isinstance(jsonp, NormalizedConfig) and isinstance(text, NormalizedConfig)
        self.assertIs(jsonp.strategy, Strategy.SCRIPT_INJECTION)
        self.assertIs(text.strategy, Strategy.HTTP)


class TestEncodeBody(unittest.TestCase):
    def test_string_body_is_json_quoted(self):
        body, headers = encode_body("a=1&b=2", {})
        self.assertEqual(body, '"a=1&b=2"')
        self.assertEqual(headers["Content-Type"], TYPE_JSON)

    def test_absent_bodies_untouched(self):
        for body in (None, "", 0, False):
            with self.subTest(body=body):
                self.assertEqual(encode_body(body, {}), (body, {}))

    def test_empty_container_is_a_body(self):
        self.assertEqual(encode_body({}, {}), ("{}", {"Content-Type": TYPE_JSON}))

    def test_non_ascii_kept(self):
        body, _ = encode_body({"name": "café"}, {})
        self.assertEqual(body, '{"name":"café"}')

    def test_unserializable_body_left_alone(self):
        circular: dict = {}
        circular["self"] = circular
        body, headers = encode_body(circular, {})
        self.assertIs(body, circular)
        self.assertEqual(headers, {})

    def test_form_branch_when_json_encoder_fails(self):
        with mock.patch("fetchbridge.config.json.dumps", side_effect=TypeError):
            body, headers = encode_body("name=a b&x=1", {})
        self.assertEqual(body, "name=a%20b&x=1")
        self.assertEqual(headers["Content-Type"], TYPE_FORM)

    def test_unmatched_string_when_json_encoder_fails(self):
        with mock.patch("fetchbridge.config.json.dumps", side_effect=ValueError):
            body, headers = encode_body("a=1&&b", {})
        self.assertEqual(body, "a=1&&b")
        self.assertEqual(headers, {})

    def test_headers_not_modified(self):
        headers = {"Accept": "*/*"}
        encode_body({"a": 1}, headers)
        self.assertEqual(headers, {"Accept": "*/*"})


class TestParseTimeout(unittest.TestCase):
    def test_values(self):
        cases = [
            (None, DEFAULT_TIMEOUT),
            ("abc", DEFAULT_TIMEOUT),
            (0, DEFAULT_TIMEOUT),
            ("0", DEFAULT_TIMEOUT),
            (True, DEFAULT_TIMEOUT),
            (1000, 1000),
            ("750ms", 750),
            (" 42", 42),
            (3.9, 3),
            ("-5", -5),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(parse_timeout(value), expected)

    def test_normalize_uses_parsed_timeout(self):
        config = normalize({"url": "http://x", "timeout": "5000"})
        assert isinstance(config, NormalizedConfig)
        self.assertEqual(config.timeout, 5000)


if __name__ == "__main__":
    unittest.main()
