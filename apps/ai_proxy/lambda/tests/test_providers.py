import json
import unittest
from collections.abc import Callable

import httpx

from ai_proxy.errors import ProviderError
from ai_proxy.normalizer import ResolvedRequest
from ai_proxy.providers.base import decode_body
from ai_proxy.providers.chat_completions import ChatCompletionsAdapter
from ai_proxy.providers.generate_content import GenerateContentAdapter


class RecordingTransport:
    """Serve a canned response and remember every outbound request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self._record))

    def _record(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


def _request(provider: str, model: str, system: str | None = None) -> ResolvedRequest:
    return ResolvedRequest(
        provider=provider,
        model=model,
        system=system,
        message="What is CSS?",
        api_key="secret-key",
    )


class ChatCompletionsAdapterTests(unittest.TestCase):
    def test_extracts_first_choice_content(self) -> None:
        body = {"choices": [{"message": {"role": "assistant", "content": "hello"}}]}
        transport = RecordingTransport(lambda request: httpx.Response(200, json=body))
        adapter = ChatCompletionsAdapter(transport)

        response = adapter.call(_request("openai", "gpt-4o-mini"))

        self.assertEqual(response.text, "hello")
        self.assertEqual(response.provider, "openai")
        self.assertEqual(response.model, "gpt-4o-mini")
        self.assertEqual(response.raw, body)

    def test_openai_request_shape(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
        adapter = ChatCompletionsAdapter(transport)

        adapter.call(_request("openai", "gpt-4o-mini", system="Be brief."))

        (sent,) = transport.requests
        self.assertEqual(str(sent.url), "https://api.openai.com/v1/chat/completions")
        self.assertEqual(sent.headers["Authorization"], "Bearer secret-key")
        payload = json.loads(sent.content)
        self.assertEqual(payload["model"], "gpt-4o-mini")
        self.assertEqual(
            payload["messages"],
            [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "What is CSS?"},
            ],
        )
        self.assertNotIn("max_tokens", payload)

    def test_deepseek_request_carries_token_cap(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
        adapter = ChatCompletionsAdapter(transport)

        adapter.call(_request("deepseek", "deepseek-reasoner"))

        (sent,) = transport.requests
        self.assertEqual(str(sent.url), "https://api.deepseek.com/v1/chat/completions")
        payload = json.loads(sent.content)
        self.assertEqual(payload["max_tokens"], 1500)
        self.assertEqual(payload["messages"], [{"role": "user", "content": "What is CSS?"}])

    def test_missing_choices_yield_empty_text(self) -> None:
        adapter = ChatCompletionsAdapter(RecordingTransport(lambda r: httpx.Response(200)))

        self.assertEqual(adapter.extract_text({"choices": []}), "")
        self.assertEqual(adapter.extract_text({"choices": [{"message": {"content": None}}]}), "")
        self.assertEqual(adapter.extract_text(["unexpected"]), "")

    def test_error_status_raises_with_status_and_body(self) -> None:
        error_body = {"error": {"message": "Incorrect API key provided"}}
        transport = RecordingTransport(lambda request: httpx.Response(401, json=error_body))
        adapter = ChatCompletionsAdapter(transport)

        with self.assertRaises(ProviderError) as ctx:
            adapter.call(_request("openai", "gpt-4o-mini"))

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.body, error_body)
        self.assertIn("401", str(ctx.exception))
        self.assertIn("Incorrect API key provided", str(ctx.exception))

    def test_transport_failure_raises_provider_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = ChatCompletionsAdapter(RecordingTransport(refuse))

        with self.assertRaises(ProviderError) as ctx:
            adapter.call(_request("deepseek", "deepseek-reasoner"))

        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("connection refused", str(ctx.exception))


class GenerateContentAdapterTests(unittest.TestCase):
    def test_concatenates_text_parts_of_first_candidate(self) -> None:
        body = {
            "candidates": [
                {"content": {"role": "model", "parts": [{"text": "foo"}, {"text": "bar"}]}},
                {"content": {"role": "model", "parts": [{"text": "ignored"}]}},
            ]
        }
        transport = RecordingTransport(lambda request: httpx.Response(200, json=body))
        adapter = GenerateContentAdapter(transport)

        response = adapter.call(_request("gemini", "gemini-2.5-flash-lite"))

        self.assertEqual(response.text, "foobar")
        self.assertEqual(response.raw, body)

    def test_request_shape_uses_query_key(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
        adapter = GenerateContentAdapter(transport)

        adapter.call(_request("gemini", "gemini-2.5-flash-lite", system="Be brief."))

        (sent,) = transport.requests
        self.assertEqual(sent.url.path, "/v1beta/models/gemini-2.5-flash-lite:generateContent")
        self.assertEqual(sent.url.params["key"], "secret-key")
        self.assertNotIn("Authorization", sent.headers)
        payload = json.loads(sent.content)
        self.assertEqual(
            payload["contents"],
            [
                {"role": "system", "parts": [{"text": "Be brief."}]},
                {"role": "user", "parts": [{"text": "What is CSS?"}]},
            ],
        )

    def test_model_is_escaped_into_one_path_segment(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
        adapter = GenerateContentAdapter(transport)

        for model in ("../../v1/models/other", "x?alt=sse&", "x#frag"):
            adapter.call(_request("gemini", model))

        for sent in transport.requests:
            path = sent.url.raw_path.split(b"?")[0]
            self.assertTrue(path.startswith(b"/v1beta/models/"))
            self.assertTrue(path.endswith(b":generateContent"))
            self.assertEqual(path.count(b"/"), 3)
            self.assertEqual(dict(sent.url.params), {"key": "secret-key"})
            self.assertEqual(sent.url.fragment, "")

    def test_skips_non_text_parts(self) -> None:
        adapter = GenerateContentAdapter(RecordingTransport(lambda r: httpx.Response(200)))
        body = {"candidates": [{"content": {"parts": [{"inlineData": {}}, {"text": "ok"}]}}]}

        self.assertEqual(adapter.extract_text(body), "ok")
        self.assertEqual(adapter.extract_text({"candidates": []}), "")
        self.assertEqual(adapter.extract_text({"promptFeedback": {"blockReason": "SAFETY"}}), "")


class DecodeBodyTests(unittest.TestCase):
    def test_non_json_body_is_wrapped(self) -> None:
        self.assertEqual(
            decode_body("<html>Bad Gateway</html>"), {"rawText": "<html>Bad Gateway</html>"}
        )
        self.assertEqual(decode_body(""), {"rawText": ""})

    def test_non_json_success_keeps_raw_text(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, text="not json"))
        adapter = GenerateContentAdapter(transport)

        response = adapter.call(_request("gemini", "gemini-2.5-flash-lite"))

        self.assertEqual(response.text, "")
        self.assertEqual(response.raw, {"rawText": "not json"})

    def test_non_json_error_reaches_status_check(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(502, text="upstream down"))
        adapter = ChatCompletionsAdapter(transport)

        with self.assertRaises(ProviderError) as ctx:
            adapter.call(_request("openai", "gpt-4o-mini"))

        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.body, {"rawText": "upstream down"})


if __name__ == "__main__":
    unittest.main()
