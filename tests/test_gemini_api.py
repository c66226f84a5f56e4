import json
import base64
import unittest
from unittest.mock import MagicMock, patch

from ai_backends import gemini_api
from errors import MalformedResponseError, NetworkError
from generator import GeneratedResult

IMAGE_B64 = base64.b64encode(b"not really a png").decode("ascii")
RESPONSE = {"script": "print(1)", "instructions": "run it", "explanation": "test"}


def _client_returning(response=None, error=None):
    client = MagicMock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = response
    return client


@patch.dict("os.environ", {"GEMINI_API_KEY": "test-key", "GEMINI_MODEL": "gemini-test"})
class GeminiBackendTests(unittest.TestCase):
    def _call(self, client):
        with patch("ai_backends.gemini_api.genai.Client", return_value=client):
            return gemini_api.call(IMAGE_B64, "image/png", "prompt", GeneratedResult)

    def test_parsed_response(self):
        response = MagicMock(parsed=GeneratedResult(**RESPONSE))
        result = self._call(_client_returning(response))
        self.assertEqual(result, dict(RESPONSE, _model="gemini-test"))

    def test_text_response(self):
        response = MagicMock(parsed=None, text=json.dumps(RESPONSE))
        result = self._call(_client_returning(response))
        self.assertEqual(result["script"], "print(1)")

    def test_request_shape(self):
        client = _client_returning(MagicMock(parsed=None, text=json.dumps(RESPONSE)))
        self._call(client)
        kwargs = client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-test")
        self.assertEqual(kwargs["config"].response_mime_type, "application/json")
        self.assertEqual(kwargs["config"].max_output_tokens, gemini_api.DEFAULT_MAX_OUTPUT_TOKENS)
        image_part, prompt = kwargs["contents"]
        self.assertEqual(image_part.inline_data.data, b"not really a png")
        self.assertEqual(image_part.inline_data.mime_type, "image/png")
        self.assertEqual(prompt, "prompt")

    def test_output_token_cap_from_env(self):
        client = _client_returning(MagicMock(parsed=None, text=json.dumps(RESPONSE)))
        with patch.dict("os.environ", {"GEMINI_MAX_OUTPUT_TOKENS": "32768"}):
            self._call(client)
        config = client.models.generate_content.call_args.kwargs["config"]
        self.assertEqual(config.max_output_tokens, 32768)

    def test_empty_response(self):
        with self.assertRaises(MalformedResponseError):
            self._call(_client_returning(MagicMock(parsed=None, text="")))

    def test_non_json_response(self):
        with self.assertRaises(MalformedResponseError):
            self._call(_client_returning(MagicMock(parsed=None, text="Sure! Here is your script")))

    def test_non_object_json(self):
        with self.assertRaises(MalformedResponseError):
            self._call(_client_returning(MagicMock(parsed=None, text="[1, 2]")))

    def test_transport_error(self):
        with self.assertRaises(NetworkError):
            self._call(_client_returning(error=ConnectionError("connection reset")))

    def test_quota_error(self):
        msg = '429 RESOURCE_EXHAUSTED. {"error": {"details": [{"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "31s"}]}}'
        with self.assertRaises(NetworkError) as ctx:
            self._call(_client_returning(error=Exception(msg)))
        self.assertIn("quota", str(ctx.exception))
        self.assertIn("31s", str(ctx.exception))

    def test_missing_key(self):
        with patch.dict("os.environ", {"GEMINI_API_KEY": "", "API_KEY": ""}):
            with self.assertRaises(RuntimeError):
                gemini_api.call(IMAGE_B64, "image/png", "prompt", GeneratedResult)
