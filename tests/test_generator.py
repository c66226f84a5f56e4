import unittest
from unittest.mock import patch

import generator
from errors import GENERIC_FAILURE_MESSAGE, GenerationFailed, MalformedResponseError, NetworkError
from generator import GeneratedResult, GenerationRequest, generate

RESPONSE = {"script": "print(1)", "instructions": "run it", "explanation": "test"}


class GenerateTests(unittest.TestCase):
    @patch("generator.call_ai", return_value=dict(RESPONSE, _model="gemini-test"))
    def test_returns_fields_verbatim(self, call_ai):
        result = generate("aGVsbG8=", "https://docs.example.com", "skip the blog")
        self.assertEqual(result, GeneratedResult(**RESPONSE))
        self.assertEqual(result.script, "print(1)")

    @patch("generator.call_ai", return_value=RESPONSE)
    def test_request_carries_image_url_and_notes(self, call_ai):
        generate("aGVsbG8=", "https://docs.example.com", "remove the banner", mime_type="image/png")
        image_b64, mime_type, prompt, schema = call_ai.call_args.args
        self.assertEqual(image_b64, "aGVsbG8=")
        self.assertEqual(mime_type, "image/png")
        self.assertIn("https://docs.example.com", prompt)
        self.assertIn("remove the banner", prompt)
        self.assertIs(schema, GeneratedResult)

    @patch("generator.call_ai", return_value={"script": "print(1)", "explanation": "test"})
    def test_missing_field_fails(self, call_ai):
        with self.assertRaises(GenerationFailed) as ctx:
            generate("aGVsbG8=", "https://docs.example.com", "")
        self.assertIsInstance(ctx.exception.__cause__, MalformedResponseError)

    @patch("generator.call_ai", return_value=dict(RESPONSE, script=42))
    def test_non_text_field_fails(self, call_ai):
        with self.assertRaises(GenerationFailed):
            generate("aGVsbG8=", "https://docs.example.com", "")

    @patch("generator.call_ai", side_effect=NetworkError("connection reset"))
    def test_transport_error_is_collapsed(self, call_ai):
        with self.assertRaises(GenerationFailed) as ctx:
            generate("aGVsbG8=", "https://docs.example.com", "")
        self.assertEqual(str(ctx.exception), GENERIC_FAILURE_MESSAGE)
        self.assertIsInstance(ctx.exception.__cause__, NetworkError)

    @patch("generator.call_ai", side_effect=MalformedResponseError("No response from Gemini"))
    def test_empty_response_is_collapsed(self, call_ai):
        with self.assertRaises(GenerationFailed) as ctx:
            generate("aGVsbG8=", "https://docs.example.com", "")
        self.assertEqual(str(ctx.exception), GENERIC_FAILURE_MESSAGE)

    @patch("generator.call_ai", side_effect=RuntimeError("AI backend 'nope' not found."))
    def test_unknown_backend_is_collapsed(self, call_ai):
        with self.assertRaises(GenerationFailed):
            generate("aGVsbG8=", "https://docs.example.com", "")

    @patch("generator.call_ai")
    def test_requires_image_and_url(self, call_ai):
        with self.assertRaises(ValueError):
            generate("", "https://docs.example.com", "")
        with self.assertRaises(ValueError):
            generate("aGVsbG8=", "", "")
        call_ai.assert_not_called()


class GenerationRequestTests(unittest.TestCase):
    def test_is_immutable(self):
        request = GenerationRequest("aGVsbG8=", "https://docs.example.com")
        with self.assertRaises(AttributeError):
            request.target_url = "https://elsewhere.example.com"

    def test_prompt_asks_for_the_three_fields(self):
        prompt = GenerationRequest("aGVsbG8=", "https://docs.example.com").prompt
        for field in ("script ", "instructions ", "explanation "):
            self.assertIn(field, prompt)
        self.assertIn("Google Colab", prompt)

    def test_prompt_without_notes(self):
        request = GenerationRequest("aGVsbG8=", "https://docs.example.com")
        self.assertIn("User notes: (none)", request.prompt)

    @patch("generator.call_ai", return_value=RESPONSE)
    def test_send_raises_specific_error(self, call_ai):
        call_ai.return_value = {"script": "print(1)"}
        with self.assertRaises(MalformedResponseError):
            generator.send(GenerationRequest("aGVsbG8=", "https://docs.example.com"))
