"""
Tests for the OpenAI chat client.
"""

import os
import json
import pytest
from unittest.mock import patch, MagicMock

from cohortcraft.campaign2cohort.llm_client import OpenAIChatClient
from cohortcraft.core.constants import DEFAULT_LLM_MODEL
from cohortcraft.core.error_handler import APIError, ConfigurationError

class TestOpenAIChatClient:
    """
    Tests for the OpenAIChatClient class.
    """

    @patch('cohortcraft.campaign2cohort.llm_client.get_api_key')
    def test_init(self, mock_get_api_key):
        """
        Test initialization of the client.
        """
        mock_get_api_key.return_value = "test_api_key"

        client = OpenAIChatClient()

        assert client.api_key == "test_api_key"
        assert client.model == DEFAULT_LLM_MODEL
        assert client.temperature == 0.7
        assert client.endpoint == "https://api.openai.com/v1/chat/completions"

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_missing_key_fails_before_request(self, mock_post):
        """
        Test a missing API key is reported without any network call.
        """
        with pytest.raises(ConfigurationError):
            OpenAIChatClient()

        assert not mock_post.called

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_complete(self, mock_post, chat_response):
        """
        Test a completion returns the message content.
        """
        mock_post.return_value = chat_response('{"microCohorts": []}')

        client = OpenAIChatClient(api_key="test_api_key", temperature=0.2)
        result = client.complete("System prompt", "User prompt")

        assert result == '{"microCohorts": []}'
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.openai.com/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer test_api_key"
        assert kwargs["json"]["model"] == DEFAULT_LLM_MODEL
        assert kwargs["json"]["temperature"] == 0.2
        assert kwargs["json"]["messages"] == [
            {"role": "system", "content": "System prompt"},
            {"role": "user", "content": "User prompt"}
        ]
        assert kwargs["timeout"] == 60

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_complete_content_parts(self, mock_post, chat_response):
        """
        Test content returned as a list of text parts is joined.
        """
        mock_post.return_value = chat_response([
            {"type": "text", "text": "Cohort 1: "},
            {"type": "text", "text": "Urban Adventure Seekers"}
        ])

        client = OpenAIChatClient(api_key="test_api_key")

        assert client.complete("System", "User") == "Cohort 1: Urban Adventure Seekers"

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_complete_without_choices(self, mock_post, make_response):
        """
        Test a response without choices raises an APIError.
        """
        mock_post.return_value = make_response({"error": {"message": "overloaded"}})

        client = OpenAIChatClient(api_key="test_api_key")

        with pytest.raises(APIError) as excinfo:
            client.complete("System", "User")

        assert "Invalid response" in excinfo.value.message

    @pytest.mark.parametrize("body", [
        {"choices": ["not a choice"]},
        {"choices": [{"message": "flat text"}]},
        {"choices": "text"},
    ])
    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_complete_malformed_choices(self, mock_post, body, make_response):
        """
        Test malformed choices raise an APIError.
        """
        mock_post.return_value = make_response(body)

        client = OpenAIChatClient(api_key="test_api_key")

        with pytest.raises(APIError):
            client.complete("System", "User")

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_complete_http_error(self, mock_post):
        """
        Test a non-2xx response raises an APIError and is not retried.
        """
        import requests

        error_response = MagicMock(status_code=429, text="rate limited")
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=error_response)
        mock_post.return_value = mock_response

        client = OpenAIChatClient(api_key="test_api_key")

        with pytest.raises(APIError) as excinfo:
            client.complete("System", "User")

        assert excinfo.value.status_code == 429
        assert mock_post.call_count == 1

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_log_file(self, mock_post, chat_response, tmp_path):
        """
        Test requests and responses are written to the log file.
        """
        mock_post.return_value = chat_response("Cohort 1: Remote Workers")
        log_file = tmp_path / "logs" / "llm.log"

        client = OpenAIChatClient(api_key="test_api_key", log_file=str(log_file))
        client.complete("System", "User")

        content = log_file.read_text()
        assert '"type": "request"' in content
        assert '"type": "response"' in content
        assert "test_api_key" not in content
