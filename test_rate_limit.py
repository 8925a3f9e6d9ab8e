"""
Tests for retrying Slack calls that come back with HTTP 429
"""
from unittest.mock import MagicMock, call
from urllib.error import URLError

import pytest
from slack_sdk.errors import SlackApiError
from slack_sdk.web import SlackResponse

from slack_export.fetcher import SlackFetcher
from slack_export.retry import RetryPolicy, retry_after_seconds


def slack_error(status_code, error, headers=None):
    response = SlackResponse(
        client=None,
        http_verb="POST",
        api_url="https://slack.com/api/conversations.history",
        req_args={},
        data={"ok": False, "error": error},
        headers=headers or {},
        status_code=status_code,
    )
    return SlackApiError(error, response)


def rate_limited(retry_after="3"):
    return slack_error(429, "ratelimited", {"Retry-After": retry_after})


def test_waits_retry_after_and_repeats():
    sleep = MagicMock()
    request = MagicMock(side_effect=[rate_limited("3"), rate_limited("3"), "ok"])

    result = RetryPolicy(sleep=sleep).call(request)

    assert result == "ok"
    assert request.call_count == 3
    assert sleep.call_args_list == [call(3.0), call(3.0)]


def test_header_name_is_case_insensitive():
    assert retry_after_seconds(slack_error(429, "ratelimited", {"retry-after": "7"})) == 7.0


@pytest.mark.parametrize("headers", [{}, {"Retry-After": "soon"}])
def test_missing_or_bad_header_falls_back_to_one_second(headers):
    assert retry_after_seconds(slack_error(429, "ratelimited", headers)) == 1.0


def test_transport_error_is_not_retried():
    sleep = MagicMock()
    request = MagicMock(side_effect=URLError("connection refused"))

    with pytest.raises(URLError):
        RetryPolicy(sleep=sleep).call(request)

    assert request.call_count == 1
    sleep.assert_not_called()


def test_other_api_errors_propagate():
    request = MagicMock(side_effect=slack_error(200, "channel_not_found"))

    with pytest.raises(SlackApiError):
        RetryPolicy(sleep=MagicMock()).call(request)

    assert request.call_count == 1


def test_undecodable_body_propagates():
    # slack_sdk raises with a plain dict response when the body is not JSON
    error = SlackApiError("Received a response in a non-JSON format", {"status": 200, "body": "<html>"})
    request = MagicMock(side_effect=error)

    with pytest.raises(SlackApiError):
        RetryPolicy(sleep=MagicMock()).call(request)


def test_bounded_policy_gives_up():
    sleep = MagicMock()
    request = MagicMock(side_effect=rate_limited("2"))

    with pytest.raises(SlackApiError):
        RetryPolicy(max_attempts=2, sleep=sleep).call(request)

    assert request.call_count == 2
    assert sleep.call_args_list == [call(2.0)]


def test_custom_backoff_receives_attempt_number():
    sleep = MagicMock()
    request = MagicMock(side_effect=[rate_limited("1"), rate_limited("1"), "ok"])
    policy = RetryPolicy(backoff=lambda attempt, retry_after: retry_after * attempt, sleep=sleep)

    policy.call(request)

    assert sleep.call_args_list == [call(1.0), call(2.0)]


def test_fetcher_reissues_identical_history_request():
    client = MagicMock()
    sleep = MagicMock()
    client.conversations_history.side_effect = [
        rate_limited("5"),
        {"ok": True, "messages": [{"ts": "1.0", "text": "a"}], "has_more": False},
    ]

    messages = SlackFetcher(client, sleep=sleep).fetch_top_level_messages("C123")

    assert [m.text for m in messages] == ["a"]
    first, second = client.conversations_history.call_args_list
    assert first == second
    assert sleep.call_args_list == [call(5.0)]


def test_negative_header_falls_back_to_one_second():
    assert retry_after_seconds(slack_error(429, "ratelimited", {"Retry-After": "-5"})) == 1.0
