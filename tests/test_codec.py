#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the request codec.
Validates request encoding and the decode rule: structural absence fails,
empty content succeeds.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from easynote.exceptions import BusinessFailure, MalformedResponseError
from easynote.llm.codec import CompletionResult, decode, encode, to_payload
from easynote.llm.models import CompletionRequest, Role
from pydantic import ValidationError


def test_encode_builds_two_message_conversation():
    """Test request encoding."""
    print("\n=== Test 1: Encode ===")

    request = encode("You are a translator.", "你好", "doubao-seed")

    assert isinstance(request, CompletionRequest)
    assert request.model == "doubao-seed"
    assert request.stream is False
    assert request.thinking is None
    assert [m.role for m in request.messages] == [Role.SYSTEM, Role.USER]
    assert request.messages[0].content == "You are a translator."
    assert request.messages[1].content == "你好"

    print("✓ Encode test passed")


def test_request_is_immutable():
    request = encode("system", "user", "model")

    with pytest.raises(ValidationError):
        request.stream = True
    with pytest.raises(ValidationError):
        request.messages[0].content = "changed"


def test_to_payload_wire_shape():
    """Test serialized body matches the endpoint contract."""
    print("\n=== Test 2: Payload ===")

    payload = to_payload(encode("sys", "hello", "doubao-seed"))

    assert payload == {
        "model": "doubao-seed",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hello"},
        ],
        "stream": False,
    }
    # Must survive a JSON round trip unchanged
    assert json.loads(json.dumps(payload)) == payload

    print("✓ Payload test passed")


def test_thinking_switch_is_serialized_when_set():
    payload = to_payload(encode("sys", "hello", "doubao-seed", thinking_type="disabled"))

    assert payload["thinking"] == {"type": "disabled"}
    assert payload["stream"] is False


def test_decode_extracts_first_choice():
    """Test decoding a normal response."""
    print("\n=== Test 3: Decode ===")

    body = json.dumps({
        "id": "chatcmpl-1",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": "first"}},
            {"index": 1, "message": {"role": "assistant", "content": "second"}},
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
    })

    result = decode(body)

    assert isinstance(result, CompletionResult)
    assert result.success
    assert result.reply_text == "first"
    assert result.error is None

    print("✓ Decode test passed")


def test_decode_keeps_content_byte_for_byte():
    content = "  line one\nline two ✓ 中文  \n"
    result = decode(json.dumps({"choices": [{"message": {"content": content}}]}))

    assert result.reply_text == content


def test_decode_accepts_bytes_and_dicts():
    body = {"choices": [{"message": {"content": "hi"}}]}

    assert decode(json.dumps(body).encode("utf-8")).reply_text == "hi"
    assert decode(body).reply_text == "hi"


def test_decode_null_content_is_empty_string():
    result = decode(json.dumps({"choices": [{"message": {"role": "assistant", "content": None}}]}))

    assert result.success
    assert result.reply_text == ""


def test_decode_missing_content_is_empty_string():
    result = decode(json.dumps({"choices": [{"message": {"role": "assistant"}}]}))

    assert result.success
    assert result.reply_text == ""


@pytest.mark.parametrize(
    "body",
    [
        None,
        "",
        "   ",
        "null",
        "[]",
        "not json",
        json.dumps({}),
        json.dumps({"choices": None}),
        json.dumps({"choices": []}),
        json.dumps({"choices": [{}]}),
        json.dumps({"choices": [{"message": None}]}),
        json.dumps({"choices": "oops"}),
        b"\xff\xfe",
    ],
)
def test_decode_structural_absence_fails(body):
    result = decode(body)

    assert result.failed
    assert isinstance(result.error, MalformedResponseError)
    assert isinstance(result.error, BusinessFailure)
    assert result.error.retryable is True


def test_decode_unloadable_json_is_malformed():
    """Bodies that make json.loads raise something other than JSONDecodeError."""
    for body in ("1" * 5000, "[" * 200000):
        result = decode(body)

        assert result.failed
        assert isinstance(result.error, MalformedResponseError)


def test_decode_empty_choices_message():
    result = decode(json.dumps({"choices": []}))

    assert "no choices" in result.error.message


def main():
    """Run all tests."""
    print("=" * 60)
    print("REQUEST CODEC TEST SUITE")
    print("=" * 60)

    tests = [
        test_encode_builds_two_message_conversation,
        test_to_payload_wire_shape,
        test_thinking_switch_is_serialized_when_set,
        test_decode_extracts_first_choice,
        test_decode_keeps_content_byte_for_byte,
        test_decode_accepts_bytes_and_dicts,
        test_decode_null_content_is_empty_string,
        test_decode_missing_content_is_empty_string,
        test_decode_empty_choices_message,
        test_decode_unloadable_json_is_malformed,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            failed += 1
            print(f"\n❌ FAILED: {test.__name__}")
            print(f"   Error: {e}")

    print("\n" + "=" * 60)
    print(f"SUMMARY: {passed} passed, {failed} failed")
    print("=" * 60)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    exit(main())
