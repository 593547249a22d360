"""Tests for message-shape validation."""

import copy

import pytest

from sambanova_client.errors import ErrorKind, ValidationError
from sambanova_client.types import MODELS
from sambanova_client.validation import (
    is_vision_model,
    validate_message,
    validate_messages,
)

TEXT_MESSAGE = {"role": "user", "content": "Hi!"}
ARRAY_MESSAGE = {
    "role": "user",
    "content": [
        {"type": "text", "text": "What do you see?"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
    ],
}

VISION_MODELS = [m for m in MODELS if "Vision" in m]
TEXT_MODELS = [m for m in MODELS if "Vision" not in m]


class TestIsVisionModel:
    @pytest.mark.parametrize("model", VISION_MODELS)
    def test_known_vision_models(self, model):
        assert is_vision_model(model)

    @pytest.mark.parametrize("model", TEXT_MODELS)
    def test_known_text_models(self, model):
        assert not is_vision_model(model)

    def test_case_insensitive(self):
        assert is_vision_model("my-VISION-model")
        assert is_vision_model("llava-vision")
        assert not is_vision_model("visio-lite")


class TestValidateMessage:
    @pytest.mark.parametrize(
        "is_vision, message, ok",
        [
            (False, TEXT_MESSAGE, True),
            (False, ARRAY_MESSAGE, False),
            (True, TEXT_MESSAGE, False),
            (True, ARRAY_MESSAGE, True),
        ],
    )
    def test_capability_cross_shape(self, is_vision, message, ok):
        if ok:
            validate_message(message, is_vision)
        else:
            with pytest.raises(ValidationError):
                validate_message(message, is_vision)

    def test_array_rejected_for_text_model(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_message(ARRAY_MESSAGE, False)
        err = exc_info.value
        assert err.code == "INVALID_MESSAGE_FORMAT"
        assert err.status == 400
        assert err.kind is ErrorKind.VALIDATION
        assert "only supported for vision models" in err.message

    def test_text_rejected_for_vision_model(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_message(TEXT_MESSAGE, True)
        assert "require array content" in exc_info.value.message

    def test_revalidation_is_noop(self):
        message = copy.deepcopy(ARRAY_MESSAGE)
        validate_message(message, True)
        validate_message(message, True)
        assert message == ARRAY_MESSAGE


class TestValidateMessages:
    def test_all_messages_checked(self):
        messages = [
            {"role": "system", "content": "be brief"},
            ARRAY_MESSAGE,
        ]
        with pytest.raises(ValidationError):
            validate_messages(messages, "Meta-Llama-3.1-8B-Instruct")

    def test_valid_conversation(self):
        messages = [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
        validate_messages(messages, "Meta-Llama-3.1-8B-Instruct")
