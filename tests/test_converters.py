import pytest

from aiclient.errors import PromptValidationError
from aiclient.generate import Message
from aiclient.generate.converters import MessageToPromptConverter, compose_role_blocks


def test_llama2_transcript_hoists_system_and_ends_with_assistant_cue():
    messages = [
        Message(role="user", content="Hi"),
        Message(role="system", content="You are terse."),
        Message(role="assistant", content="Hello."),
        Message(role="user", content="Weather?"),
    ]
    assert MessageToPromptConverter.create().to_prompt(messages) == (
        "You are terse.\n"
        "Human: Hi\n"
        "Assistant: Hello.\n"
        "Human: Weather?\n"
        "Assistant:"
    )


def test_custom_markers():
    conv = MessageToPromptConverter(human_prompt="[INST]", assistant_prompt="[/INST]", line_separator=" ")
    assert conv.to_prompt([Message(role="user", content="Hi")]) == "[INST] Hi [/INST]"


def test_function_messages_are_rejected():
    with pytest.raises(PromptValidationError):
        MessageToPromptConverter.create().to_prompt([Message(role="function", content="{}")])


def test_role_blocks_keep_order():
    text = compose_role_blocks([Message(role="system", content=" rules "), Message(role="user", content="Hello")])
    assert text == "SYSTEM:\nrules\n\nUSER:\nHello\n"
