# ===============================================
# Standalone tests for the ChatGenerator
# using the EchoDevClient (no API calls).
# ===============================================

import pytest
import yaml

from aiclient.generate import AiClient, AiResponse, ChatGenerator, EchoDevClient, Generation, Message, MessageType


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "generate.yaml"
    path.write_text(yaml.safe_dump({"system_prompt": "You are concise.", "temperature": 0.3, "max_tokens": 300}))
    return str(path)


class RecordingClient(AiClient):
    def __init__(self):
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return AiResponse([Generation("recorded")])


def test_chat_echoes_last_user_message(config_path):
    gen = ChatGenerator(model_client=EchoDevClient(), config_path=config_path)
    out = gen.chat("What is aiclient?", history=[Message(role="user", content="earlier question")])

    assert out.generation.text == "[ECHO RESPONSE]\nWhat is aiclient?"
    assert out.generation.choice_metadata.finish_reason == "STOP"
    assert out.generation.info == {"temp": 0.3, "max_tokens": 300}
    assert out.metadata.provider == "echo"


def test_prompt_layout_and_option_precedence(config_path):
    client = RecordingClient()
    gen = ChatGenerator(model_client=client, config_path=config_path)
    history = [Message(role="user", content="q1"), Message(role="assistant", content="a1")]
    gen.chat("q2", history=history, temperature=0.9)

    prompt = client.prompts[0]
    assert [m.role for m in prompt.messages] == [MessageType.SYSTEM, MessageType.USER, MessageType.ASSISTANT, MessageType.USER]
    assert prompt.messages[0].content == "You are concise."
    assert prompt.options.temperature == 0.9
    assert prompt.options.max_tokens == 300
    assert prompt.options.top_p is None


def test_missing_config_file_means_no_system_message(tmp_path):
    client = RecordingClient()
    ChatGenerator(model_client=client, config_path=str(tmp_path / "absent.yaml")).chat("hello")

    prompt = client.prompts[0]
    assert len(prompt.messages) == 1
    assert prompt.options.temperature is None


def test_stream_matches_single_shot(config_path):
    gen = ChatGenerator(model_client=EchoDevClient(), config_path=config_path)
    chunks = list(gen.stream_chat("stream this answer please"))

    assert len(chunks) > 1
    assert all(c.generation.choice_metadata.finish_reason is None for c in chunks[:-1])
    assert chunks[-1].generation.choice_metadata.finish_reason == "STOP"
    assert "".join(c.generation.text for c in chunks) == gen.chat("stream this answer please").generation.text


def test_stream_requires_stream_capable_client(config_path):
    gen = ChatGenerator(model_client=RecordingClient(), config_path=config_path)
    with pytest.raises(TypeError):
        gen.stream_chat("hello")


def test_generate_text_shortcut():
    assert EchoDevClient().generate_text("ping") == "[ECHO RESPONSE]\nping"
