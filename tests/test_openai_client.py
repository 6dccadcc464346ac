# ===============================================
# tests/test_openai_client.py
# OpenAI adapter with SDK-shaped fake objects.
# ===============================================

from types import SimpleNamespace

import openai
import pytest

from aiclient.errors import ProviderResponseError, StreamInterruptedError, TransportError
from aiclient.generate import Message, Prompt
from aiclient.generate.clients.openai_client import OpenAiApi, OpenAiChatClient


def _completion(*texts, usage=(3, 2)):
    return SimpleNamespace(
        id="chatcmpl-1",
        model="gpt-4o-mini",
        choices=[
            SimpleNamespace(index=i, finish_reason="stop", message=SimpleNamespace(role="assistant", content=t))
            for i, t in enumerate(texts)
        ],
        usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]) if usage else None,
    )


def _chunk(text, finish_reason=None):
    return SimpleNamespace(
        id="chatcmpl-1",
        model="gpt-4o-mini",
        choices=[SimpleNamespace(index=0, finish_reason=finish_reason, delta=SimpleNamespace(content=text))],
        usage=None,
    )


class FakeApi:
    def __init__(self, response=None, chunks=()):
        self.response = response
        self.chunks = list(chunks)
        self.requests = []

    def chat_completion(self, request):
        self.requests.append(request)
        return self.response

    def chat_completion_stream(self, request):
        self.requests.append(request)
        return iter(self.chunks)


def test_generate_maps_every_choice():
    api = FakeApi(_completion("Hi there", "Hello!"))
    resp = OpenAiChatClient(api).generate(Prompt.from_text("Hello"))

    assert [g.text for g in resp.generations] == ["Hi there", "Hello!"]
    assert resp.generation.choice_metadata.finish_reason == "stop"
    assert resp.generation.choice_metadata.usage.total_tokens == 5
    assert resp.metadata.extra["id"] == "chatcmpl-1"


def test_request_carries_messages_and_only_set_options():
    api = FakeApi(_completion("ok"))
    prompt = Prompt(messages=[Message(role="system", content="be brief"), Message(role="user", content="Hello")])
    OpenAiChatClient(api).generate(prompt)

    assert api.requests[0] == {
        "model": "gpt-4o-mini",
        "messages": [{"role": "system", "content": "be brief"}, {"role": "user", "content": "Hello"}],
    }

    OpenAiChatClient(api).with_top_p(0.8).generate(prompt)
    assert api.requests[1]["top_p"] == 0.8
    assert "temperature" not in api.requests[1]


def test_missing_usage_stays_absent():
    resp = OpenAiChatClient(FakeApi(_completion("ok", usage=None))).generate(Prompt.from_text("Hello"))
    assert resp.generation.choice_metadata.usage is None


def test_negative_usage_is_a_provider_error():
    with pytest.raises(ProviderResponseError):
        OpenAiChatClient(FakeApi(_completion("ok", usage=(3, -2)))).generate(Prompt.from_text("Hello"))


def test_empty_choices_is_a_contract_violation():
    with pytest.raises(ProviderResponseError):
        OpenAiChatClient(FakeApi(_completion())).generate(Prompt.from_text("Hello"))


def test_stream_concatenates_to_single_shot_text():
    api = FakeApi(_completion("Hi there"), chunks=[_chunk("Hi"), _chunk(" there"), _chunk(None, "stop")])
    client = OpenAiChatClient(api)
    streamed = list(client.generate_stream(Prompt.from_text("Hello")))

    assert len(streamed) == 3
    assert [r.generation.choice_metadata.finish_reason for r in streamed] == [None, None, "stop"]
    assert "".join(r.generation.text for r in streamed) == client.generate(Prompt.from_text("Hello")).generation.text


def test_usage_only_trailer_chunk_still_yields_a_generation():
    trailer = SimpleNamespace(id="c", model="gpt-4o-mini", choices=[], usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2))
    out = list(OpenAiChatClient(FakeApi(chunks=[trailer])).generate_stream(Prompt.from_text("Hello")))

    assert out[0].generation.text == ""
    assert out[0].generation.choice_metadata.usage.generation_tokens == 2


# -------------------------
# SDK transport
# -------------------------
class FakeCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.result


def _sdk(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_api_wraps_sdk_errors():
    api = OpenAiApi(client=_sdk(FakeCompletions(error=openai.OpenAIError("invalid key"))))
    with pytest.raises(TransportError, match="invalid key"):
        api.chat_completion({"model": "gpt-4o-mini", "messages": []})


def test_api_stream_failure_mid_way():
    def broken():
        yield _chunk("Hi")
        raise openai.OpenAIError("connection lost")

    completions = FakeCompletions(result=broken())
    stream = OpenAiApi(client=_sdk(completions)).chat_completion_stream({"model": "m", "messages": []})

    assert completions.kwargs["stream"] is True
    assert next(stream).choices[0].delta.content == "Hi"
    with pytest.raises(StreamInterruptedError):
        next(stream)
