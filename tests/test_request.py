import pytest

from aigateway.config import APIType
from aigateway.openai_types import FunctionDefinition, Message, Tool
from aigateway.request import (
    Request,
    chat_completions_request,
    embeddings_request,
    images_request,
    responses_request,
)


def test_chat_completions_factory():
    msgs = [Message(role="user", content="test")]
    req = chat_completions_request("gpt-4", msgs)
    assert req.api_type == APIType.CHAT_COMPLETIONS
    assert req.model == "gpt-4"
    assert req.messages == msgs
    assert req.endpoint == "/v1/chat/completions"


def test_responses_factory():
    req = responses_request("gpt-4", "hello")
    assert req.api_type == APIType.RESPONSES
    assert req.input == "hello"
    assert req.endpoint == "/v1/responses"


def test_embeddings_factory():
    req = embeddings_request("text-embedding-3-small", ["a", "b"])
    assert req.api_type == APIType.EMBEDDINGS
    assert req.embedding_input == ["a", "b"]
    assert req.endpoint == "/v1/embeddings"


def test_images_factory():
    req = images_request("dall-e-3", "a cat")
    assert req.api_type == APIType.IMAGES
    assert req.image_prompt == "a cat"
    assert req.endpoint == "/v1/images/generations"


def test_effective_max_tokens_prefers_output_tokens():
    req = Request(max_tokens=10, max_output_tokens=20)
    assert req.effective_max_tokens() == 20
    req.max_output_tokens = None
    assert req.effective_max_tokens() == 10


def test_set_max_tokens_sets_both():
    req = Request()
    req.set_max_tokens(50)
    assert req.max_tokens == 50
    assert req.max_output_tokens == 50


def test_to_chat_completion_request_copies_fields():
    tool = Tool(type="function", function=FunctionDefinition(name="lookup"))
    req = chat_completions_request("gpt-4", [Message(role="user", content="hi")])
    req.temperature = 0.7
    req.top_p = 0.9
    req.max_output_tokens = 30
    req.stop = ["END"]
    req.tools = [tool]
    req.tool_choice = "auto"
    req.stream = True
    chat = req.to_chat_completion_request()
    assert chat.model == "gpt-4"
    assert chat.messages == [Message(role="user", content="hi")]
    assert chat.temperature == 0.7
    assert chat.top_p == 0.9
    assert chat.max_tokens == 30
    assert chat.stop == ["END"]
    assert chat.tools == [tool]
    assert chat.tool_choice == "auto"
    assert chat.stream is True


def test_to_embedding_request():
    req = embeddings_request("text-embedding-3-small", "hello world")
    req.encoding_format = "float"
    req.dimensions = 256
    emb = req.to_embedding_request()
    assert emb.input == "hello world"
    assert emb.model == "text-embedding-3-small"
    assert emb.encoding_format == "float"
    assert emb.dimensions == 256


def test_to_image_request():
    req = images_request("dall-e-3", "a cat")
    req.image_n = 2
    req.image_size = "1024x1024"
    req.image_quality = "hd"
    req.image_style = "vivid"
    img = req.to_image_request()
    assert img.model == "dall-e-3"
    assert img.prompt == "a cat"
    assert img.n == 2
    assert img.size == "1024x1024"
    assert img.quality == "hd"
    assert img.style == "vivid"


def test_clone_is_deep():
    req = chat_completions_request("gpt-4", [Message(role="user", content="hi")])
    req.headers["X-Test"] = "1"
    cloned = req.clone()
    assert cloned == req
    cloned.messages[0].content = "changed"
    cloned.headers["X-Test"] = "2"
    assert req.messages[0].content == "hi"
    assert req.headers["X-Test"] == "1"


def test_string_input_is_user_message():
    req = responses_request("gpt-4", "hello")
    assert req.input_to_messages() == [Message(role="user", content="hello")]


def test_list_input_keeps_message_items_only():
    req = responses_request(
        "gpt-4",
        [
            {"type": "message", "role": "system", "content": "be brief"},
            {"type": "function_call", "role": "user", "content": "x"},
            {"type": "message", "content": "no role"},
            "not a dict",
            {"type": "message", "role": "user", "content": "hi"},
        ],
    )
    assert req.input_to_messages() == [
        Message(role="system", content="be brief"),
        Message(role="user", content="hi"),
    ]


def test_empty_list_falls_back_to_empty_user_message():
    req = responses_request("gpt-4", [])
    assert req.input_to_messages() == [Message(role="user", content="")]


def test_none_input_falls_back_to_empty_user_message():
    req = responses_request("gpt-4", None)
    assert req.input_to_messages() == [Message(role="user", content="")]


def test_bytes_input_parsed_as_json_array():
    req = responses_request(
        "gpt-4", b'[{"type":"message","role":"user","content":"hello"}]'
    )
    assert req.input_to_messages() == [Message(role="user", content="hello")]


def test_invalid_bytes_input_raises():
    req = responses_request("gpt-4", b"not json")
    with pytest.raises(ValueError):
        req.input_to_messages()


def test_bytes_object_input_raises():
    req = responses_request("gpt-4", b'{"type":"message"}')
    with pytest.raises(ValueError):
        req.input_to_messages()


def test_dict_input_becomes_json_text():
    req = responses_request("gpt-4", {"b": "x", "a": "y"})
    assert req.input_to_messages() == [Message(role="user", content='{"a":"y","b":"x"}')]


def test_structured_content_is_formatted():
    req = responses_request(
        "gpt-4",
        [{"type": "message", "role": "user", "content": [{"type": "input_text", "text": "hi"}]}],
    )
    assert req.input_to_messages()[0].content == "[map[text:hi type:input_text]]"


def test_numeric_content_from_bytes_is_formatted():
    req = responses_request(
        "gpt-4", b'[{"type":"message","role":"user","content":1000000}]'
    )
    assert req.input_to_messages()[0].content == "1e+06"