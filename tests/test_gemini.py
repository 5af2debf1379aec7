import pytest

from aigateway import openai_types as openai
from aigateway.gemini import (
    Candidate,
    Content,
    EmbedContentResponse,
    EmbeddingValue,
    GenerateContentResponse,
    Part,
    UsageMetadata,
    embeddings_gemini_to_openai,
    embeddings_openai_to_gemini,
    gemini_to_openai,
    openai_to_gemini,
)


def _request(messages, **kwargs):
    return openai.ChatCompletionRequest(
        model="gpt-4",
        messages=[openai.Message(role=r, content=c) for r, c in messages],
        **kwargs,
    )


def test_openai_to_gemini():
    gemini_req = openai_to_gemini(_request([("user", "Hello")], temperature=0.7), "gemini-pro")
    assert len(gemini_req.contents) == 1
    assert gemini_req.contents[0].role == "user"
    assert gemini_req.generation_config.temperature == 0.7


def test_openai_to_gemini_assistant_role():
    gemini_req = openai_to_gemini(
        _request([("user", "Hello"), ("assistant", "Hi there")]), "gemini-pro"
    )
    assert len(gemini_req.contents) == 2
    assert gemini_req.contents[1].role == "model"


def test_openai_to_gemini_system_role():
    gemini_req = openai_to_gemini(
        _request([("system", "You are a helpful assistant"), ("user", "Hello")]), "gemini-pro"
    )
    assert len(gemini_req.contents) == 2
    assert gemini_req.contents[0].role == "user"


def test_openai_to_gemini_with_top_p():
    gemini_req = openai_to_gemini(_request([("user", "Hello")], top_p=0.9), "gemini-pro")
    assert gemini_req.generation_config.top_p == 0.9


def test_openai_to_gemini_with_max_tokens():
    gemini_req = openai_to_gemini(_request([("user", "Hello")], max_tokens=100), "gemini-pro")
    assert gemini_req.generation_config.max_output_tokens == 100


def test_openai_to_gemini_with_stop_sequences():
    gemini_req = openai_to_gemini(_request([("user", "Hello")], stop=["\n", "END"]), "gemini-pro")
    assert len(gemini_req.generation_config.stop_sequences) == 2


def test_openai_to_gemini_single_stop_string():
    gemini_req = openai_to_gemini(_request([("user", "Hello")], stop="END"), "gemini-pro")
    assert gemini_req.generation_config.stop_sequences == ["END"]


def test_openai_to_gemini_zero_values_left_unset():
    gemini_req = openai_to_gemini(
        _request([("user", "Hello")], temperature=0.0, stop=""), "gemini-pro"
    )
    assert gemini_req.to_dict() == {
        "contents": [{"role": "user", "parts": [{"text": "Hello"}]}],
        "generationConfig": {},
    }


def test_gemini_to_openai():
    gemini_resp = GenerateContentResponse(
        candidates=[
            Candidate(
                content=Content(role="model", parts=[Part(text="Hello there!")]),
                finish_reason="STOP",
                index=0,
            )
        ],
        usage_metadata=UsageMetadata(
            prompt_token_count=5, candidates_token_count=3, total_token_count=8
        ),
    )
    resp = gemini_to_openai(gemini_resp, "gemini-pro")
    assert len(resp.choices) == 1
    assert resp.choices[0].message.content == "Hello there!"
    assert resp.choices[0].finish_reason == "stop"
    assert resp.usage.total_tokens == 8
    assert resp.id == "gemini-gemini-pro"


@pytest.mark.parametrize(
    "reason, expected",
    [("MAX_TOKENS", "length"), ("SAFETY", "content_filter"), ("RECITATION", "content_filter"),
     ("OTHER", "stop")],
)
def test_gemini_finish_reason_mapping(reason, expected):
    gemini_resp = GenerateContentResponse(candidates=[Candidate(finish_reason=reason)])
    assert gemini_to_openai(gemini_resp, "m").choices[0].finish_reason == expected


def test_gemini_to_openai_joins_parts_with_space():
    gemini_resp = GenerateContentResponse.from_dict(
        {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": "a"}, {"text": ""}, {"text": "b"}]},
                    "finishReason": "STOP",
                    "index": 0,
                }
            ],
            "usageMetadata": {"promptTokenCount": 1, "candidatesTokenCount": 2, "totalTokenCount": 3},
        }
    )
    resp = gemini_to_openai(gemini_resp, "gemini-pro")
    assert resp.choices[0].message.content == "a b"
    assert resp.usage.prompt_tokens == 1
    assert resp.usage.completion_tokens == 2


def test_embeddings_openai_to_gemini():
    req = openai.EmbeddingRequest(input="Hello world", model="text-embedding-004")
    gemini_req = embeddings_openai_to_gemini(req)
    assert gemini_req.content.parts[0].text == "Hello world"
    assert gemini_req.to_dict()["taskType"] == "RETRIEVAL_DOCUMENT"


def test_embeddings_openai_to_gemini_takes_first_of_list():
    req = openai.EmbeddingRequest(input=["first", "second"], model="text-embedding-004")
    assert embeddings_openai_to_gemini(req).content.parts[0].text == "first"


def test_embeddings_gemini_to_openai():
    gemini_resp = EmbedContentResponse(embedding=EmbeddingValue(values=[0.1, 0.2, 0.3]))
    resp = embeddings_gemini_to_openai(gemini_resp, "text-embedding-004")
    assert len(resp.data) == 1
    assert len(resp.data[0].embedding) == 3
    assert resp.usage.total_tokens == 3


@pytest.mark.parametrize("role", ["user", "model"])
def test_content_role_roundtrip(role):
    content = Content(role=role, parts=[Part(text="x")])
    data = content.to_dict()
    assert data["role"] == role
    assert Content.from_dict(data) == content


def test_content_without_role_omits_it():
    assert Content(parts=[Part(text="x")]).to_dict() == {"parts": [{"text": "x"}]}


def test_embed_content_response_from_dict():
    resp = EmbedContentResponse.from_dict({"embedding": {"values": [1.0, 2.0]}})
    assert resp.embedding.values == [1.0, 2.0]