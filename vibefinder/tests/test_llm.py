import json
from unittest.mock import MagicMock, patch

from vibefinder.cache.ttl_cache import TTLCache
from vibefinder.llm.config import LLMConfig
from vibefinder.llm.groq_client import (
    categorize_venue_vibe,
    generate_mock_recommendations,
    generate_recommendation_description,
    generate_text,
)

SAMPLE_VENUE = {
    "name": "Blue Note Jazz Club",
    "address": "131 W 3rd St",
    "categories": ["music", "bar"],
}

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_description(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        "  Smoky late-night sets in a tiny room.  "
    )

    result = generate_recommendation_description(SAMPLE_VENUE, config=ENABLED_CONFIG)

    assert result == "Smoky late-night sets in a tiny room."
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["max_tokens"] == 100
    assert kwargs["messages"][0]["role"] == "system"
    assert "Blue Note Jazz Club" in kwargs["messages"][1]["content"]


@patch("vibefinder.llm.groq_client.Groq")
def test_categorize_filters_unknown_tags(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        "Chill, spooky, cozy, lively, artsy, trendy"
    )

    result = categorize_venue_vibe(SAMPLE_VENUE, config=ENABLED_CONFIG)

    assert result == ["chill", "cozy", "lively", "artsy"]


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_text_fallback_on_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    assert generate_text("hello", config=ENABLED_CONFIG) is None
    assert categorize_venue_vibe(SAMPLE_VENUE, config=ENABLED_CONFIG) == []


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_text_empty_response(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("   ")

    assert generate_text("hello", config=ENABLED_CONFIG) is None


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_text_disabled(mock_groq_cls):
    assert generate_text("hello", config=DISABLED_CONFIG) is None
    assert generate_text("hello", config=LLMConfig(api_key="", enabled=True)) is None
    mock_groq_cls.assert_not_called()


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_text_cached(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("hi")
    cache = TTLCache()

    first = generate_text("hello", config=ENABLED_CONFIG, cache=cache)
    second = generate_text("hello", config=ENABLED_CONFIG, cache=cache)

    assert first == second == "hi"
    assert mock_groq_cls.return_value.chat.completions.create.call_count == 1
    assert cache.size == 1


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_mock_recommendations(mock_groq_cls):
    llm_response = json.dumps({
        "recommendations": [
            {"title": "Jazz Night", "description": "Live sets.", "venue_name": "Blue Note",
             "location": "Downtown", "vibe_tags": ["Chill", "intimate", "spooky"]},
            {"description": "no title, skipped"},
            {"title": "Rooftop Party", "vibe_tags": ["lively"]},
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = generate_mock_recommendations(3, 37.7749, -122.4194, config=ENABLED_CONFIG)

    assert [r["title"] for r in result] == ["Jazz Night", "Rooftop Party"]
    assert result[0]["vibe_tags"] == ["chill", "intimate"]
    assert result[0]["recommendation_id"] == "mock-0"
    assert all(70 <= r["trend_score"] <= 100 for r in result)
    assert all(abs(r["latitude"] - 37.7749) <= 0.05 for r in result)
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_mock_accepts_bare_list(mock_groq_cls):
    llm_response = json.dumps([{"title": "Poetry Slam"}])
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = generate_mock_recommendations(5, config=ENABLED_CONFIG)

    assert [r["title"] for r in result] == ["Poetry Slam"]


@patch("vibefinder.llm.groq_client.Groq")
def test_generate_mock_fallback_on_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    assert generate_mock_recommendations(3, config=ENABLED_CONFIG) is None


def test_generate_mock_disabled():
    assert generate_mock_recommendations(3, config=DISABLED_CONFIG) is None
