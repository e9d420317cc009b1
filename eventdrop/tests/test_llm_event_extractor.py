import json
from datetime import datetime, timezone

from eventdrop.core.errors import UpstreamUnavailable
from eventdrop.domain.schemas.event import ExtractionResult
from eventdrop.services.extract.llm_event_extractor import (
    PLACEHOLDER_CONFIDENCE,
    build_prompt,
    extract_event_fields,
    placeholder_result,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeGateway:
    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list = []

    def complete(self, content) -> str:
        self.calls.append(content)
        if self.error:
            raise self.error
        return self.reply


def _reply(**fields) -> str:
    payload = {
        "title": "Jazz Night",
        "start_at": "2026-04-10T20:00:00",
        "city": "Munich",
        "venue": "Unterfahrt",
        "confidence": {"overall": 0.9, "title": 0.95},
        "evidence": {"title": "JAZZ NIGHT"},
    }
    payload.update(fields)
    return json.dumps(payload)


def test_extracts_fields_from_image() -> None:
    gateway = _FakeGateway(_reply(age_restriction="18+", content_flags=["Alcohol", "alcohol"]))

    result = extract_event_fields(gateway, now=NOW, image_url="data:image/png;base64,AAAA")

    assert result.is_placeholder is False
    assert result.title == "Jazz Night"
    assert result.city == "Munich"
    assert result.age_restriction == "18+"
    assert result.content_flags == ["alcohol"]
    assert result.overall_confidence == 0.9
    content = gateway.calls[0]
    assert "The current year is 2026" in content[0]["text"]
    assert content[1]["image_url"]["url"] == "data:image/png;base64,AAAA"


def test_extracts_fields_from_page_text() -> None:
    gateway = _FakeGateway(_reply())

    result = extract_event_fields(gateway, now=NOW, page_text="Jazz Night at Unterfahrt")

    assert result.title == "Jazz Night"
    prompt = gateway.calls[0]
    assert isinstance(prompt, str)
    assert "this webpage content" in prompt
    assert prompt.endswith("Jazz Night at Unterfahrt")


def test_lenient_fields_are_coerced() -> None:
    gateway = _FakeGateway(
        _reply(title="null", confidence={"overall": 3, "city": "0.4", "venue": "high"}, age_restriction="toddlers")
    )

    result = extract_event_fields(gateway, now=NOW, image_url="https://cdn.example.com/p.jpg")

    assert result.title == "Untitled Event"
    assert result.confidence == {"overall": 1.0, "city": 0.4}
    assert result.age_restriction == "all_ages"


def test_returns_placeholder_without_gateway() -> None:
    result = extract_event_fields(None, now=NOW, image_url="https://cdn.example.com/p.jpg")

    assert result.is_placeholder is True


def test_returns_placeholder_without_source() -> None:
    gateway = _FakeGateway(_reply())

    result = extract_event_fields(gateway, now=NOW)

    assert result.is_placeholder is True
    assert gateway.calls == []


def test_returns_placeholder_on_gateway_error() -> None:
    gateway = _FakeGateway(error=UpstreamUnavailable("busy", upstream_status=429))

    result = extract_event_fields(gateway, now=NOW, image_url="https://cdn.example.com/p.jpg")

    assert result.is_placeholder is True


def test_returns_placeholder_on_unparseable_reply() -> None:
    gateway = _FakeGateway("Sorry, I can't read this poster.")

    result = extract_event_fields(gateway, now=NOW, image_url="https://cdn.example.com/p.jpg")

    assert result.is_placeholder is True


def test_returns_placeholder_when_reply_has_no_event_fields() -> None:
    gateway = _FakeGateway('{"answer": 42}')

    result = extract_event_fields(gateway, now=NOW, page_text="text")

    assert result.is_placeholder is True


def test_placeholder_is_complete_and_low_confidence() -> None:
    result = placeholder_result(NOW, reason="test")

    assert isinstance(result, ExtractionResult)
    assert result.title == "Untitled Event"
    assert result.start_at == "2026-03-08T12:00:00+00:00"
    assert set(result.confidence.values()) == {PLACEHOLDER_CONFIDENCE}
    assert "please" in result.evidence["start_at"].lower()


def test_build_prompt_mentions_year_and_source() -> None:
    assert "assume 2027" in build_prompt(2027)
    assert "this poster image" in build_prompt(2027)
    assert "this webpage content" in build_prompt(2027, from_page=True)


def test_returns_placeholder_on_unexpected_gateway_error() -> None:
    gateway = _FakeGateway(error=ValueError("bad SDK payload"))

    result = extract_event_fields(gateway, now=NOW, image_url="https://cdn.example.com/p.jpg")

    assert result.is_placeholder is True


def test_long_fields_are_bounded_to_column_sizes() -> None:
    result = ExtractionResult(
        title="x" * 1000,
        city="c" * 300,
        address="a" * 600,
        ticket_url="https://t.example.com/" + "q" * 1000,
        timezone="t" * 65,
    )

    assert len(result.title) == 255
    assert len(result.city) == 255
    assert len(result.address) == 500
    assert result.ticket_url is None
    assert result.timezone == "Europe/Berlin"
