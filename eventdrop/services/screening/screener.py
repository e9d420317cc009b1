from __future__ import annotations

import logging

from pydantic import ValidationError

from eventdrop.domain.schemas.screening import ScreeningDecision, ScreeningVerdict
from eventdrop.services.llm.client import ModelGateway, image_part
from eventdrop.services.llm.parse import Parsed, parse_model_json

logger = logging.getLogger(__name__)

REJECT_BELOW_SCORE = 4
AMBIGUOUS_SCORES = range(4, 7)

NOT_A_POSTER_REASON = (
    "This doesn't appear to be an event poster. "
    "Please upload a photo of an event poster or flyer."
)
POLICY_VIOLATION_REASON = (
    "This content can't be posted as it appears to violate our content guidelines."
)

SCREENING_PROMPT = """Analyze this image for content screening. Return ONLY valid JSON:
{
  "is_poster": true/false,
  "poster_score": 1-10,
  "safety": "safe" | "unsafe" | "unclear",
  "reason": "brief explanation"
}

RULES:
- is_poster: Is this an event poster, flyer, announcement, or promotional material for an event? Score 1-10.
  - Score 7-10: Clearly an event poster/flyer
  - Score 4-6: Could be a poster but unclear (e.g. photo of a venue, partial poster)
  - Score 1-3: Not a poster (selfie, random photo, meme, screenshot, etc.)
- safety:
  - "safe": Normal event content
  - "unsafe": Contains illegal activity promotion, extreme violence, hate speech, explicit sexual content, drug sales
  - "unclear": Borderline content that needs human review (e.g. adult entertainment venue, cannabis event in unclear jurisdiction)
- reason: One sentence explaining your assessment"""


def screen_poster(gateway: ModelGateway, image_url: str) -> ScreeningVerdict:
    """Ask the model whether ``image_url`` is a safe event poster.

    Gateway failures propagate as ``UpstreamUnavailable``; there is no safe
    verdict to fall back to when the model could not be asked at all. A reply
    that cannot be read yields the conservative verdict, which routes the
    submission to human review.
    """
    content = gateway.complete([{"type": "text", "text": SCREENING_PROMPT}, image_part(image_url)])
    logger.info("Screening reply received length=%s", len(content))
    return parse_verdict(content)


def parse_verdict(content: str) -> ScreeningVerdict:
    result = parse_model_json(content)
    if not isinstance(result, Parsed):
        logger.warning("Screening reply unparseable reason=%s", result.reason)
        return ScreeningVerdict.conservative()
    try:
        return ScreeningVerdict.model_validate(result.payload)
    except ValidationError as exc:
        logger.warning("Screening reply incomplete errors=%s", exc.error_count())
        return ScreeningVerdict.conservative()


def decide(verdict: ScreeningVerdict) -> ScreeningDecision:
    if verdict.poster_score < REJECT_BELOW_SCORE:
        return ScreeningDecision(accepted=False, reason=NOT_A_POSTER_REASON)

    if verdict.safety == "unsafe":
        return ScreeningDecision(accepted=False, reason=POLICY_VIOLATION_REASON)

    if verdict.safety == "unclear" or verdict.poster_score in AMBIGUOUS_SCORES:
        return ScreeningDecision(
            accepted=True,
            reason=verdict.reason,
            moderation_status="pending",
            moderation_notes=f"AI screening: {verdict.reason}",
        )

    return ScreeningDecision(accepted=True, reason=verdict.reason, moderation_status="approved")
