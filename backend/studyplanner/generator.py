"""AI schedule generation.

Builds a single natural-language instruction from the submitted study
preferences, sends it to the chat completions API and parses the reply
into validated `ScheduleEntry` objects. The generator has no side effect
beyond the network call; persisting the result is `ScheduleService`'s job.
"""

import functools
import logging
from typing import Any, List, Optional

import openai
from openai import OpenAI

from .config import settings
from .errors import GenerationParseError, GenerationServiceError
from .schemas import ScheduleEntry, StudyPreferences
from .utils.parsers import parse_schedule_response

logger = logging.getLogger("studyplanner.generator")

EXAMPLE_RESPONSE = (
    '[{"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "11:00", '
    '"subject": "Math: Calculus Chapter 3"}]'
)


def build_prompt(prefs: StudyPreferences) -> str:
    """Return the instruction sent to the model for `prefs`."""
    return (
        f"Based on these study preferences, create a ({prefs.deadline})days schedule. "
        "The user has provided subjects with priorities. Your job is to schedule them. "
        f"Preferences: Goal({prefs.goal}), Subjects({prefs.subjects}), Methods({prefs.methods}), "
        f"Deadline({prefs.deadline}), Daily Time({prefs.dailytime:g} hours), Slots({prefs.slots}), "
        f"Remarks({prefs.remarks}), Flexibility({prefs.flexibility}). "
        "IMPORTANT: Respond with ONLY a valid JSON array of objects. "
        'Each object must have these keys: "dayOfWeek", "startTime", "endTime", "subject". '
        'Times use 24-hour "HH:MM". The "subject" should come from user input. '
        f"Example: {EXAMPLE_RESPONSE}"
    )


class ScheduleGenerator:
    """Turn study preferences into schedule entries with an LLM.

    `client` is any object exposing `chat.completions.create` (an
    `openai.OpenAI` instance in production). With no client configured,
    `generate` fails with `GenerationServiceError`.
    """

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None, timeout: Optional[float] = None):
        self.client = client
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls) -> "ScheduleGenerator":
        if not settings.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not configured; schedule generation will fail")
            return cls(client=None)
        # no automatic retries: failures go straight back to the requester
        client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.AI_TIMEOUT_SECONDS, max_retries=0)
        return cls(client=client)

    def generate(self, prefs: StudyPreferences) -> List[ScheduleEntry]:
        prompt = build_prompt(prefs)
        raw = self._complete(prompt)
        entries = parse_schedule_response(raw)
        logger.info("model returned %d schedule items", len(entries))
        return entries

    def _complete(self, prompt: str) -> str:
        if self.client is None:
            raise GenerationServiceError("AI service is not configured")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout,
            )
        except openai.OpenAIError as e:
            logger.error("LLM API error: %s", e)
            raise GenerationServiceError(f"AI service request failed: {e}") from e
        if not response.choices:
            raise GenerationParseError("model returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise GenerationParseError("model returned an empty message")
        return content


@functools.lru_cache(maxsize=1)
def get_generator() -> ScheduleGenerator:
    """FastAPI dependency; one generator (and HTTP client) per process.

    Tests override it with a fake-client generator.
    """
    return ScheduleGenerator.from_settings()
