import logging
from datetime import date
from typing import Optional

from llm.llm_client import LLMClient
from llm.schemas import ExtractedTaskFields
from taskboard import errors
from taskboard.dates import DUE_DATE_FORMAT, strict_due_date
from taskboard.models import DEFAULT_PRIORITY, PRIORITIES, ParsedTranscript

logger = logging.getLogger(__name__)

MAX_TRANSCRIPT_CHARS = 5000
FALLBACK_TITLE_CHARS = 100

# Checked in order, first hit wins.
_PRIORITY_KEYWORDS = (("critical", "Critical"), ("high", "High"), ("low", "Low"))

PROMPT_TEMPLATE = """Parse this task description and extract structured data. Return ONLY valid JSON with no markdown formatting.

Task: "{transcript}"

Extract:
- title: Short action verb + object (20-60 chars, Title Case) - DO NOT include priority or date. Examples: "Review Code", "Fix Login Bug", "Migrate User Data"
- description: Clean description of what needs to be done - DO NOT include priority or date
- priority: One of: Low, Medium, High, Critical (default: Medium)
- dueDate: Format DD-MM-YYYY. Parse relative dates (tomorrow, next week, etc.) based on today's date {today}. If no date mentioned, use null.

Examples:
Input: "Create a high priority task to review code by January 29,2028"
Output: {{"title": "Review Code", "description": "Review code", "priority": "High", "dueDate": "29-01-2028"}}

Input: "Critical priority task to migrate user data from old system to new database by January 30, 2026"
Output: {{"title": "Migrate User Data", "description": "Migrate user data from old system to new database", "priority": "Critical", "dueDate": "30-01-2026"}}

Return format:
{{
  "title": "extracted title",
  "description": "detailed description",
  "priority": "Medium",
  "dueDate": "DD-MM-YYYY or null"
}}"""


def check_transcript(transcript: Optional[str]) -> str:
    if not transcript or not transcript.strip():
        raise errors.InvalidTranscript("Transcript is required")
    if len(transcript) > MAX_TRANSCRIPT_CHARS:
        raise errors.InvalidTranscript("Transcript too long")
    return transcript


def build_prompt(transcript: str, today: date) -> str:
    return PROMPT_TEMPLATE.format(
        transcript=transcript, today=today.strftime(DUE_DATE_FORMAT)
    )


def keyword_priority(transcript: str) -> str:
    lower = transcript.lower()
    for keyword, priority in _PRIORITY_KEYWORDS:
        if keyword in lower:
            return priority
    return DEFAULT_PRIORITY


class TranscriptExtractor:
    """Turns a voice transcript into title, description, priority and due date.

    The extraction service is asked first. Whatever it returns is checked
    against the task rules; if the call or the parse fails the result comes
    from local keyword heuristics instead. extract() never raises for
    service failures, only for an unusable transcript.
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm = llm_client or LLMClient()

    def extract(self, transcript: Optional[str], today: Optional[date] = None) -> ParsedTranscript:
        transcript = check_transcript(transcript)
        today = today or date.today()

        try:
            raw = self.llm.complete_json(build_prompt(transcript, today))
            fields = ExtractedTaskFields.model_validate(raw)
        except Exception as e:
            # Network errors, missing credentials, provider HTTP errors, bad JSON.
            logger.warning(f"AI parsing failed, using fallback: {e}")
            return self.fallback(transcript)

        return self.reconcile(fields, transcript, today)

    @staticmethod
    def reconcile(fields: ExtractedTaskFields, transcript: str, today: date) -> ParsedTranscript:
        priority = fields.priority if fields.priority in PRIORITIES else DEFAULT_PRIORITY
        return ParsedTranscript(
            title=fields.title or transcript[:FALLBACK_TITLE_CHARS],
            description=fields.description or transcript,
            priority=priority,
            dueDate=strict_due_date(fields.dueDate, today=today),
            source="llm",
        )

    @staticmethod
    def fallback(transcript: str) -> ParsedTranscript:
        return ParsedTranscript(
            title=transcript[:FALLBACK_TITLE_CHARS],
            description=transcript,
            priority=keyword_priority(transcript),
            dueDate=None,
            source="fallback",
        )
