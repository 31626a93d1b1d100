"""AI-written report card comments via OpenAI chat completions."""

import json
import logging

from openai import OpenAI
from pydantic import ValidationError as SchemaValidationError

from markshare.core.config import settings
from markshare.schemas.common import OperationResult
from markshare.schemas.report import ReportCard, ReportCardSummary

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an experienced, encouraging school principal writing report card remarks. "
    "Return valid JSON only, with the keys \"comment\" and \"whatsapp_message\"."
)


def build_prompt(card: ReportCard) -> str:
    """Render the student's marks into the user prompt."""
    marks = {
        subject: [
            {"exam": d.exam_name, "marks": d.marks, "total_marks": d.total_marks}
            for d in details
        ]
        for subject, details in card.subjects.items()
    }
    return f"""Student: {card.student_name}
Class: {card.class_name}
Marks by subject: {json.dumps(marks, ensure_ascii=False)}
Total scored: {card.total_scored} out of {card.total_possible} ({card.percentage}%)

1. "comment": 2-3 sentences addressed to the student by name ("Dear {card.student_name},").
   Praise the strongest subjects, gently name one or two subjects to improve,
   and close on an encouraging note.
2. "whatsapp_message": a brief message to the parent that greets them, summarizes
   {card.student_name}'s performance in a few words and says the full report card is ready."""


class ReportCommentService:
    """Generates a report card comment and a parent message."""

    def __init__(self, client: OpenAI | None = None, model: str | None = None):
        self.client = client
        self.model = model or settings.OPENAI_MODEL

    def _get_client(self) -> OpenAI | None:
        if self.client is None and settings.OPENAI_API_KEY:
            self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
        return self.client

    def generate(self, card: ReportCard) -> OperationResult:
        """Never raises; provider problems come back as EXTERNAL_SERVICE_ERROR."""
        client = self._get_client()
        if client is None:
            return OperationResult.fail(
                "AI summaries are not configured.",
                code="EXTERNAL_SERVICE_ERROR",
            )

        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(card)},
                ],
                response_format={"type": "json_object"},
                temperature=0.4,
            )
            content = completion.choices[0].message.content or ""
            summary = ReportCardSummary.model_validate_json(content)
        except SchemaValidationError:
            logger.warning(f"Unparseable report comment for student {card.student_id}")
            return OperationResult.fail(
                "Failed to generate summary.",
                code="EXTERNAL_SERVICE_ERROR",
            )
        except Exception as e:
            logger.error(f"Report comment generation failed for student {card.student_id}: {e}")
            return OperationResult.fail(
                "Failed to generate summary.",
                code="EXTERNAL_SERVICE_ERROR",
            )

        logger.info(f"Generated report comment for student {card.student_id}")
        return OperationResult.ok(
            "Summary generated.",
            comment=summary.comment,
            whatsapp_message=summary.whatsapp_message,
        )
