import re
from typing import Dict

ISSUE_FALLBACK = "Unable to identify specific issue"


class FeedbackParser:
    """Splits coach output into its four labelled sections.

    Missing sections degrade to an empty string (a placeholder for the issue)
    so partial model output still renders.
    """

    ISSUE_RE = re.compile(r"Issue:\s*\n?([\s\S]*?)(?=\n\s*Explanation:|\Z)", re.IGNORECASE)
    EXPLANATION_RE = re.compile(r"Explanation:\s*\n?([\s\S]*?)(?=\n\s*Practice Task:|\Z)", re.IGNORECASE)
    PRACTICE_RE = re.compile(r"Practice Task:\s*\n?([\s\S]*?)(?=\n\s*How This Helps:|\Z)", re.IGNORECASE)
    HELPS_RE = re.compile(r"How This Helps:\s*\n?([\s\S]*?)\Z", re.IGNORECASE)

    def __init__(self, issue_fallback: str = ISSUE_FALLBACK):
        self.issue_fallback = issue_fallback

    def parse(self, raw: str) -> Dict[str, str]:
        raw = raw or ""
        return {
            "issue": self._extract(self.ISSUE_RE, raw, self.issue_fallback),
            "explanation": self._extract(self.EXPLANATION_RE, raw),
            "practice_task": self._extract(self.PRACTICE_RE, raw),
            "how_this_helps": self._extract(self.HELPS_RE, raw),
        }

    @staticmethod
    def _extract(pattern: re.Pattern, raw: str, fallback: str = "") -> str:
        match = pattern.search(raw)
        if match is None:
            return fallback
        return match.group(1).strip() or fallback
