"""Classificação heurística de postagens: prioridade, sentimento e categoria."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

URGENT_KEYWORDS = ("urgent", "sos", "emergency", "trapped", "medical", "help", "critical")
MODERATE_KEYWORDS = ("need", "assistance", "shelter", "food", "water", "supplies")
LOW_KEYWORDS = ("update", "info", "volunteer", "available")

NEGATIVE_WORDS = (
    "help",
    "trapped",
    "emergency",
    "urgent",
    "disaster",
    "damage",
    "destroyed",
    "need",
)
POSITIVE_WORDS = ("safe", "rescued", "available", "restored", "volunteer", "helping")

# A ordem define a precedência: vence a primeira categoria com palavra presente.
CATEGORY_KEYWORDS: Mapping[str, Sequence[str]] = {
    "medical": ("medical", "injured", "hospital", "ambulance", "doctor"),
    "shelter": ("shelter", "housing", "accommodation", "place to stay"),
    "food_water": ("food", "water", "hungry", "thirsty", "supplies"),
    "rescue": ("trapped", "rescue", "stuck", "help", "sos"),
    "information": ("update", "info", "status", "news", "report"),
    "volunteer": ("volunteer", "helping", "assist", "support"),
    "infrastructure": ("power", "electricity", "road", "bridge", "water system"),
}

MAX_PRIORITY = 10


@dataclass(frozen=True)
class Classification:
    priority_score: int
    sentiment: str
    category: str


class ReportClassifier:
    """Aplica regras por palavra-chave (substring, sem diferenciar maiúsculas)."""

    def priority(self, content: str) -> int:
        text = content.lower()
        score = 1
        score += 3 * sum(1 for keyword in URGENT_KEYWORDS if keyword in text)
        score += 2 * sum(1 for keyword in MODERATE_KEYWORDS if keyword in text)
        score += sum(1 for keyword in LOW_KEYWORDS if keyword in text)
        return min(MAX_PRIORITY, score)

    def sentiment(self, content: str) -> str:
        text = content.lower()
        negative = sum(1 for word in NEGATIVE_WORDS if word in text)
        positive = sum(1 for word in POSITIVE_WORDS if word in text)
        if negative > positive:
            return "negative"
        if positive > negative:
            return "positive"
        return "neutral"

    def category(self, content: str) -> str:
        text = content.lower()
        for category, keywords in CATEGORY_KEYWORDS.items():
            if any(keyword in text for keyword in keywords):
                return category
        return "general"

    def classify(self, content: str) -> Classification:
        return Classification(
            priority_score=self.priority(content),
            sentiment=self.sentiment(content),
            category=self.category(content),
        )


__all__ = [
    "CATEGORY_KEYWORDS",
    "Classification",
    "LOW_KEYWORDS",
    "MODERATE_KEYWORDS",
    "ReportClassifier",
    "URGENT_KEYWORDS",
]
