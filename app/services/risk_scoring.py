"""Risk scoring - turns questionnaire answers into a 0-100 risk score.

Each category carries a weight (the five weights add up to 100) and every
answer option carries a factor between 0 and 1. The score is the sum of
``category weight * option factor`` over the answered categories, rounded
half-up. Financial goals are multi-select; their factor is the mean of the
selected goals' factors.

The total is NOT rescaled when some categories are unanswered: a user who
only answers ``age`` scores at most 25. The questionnaire flow always
requires all five answers before scoring, so in practice the weights
always add up to 100.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence


@dataclass(frozen=True)
class AnswerOption:
    value: object
    label: str
    weight: Decimal


@dataclass(frozen=True)
class Question:
    id: str
    title: str
    subtitle: str
    category_weight: int
    options: Sequence[AnswerOption]
    multiple: bool = False

    def weight_for(self, value: object) -> Optional[Decimal]:
        for option in self.options:
            if option.value == value:
                return option.weight
        return None


def _options(*rows) -> List[AnswerOption]:
    return [AnswerOption(value=v, label=label, weight=Decimal(w)) for v, label, w in rows]


QUESTIONS: List[Question] = [
    Question(
        id="age",
        title="What is your age?",
        subtitle="Age helps determine your investment timeline and risk capacity",
        category_weight=25,
        options=_options(
            (25, "Under 25", "0.8"),
            (35, "25-35", "0.9"),
            (45, "36-45", "0.7"),
            (55, "46-55", "0.5"),
            (65, "56-65", "0.3"),
            (70, "Above 65", "0.1"),
        ),
    ),
    Question(
        id="income",
        title="What is your annual household income?",
        subtitle="Income helps assess your investment capacity",
        category_weight=20,
        options=_options(
            (300000, "Below 3 Lakhs", "0.3"),
            (600000, "3-6 Lakhs", "0.5"),
            (1000000, "6-10 Lakhs", "0.7"),
            (1500000, "10-15 Lakhs", "0.8"),
            (2000000, "15-20 Lakhs", "0.9"),
            (3000000, "Above 20 Lakhs", "1.0"),
        ),
    ),
    Question(
        id="investment_horizon",
        title="What is your investment time horizon?",
        subtitle="Longer investment periods generally allow for higher risk tolerance",
        category_weight=30,
        options=_options(
            (1, "Less than 1 year", "0.1"),
            (3, "1-3 years", "0.3"),
            (5, "3-5 years", "0.6"),
            (10, "5-10 years", "0.8"),
            (15, "10-15 years", "0.9"),
            (20, "More than 15 years", "1.0"),
        ),
    ),
    Question(
        id="risk_tolerance",
        title="How do you react to market volatility?",
        subtitle="Your emotional response to market fluctuations",
        category_weight=15,
        options=_options(
            (1, "I panic and want to sell immediately", "0.1"),
            (2, "I feel uncomfortable but hold my investments", "0.3"),
            (3, "I remain neutral and stick to my plan", "0.6"),
            (4, "I see it as a buying opportunity", "0.8"),
            (5, "I actively invest more during market downturns", "1.0"),
        ),
    ),
    Question(
        id="financial_goals",
        title="What are your primary financial goals?",
        subtitle="Select all that apply",
        category_weight=10,
        multiple=True,
        options=_options(
            ("retirement", "Retirement Planning", "0.7"),
            ("wealth", "Wealth Creation", "0.9"),
            ("education", "Children's Education", "0.6"),
            ("home", "Home Purchase", "0.5"),
            ("emergency", "Emergency Fund", "0.2"),
            ("tax", "Tax Saving", "0.4"),
        ),
    ),
]

QUESTIONS_BY_ID: Dict[str, Question] = {q.id: q for q in QUESTIONS}


@dataclass
class QuestionnaireAnswers:
    """Answers collected by the questionnaire; any category may still be missing."""

    age: Optional[int] = None
    income: Optional[int] = None
    investment_horizon: Optional[int] = None
    risk_tolerance: Optional[int] = None
    financial_goals: List[str] = field(default_factory=list)

    def missing(self) -> List[str]:
        """Ids of the categories that still need an answer."""
        missing = [
            qid for qid in ("age", "income", "investment_horizon", "risk_tolerance")
            if not getattr(self, qid)
        ]
        if not self.financial_goals:
            missing.append("financial_goals")
        return missing

    def invalid(self) -> List[str]:
        """Ids of the categories answered with a value that is not an option."""
        invalid = [
            qid for qid in ("age", "income", "investment_horizon", "risk_tolerance")
            if getattr(self, qid) and QUESTIONS_BY_ID[qid].weight_for(getattr(self, qid)) is None
        ]
        goals = QUESTIONS_BY_ID["financial_goals"]
        if any(goals.weight_for(goal) is None for goal in self.financial_goals):
            invalid.append("financial_goals")
        return invalid

    @property
    def is_complete(self) -> bool:
        return not self.missing() and not self.invalid()


class RiskScoringEngine:
    """Maps questionnaire answers to a 0-100 integer score."""

    def __init__(self, questions: Sequence[Question] = QUESTIONS) -> None:
        self.questions = {q.id: q for q in questions}

    def contributions(self, answers: QuestionnaireAnswers) -> Dict[str, Decimal]:
        """Weighted contribution of every scored category.

        Categories left unanswered, or answered with a value that is not one
        of the options, are absent from the result.
        """
        result: Dict[str, Decimal] = {}

        for qid in ("age", "income", "investment_horizon", "risk_tolerance"):
            value = getattr(answers, qid)
            if not value:
                continue
            question = self.questions[qid]
            weight = question.weight_for(value)
            if weight is not None:
                result[qid] = weight * question.category_weight

        goals = answers.financial_goals
        if goals:
            question = self.questions["financial_goals"]
            # unknown goal tags count as zero but still dilute the mean
            goal_weights = [question.weight_for(goal) or Decimal("0") for goal in goals]
            mean = sum(goal_weights, Decimal("0")) / len(goal_weights)
            result["financial_goals"] = mean * question.category_weight

        return result

    def score(self, answers: QuestionnaireAnswers) -> int:
        contributions = self.contributions(answers)
        answered_weight = sum(self.questions[qid].category_weight for qid in contributions)
        if answered_weight == 0:
            return 0
        total = sum(contributions.values(), Decimal("0"))
        return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def risk_label(score: int) -> str:
    """Investor label shown next to a score."""
    if score <= 30:
        return "Conservative"
    if score <= 50:
        return "Moderate"
    if score <= 70:
        return "Balanced"
    return "Aggressive"
