from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from app.services.allocation import Allocation, allocate
from app.services.errors import IncompleteQuestionnaireError
from app.services.risk_scoring import QuestionnaireAnswers, RiskScoringEngine, risk_label


@dataclass(frozen=True)
class RiskProfile:
    """Completed questionnaire with its score and target allocation.

    Never edited in place; a retake produces a new profile.
    """

    age: int
    income: int
    investment_horizon: int
    risk_tolerance: int
    financial_goals: Tuple[str, ...]
    score: int
    allocation: Allocation

    @property
    def label(self) -> str:
        return risk_label(self.score)

    @classmethod
    def from_answers(
        cls,
        answers: QuestionnaireAnswers,
        engine: Optional[RiskScoringEngine] = None,
    ) -> "RiskProfile":
        missing = answers.missing()
        invalid = answers.invalid()
        if missing or invalid:
            raise IncompleteQuestionnaireError(missing, invalid)

        score = (engine or RiskScoringEngine()).score(answers)
        return cls(
            age=answers.age,
            income=answers.income,
            investment_horizon=answers.investment_horizon,
            risk_tolerance=answers.risk_tolerance,
            financial_goals=tuple(answers.financial_goals),
            score=score,
            allocation=allocate(score),
        )

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "income": self.income,
            "investmentHorizon": self.investment_horizon,
            "riskTolerance": self.risk_tolerance,
            "financialGoals": list(self.financial_goals),
            "score": self.score,
            "allocation": self.allocation.as_dict(),
        }

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "RiskProfile":
        allocation = data["allocation"]
        return cls(
            age=data["age"],
            income=data["income"],
            investment_horizon=data["investmentHorizon"],
            risk_tolerance=data["riskTolerance"],
            financial_goals=tuple(data["financialGoals"]),
            score=int(data["score"]),
            allocation=Allocation(
                equity=allocation["equity"],
                debt=allocation["debt"],
                government=allocation["government"],
            ),
        )
