# Sub-score calculators
from app.domain.scoring.factors.academic_fit import AcademicFitFactor
from app.domain.scoring.factors.activity import ActivityFactor
from app.domain.scoring.factors.award import AwardFactor

__all__ = [
    "AcademicFitFactor",
    "ActivityFactor",
    "AwardFactor",
]
