"""
Compliance checks for computed room illuminance.
"""

from luxgrid.compliance.standards import (
    ACTIVITY_REQUIREMENTS,
    ActivityRequirement,
    ComplianceResult,
    evaluate_compliance,
    get_requirement,
)

__all__ = [
    "ACTIVITY_REQUIREMENTS",
    "ActivityRequirement",
    "ComplianceResult",
    "evaluate_compliance",
    "get_requirement",
]
