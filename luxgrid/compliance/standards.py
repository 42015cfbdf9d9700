"""
EN 12464-1 indoor work place requirements.

Only the two quantities the grid engine produces are checked: maintained
average illuminance (Em) and overall uniformity (U0). Each activity code maps
to the requirement used for pass/fail and for the recommendation text.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional


DEFAULT_REQUIRED_LUX = 500.0


@dataclass(frozen=True)
class ActivityRequirement:
    code: str
    name: str
    required_lux: float
    min_uniformity: float


ACTIVITY_REQUIREMENTS: Dict[str, ActivityRequirement] = {
    r.code: r
    for r in (
        ActivityRequirement("OFFICE", "Office", 500.0, 0.60),
        ActivityRequirement("MEETING", "Meeting room", 500.0, 0.60),
        ActivityRequirement("CLASSROOM", "Classroom", 500.0, 0.60),
        ActivityRequirement("CORRIDOR", "Corridor", 100.0, 0.40),
        ActivityRequirement("STAIR", "Stairs", 150.0, 0.40),
        ActivityRequirement("RESTROOM", "Restroom", 200.0, 0.40),
        ActivityRequirement("WAREHOUSE", "Warehouse", 200.0, 0.40),
        ActivityRequirement("WORKSHOP", "Workshop", 500.0, 0.60),
        ActivityRequirement("TECHNICAL", "Technical room", 300.0, 0.40),
        ActivityRequirement("SURGERY", "Operating theatre", 1000.0, 0.70),
        ActivityRequirement("EXAM", "Examination room", 500.0, 0.60),
        ActivityRequirement("RECEPTION", "Reception", 300.0, 0.60),
        ActivityRequirement("ARCHIVE", "Archive", 200.0, 0.40),
        ActivityRequirement("RETAIL", "Retail area", 500.0, 0.60),
        ActivityRequirement("KITCHEN", "Kitchen", 500.0, 0.60),
        ActivityRequirement("PARKING", "Parking", 75.0, 0.40),
        ActivityRequirement("CUSTOM", "Custom", 300.0, 0.60),
    )
}


def get_requirement(activity: Optional[str]) -> Optional[ActivityRequirement]:
    if not activity:
        return None
    return ACTIVITY_REQUIREMENTS.get(activity.strip().upper())


@dataclass(frozen=True)
class ComplianceResult:
    meets: bool
    required_lux: float
    min_uniformity: Optional[float]
    activity: Optional[ActivityRequirement] = None
    recommendations: List[str] = field(default_factory=list)

    @property
    def recommendation(self) -> str:
        return "\n".join(self.recommendations)

    def to_dict(self) -> Dict[str, object]:
        return {
            "meets": self.meets,
            "required_lux": self.required_lux,
            "min_uniformity": self.min_uniformity,
            "activity": self.activity.code if self.activity else None,
            "recommendations": list(self.recommendations),
        }


def additional_luminaires_needed(average_lux: float, required_lux: float, luminaire_count: int) -> int:
    if luminaire_count <= 0 or average_lux <= 0 or average_lux >= required_lux:
        return 0
    return int(math.ceil(luminaire_count * (required_lux / average_lux - 1.0)))


def evaluate_compliance(
    average_lux: float,
    uniformity: float,
    luminaire_count: int,
    activity: Optional[str] = None,
    custom: Optional[ActivityRequirement] = None,
) -> ComplianceResult:
    """
    Pass/fail against the activity requirement.

    Without a known activity only Em >= 500 lx is checked. `custom` replaces
    the table entry for the CUSTOM activity.
    """
    req = _requirement(activity, custom)
    if luminaire_count <= 0:
        required = req.required_lux if req else DEFAULT_REQUIRED_LUX
        return ComplianceResult(
            meets=False,
            required_lux=required,
            min_uniformity=req.min_uniformity if req else None,
            activity=req,
            recommendations=["No luminaires found in this room. Add luminaires to light the space."],
        )

    if req is None:
        meets = average_lux >= DEFAULT_REQUIRED_LUX
        recs: List[str] = []
        if not meets:
            recs.extend(_illuminance_recommendations(average_lux, DEFAULT_REQUIRED_LUX, luminaire_count))
        return ComplianceResult(meets, DEFAULT_REQUIRED_LUX, None, None, recs)

    lux_ok = average_lux >= req.required_lux
    u0_ok = uniformity >= req.min_uniformity
    recs = []
    if not lux_ok:
        recs.extend(_illuminance_recommendations(average_lux, req.required_lux, luminaire_count))
    if not u0_ok:
        recs.append(
            f"Uniformity U0 {uniformity:.2f} is below the required {req.min_uniformity:.2f}. "
            "Distribute luminaires more evenly or reduce spacing."
        )
    return ComplianceResult(lux_ok and u0_ok, req.required_lux, req.min_uniformity, req, recs)


def _illuminance_recommendations(average_lux: float, required_lux: float, luminaire_count: int) -> List[str]:
    deficit = required_lux - average_lux
    pct = (deficit / required_lux * 100.0) if required_lux > 0 else 0.0
    recs = [f"Average illuminance {average_lux:.0f} lx is {deficit:.0f} lx ({pct:.0f}%) below the required {required_lux:.0f} lx."]
    extra = additional_luminaires_needed(average_lux, required_lux, luminaire_count)
    if extra > 0:
        recs.append(f"Add about {extra} similar luminaire(s) or use higher-output luminaires.")
    elif average_lux <= 0:
        recs.append("No light reaches the work plane; check luminaire heights and photometry.")
    return recs


def _requirement(activity: Optional[str], custom: Optional[ActivityRequirement]) -> Optional[ActivityRequirement]:
    req = get_requirement(activity)
    if req is not None and req.code == "CUSTOM" and custom is not None:
        return custom
    return req
