from luxgrid.core.units import FEET_TO_METERS, normalize_unit, unit_scale_to_m

__all__ = ["FEET_TO_METERS", "normalize_unit", "unit_scale_to_m"]
