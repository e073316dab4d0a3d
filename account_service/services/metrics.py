"""
Derived health metrics: body-mass-index and its category.
"""

from typing import Tuple

from ..exceptions import ValidationError
from ..models import BMICategory

# Lower bounds of each category, checked from the top; ranges are closed-open
BMI_THRESHOLDS = (
    (30.0, BMICategory.OBESE),
    (25.0, BMICategory.OVERWEIGHT),
    (18.5, BMICategory.NORMAL),
)


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """
    Calculates BMI as weight (kg) / height (m)^2, rounded to one decimal place.

    Raises:
        ValidationError: If height or weight is not positive.
    """
    if height_cm is None or height_cm <= 0:
        raise ValidationError("Height must be a positive number of centimetres")
    if weight_kg is None or weight_kg <= 0:
        raise ValidationError("Weight must be a positive number of kilograms")
    return round(weight_kg / ((height_cm / 100) ** 2), 1)


def bmi_category(bmi: float) -> BMICategory:
    for lower_bound, category in BMI_THRESHOLDS:
        if bmi >= lower_bound:
            return category
    return BMICategory.UNDERWEIGHT


def derive_metrics(height_cm: float, weight_kg: float) -> Tuple[float, BMICategory]:
    """Returns (bmi, category) for the given height and weight."""
    bmi = calculate_bmi(height_cm, weight_kg)
    return bmi, bmi_category(bmi)
