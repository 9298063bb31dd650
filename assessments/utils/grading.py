"""
Fixed grading scale shared by grade records, term results and CBT outcomes.

Percentages are Decimals with two places, rounded half-up. Letter grades are
assigned by comparing that rounded value against fixed lower bounds, so
84.99 is a B and 85.00 is an A.
"""
import re
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')

GRADE_BOUNDARIES = [
    (Decimal('85'), 'A'),
    (Decimal('70'), 'B'),
    (Decimal('55'), 'C'),
    (Decimal('40'), 'D'),
]
FAIL_GRADE = 'F'

GRADE_LETTER_CHOICES = [(letter, letter) for _, letter in GRADE_BOUNDARIES] + [(FAIL_GRADE, FAIL_GRADE)]

GRADE_REMARKS = {
    'A': 'Excellent performance. Keep up the outstanding work.',
    'B': 'Very good performance. Continue to maintain this level.',
    'C': 'Good performance. There is room for improvement.',
    'D': 'Fair performance. More effort is needed to improve.',
    'F': 'Poor performance. Immediate attention and remedial work required.',
}

TERM_CHOICES = [
    ('term1', 'First Term'),
    ('term2', 'Second Term'),
    ('final', 'Final Term'),
]
TERM_VALUES = [value for value, _ in TERM_CHOICES]

ACADEMIC_YEAR_RE = re.compile(r'^(\d{4})-(\d{4})$')


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value):
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_percentage(numerator, denominator):
    """numerator / denominator * 100 to two places; 0.00 when the denominator is zero"""
    denominator = to_decimal(denominator)
    if denominator == 0:
        return ZERO
    return quantize(to_decimal(numerator) * HUNDRED / denominator)


def letter_grade_for(percentage):
    percentage = quantize(percentage)
    for lower_bound, letter in GRADE_BOUNDARIES:
        if percentage >= lower_bound:
            return letter
    return FAIL_GRADE


def remarks_for_grade(letter):
    return GRADE_REMARKS.get(letter, '')


def validate_academic_year(value):
    """Academic years look like 2024-2025: two consecutive calendar years"""
    match = ACADEMIC_YEAR_RE.match(value or '')
    if not match or int(match.group(2)) != int(match.group(1)) + 1:
        raise ValidationError(f'"{value}" is not a valid academic year (expected e.g. 2024-2025)')
