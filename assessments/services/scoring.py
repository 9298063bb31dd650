"""
Scoring Engine - deterministic scoring of CBT answers
"""
from dataclasses import dataclass
from decimal import Decimal

from assessments.utils.grading import ZERO, quantize, round_percentage, to_decimal

DISTRIBUTION_BUCKETS = [
    ('0-20', Decimal('20')),
    ('21-40', Decimal('40')),
    ('41-60', Decimal('60')),
    ('61-80', Decimal('80')),
    ('81-100', Decimal('100')),
]


@dataclass(frozen=True)
class ScoreBreakdown:
    correct: int
    total: int
    percentage: Decimal
    pass_threshold: Decimal
    passed: bool


def score_answers(answers, answer_key, pass_threshold) -> ScoreBreakdown:
    """
    Count exact matches between recorded answers and the answer key.

    Args:
        answers: question id -> selected option index (missing means unanswered)
        answer_key: question id -> correct option index
        pass_threshold: pass mark as a percentage

    Unanswered questions count as incorrect. An empty key or an unanswered
    session scores 0.00, not an error.
    """
    correct = sum(1 for question_id, key in answer_key.items() if answers.get(question_id) == key)
    total = len(answer_key)
    percentage = round_percentage(correct, total)
    threshold = quantize(pass_threshold)
    return ScoreBreakdown(
        correct=correct,
        total=total,
        percentage=percentage,
        pass_threshold=threshold,
        passed=percentage >= threshold,
    )


def bucket_for(percentage):
    percentage = to_decimal(percentage)
    for label, upper_bound in DISTRIBUTION_BUCKETS:
        if percentage <= upper_bound:
            return label
    return DISTRIBUTION_BUCKETS[-1][0]


def summarize_percentages(percentages):
    """Histogram, average and count for a teacher's view of an exam"""
    distribution = {label: 0 for label, _ in DISTRIBUTION_BUCKETS}
    for value in percentages:
        distribution[bucket_for(value)] += 1
    count = len(percentages)
    average = quantize(sum((to_decimal(p) for p in percentages), ZERO) / count) if count else ZERO
    return {
        'count': count,
        'averageScore': average,
        'distribution': distribution,
    }
