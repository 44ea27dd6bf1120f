"""Letter grade derivation.

The letter is a pure function of the percentage scored, evaluated against
fixed lower bounds from best to worst.
"""

from typing import List, Tuple

GRADE_BREAKPOINTS: List[Tuple[float, str]] = [
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D"),
]
FAILING_GRADE = "F"


def compute_letter_grade(marks: float, max_marks: float) -> str:
    """Return the letter grade for ``marks`` out of ``max_marks``.

    Args:
        marks: Marks obtained, 0 or more.
        max_marks: Maximum marks of the exam, strictly positive.

    Returns:
        One of A+, A, A-, B+, B, B-, C+, C, C-, D or F.

    Raises:
        ValueError: If max_marks is not positive.
    """
    if max_marks <= 0:
        raise ValueError("max_marks must be positive")
    percentage = marks / max_marks * 100
    for lower_bound, letter in GRADE_BREAKPOINTS:
        if percentage >= lower_bound:
            return letter
    return FAILING_GRADE
