import pytest

from utils.grading import compute_letter_grade


@pytest.mark.parametrize(
    "marks, max_marks, expected",
    [
        (95, 100, "A+"),
        (90, 100, "A+"),
        (89.99, 100, "A"),
        (80, 100, "A-"),
        (75, 100, "B+"),
        (52, 100, "C-"),
        (45, 100, "D"),
        (44.9, 100, "F"),
        (0, 100, "F"),
        (18, 20, "A+"),
    ],
)
def test_compute_letter_grade(marks, max_marks, expected):
    assert compute_letter_grade(marks, max_marks) == expected


def test_non_positive_max_marks():
    with pytest.raises(ValueError):
        compute_letter_grade(10, 0)
