"""Classification thresholds for the staircase screening tests.

These are fixed product constants, one set per test type, not values derived
from the level tables.
"""

# Visual acuity is classified on the number of levels passed (0-10).
# Level 8 corresponds to 20/20 on the built-in acuity table.
ACUITY_THRESHOLDS = {
    "metric": "levels_passed",
    "normal": 8,        # levels passed at or above this are normal
    "follow_up": 5,     # 5..7 suggests a follow-up exam, below is see-a-doctor
    "asymmetry": 2,     # left/right difference in levels
}

# Contrast sensitivity is classified on the mapped logCS score.
CONTRAST_THRESHOLDS = {
    "metric": "score",
    "normal": 0.9,      # logCS
    "follow_up": 0.6,   # 0.6 <= logCS < 0.9
    "asymmetry": 0.3,   # left/right difference in logCS
}

# Reading bands shown next to a contrast score, best first.
CONTRAST_INTERPRETATION_BANDS = [
    ("excellent", 1.2),
    ("normal", 0.9),
    ("mild", 0.6),
    ("moderate", 0.3),
]
CONTRAST_LOWEST_BAND = "significant"

# Absolute tolerance for comparisons against decimal table values,
# e.g. 1.2 - 0.9 evaluates to 0.29999999999999993.
SCORE_TOLERANCE = 1e-9

# Recommendations attached to a test summary
RECOMMENDATIONS = {
    "none": "No action needed. Repeat the screening periodically.",
    "follow_up": "Consider a routine eye exam to follow up on this result.",
    "see_doctor": "Please see an eye care professional for a full examination.",
}
