"""Weekly set-count auto-regulation from subjective feedback.

The decision procedure is an ordered rule table. Rules are evaluated top to
bottom and the first match decides the adjustment, so the joint pain and
workload brakes always win over the priority-tier increase rules.
"""

from typing import Callable, NamedTuple

from .feedback import JointPain, MuscleGroupPriority, Pump, Workload, parse_enum


class FeedbackInput(NamedTuple):
    priority: MuscleGroupPriority
    joint_pain: JointPain
    pump: Pump
    workload: Workload


class SetAdjustment(NamedTuple):
    set_adjustment: int
    reasoning: str
    rule: str


class Rule(NamedTuple):
    name: str
    matches: Callable[[FeedbackInput], bool]
    adjustment: int
    reasoning: str


H = MuscleGroupPriority.HIGH
M = MuscleGroupPriority.MEDIUM
L = MuscleGroupPriority.LOW

AUTO_REGULATION_RULES: tuple[Rule, ...] = (
    Rule(
        "joint_pain_high",
        lambda f: f.joint_pain is JointPain.HIGH,
        -2,
        "High joint pain - significant volume reduction needed",
    ),
    Rule(
        "joint_pain_medium",
        lambda f: f.joint_pain is JointPain.MEDIUM,
        -1,
        "Medium joint pain - reducing volume for recovery",
    ),
    Rule(
        "workload_too_much",
        lambda f: f.workload is Workload.TOO_MUCH,
        -1,
        "Workload too high - backing off for recovery",
    ),
    Rule(
        "high_hard_amazing",
        lambda f: f.priority is H and f.workload is Workload.HARD and f.pump is Pump.AMAZING,
        1,
        "Hard work with great pump - adding volume while recovering well",
    ),
    Rule(
        "high_medium_amazing",
        lambda f: f.priority is H and f.workload is Workload.MEDIUM and f.pump is Pump.AMAZING,
        1,
        "Moderate workload with amazing pump - increasing volume",
    ),
    Rule(
        "high_easy_good_pump",
        lambda f: f.priority is H
        and f.workload is Workload.EASY
        and f.pump in (Pump.OK, Pump.AMAZING),
        1,
        "Easy workload with good response - increasing stimulus",
    ),
    Rule(
        "high_no_pump",
        lambda f: f.priority is H and f.pump is Pump.NONE,
        1,
        "No pump detected - need more volume for stimulus",
    ),
    Rule(
        "high_maintain",
        lambda f: f.priority is H,
        0,
        "Maintaining current volume - good balance",
    ),
    Rule(
        "medium_no_pump",
        lambda f: f.priority is M
        and f.pump is Pump.NONE
        and f.workload in (Workload.EASY, Workload.MEDIUM),
        1,
        "No pump with manageable workload - adding volume",
    ),
    Rule(
        "medium_maintain",
        lambda f: f.priority is M,
        0,
        "Medium priority - maintaining current volume",
    ),
    Rule(
        "low_maintain",
        lambda f: f.priority is L,
        0,
        "Low priority maintenance - keeping volume stable",
    ),
)


class AutoRegulation:
    """Map weekly feedback and muscle group priority to a set delta."""

    RULES = AUTO_REGULATION_RULES

    @staticmethod
    def parse_feedback(priority, joint_pain, pump, workload) -> FeedbackInput:
        return FeedbackInput(
            parse_enum(MuscleGroupPriority, priority, "priority"),
            parse_enum(JointPain, joint_pain, "joint_pain"),
            parse_enum(Pump, pump, "pump"),
            parse_enum(Workload, workload, "workload"),
        )

    @classmethod
    def calculate_set_adjustment(
        cls, priority, joint_pain, pump, workload
    ) -> SetAdjustment:
        """Return the set adjustment for next week.

        Every input accepts its enum member or the string value. Unknown
        values raise :class:`~algorithms.errors.InvalidFeedbackValue`.
        """
        feedback = cls.parse_feedback(priority, joint_pain, pump, workload)
        for rule in cls.RULES:
            if rule.matches(feedback):
                return SetAdjustment(rule.adjustment, rule.reasoning, rule.name)
        # every priority tier ends in a catch-all rule
        raise AssertionError(f"no rule matched {feedback!r}")


def calculate_set_adjustment(priority, joint_pain, pump, workload) -> SetAdjustment:
    return AutoRegulation.calculate_set_adjustment(priority, joint_pain, pump, workload)
