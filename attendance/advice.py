"""Result texts for the attendance view: action message, tips and per-subject breakdown."""

from typing import List

from attendance.analyzer import MINIMUM_ATTENDANCE, STATUS_SAFE, round_half_up
from attendance.models import AnalysisResult, SubjectBreakdown, Tip


def subject_breakdown(result: AnalysisResult) -> List[SubjectBreakdown]:
    """Per-subject lines sorted by name, flagged SAFE or RISK against the minimum."""
    breakdown = []
    for subject in sorted(result.subjects, key=lambda s: s.name):
        is_safe = subject.percentage >= MINIMUM_ATTENDANCE
        breakdown.append(SubjectBreakdown(
            name=subject.name,
            held=subject.held,
            attended=subject.attended,
            percentage=round_half_up(subject.percentage, 1),
            is_safe=is_safe,
            label="SAFE" if is_safe else "RISK",
        ))
    return breakdown


def build_action_message(result: AnalysisResult) -> str:
    """Summary paragraph shown next to the action number."""
    attended_line = (
        f"You have attended {result.total_attended} out of {result.total_held} classes."
    )

    if result.status == STATUS_SAFE:
        return f"""You're SAFE!
{attended_line}

You can skip up to {result.action_number} class(es) and still maintain {MINIMUM_ATTENDANCE}% attendance!

But be careful! Missing too many classes might get you in trouble."""

    return f"""You're in DANGER!
{attended_line}

You need to attend {result.action_number} more consecutive class(es) to reach {MINIMUM_ATTENDANCE}% attendance!

Act fast! Attend all upcoming classes without miss."""


def build_tips(result: AnalysisResult) -> List[Tip]:
    """Tips tailored to the student's status."""
    if result.status == STATUS_SAFE:
        return _safe_tips(result)
    return _danger_tips(result)


def _safe_tips(result: AnalysisResult) -> List[Tip]:
    tips = [Tip(
        title="You're Doing Great!",
        text="Your attendance is above the minimum requirement. Keep attending classes regularly.",
    )]

    if result.action_number > 0:
        tips.append(Tip(
            title="Strategic Skipping",
            text=(
                f"You can afford to miss {result.action_number} class(es), but don't use all at once. "
                "Save them for emergencies!"
            ),
        ))
    else:
        tips.append(Tip(
            title="Limited Buffer",
            text="You have very little room to skip. It's risky! Attend all upcoming classes.",
        ))

    tips.append(Tip(
        title="Pro Tip",
        text=(
            "Don't skip classes unnecessarily. A sudden illness or emergency could push you "
            f"below {MINIMUM_ATTENDANCE}%!"
        ),
    ))
    return tips


def _danger_tips(result: AnalysisResult) -> List[Tip]:
    tips = [Tip(
        title="Action Required!",
        text=(
            f"You MUST attend {result.action_number} more consecutive class(es) "
            f"to reach {MINIMUM_ATTENDANCE}% attendance."
        ),
    )]

    # Input order, as entered
    at_risk = [s.name for s in result.subjects if s.percentage < MINIMUM_ATTENDANCE]
    if at_risk:
        tips.append(Tip(
            title="Priority Subjects",
            text=f"Focus on attending: {', '.join(at_risk)}. These are pulling your attendance down!",
        ))

    tips.append(Tip(
        title="Don't Delay!",
        text=(
            "Start attending classes immediately. Every class counts now. "
            "Missing more classes will make it even harder to recover!"
        ),
    ))
    tips.append(Tip(
        title="Talk to Your Instructor",
        text="Consider informing your instructor about your attendance concerns. They might be able to help!",
    ))
    return tips
