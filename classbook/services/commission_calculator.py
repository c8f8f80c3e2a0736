"""
Commission Calculator

Maps a class session's commission policy and one meeting's attendance
outcomes to the amount owed to the instructor, plus a structured breakdown
that is frozen onto the meeting for audit and display.

Policies form a closed set:
    FlatPerMeeting(amount)  - fixed amount for the meeting
    PerStudent(amount)      - amount x present-equivalent students
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Union

PRESENT_EQUIVALENT_STATUSES = frozenset({'present', 'late', 'excused'})

BY_CLASS = 'BY_CLASS'
BY_STUDENT = 'BY_STUDENT'
COMMISSION_TYPES = (BY_CLASS, BY_STUDENT)


@dataclass(frozen=True)
class FlatPerMeeting:
    amount: Decimal
    code = BY_CLASS


@dataclass(frozen=True)
class PerStudent:
    amount: Decimal
    code = BY_STUDENT


CommissionPolicy = Union[FlatPerMeeting, PerStudent]


@dataclass(frozen=True)
class CommissionResult:
    amount: Decimal
    eligible_student_count: int
    breakdown: dict
    policy: str


def policy_from_settings(commission_type: str, amount) -> CommissionPolicy:
    """Build the policy variant from the stored (type, amount) columns"""
    amount = Decimal(amount)
    if amount < 0:
        raise ValueError(f"Commission amount must be non-negative, got: {amount}")
    if commission_type == BY_CLASS:
        return FlatPerMeeting(amount)
    if commission_type == BY_STUDENT:
        return PerStudent(amount)
    raise ValueError(f"Invalid commission type: {commission_type}. Must be 'BY_CLASS' or 'BY_STUDENT'")


def format_currency(amount, symbol: str = 'Rp') -> str:
    """Format an amount the Indonesian way: Rp 1.250.000 (cents only when non-zero)"""
    amount = Decimal(amount).quantize(Decimal('0.01'))
    text = f"{abs(amount):,.2f}".translate(str.maketrans(',.', '.,'))
    if text.endswith(',00'):
        text = text[:-3]
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol} {text}"


class CommissionCalculator:
    """Pure commission computation; no database access"""

    @staticmethod
    def count_eligible(statuses: Iterable[str]) -> int:
        return sum(1 for status in statuses if status in PRESENT_EQUIVALENT_STATUSES)

    @staticmethod
    def calculate(policy: CommissionPolicy, statuses: Iterable[str],
                  currency_symbol: str = 'Rp') -> CommissionResult:
        """
        Calculate the commission for one meeting.

        Args:
            policy: FlatPerMeeting or PerStudent
            statuses: attendance status of every recorded student
            currency_symbol: prefix used in the human-readable summary

        Returns:
            CommissionResult with amount, eligible count and breakdown
        """
        statuses = list(statuses)
        eligible = CommissionCalculator.count_eligible(statuses)
        if not isinstance(policy, (FlatPerMeeting, PerStudent)):
            raise TypeError(f"Unhandled commission policy: {policy!r}")
        unit = Decimal(policy.amount)

        if eligible == 0:
            amount = Decimal('0')
            summary = 'No students present'
        elif isinstance(policy, FlatPerMeeting):
            amount = unit
            summary = f"Flat per meeting: {format_currency(unit, currency_symbol)}"
        else:
            amount = unit * eligible
            summary = (f"{eligible} students x {format_currency(unit, currency_symbol)} = "
                       f"{format_currency(amount, currency_symbol)}")

        breakdown = {
            'policy': policy.code,
            'label': CommissionCalculator.policy_label(policy),
            'eligible_students': eligible,
            'recorded_students': len(statuses),
            'unit_amount': float(unit),
            'amount': float(amount),
            'summary': summary
        }
        return CommissionResult(amount=amount, eligible_student_count=eligible,
                                breakdown=breakdown, policy=policy.code)

    @staticmethod
    def policy_label(policy: CommissionPolicy) -> str:
        if isinstance(policy, FlatPerMeeting):
            return 'Commission per class'
        if isinstance(policy, PerStudent):
            return 'Commission per student'
        raise TypeError(f"Unhandled commission policy: {policy!r}")

    @staticmethod
    def total_commission(meetings: List) -> Decimal:
        """Sum the frozen commission of already-closed meetings"""
        return sum((Decimal(meeting.calculated_commission or 0) for meeting in meetings), Decimal('0'))
