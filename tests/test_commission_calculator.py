"""Tests for the commission calculator.

Covers both policy variants, the zero-attendee rule and the
present-equivalent status set (present, late and excused count; absent does not).
"""

from decimal import Decimal

import pytest

from classbook.services.commission_calculator import (
    CommissionCalculator,
    FlatPerMeeting,
    PerStudent,
    format_currency,
    policy_from_settings,
)


class TestFlatPerMeeting:
    def test_flat_amount_regardless_of_headcount(self) -> None:
        result = CommissionCalculator.calculate(
            FlatPerMeeting(Decimal('50000')), ['present', 'present', 'present', 'absent'])
        assert result.amount == Decimal('50000')
        assert result.eligible_student_count == 3
        assert result.policy == 'BY_CLASS'

    def test_single_late_student_still_earns_flat_amount(self) -> None:
        result = CommissionCalculator.calculate(FlatPerMeeting(Decimal('50000')), ['late'])
        assert result.amount == Decimal('50000')

    def test_zero_eligible_is_zero(self) -> None:
        result = CommissionCalculator.calculate(FlatPerMeeting(Decimal('50000')), ['absent', 'absent'])
        assert result.amount == Decimal('0')
        assert result.eligible_student_count == 0
        assert result.breakdown['summary'] == 'No students present'


class TestPerStudent:
    def test_multiplies_by_present_equivalent(self) -> None:
        result = CommissionCalculator.calculate(
            PerStudent(Decimal('10000')), ['present', 'present', 'late', 'absent'])
        assert result.amount == Decimal('30000')
        assert result.eligible_student_count == 3
        assert result.breakdown['recorded_students'] == 4
        assert result.breakdown['summary'] == '3 students x Rp 10.000 = Rp 30.000'

    def test_excused_counts_as_present(self) -> None:
        result = CommissionCalculator.calculate(PerStudent(Decimal('10000')), ['excused', 'absent'])
        assert result.amount == Decimal('10000')

    def test_breakdown_is_json_friendly(self) -> None:
        result = CommissionCalculator.calculate(PerStudent(Decimal('12500.50')), ['present', 'present'])
        assert result.breakdown['unit_amount'] == 12500.5
        assert result.breakdown['amount'] == 25001.0
        assert result.breakdown['policy'] == 'BY_STUDENT'
        assert result.breakdown['label'] == 'Commission per student'


class TestPolicyFromSettings:
    def test_builds_variants(self) -> None:
        assert policy_from_settings('BY_CLASS', '50000') == FlatPerMeeting(Decimal('50000'))
        assert policy_from_settings('BY_STUDENT', 10000) == PerStudent(Decimal('10000'))

    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            policy_from_settings('BY_HOUR', '50000')

    def test_rejects_negative_amount(self) -> None:
        with pytest.raises(ValueError):
            policy_from_settings('BY_CLASS', '-1')

    def test_unknown_policy_object_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            CommissionCalculator.calculate(object(), ['present'])


def test_format_currency() -> None:
    assert format_currency(Decimal('1250000')) == 'Rp 1.250.000'
    assert format_currency(Decimal('1250.5'), 'IDR') == 'IDR 1.250,50'
    assert format_currency(Decimal('-5000')) == '-Rp 5.000'


def test_total_commission_sums_frozen_amounts() -> None:
    class _Meeting:
        def __init__(self, amount):
            self.calculated_commission = amount

    meetings = [_Meeting(Decimal('50000')), _Meeting(Decimal('30000')), _Meeting(None)]
    assert CommissionCalculator.total_commission(meetings) == Decimal('80000')
