"""
Tests for damage assessments.
"""

from datetime import date
from decimal import Decimal

import pytest

from stockkeeper import stock, StockError
from stockkeeper.models import DamageAction, DamageSeverity, MovementType
from stockkeeper.tests.conftest import PRODUCT


pytestmark = pytest.mark.django_db


class TestDamageAssessment:
    """Tests for stock.create_damage_assessment()."""

    def test_record_damage(self, stocked, user):
        """Recording damage stores the assessment and moves no stock."""
        assessment = stock.create_damage_assessment(
            Decimal('3'), PRODUCT, stocked, 'water', DamageSeverity.MAJOR,
            user=user,
            description='Roof leak over aisle 4',
            estimated_loss_value=Decimal('149.995'),
        )

        assert assessment.assessed_by == user
        assert assessment.estimated_loss_value == Decimal('150.00')
        assert stock.on_hand(PRODUCT, stocked) == Decimal('100')

    def test_link_to_write_off(self, stocked, user):
        """A write-off entry can be linked through related_txn_id."""
        entry = stock.issue(
            Decimal('3'), PRODUCT, stocked,
            movement_type=MovementType.ADJUSTMENT_OUT, reason='Water damage',
        )

        assessment = stock.create_damage_assessment(
            Decimal('3'), PRODUCT, stocked, 'water', DamageSeverity.TOTAL_LOSS,
            action_taken=DamageAction.WRITE_OFF,
            related_txn_id=entry.txn_id,
        )

        assert stock.ledger(txn_id=assessment.related_txn_id).get() == entry

    @pytest.mark.parametrize('kwargs, code', [
        ({'severity': 'catastrophic'}, 'INVALID_SEVERITY'),
        ({'severity': DamageSeverity.MINOR, 'action_taken': 'burn'}, 'INVALID_ACTION'),
        ({'severity': DamageSeverity.MINOR, 'estimated_loss_value': -1}, 'INVALID_INPUT'),
    ])
    def test_invalid(self, stocked, kwargs, code):
        """Severity and action must be known values."""
        with pytest.raises(StockError) as exc:
            stock.create_damage_assessment(Decimal('1'), PRODUCT, stocked, 'impact', **kwargs)

        assert exc.value.code == code

    def test_filter_by_date(self, stocked, branch):
        """Assessments are listed by warehouse and date range."""
        stock.create_damage_assessment(
            1, PRODUCT, stocked, 'impact', DamageSeverity.MINOR, assessment_date=date(2024, 1, 10),
        )
        stock.create_damage_assessment(
            2, PRODUCT, stocked, 'impact', DamageSeverity.MINOR, assessment_date=date(2024, 2, 10),
        )
        stock.create_damage_assessment(
            4, PRODUCT, branch, 'impact', DamageSeverity.MINOR, assessment_date=date(2024, 2, 11),
        )

        january = stock.get_damage_assessments(stocked, from_date=date(2024, 1, 1), to_date=date(2024, 1, 31))
        february = stock.get_damage_assessments(to_date=date(2024, 2, 28), from_date=date(2024, 2, 1))

        assert [a.damaged_quantity for a in january] == [Decimal('1')]
        assert sorted(a.damaged_quantity for a in february) == [Decimal('2'), Decimal('4')]
