"""
Damage assessments — record losses found on stock.

Recording damage does not move stock. Writing the quantity off is a
separate adjustment_out (or damage) issue, linked through related_txn_id.
"""

import logging

from stockkeeper.exceptions import InvalidInput
from stockkeeper.models.damage import DamageAssessment
from stockkeeper.models.enums import DamageAction, DamageSeverity
from stockkeeper.pricing import round_money, to_decimal
from stockkeeper.services.queries import clean_quantity, get_warehouse

logger = logging.getLogger('stockkeeper')


class DamageAssessments:
    """Damage assessment methods."""

    @classmethod
    def create_damage_assessment(cls, quantity, product_id, warehouse, damage_type,
                                 severity, user=None, variant_id=None, serial_number='',
                                 description='', estimated_loss_value=None,
                                 action_taken='', insurance_claim_number='',
                                 related_txn_id='', assessment_date=None) -> DamageAssessment:
        """
        Record damaged quantity of a product.

        Raises:
            InvalidInput: non-positive quantity, empty damage_type, unknown
                severity or action, negative loss value
        """
        quantity = clean_quantity(quantity)
        if not damage_type:
            raise InvalidInput('INVALID_INPUT', field='damage_type')
        if severity not in DamageSeverity.values:
            raise InvalidInput('INVALID_SEVERITY', severity=severity)
        if action_taken and action_taken not in DamageAction.values:
            raise InvalidInput('INVALID_ACTION', action=action_taken)

        if estimated_loss_value is not None:
            estimated_loss_value = to_decimal(estimated_loss_value, 'estimated_loss_value')
            if estimated_loss_value < 0:
                raise InvalidInput('INVALID_INPUT', field='estimated_loss_value')
            estimated_loss_value = round_money(estimated_loss_value)

        wh = get_warehouse(warehouse)
        fields = {}
        if assessment_date is not None:
            fields['assessment_date'] = assessment_date

        assessment = DamageAssessment.objects.create(
            warehouse=wh,
            product_id=product_id,
            variant_id=variant_id,
            serial_number=serial_number,
            damaged_quantity=quantity,
            damage_type=damage_type,
            damage_severity=severity,
            damage_description=description,
            estimated_loss_value=estimated_loss_value,
            action_taken=action_taken,
            insurance_claim_number=insurance_claim_number,
            related_txn_id=related_txn_id,
            assessed_by=user,
            **fields,
        )
        logger.info(
            "stock.damage.assessed",
            extra={
                "assessment_id": assessment.pk,
                "product_id": product_id,
                "warehouse": wh.code,
                "qty": str(quantity),
                "severity": severity,
            },
        )
        return assessment

    @classmethod
    def get_damage_assessments(cls, warehouse=None, from_date=None, to_date=None,
                               product_id=None):
        """Assessments filtered by warehouse, product and assessment date range."""
        qs = DamageAssessment.objects.all()

        if warehouse is not None:
            qs = qs.filter(warehouse=warehouse)

        if product_id is not None:
            qs = qs.filter(product_id=product_id)

        if from_date is not None:
            qs = qs.filter(assessment_date__gte=from_date)

        if to_date is not None:
            qs = qs.filter(assessment_date__lte=to_date)

        return qs
