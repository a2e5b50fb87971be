"""
Initial migration for Stockkeeper models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
import stockkeeper.models.ledger
from django.conf import settings
from django.db import migrations, models


MOVEMENT_TYPES = [
    ('purchase_in', 'Purchase receipt'),
    ('purchase_return_in', 'Purchase return (in)'),
    ('purchase_return_out', 'Return to vendor'),
    ('sale_out', 'Sale'),
    ('sale_return_in', 'Sales return'),
    ('sale_return_out', 'Sales return (legacy)'),
    ('transfer_in', 'Transfer in'),
    ('transfer_out', 'Transfer out'),
    ('adjustment_in', 'Adjustment in'),
    ('adjustment_out', 'Adjustment out'),
]

PRIORITY_LEVELS = [('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('urgent', 'Urgent')]


class Migration(migrations.Migration):
    """Create Stockkeeper models."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(help_text='Unique identifier (e.g. main, north-branch)', unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('company_id', models.PositiveIntegerField(db_index=True, verbose_name='Company')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive warehouses reject every movement.', verbose_name='Active')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Warehouse',
                'verbose_name_plural': 'Warehouses',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='StorageBin',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, verbose_name='Code')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bins', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Storage bin',
                'verbose_name_plural': 'Storage bins',
                'ordering': ['warehouse', 'code'],
            },
        ),
        migrations.CreateModel(
            name='StockLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='On hand')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Stock level',
                'verbose_name_plural': 'Stock levels',
            },
        ),
        migrations.CreateModel(
            name='StockLedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('movement_type', models.CharField(choices=MOVEMENT_TYPES, max_length=30, verbose_name='Movement type')),
                ('quantity_delta', models.DecimalField(decimal_places=3, help_text='Positive = inward, negative = outward', max_digits=12, verbose_name='Delta')),
                ('previous_stock', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Previous stock')),
                ('new_stock', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='New stock')),
                ('txn_id', models.CharField(db_index=True, default=stockkeeper.models.ledger.new_txn_id, max_length=64, verbose_name='Transaction')),
                ('reference_type', models.CharField(blank=True, default='', max_length=50)),
                ('reference_id', models.PositiveIntegerField(blank=True, null=True)),
                ('reference_number', models.CharField(blank=True, default='', max_length=100)),
                ('reason', models.CharField(help_text='Required. E.g. "Invoice INV-123", "Physical count"', max_length=255, verbose_name='Reason')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin', verbose_name='Bin')),
                ('stock_level', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='stockkeeper.stocklevel', verbose_name='Stock level')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Ledger entry',
                'verbose_name_plural': 'Ledger entries',
                'ordering': ['timestamp', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('reserved_quantity', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Reserved quantity')),
                ('reference_type', models.CharField(max_length=50, verbose_name='Reference type')),
                ('reference_id', models.PositiveIntegerField(blank=True, null=True)),
                ('reference_number', models.CharField(blank=True, default='', max_length=100, verbose_name='Reference number')),
                ('status', models.CharField(choices=[('active', 'Active'), ('released', 'Released'), ('consumed', 'Consumed')], db_index=True, default='active', max_length=20, verbose_name='Status')),
                ('reservation_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Reserved at')),
                ('expires_at', models.DateTimeField(blank=True, db_index=True, help_text='If still active at this time it stops counting and is swept as released', null=True, verbose_name='Expires at')),
                ('resolved_at', models.DateTimeField(blank=True, help_text='When consumed or released', null=True, verbose_name='Resolved at')),
                ('notes', models.TextField(blank=True, default='')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin', verbose_name='Bin')),
                ('reserved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Reserved by')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reservations', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Reservation',
                'verbose_name_plural': 'Reservations',
                'ordering': ['reservation_date', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='SerialUnit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('serial_number', models.CharField(max_length=100, unique=True, verbose_name='Serial number')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('status', models.CharField(choices=[('available', 'Available'), ('reserved', 'Reserved'), ('sold', 'Sold'), ('transferred', 'Transferred'), ('scrapped', 'Scrapped')], db_index=True, default='available', max_length=20, verbose_name='Status')),
                ('last_txn_id', models.CharField(blank=True, default='', max_length=64)),
                ('cost_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin', verbose_name='Bin')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='serial_units', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Serial unit',
                'verbose_name_plural': 'Serial units',
                'ordering': ['serial_number'],
            },
        ),
        migrations.CreateModel(
            name='QCHold',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('serial_number', models.CharField(blank=True, default='', max_length=100)),
                ('hold_quantity', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Held quantity')),
                ('hold_reason', models.CharField(max_length=255, verbose_name='Reason')),
                ('hold_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('on_hold', 'On hold'), ('released', 'Released'), ('rejected', 'Rejected')], db_index=True, default='on_hold', max_length=20, verbose_name='Status')),
                ('inspection_notes', models.TextField(blank=True, default='')),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('release_notes', models.TextField(blank=True, default='')),
                ('related_txn_id', models.CharField(blank=True, default='', max_length=64)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('inspector', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Inspector')),
                ('released_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='qc_holds', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'QC hold',
                'verbose_name_plural': 'QC holds',
                'ordering': ['hold_date', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='PickList',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=50, unique=True, verbose_name='Number')),
                ('pick_list_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('in_progress', 'In progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='draft', max_length=20)),
                ('priority_level', models.CharField(choices=PRIORITY_LEVELS, default='normal', max_length=10)),
                ('special_instructions', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('picker', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Picker')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='pick_lists', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Pick list',
                'verbose_name_plural': 'Pick lists',
                'ordering': ['-pick_list_date'],
            },
        ),
        migrations.CreateModel(
            name='PickListDetail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('required_quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('picked_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12)),
                ('uom_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Unit of measure')),
                ('pick_sequence', models.PositiveIntegerField(default=0)),
                ('pick_instructions', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('picking', 'Picking'), ('completed', 'Completed'), ('short', 'Short')], db_index=True, default='pending', max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin')),
                ('pick_list', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='details', to='stockkeeper.picklist')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.warehouse')),
            ],
            options={
                'verbose_name': 'Pick list line',
                'verbose_name_plural': 'Pick list lines',
                'ordering': ['pick_list', 'pick_sequence'],
            },
        ),
        migrations.CreateModel(
            name='StockTransfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transfer_number', models.CharField(max_length=50, unique=True, verbose_name='Transfer number')),
                ('transfer_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('transfer_status', models.CharField(choices=[('draft', 'Draft'), ('pending_approval', 'Pending approval'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('in_transit', 'In transit'), ('partially_received', 'Partially received'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='draft', max_length=20, verbose_name='Status')),
                ('approval_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20, verbose_name='Approval')),
                ('requires_approval', models.BooleanField(default=False)),
                ('estimated_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('approval_remarks', models.TextField(blank=True, default='')),
                ('rejection_reason', models.TextField(blank=True, default='')),
                ('priority_level', models.CharField(choices=PRIORITY_LEVELS, default='normal', max_length=10)),
                ('transport_method', models.CharField(blank=True, default='', max_length=30)),
                ('carrier_name', models.CharField(blank=True, default='', max_length=100)),
                ('tracking_number', models.CharField(blank=True, default='', max_length=100)),
                ('expected_delivery_date', models.DateField(blank=True, null=True)),
                ('special_instructions', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shipped_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Approved by')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
                ('from_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_transfers', to='stockkeeper.warehouse', verbose_name='From warehouse')),
                ('to_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='incoming_transfers', to='stockkeeper.warehouse', verbose_name='To warehouse')),
            ],
            options={
                'verbose_name': 'Stock transfer',
                'verbose_name_plural': 'Stock transfers',
                'ordering': ['-transfer_date'],
            },
        ),
        migrations.CreateModel(
            name='TransferDetail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('uom_id', models.PositiveIntegerField(blank=True, null=True)),
                ('requested_quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('shipped_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12)),
                ('received_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12)),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('line_status', models.CharField(choices=[('pending', 'Pending'), ('shipped', 'Shipped'), ('short', 'Short shipped'), ('partially_received', 'Partially received'), ('received', 'Received'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('from_bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin')),
                ('to_bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockkeeper.storagebin')),
                ('transfer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='stockkeeper.stocktransfer')),
            ],
            options={
                'verbose_name': 'Transfer line',
                'verbose_name_plural': 'Transfer lines',
                'ordering': ['transfer', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='DamageAssessment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product')),
                ('variant_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='Variant')),
                ('serial_number', models.CharField(blank=True, default='', max_length=100)),
                ('damaged_quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('damage_type', models.CharField(max_length=50, verbose_name='Damage type')),
                ('damage_severity', models.CharField(choices=[('minor', 'Minor'), ('major', 'Major'), ('total_loss', 'Total loss')], max_length=20, verbose_name='Severity')),
                ('damage_description', models.TextField(blank=True, default='')),
                ('estimated_loss_value', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('action_taken', models.CharField(blank=True, choices=[('write_off', 'Write off'), ('repair', 'Repair'), ('return_to_vendor', 'Return to vendor'), ('dispose', 'Dispose')], default='', max_length=20)),
                ('insurance_claim_number', models.CharField(blank=True, default='', max_length=100)),
                ('related_txn_id', models.CharField(blank=True, default='', max_length=64)),
                ('assessment_date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('assessed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Assessed by')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='damage_assessments', to='stockkeeper.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Damage assessment',
                'verbose_name_plural': 'Damage assessments',
                'ordering': ['-assessment_date', '-pk'],
            },
        ),
        migrations.AddConstraint(
            model_name='storagebin',
            constraint=models.UniqueConstraint(fields=('warehouse', 'code'), name='unique_bin_code_per_warehouse'),
        ),
        migrations.AddIndex(
            model_name='stocklevel',
            index=models.Index(fields=['product_id', 'warehouse'], name='stocklevel_product_wh_idx'),
        ),
        migrations.AddConstraint(
            model_name='stocklevel',
            constraint=models.UniqueConstraint(fields=('product_id', 'variant_id', 'warehouse'), name='unique_stock_level_key'),
        ),
        migrations.AddConstraint(
            model_name='stocklevel',
            constraint=models.CheckConstraint(condition=models.Q(('_quantity__gte', 0)), name='stock_level_non_negative'),
        ),
        migrations.AddIndex(
            model_name='stockledgerentry',
            index=models.Index(fields=['stock_level', 'timestamp'], name='ledger_level_ts_idx'),
        ),
        migrations.AddIndex(
            model_name='stockledgerentry',
            index=models.Index(fields=['reference_type', 'reference_number'], name='ledger_reference_idx'),
        ),
        migrations.AddConstraint(
            model_name='stockledgerentry',
            constraint=models.CheckConstraint(condition=models.Q(('new_stock__gte', 0)), name='ledger_new_stock_non_negative'),
        ),
        migrations.AddIndex(
            model_name='reservation',
            index=models.Index(fields=['status', 'expires_at'], name='reservation_status_exp_idx'),
        ),
        migrations.AddIndex(
            model_name='reservation',
            index=models.Index(fields=['product_id', 'warehouse', 'status'], name='reservation_key_status_idx'),
        ),
        migrations.AddIndex(
            model_name='reservation',
            index=models.Index(fields=['reference_type', 'reference_number'], name='reservation_reference_idx'),
        ),
        migrations.AddIndex(
            model_name='serialunit',
            index=models.Index(fields=['product_id', 'warehouse', 'status'], name='serial_key_status_idx'),
        ),
        migrations.AddIndex(
            model_name='qchold',
            index=models.Index(fields=['product_id', 'warehouse', 'status'], name='qchold_key_status_idx'),
        ),
        migrations.AddConstraint(
            model_name='picklistdetail',
            constraint=models.CheckConstraint(condition=models.Q(('picked_quantity__gte', 0), ('picked_quantity__lte', models.F('required_quantity'))), name='pick_detail_picked_within_required'),
        ),
        migrations.AddConstraint(
            model_name='transferdetail',
            constraint=models.CheckConstraint(condition=models.Q(('received_quantity__gte', 0), ('received_quantity__lte', models.F('shipped_quantity')), ('shipped_quantity__lte', models.F('requested_quantity'))), name='transfer_line_quantities_ordered'),
        ),
    ]
