# Generated manually for vouchers app

import uuid
from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('merchants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Voucher',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('redemption_code', models.CharField(db_index=True, editable=False, max_length=10, unique=True)),
                ('status', models.CharField(choices=[('issued', 'Issued'), ('pending', 'Pending'), ('unredeemed', 'Unredeemed'), ('redeemed', 'Redeemed'), ('refunded', 'Refunded'), ('disputed', 'Disputed'), ('expired', 'Expired')], default='issued', max_length=20)),
                ('product_sku', models.CharField(blank=True, max_length=100)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('amount_gross', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('stripe_fee', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('payment_intent_id', models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('sender_name', models.CharField(blank=True, max_length=200)),
                ('recipient_name', models.CharField(blank=True, max_length=200)),
                ('recipient_email', models.EmailField(blank=True, max_length=254)),
                ('recipient_token', models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ('recipient_became_sender', models.BooleanField(default=False)),
                ('recipient_linked_sender_email', models.EmailField(blank=True, max_length=254)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('issued_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('redeemed_at', models.DateTimeField(blank=True, null=True)),
                ('refunded_at', models.DateTimeField(blank=True, null=True)),
                ('disputed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gift_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vouchers', to='merchants.giftitem')),
                ('valid_locations', models.ManyToManyField(blank=True, related_name='vouchers', to='merchants.merchantlocation')),
            ],
            options={
                'db_table': 'vouchers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='vouchers_status_9a4c1e_idx'),
                    models.Index(fields=['gift_item', 'status'], name='vouchers_gift_it_2b7d3f_idx'),
                    models.Index(fields=['payment_intent_id'], name='vouchers_payment_5e8a0b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('purchase', 'Purchase'), ('redemption', 'Redemption'), ('refund', 'Refund')], max_length=20)),
                ('status', models.CharField(choices=[('completed', 'Completed'), ('pending', 'Pending'), ('failed', 'Failed'), ('refunded', 'Refunded')], default='completed', max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('stripe_fee', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('brontie_commission', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('merchant_payout', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('stripe_payment_intent_id', models.CharField(blank=True, max_length=255)),
                ('customer_email', models.EmailField(blank=True, max_length=254)),
                ('sender_name', models.CharField(blank=True, max_length=200)),
                ('recipient_name', models.CharField(blank=True, max_length=200)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('gift_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='merchants.giftitem')),
                ('merchant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='merchants.merchant')),
                ('voucher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='vouchers.voucher')),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['merchant', 'type', 'status', 'created_at'], name='transaction_merchan_4c1f8d_idx'),
                    models.Index(fields=['voucher', 'type'], name='transaction_voucher_7e2a9c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RedemptionLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('merchant_location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='redemption_logs', to='merchants.merchantlocation')),
                ('voucher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='redemption_logs', to='vouchers.voucher')),
            ],
            options={
                'db_table': 'redemption_logs',
                'ordering': ['-timestamp'],
                'indexes': [models.Index(fields=['merchant_location', 'timestamp'], name='redemption__merchan_3d6b2f_idx')],
            },
        ),
        migrations.CreateModel(
            name='PayoutItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount_payable', models.DecimalField(decimal_places=2, max_digits=10)),
                ('brontie_fee', models.DecimalField(decimal_places=2, max_digits=10)),
                ('stripe_fee', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('reversed', 'Reversed')], default='pending', max_length=20)),
                ('paid_out_at', models.DateTimeField(blank=True, null=True)),
                ('transfer_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('merchant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payout_items', to='merchants.merchant')),
                ('voucher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payout_items', to='vouchers.voucher')),
            ],
            options={
                'db_table': 'payoutitems',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['merchant', 'status'], name='payoutitems_merchan_8b3e1a_idx'),
                    models.Index(fields=['voucher'], name='payoutitems_voucher_1f5c7d_idx'),
                    models.Index(fields=['paid_out_at'], name='payoutitems_paid_ou_6a9e4b_idx'),
                ],
            },
        ),
    ]
