# Generated manually for merchants app

import uuid
from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import apps.merchants.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('slug', models.SlugField(max_length=120, unique=True)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('is_active', models.BooleanField(default=True)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'categories',
                'verbose_name_plural': 'categories',
                'ordering': ['display_order', 'name'],
                'indexes': [models.Index(fields=['is_active', 'display_order'], name='categories_is_acti_0b6f1d_idx')],
            },
        ),
        migrations.CreateModel(
            name='Merchant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('address', models.CharField(blank=True, max_length=300)),
                ('county', models.CharField(blank=True, max_length=50)),
                ('business_category', models.CharField(blank=True, max_length=100)),
                ('logo_url', models.URLField(blank=True)),
                ('website', models.URLField(blank=True)),
                ('contact_email', models.EmailField(db_index=True, max_length=254, unique=True)),
                ('contact_phone', models.CharField(blank=True, max_length=30)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('denied', 'Denied')], default='pending', max_length=20)),
                ('is_active', models.BooleanField(default=False)),
                ('password', models.CharField(blank=True, max_length=128)),
                ('temp_password', models.CharField(blank=True, max_length=128)),
                ('account_holder_name', models.CharField(blank=True, max_length=200)),
                ('iban', models.CharField(blank=True, max_length=34)),
                ('bic', models.CharField(blank=True, max_length=11)),
                ('stripe_account_id', models.CharField(blank=True, db_index=True, max_length=100)),
                ('stripe_is_connected', models.BooleanField(default=False)),
                ('stripe_onboarding_completed', models.BooleanField(default=False)),
                ('stripe_charges_enabled', models.BooleanField(default=False)),
                ('stripe_payouts_enabled', models.BooleanField(default=False)),
                ('stripe_details_submitted', models.BooleanField(default=False)),
                ('brontie_fee_active', models.BooleanField(default=False)),
                ('commission_rate', models.DecimalField(decimal_places=3, default=Decimal('0.100'), max_digits=4, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('brontie_fee_activated_at', models.DateTimeField(blank=True, null=True)),
                ('brontie_fee_deactivated_at', models.DateTimeField(blank=True, null=True)),
                ('brontie_fee_deactivation_reason', models.CharField(blank=True, max_length=300)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'merchants',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['status', 'is_active'], name='merchants_status_5a1c2e_idx'),
                    models.Index(fields=['county'], name='merchants_county_7d3b9f_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MerchantLocation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('address', models.CharField(max_length=300)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('county', models.CharField(blank=True, max_length=50)),
                ('zip_code', models.CharField(blank=True, max_length=20)),
                ('country', models.CharField(default='Ireland', max_length=100)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('merchant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='locations', to='merchants.merchant')),
            ],
            options={
                'db_table': 'merchant_locations',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['merchant', 'is_active'], name='merchant_lo_merchan_2c8e4a_idx')],
            },
        ),
        migrations.CreateModel(
            name='GiftItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.CharField(blank=True, max_length=200)),
                ('price', models.DecimalField(decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0.50')), apps.merchants.models.validate_price_step])),
                ('image_url', models.URLField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='gift_items', to='merchants.category')),
                ('merchant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='gift_items', to='merchants.merchant')),
                ('locations', models.ManyToManyField(blank=True, related_name='gift_items', to='merchants.merchantlocation')),
            ],
            options={
                'db_table': 'giftitems',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['merchant', 'is_active'], name='giftitems_merchan_8f1a6b_idx'),
                    models.Index(fields=['category', 'is_active'], name='giftitems_categor_3e9d0c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LocationQRCode',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('short_id', models.CharField(db_index=True, max_length=8, unique=True)),
                ('expires_at', models.DateTimeField()),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='qr_codes', to='merchants.merchantlocation')),
                ('merchant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='qr_codes', to='merchants.merchant')),
            ],
            options={
                'db_table': 'location_qr_codes',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['location', 'is_active'], name='location_qr_locatio_6b2f7e_idx')],
            },
        ),
    ]
