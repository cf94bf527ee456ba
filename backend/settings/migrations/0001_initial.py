from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GlobalSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('restaurant_name', models.CharField(default='Restaurant POS', max_length=100)),
                ('kot_split_by_major_category', models.BooleanField(default=False, help_text='Print one KOT per major category (kitchen station) instead of one per order.')),
                ('kot_include_variants', models.BooleanField(default=True, help_text='Show selected variant options under each KOT line.')),
                ('kot_include_deal_breakdown', models.BooleanField(default=True, help_text='Show the items contained in a deal under its KOT line.')),
                ('default_delivery_charge', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Charge applied to new delivery orders when none is given.', max_digits=10)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Global Settings',
                'verbose_name_plural': 'Global Settings',
            },
        ),
    ]
