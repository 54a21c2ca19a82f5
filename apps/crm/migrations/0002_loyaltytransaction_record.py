import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("crm", "0001_initial"),
        ("sales", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="loyaltytransaction",
            name="record",
            field=models.ForeignKey(
                blank=True,
                help_text="Ledger record that generated this transaction (if applicable)",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="loyalty_transactions",
                to="sales.transactionrecord",
            ),
        ),
        migrations.AddIndex(
            model_name="loyaltytransaction",
            index=models.Index(fields=["client", "-timestamp"], name="loyalty_client_ts_idx"),
        ),
        migrations.AddIndex(
            model_name="loyaltytransaction",
            index=models.Index(fields=["transaction_type", "timestamp"], name="loyalty_type_ts_idx"),
        ),
        migrations.AddIndex(
            model_name="loyaltytransaction",
            index=models.Index(fields=["record"], name="loyalty_record_idx"),
        ),
    ]
