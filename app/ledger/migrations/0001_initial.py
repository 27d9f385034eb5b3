import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                ("account_id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "name",
                    models.CharField(
                        help_text="Display label for this account", max_length=255
                    ),
                ),
                (
                    "balance",
                    models.BigIntegerField(
                        default=0,
                        help_text="Balance in minor currency units, derived from transactions",
                    ),
                ),
            ],
            options={
                "ordering": ["account_id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("balance__gte", 0)),
                        name="ledger_account_balance_non_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionCategory",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "transaction_category_id",
                    models.BigAutoField(primary_key=True, serialize=False),
                ),
                ("name", models.CharField(max_length=100)),
            ],
            options={
                "verbose_name_plural": "transaction categories",
                "ordering": ["transaction_category_id"],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "transaction_id",
                    models.BigAutoField(primary_key=True, serialize=False),
                ),
                (
                    "amount",
                    models.BigIntegerField(
                        help_text="Signed amount: positive credits, negative debits"
                    ),
                ),
                (
                    "transaction_date",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now
                    ),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        blank=True,
                        help_text="Client-supplied key that makes retries safe",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        help_text="Account this line affects",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="ledger.account",
                    ),
                ),
                (
                    "from_account",
                    models.ForeignKey(
                        blank=True,
                        help_text="Source account when this line is part of a transfer",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger.account",
                    ),
                ),
                (
                    "to_account",
                    models.ForeignKey(
                        blank=True,
                        help_text="Target account when this line is part of a transfer",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger.account",
                    ),
                ),
                (
                    "transaction_category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="ledger.transactioncategory",
                    ),
                ),
            ],
            options={
                "ordering": ["-transaction_date", "-transaction_id"],
                "indexes": [
                    models.Index(
                        fields=["account", "-transaction_date", "-transaction_id"],
                        name="ledger_txn_account_recent_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount", 0), _negated=True),
                        name="ledger_transaction_amount_non_zero",
                    ),
                    models.UniqueConstraint(
                        fields=("account", "idempotency_key"),
                        name="ledger_transaction_unique_idempotency_key",
                    ),
                ],
            },
        ),
    ]
