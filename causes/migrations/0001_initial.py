from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Cause",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("target_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("raised_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Sum of completed payments; only the payment status updater writes it", max_digits=12)),
                ("category", models.CharField(max_length=100)),
                ("location", models.CharField(max_length=200)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("PAUSED", "Paused"), ("DRAFT", "Draft"), ("COMPLETED", "Completed")], default="ACTIVE", max_length=20)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                ("featured", models.BooleanField(default=False)),
                ("deadline", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
