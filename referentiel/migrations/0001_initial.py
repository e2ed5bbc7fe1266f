from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Depot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20, unique=True)),
                ("intitule", models.CharField(max_length=150)),
                ("adresse", models.TextField(blank=True)),
                ("actif", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Dépôt",
                "verbose_name_plural": "Dépôts",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("specification", models.CharField(blank=True, max_length=100)),
                ("taille", models.CharField(blank=True, max_length=50)),
                (
                    "kg_par_carton",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("20"),
                        help_text="Poids net d'un carton (kg)",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.001"))],
                    ),
                ),
                ("cout_reference", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                (
                    "devise_cout_reference",
                    models.CharField(
                        choices=[("MRU", "Ouguiya (MRU)"), ("EUR", "Euro"), ("USD", "Dollar US")],
                        default="MRU",
                        max_length=3,
                    ),
                ),
                ("actif", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["reference"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("kg_par_carton__gt", 0)),
                        name="article_kg_par_carton_positif",
                    )
                ],
            },
        ),
    ]
