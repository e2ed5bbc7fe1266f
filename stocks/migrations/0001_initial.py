from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


DEVISES = [("MRU", "Ouguiya (MRU)"), ("EUR", "Euro"), ("USD", "Dollar US")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("referentiel", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("numero_lot", models.CharField(help_text="Numéro de lot (ex: LOT-POULPE-20240115-01)", max_length=80)),
                ("quantite_initiale_kg", models.DecimalField(decimal_places=3, max_digits=14)),
                ("quantite_restante_kg", models.DecimalField(decimal_places=3, max_digits=14)),
                ("cout_unitaire", models.DecimalField(decimal_places=6, max_digits=18)),
                ("devise", models.CharField(choices=DEVISES, default="MRU", max_length=3)),
                ("cout_unitaire_position", models.DecimalField(decimal_places=6, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "article",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lots",
                        to="referentiel.article",
                    ),
                ),
                (
                    "depot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lots",
                        to="referentiel.depot",
                    ),
                ),
                (
                    "lot_origine",
                    models.ForeignKey(
                        blank=True,
                        help_text="Lot source (transfert inter-dépôts)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lots_derives",
                        to="stocks.lot",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["article", "depot", "created_at"], name="lot_fifo_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantite_initiale_kg__gt", 0)),
                        name="lot_quantite_initiale_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantite_restante_kg__gte", 0)),
                        name="lot_quantite_restante_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantite_restante_kg__lte", models.F("quantite_initiale_kg"))),
                        name="lot_restante_inferieure_initiale",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("cout_unitaire__gte", 0)),
                        name="lot_cout_unitaire_positif",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PositionStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantite_kg", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("quantite_commercialisable_kg", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("valeur_stock", models.DecimalField(decimal_places=9, default=Decimal("0"), max_digits=28)),
                ("cout_moyen_unitaire", models.DecimalField(decimal_places=6, default=Decimal("0"), max_digits=20)),
                ("devise", models.CharField(blank=True, choices=DEVISES, max_length=3)),
                ("seuil_alerte_kg", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=14)),
                ("version", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "article",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="positions",
                        to="referentiel.article",
                    ),
                ),
                (
                    "depot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="positions",
                        to="referentiel.depot",
                    ),
                ),
            ],
            options={
                "ordering": ["depot_id", "article_id"],
                "constraints": [
                    models.UniqueConstraint(fields=("depot", "article"), name="unique_position_depot_article"),
                    models.CheckConstraint(
                        condition=models.Q(("quantite_commercialisable_kg__gte", 0)),
                        name="position_commercialisable_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantite_commercialisable_kg__lte", models.F("quantite_kg"))),
                        name="position_commercialisable_inferieure_quantite",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MouvementStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type_mouvement",
                    models.CharField(
                        choices=[
                            ("ENTREE", "Entrée"),
                            ("TRANSFERT", "Transfert"),
                            ("SORTIE", "Sortie"),
                            ("AJUSTEMENT", "Ajustement"),
                            ("AJUSTEMENT_COMMERCIALISABLE", "Ajustement commercialisable"),
                        ],
                        max_length=30,
                    ),
                ),
                ("reference", models.CharField(blank=True, max_length=100)),
                ("motif", models.TextField(blank=True)),
                ("date_mouvement", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="mouvements_stock",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "depot_destination",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="mouvements_entrants",
                        to="referentiel.depot",
                    ),
                ),
                (
                    "depot_source",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="mouvements_sortants",
                        to="referentiel.depot",
                    ),
                ),
            ],
            options={
                "ordering": ["-date_mouvement", "-id"],
            },
        ),
        migrations.CreateModel(
            name="LigneMouvementStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sens", models.CharField(choices=[("ENTREE", "Entrée"), ("SORTIE", "Sortie")], max_length=10)),
                ("quantite_kg", models.DecimalField(decimal_places=3, max_digits=14)),
                ("cout_unitaire", models.DecimalField(blank=True, decimal_places=6, max_digits=18, null=True)),
                ("devise", models.CharField(blank=True, choices=DEVISES, max_length=3)),
                (
                    "article",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lignes_mouvement",
                        to="referentiel.article",
                    ),
                ),
                (
                    "depot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lignes_mouvement",
                        to="referentiel.depot",
                    ),
                ),
                (
                    "lot",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lignes_mouvement",
                        to="stocks.lot",
                    ),
                ),
                (
                    "mouvement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lignes",
                        to="stocks.mouvementstock",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="AlerteStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type_alerte",
                    models.CharField(
                        choices=[("STOCK_BAS", "Stock bas"), ("RUPTURE", "Rupture de stock")],
                        max_length=20,
                    ),
                ),
                (
                    "statut",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("IGNOREE", "Ignorée"), ("RESOLUE", "Résolue")],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("quantite_actuelle_kg", models.DecimalField(decimal_places=3, max_digits=14)),
                ("seuil_alerte_kg", models.DecimalField(decimal_places=3, max_digits=14)),
                ("message", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("resolue_le", models.DateTimeField(blank=True, null=True)),
                (
                    "article",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="alertes_stock",
                        to="referentiel.article",
                    ),
                ),
                (
                    "depot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="alertes_stock",
                        to="referentiel.depot",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("statut", "ACTIVE")),
                        fields=("depot", "article"),
                        name="unique_alerte_active_par_position",
                    ),
                ],
            },
        ),
    ]
