from django.contrib import admin

from .models import AlerteStock, LigneMouvementStock, Lot, MouvementStock, PositionStock


@admin.register(Lot)
class LotAdmin(admin.ModelAdmin):
    list_display = (
        "numero_lot",
        "article",
        "depot",
        "quantite_initiale_kg",
        "quantite_restante_kg",
        "cout_unitaire",
        "devise",
        "created_at",
    )
    list_filter = ("depot", "devise")
    search_fields = ("numero_lot", "article__reference")
    # Quantités mises à jour uniquement par le moteur
    readonly_fields = (
        "quantite_initiale_kg",
        "quantite_restante_kg",
        "cout_unitaire_position",
        "lot_origine",
    )


@admin.register(PositionStock)
class PositionStockAdmin(admin.ModelAdmin):
    list_display = (
        "depot",
        "article",
        "quantite_kg",
        "quantite_commercialisable_kg",
        "cout_moyen_unitaire",
        "devise",
        "seuil_alerte_kg",
        "version",
    )
    list_filter = ("depot",)
    search_fields = ("article__reference",)
    readonly_fields = (
        "quantite_kg",
        "quantite_commercialisable_kg",
        "valeur_stock",
        "cout_moyen_unitaire",
        "devise",
        "version",
    )


class LigneMouvementStockInline(admin.TabularInline):
    model = LigneMouvementStock
    extra = 0
    can_delete = False
    readonly_fields = ("article", "depot", "lot", "sens", "quantite_kg", "cout_unitaire", "devise")


@admin.register(MouvementStock)
class MouvementStockAdmin(admin.ModelAdmin):
    list_display = (
        "type_mouvement",
        "depot_source",
        "depot_destination",
        "reference",
        "date_mouvement",
        "created_by",
    )
    list_filter = ("type_mouvement", "depot_source", "depot_destination")
    search_fields = ("reference", "motif")
    inlines = [LigneMouvementStockInline]


@admin.register(AlerteStock)
class AlerteStockAdmin(admin.ModelAdmin):
    list_display = (
        "depot",
        "article",
        "type_alerte",
        "statut",
        "quantite_actuelle_kg",
        "seuil_alerte_kg",
        "created_at",
    )
    list_filter = ("statut", "type_alerte", "depot")
