from django.contrib import admin

from .models import Article, Depot


@admin.register(Depot)
class DepotAdmin(admin.ModelAdmin):
    list_display = ("code", "intitule", "actif")
    list_filter = ("actif",)
    search_fields = ("code", "intitule")


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "specification",
        "taille",
        "kg_par_carton",
        "cout_reference",
        "devise_cout_reference",
        "actif",
    )
    list_filter = ("actif", "devise_cout_reference")
    search_fields = ("reference", "specification")
