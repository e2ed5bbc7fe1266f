# referentiel/catalogue.py
"""
Accès en lecture seule au référentiel articles / dépôts.

Le moteur de stock ne manipule que ces fiches : il ne modifie jamais
le référentiel (CRUD géré ailleurs). Les fiches articles peuvent être
mises en cache (backend Django injecté, TTL court) puisque le facteur
de conditionnement reste corrigeable.
"""

from dataclasses import dataclass
from decimal import Decimal

from referentiel.models import Article, Depot
from stocks.exceptions import ErreurValidation


@dataclass(frozen=True)
class FicheArticle:
    id: int
    reference: str
    libelle: str
    kg_par_carton: Decimal
    cout_reference: Decimal
    devise_cout_reference: str


@dataclass(frozen=True)
class FicheDepot:
    id: int
    code: str
    intitule: str


class CatalogueArticles:

    def __init__(self, cache=None, ttl=300):
        self.cache = cache
        self.ttl = ttl

    def _cle(self, article_id):
        return f"catalogue:article:{article_id}"

    def get_article(self, article_id) -> FicheArticle:
        if self.cache is not None:
            fiche = self.cache.get(self._cle(article_id))
            if fiche is not None:
                return fiche

        try:
            article = Article.objects.get(pk=article_id)
        except (Article.DoesNotExist, ValueError, TypeError):
            raise ErreurValidation(
                f"Article introuvable : {article_id}.",
                champ="article",
            )

        fiche = FicheArticle(
            id=article.id,
            reference=article.reference,
            libelle=article.libelle,
            kg_par_carton=article.kg_par_carton,
            cout_reference=article.cout_reference,
            devise_cout_reference=article.devise_cout_reference,
        )

        if self.cache is not None:
            self.cache.set(self._cle(article_id), fiche, self.ttl)

        return fiche

    def invalider(self, article_id):
        if self.cache is not None:
            self.cache.delete(self._cle(article_id))


class RegistreDepots:

    def get_depot(self, depot_id) -> FicheDepot:
        try:
            depot = Depot.objects.get(pk=depot_id)
        except (Depot.DoesNotExist, ValueError, TypeError):
            raise ErreurValidation(
                f"Dépôt introuvable : {depot_id}.",
                champ="depot",
            )

        return FicheDepot(
            id=depot.id,
            code=depot.code,
            intitule=depot.intitule,
        )
