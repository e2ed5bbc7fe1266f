# stocks/serializers_stock/mouvement.py

from rest_framework import serializers

from referentiel.constants import Devise
from stocks.constants import TypeMouvement
from stocks.exceptions import ErreurValidation
from stocks.models_stock.mouvement import LigneMouvementStock, MouvementStock
from stocks.services.allocation import AllocationManuelle
from stocks.services.commandes import (
    Ajustement,
    Entree,
    LigneEntree,
    LigneSortie,
    Sortie,
    Transfert,
)
from stocks.services.conversion import en_quantite_kg, kg_depuis_cartons


# ============================================================
# JOURNAL (lecture)
# ============================================================

class LigneMouvementStockSerializer(serializers.ModelSerializer):

    article_reference = serializers.CharField(
        source="article.reference",
        read_only=True
    )

    depot_code = serializers.CharField(
        source="depot.code",
        read_only=True
    )

    numero_lot = serializers.CharField(
        source="lot.numero_lot",
        read_only=True,
        default=None
    )

    class Meta:
        model = LigneMouvementStock
        fields = [
            "id",
            "article",
            "article_reference",
            "depot",
            "depot_code",
            "lot",
            "numero_lot",
            "sens",
            "quantite_kg",
            "cout_unitaire",
            "devise",
        ]


class MouvementStockSerializer(serializers.ModelSerializer):

    lignes = LigneMouvementStockSerializer(many=True, read_only=True)

    created_by = serializers.CharField(
        source="created_by.username",
        read_only=True,
        default=None
    )

    class Meta:
        model = MouvementStock
        fields = [
            "id",
            "type_mouvement",
            "depot_source",
            "depot_destination",
            "reference",
            "motif",
            "date_mouvement",
            "created_by",
            "created_at",
            "lignes",
        ]


# ============================================================
# COMMANDES (écriture)
# ============================================================

class SelectionLotSerializer(serializers.Serializer):
    lot_id = serializers.IntegerField()
    quantite_kg = serializers.DecimalField(max_digits=14, decimal_places=3)


class LigneEntreeSerializer(serializers.Serializer):
    article = serializers.IntegerField()
    quantite_kg = serializers.DecimalField(max_digits=14, decimal_places=3, required=False)
    quantite_cartons = serializers.DecimalField(max_digits=14, decimal_places=3, required=False)
    cout_unitaire = serializers.DecimalField(max_digits=18, decimal_places=6)
    devise = serializers.ChoiceField(choices=Devise.choices, required=False)
    numero_lot = serializers.CharField(max_length=80, required=False, allow_blank=True)
    quarantaine = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs.get("quantite_kg") is None and attrs.get("quantite_cartons") is None:
            raise serializers.ValidationError(
                "Renseigner la quantité en kg ou en cartons."
            )
        return attrs


class LigneSortieSerializer(serializers.Serializer):
    article = serializers.IntegerField()
    quantite_kg = serializers.DecimalField(max_digits=14, decimal_places=3)
    lots = SelectionLotSerializer(many=True, required=False)


class MouvementCommandeSerializer(serializers.Serializer):
    """
    JSON -> commande de mouvement.

    ENTREE     : depot, lignes [{article, quantite_kg | quantite_cartons, cout_unitaire, ...}]
    TRANSFERT  : depot_source, depot_destination, lignes [{article, quantite_kg, lots?}]
    SORTIE     : depot, lignes [{article, quantite_kg, lots}]
    AJUSTEMENT : depot, article, delta_kg, lots? | cout_unitaire
    """

    TYPES = [
        TypeMouvement.ENTREE,
        TypeMouvement.TRANSFERT,
        TypeMouvement.SORTIE,
        TypeMouvement.AJUSTEMENT,
    ]

    type = serializers.ChoiceField(choices=TYPES)

    depot = serializers.IntegerField(required=False)
    depot_source = serializers.IntegerField(required=False)
    depot_destination = serializers.IntegerField(required=False)

    lignes = serializers.ListField(
        child=serializers.DictField(),
        required=False,
    )

    article = serializers.IntegerField(required=False)
    delta_kg = serializers.DecimalField(max_digits=14, decimal_places=3, required=False)
    lots = SelectionLotSerializer(many=True, required=False)
    cout_unitaire = serializers.DecimalField(max_digits=18, decimal_places=6, required=False)
    devise = serializers.ChoiceField(choices=Devise.choices, required=False)
    numero_lot = serializers.CharField(max_length=80, required=False, allow_blank=True)
    quarantaine = serializers.BooleanField(required=False, default=False)

    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    motif = serializers.CharField(required=False, allow_blank=True, default="")
    date_mouvement = serializers.DateTimeField(required=False)

    REQUIS = {
        TypeMouvement.ENTREE: ("depot", "lignes"),
        TypeMouvement.TRANSFERT: ("depot_source", "depot_destination", "lignes"),
        TypeMouvement.SORTIE: ("depot", "lignes"),
        TypeMouvement.AJUSTEMENT: ("depot", "article", "delta_kg"),
    }

    def validate(self, attrs):
        manquants = [
            champ for champ in self.REQUIS[attrs["type"]]
            if attrs.get(champ) in (None, [])
        ]
        if manquants:
            raise serializers.ValidationError(
                {champ: "Ce champ est obligatoire pour ce type de mouvement." for champ in manquants}
            )
        return attrs

    # ------------------------------------------------------------

    def _lignes(self, serializer_class):
        lignes = []
        for index, brute in enumerate(self.validated_data["lignes"]):
            serializer = serializer_class(data=brute)
            if not serializer.is_valid():
                raise serializers.ValidationError({"lignes": {index: serializer.errors}})
            lignes.append(serializer.validated_data)
        return lignes

    @staticmethod
    def _allocation(lots):
        if not lots:
            return None
        return AllocationManuelle(
            [{"lot_id": s["lot_id"], "quantite_kg": s["quantite_kg"]} for s in lots]
        )

    def _quantite_entree(self, ligne, catalogue):
        if ligne.get("quantite_kg") is not None:
            return ligne["quantite_kg"]

        fiche = catalogue.get_article(ligne["article"])
        return en_quantite_kg(kg_depuis_cartons(ligne["quantite_cartons"], fiche.kg_par_carton))

    def to_commande(self, catalogue):
        data = self.validated_data
        commun = {
            "reference": data.get("reference", ""),
            "motif": data.get("motif", ""),
            "date_mouvement": data.get("date_mouvement"),
        }
        type_mouvement = data["type"]

        if type_mouvement == TypeMouvement.ENTREE:
            return Entree(
                depot_id=data["depot"],
                lignes=[
                    LigneEntree(
                        article_id=ligne["article"],
                        quantite_kg=self._quantite_entree(ligne, catalogue),
                        cout_unitaire=ligne["cout_unitaire"],
                        devise=ligne.get("devise"),
                        numero_lot=ligne.get("numero_lot", ""),
                        quarantaine=ligne.get("quarantaine", False),
                    )
                    for ligne in self._lignes(LigneEntreeSerializer)
                ],
                **commun,
            )

        if type_mouvement in (TypeMouvement.TRANSFERT, TypeMouvement.SORTIE):
            lignes = [
                LigneSortie(
                    article_id=ligne["article"],
                    quantite_kg=ligne["quantite_kg"],
                    allocation=self._allocation(ligne.get("lots")),
                )
                for ligne in self._lignes(LigneSortieSerializer)
            ]

            if type_mouvement == TypeMouvement.TRANSFERT:
                return Transfert(
                    depot_source_id=data["depot_source"],
                    depot_destination_id=data["depot_destination"],
                    lignes=lignes,
                    **commun,
                )
            return Sortie(depot_id=data["depot"], lignes=lignes, **commun)

        if type_mouvement == TypeMouvement.AJUSTEMENT:
            return Ajustement(
                depot_id=data["depot"],
                article_id=data["article"],
                delta_kg=data["delta_kg"],
                allocation=self._allocation(data.get("lots")),
                cout_unitaire=data.get("cout_unitaire"),
                devise=data.get("devise"),
                numero_lot=data.get("numero_lot", ""),
                quarantaine=data.get("quarantaine", False),
                **commun,
            )

        raise ErreurValidation("Type de mouvement inconnu.", champ="type")
