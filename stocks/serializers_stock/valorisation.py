# stocks/serializers_stock/valorisation.py

from rest_framework import serializers

from referentiel.constants import Devise


class CoutRevientRequestSerializer(serializers.Serializer):
    depot = serializers.IntegerField()
    article = serializers.IntegerField()
    devise = serializers.ChoiceField(choices=Devise.choices, required=False)

    # Surcharges des paramètres par défaut
    prix_smcp = serializers.DecimalField(max_digits=14, decimal_places=4, required=False)
    frais_conteneur = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0),
        required=False,
    )
    tonnes_par_conteneur = serializers.DecimalField(
        max_digits=8, decimal_places=3, required=False, min_value=0
    )
    fret_par_tonne = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, min_value=0
    )
    taux_retenue_pct = serializers.DecimalField(
        max_digits=6, decimal_places=3, required=False, min_value=0
    )


class CoutRevientSerializer(serializers.Serializer):
    devise = serializers.CharField()
    frais_conteneur_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
    fret_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
    retenue_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
    frais_par_tonne_devise_frais = serializers.DecimalField(max_digits=18, decimal_places=2)
    frais_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
    cump_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
    cout_revient_par_tonne = serializers.DecimalField(max_digits=18, decimal_places=2)
