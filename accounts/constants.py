# accounts/constants.py

class UserRole:
    SUPERADMIN = "SUPERADMIN"
    GESTIONNAIRE_STOCK = "GESTIONNAIRE_STOCK"
    MAGASINIER = "MAGASINIER"
    COMMERCIAL = "COMMERCIAL"
    LECTEUR = "LECTEUR"

    CHOICES = [
        (SUPERADMIN, "Super Admin"),
        (GESTIONNAIRE_STOCK, "Gestionnaire de stock"),
        (MAGASINIER, "Magasinier / pointeur"),
        (COMMERCIAL, "Commercial"),
        (LECTEUR, "Lecteur"),
    ]


class StockRoles:
    # Consultation positions, lots, valorisation
    LECTURE = (
        UserRole.SUPERADMIN,
        UserRole.GESTIONNAIRE_STOCK,
        UserRole.MAGASINIER,
        UserRole.COMMERCIAL,
        UserRole.LECTEUR,
    )

    # Soumission des mouvements
    MOUVEMENTS = (
        UserRole.SUPERADMIN,
        UserRole.GESTIONNAIRE_STOCK,
        UserRole.MAGASINIER,
    )

    # Ajustements, quarantaine, seuils, taux
    AJUSTEMENTS = (
        UserRole.SUPERADMIN,
        UserRole.GESTIONNAIRE_STOCK,
    )
