from rest_framework.permissions import BasePermission, SAFE_METHODS

from accounts.constants import StockRoles, UserRole


def _role(user):
    if user.is_superuser:
        return UserRole.SUPERADMIN
    return getattr(user, "role", None)


class IsStockActor(BasePermission):
    """
    Lecture du stock : tout utilisateur authentifié ayant un rôle stock.
    Écriture : rôles autorisés à soumettre des mouvements.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return _role(user) in StockRoles.LECTURE

        return _role(user) in StockRoles.MOUVEMENTS


class CanAdjustStock(BasePermission):
    """
    Ajustements manuels, quarantaine, seuils d'alerte et taux de change.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return _role(user) in StockRoles.LECTURE

        return _role(user) in StockRoles.AJUSTEMENTS


class CanReadStock(BasePermission):
    """
    Consultation et calculs sans effet sur le stock (coût de revient).
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        return _role(user) in StockRoles.LECTURE
