"""
Locale lookup

All user-facing strings (error messages, notices) go through translate().
Catalogs are keyed by locale, then by message key. Unknown keys fall back to
the default locale and finally to the key itself.
"""
from typing import Any, Dict, Optional
from farm_catalog.config import settings

SUPPORTED_LOCALES = ("fr", "en", "ar")

MESSAGES: Dict[str, Dict[str, str]] = {
    "fr": {
        # Titles
        "common.success": "Succès",
        "common.warning": "Attention",
        "common.error": "Erreur",
        # Errors
        "errors.not_found": "{entity} introuvable",
        "errors.version_conflict": "Les données ont été modifiées par un autre utilisateur. Veuillez recharger (version attendue {expected}, actuelle {current}).",
        "errors.duplicate_link": "Cette association existe déjà. Veuillez recharger la liste.",
        "errors.has_dependencies": "Impossible de supprimer : {dependencies}. Désactivez plutôt l'élément.",
        "errors.validation": "Données invalides : {detail}",
        "errors.scope_violation": "Action non autorisée sur cet élément",
        "errors.transport": "Une erreur serveur est survenue. Veuillez réessayer.",
        "errors.unauthorized": "Authentification requise",
        "errors.favorites_limit": "Maximum {limit} favoris par catalogue",
        # Catalog
        "catalog.created": "{entity} créé",
        "catalog.updated": "{entity} mis à jour",
        "catalog.deleted": "{entity} supprimé",
        "catalog.restored": "{entity} restauré",
        "catalog.purged": "{entity} supprimé définitivement",
        # Preferences
        "preferences.selected": "{name} ajouté à votre sélection",
        "preferences.already_selected": "{name} est déjà dans votre liste",
        "preferences.removed": "{name} retiré de vos préférences",
        "preferences.local_created": "{name} ajouté comme donnée locale",
        "preferences.local_removed": "{name} (donnée locale) supprimé",
        "preferences.saved": "Préférences enregistrées",
        "preferences.activated": "{name} activé",
        "preferences.deactivated": "{name} désactivé",
        "preferences.reordered": "Ordre enregistré",
        # Junctions
        "junction.linked": "Association créée",
        "junction.unlinked": "Association supprimée",
        "junction.activated": "Association activée",
        "junction.deactivated": "Association désactivée",
    },
    "en": {
        "common.success": "Success",
        "common.warning": "Warning",
        "common.error": "Error",
        "errors.not_found": "{entity} not found",
        "errors.version_conflict": "The data was modified by another user. Please reload (expected version {expected}, current {current}).",
        "errors.duplicate_link": "This association already exists. Please reload the list.",
        "errors.has_dependencies": "Cannot delete: {dependencies}. Deactivate it instead.",
        "errors.validation": "Invalid data: {detail}",
        "errors.scope_violation": "Action not allowed on this item",
        "errors.transport": "A server error occurred. Please try again.",
        "errors.unauthorized": "Authentication required",
        "errors.favorites_limit": "At most {limit} favorites per catalog",
        "catalog.created": "{entity} created",
        "catalog.updated": "{entity} updated",
        "catalog.deleted": "{entity} deleted",
        "catalog.restored": "{entity} restored",
        "catalog.purged": "{entity} permanently deleted",
        "preferences.selected": "{name} added to your selection",
        "preferences.already_selected": "{name} is already in your list",
        "preferences.removed": "{name} removed from your preferences",
        "preferences.local_created": "{name} added as local data",
        "preferences.local_removed": "{name} (local data) deleted",
        "preferences.saved": "Preferences saved",
        "preferences.activated": "{name} activated",
        "preferences.deactivated": "{name} deactivated",
        "preferences.reordered": "Order saved",
        "junction.linked": "Association created",
        "junction.unlinked": "Association deleted",
        "junction.activated": "Association activated",
        "junction.deactivated": "Association deactivated",
    },
    "ar": {
        "common.success": "نجاح",
        "common.warning": "تنبيه",
        "common.error": "خطأ",
        "errors.not_found": "{entity} غير موجود",
        "errors.version_conflict": "تم تعديل البيانات من طرف مستخدم آخر. يرجى إعادة التحميل (النسخة المتوقعة {expected}، الحالية {current}).",
        "errors.duplicate_link": "هذا الربط موجود مسبقا. يرجى إعادة تحميل القائمة.",
        "errors.has_dependencies": "لا يمكن الحذف: {dependencies}. قم بالتعطيل بدلا من ذلك.",
        "errors.validation": "بيانات غير صالحة: {detail}",
        "errors.scope_violation": "عملية غير مسموح بها على هذا العنصر",
        "errors.transport": "حدث خطأ في الخادم. يرجى المحاولة مجددا.",
        "errors.unauthorized": "المصادقة مطلوبة",
        "errors.favorites_limit": "الحد الأقصى {limit} مفضلات لكل قائمة",
        "catalog.created": "تم إنشاء {entity}",
        "catalog.updated": "تم تحديث {entity}",
        "catalog.deleted": "تم حذف {entity}",
        "catalog.restored": "تمت استعادة {entity}",
        "catalog.purged": "تم حذف {entity} نهائيا",
        "preferences.selected": "تمت إضافة {name} إلى اختيارك",
        "preferences.already_selected": "{name} موجود مسبقا في قائمتك",
        "preferences.removed": "تمت إزالة {name} من تفضيلاتك",
        "preferences.local_created": "تمت إضافة {name} كبيانات محلية",
        "preferences.local_removed": "تم حذف {name} (بيانات محلية)",
        "preferences.saved": "تم حفظ التفضيلات",
        "preferences.activated": "تم تفعيل {name}",
        "preferences.deactivated": "تم تعطيل {name}",
        "preferences.reordered": "تم حفظ الترتيب",
        "junction.linked": "تم إنشاء الربط",
        "junction.unlinked": "تم حذف الربط",
        "junction.activated": "تم تفعيل الربط",
        "junction.deactivated": "تم تعطيل الربط",
    },
}


class _SafeParams(dict):
    """Leaves unknown placeholders untouched instead of raising KeyError"""

    def __missing__(self, key):
        return "{" + key + "}"


def normalize_locale(locale: Optional[str]) -> str:
    """
    Reduces an Accept-Language value (ex: "en-US,en;q=0.9") to a supported locale.
    """
    if not locale:
        return settings.DEFAULT_LOCALE

    for part in locale.split(","):
        tag = part.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in SUPPORTED_LOCALES:
            return primary

    return settings.DEFAULT_LOCALE


def translate(key: str, params: Optional[Dict[str, Any]] = None, locale: Optional[str] = None) -> str:
    """
    Looks up a message and interpolates its parameters.

    Args:
        key: Message key (ex: "errors.not_found")
        params: Values for the {placeholders}
        locale: Target locale; the default locale is used when missing

    Returns:
        The translated message, or the key itself when unknown

    Usage:
        translate("preferences.already_selected", {"name": "Ouled Djellal"}, "fr")
    """
    loc = locale if locale in MESSAGES else settings.DEFAULT_LOCALE
    template = MESSAGES[loc].get(key) or MESSAGES[settings.DEFAULT_LOCALE].get(key)
    if template is None:
        return key
    return template.format_map(_SafeParams(params or {}))


class Translator:
    """Translation function bound to one locale"""

    def __init__(self, locale: Optional[str] = None):
        self.locale = normalize_locale(locale)

    def __call__(self, key: str, params: Optional[Dict[str, Any]] = None) -> str:
        return translate(key, params, self.locale)
