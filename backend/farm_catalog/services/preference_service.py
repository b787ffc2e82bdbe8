"""
Preference Service

Persists the farm preference links of one catalog and returns a fresh
Resolution after every mutation. Links belong to a single farm: no version,
concurrent edits from two sessions of the same farm are last-write-wins.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farm_catalog.config import settings
from farm_catalog.core.errors import NotFound, ValidationFailure
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import LoggingNotifier, Notifier
from farm_catalog.services import concurrency
from farm_catalog.services.catalog_registry import CatalogSpec
from farm_catalog.services.catalog_service import get_catalog_service
from farm_catalog.services.resolution import Resolution, resolve
from farm_catalog.services.scope import Actor, ScopedEntity, attach_scope

logger = logging.getLogger(__name__)


class PreferenceService:
    """
    Preference operations of one catalog for one request

    Usage:
        service = PreferenceService(CATALOGS["breeds"], notifier, Translator("fr"))
        resolution = service.select(db, farm_id=3, entity_id=12)
    """

    def __init__(self, spec: CatalogSpec, notifier: Notifier = None, translator: Translator = None):
        if not spec.has_preferences:
            raise ValueError(f"{spec.name} has no preferences")
        self.spec = spec
        self.model = spec.model
        self.link_model = spec.preference_model
        self.notifier = notifier or LoggingNotifier()
        self.t = translator or Translator()

    # ============ LOAD / RESOLVE ============

    def resolve_for_farm(
        self,
        db: Session,
        farm_id: int,
        search: Optional[str] = None,
        active_only: bool = False
    ) -> Resolution:
        model = self.model
        global_entities = (
            db.query(model)
            .filter(model.farm_id.is_(None), model.deleted_at.is_(None))
            .order_by(model.display_order.is_(None), model.display_order, model.name_fr, model.id)
            .all()
        )
        local_entities = (
            db.query(model)
            .filter(model.farm_id == farm_id, model.deleted_at.is_(None))
            .all()
        )
        links = db.query(self.link_model).filter(self.link_model.farm_id == farm_id).all()

        return resolve(
            global_entities,
            links,
            local_entities,
            search=search,
            search_fields=self.spec.search_fields,
            active_only=active_only,
        )

    def _get_entity(self, db: Session, farm_id: int, entity_id: int) -> ScopedEntity:
        """Live entry visible to the farm (global or its own local)"""
        entity = (
            db.query(self.model)
            .filter(self.model.id == entity_id, self.model.deleted_at.is_(None))
            .first()
        )
        if not entity or entity.farm_id not in (None, farm_id):
            raise NotFound(self.spec.label, entity_id)
        return attach_scope(entity)

    def _get_link(self, db: Session, farm_id: int, entity_id: int):
        return (
            db.query(self.link_model)
            .filter(self.link_model.farm_id == farm_id, self.link_model.catalog_entity_id == entity_id)
            .first()
        )

    def _next_order(self, db: Session, farm_id: int) -> int:
        current = (
            db.query(func.max(self.link_model.display_order))
            .filter(self.link_model.farm_id == farm_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    def _ensure_link(self, db: Session, farm_id: int, entity_id: int):
        """Link of the farm for the entry, created (not committed) when missing"""
        link = self._get_link(db, farm_id, entity_id)
        if link is None:
            link = self.link_model(
                farm_id=farm_id,
                catalog_entity_id=entity_id,
                display_order=self._next_order(db, farm_id),
            )
            db.add(link)
            db.flush()
        return link

    def _name(self, entity: Any) -> str:
        return entity.name_for(self.t.locale)

    # ============ SELECT / DESELECT ============

    def select(self, db: Session, farm_id: int, entity_id: int) -> Resolution:
        """
        Adds a global entry to the farm's selection.
        Already selected: nothing changes and a warning notice is emitted.
        """
        scoped = self._get_entity(db, farm_id, entity_id)
        entity = scoped.entity
        name = self._name(entity)

        if scoped.is_local or self._get_link(db, farm_id, entity_id):
            self.notifier.warning(self.t("common.warning"), self.t("preferences.already_selected", {"name": name}))
            return self.resolve_for_farm(db, farm_id)

        if not entity.is_active:
            raise ValidationFailure(f"{self.spec.label} {entity_id} is inactive", field="entity_id")

        db.add(self.link_model(
            farm_id=farm_id,
            catalog_entity_id=entity_id,
            display_order=self._next_order(db, farm_id),
        ))
        try:
            db.commit()
        except IntegrityError:
            # Another session of the same farm selected it first
            db.rollback()
            self.notifier.warning(self.t("common.warning"), self.t("preferences.already_selected", {"name": name}))
            return self.resolve_for_farm(db, farm_id)

        logger.info("[PREFERENCES] Farm %s selected %s %s", farm_id, self.spec.label, entity_id)
        self.notifier.success(self.t("common.success"), self.t("preferences.selected", {"name": name}))
        return self.resolve_for_farm(db, farm_id)

    def deselect(self, db: Session, farm_id: int, entity_id: int) -> Resolution:
        """
        Removes an entry from the selection:
        - local entry: soft-deleted (owning it is what selects it)
        - global entry: only the link is deleted
        """
        scoped = self._get_entity(db, farm_id, entity_id)
        name = self._name(scoped.entity)

        if scoped.is_local:
            concurrency.soft_delete(db, scoped.entity)
            logger.info("[PREFERENCES] Farm %s removed local %s %s", farm_id, self.spec.label, entity_id)
            self.notifier.success(self.t("common.success"), self.t("preferences.local_removed", {"name": name}))
            return self.resolve_for_farm(db, farm_id)

        link = self._get_link(db, farm_id, entity_id)
        if link is None:
            raise NotFound("Preference", entity_id)

        db.delete(link)
        db.commit()

        logger.info("[PREFERENCES] Farm %s deselected %s %s", farm_id, self.spec.label, entity_id)
        self.notifier.success(self.t("common.success"), self.t("preferences.removed", {"name": name}))
        return self.resolve_for_farm(db, farm_id)

    # ============ LOCAL ENTRIES ============

    def create_local(self, db: Session, actor: Actor, data: Dict[str, Any]) -> Tuple[ScopedEntity, Resolution]:
        """
        Creates an entry local to the actor's farm and places it
        at the end of the farm's selection.
        """
        scoped = get_catalog_service(self.spec.name).create(db, actor, data)
        self._ensure_link(db, actor.farm_id, scoped.id)
        db.commit()

        self.notifier.success(
            self.t("common.success"),
            self.t("preferences.local_created", {"name": self._name(scoped.entity)})
        )
        return scoped, self.resolve_for_farm(db, actor.farm_id)

    # ============ FAVORITES / ORDER ============

    def count_favorites(self, db: Session, farm_id: int) -> int:
        return (
            db.query(func.count(self.link_model.id))
            .join(self.model, self.model.id == self.link_model.catalog_entity_id)
            .filter(
                self.link_model.farm_id == farm_id,
                self.link_model.is_favorite.is_(True),
                self.model.deleted_at.is_(None),
            )
            .scalar()
        )

    def toggle_favorite(self, db: Session, farm_id: int, entity_id: int) -> Resolution:
        """
        Flips the favorite flag of a selected entry.

        Raises:
            NotFound: global entry not selected by the farm
            ValidationFailure: the farm already has MAX_FAVORITES favorites
        """
        scoped = self._get_entity(db, farm_id, entity_id)

        if scoped.is_local:
            link = self._ensure_link(db, farm_id, entity_id)
        else:
            link = self._get_link(db, farm_id, entity_id)
            if link is None:
                raise NotFound("Preference", entity_id)

        if not link.is_favorite and self.count_favorites(db, farm_id) >= settings.MAX_FAVORITES:
            db.rollback()
            raise ValidationFailure(
                f"maximum {settings.MAX_FAVORITES} favorites",
                field="is_favorite",
                message_key="errors.favorites_limit",
                limit=settings.MAX_FAVORITES,
            )

        link.is_favorite = not link.is_favorite
        db.commit()

        logger.info(
            "[PREFERENCES] Farm %s %s %s %s as favorite",
            farm_id, "marked" if link.is_favorite else "unmarked", self.spec.label, entity_id
        )
        return self.resolve_for_farm(db, farm_id)

    def set_active(self, db: Session, farm_id: int, entity_id: int, is_active: bool) -> Resolution:
        """
        Activates or deactivates the farm's link to an entry without removing it.
        A deactivated entry keeps its link settings but is
        left out of the active-only views (picker).

        Raises:
            NotFound: global entry not selected by the farm
        """
        scoped = self._get_entity(db, farm_id, entity_id)

        if scoped.is_local:
            link = self._ensure_link(db, farm_id, entity_id)
        else:
            link = self._get_link(db, farm_id, entity_id)
            if link is None:
                raise NotFound("Preference", entity_id)

        link.is_active = is_active
        db.commit()

        name = self._name(scoped.entity)
        key = "preferences.activated" if is_active else "preferences.deactivated"
        logger.info(
            "[PREFERENCES] Farm %s %s %s %s",
            farm_id, "activated" if is_active else "deactivated", self.spec.label, entity_id
        )
        self.notifier.success(self.t("common.success"), self.t(key, {"name": name}))
        return self.resolve_for_farm(db, farm_id)

    def reorder(self, db: Session, farm_id: int, entity_ids: List[int]) -> Resolution:
        """
        Rewrites the display order of the selection.
        entity_ids must be selected entries; their position becomes their order.
        """
        if len(set(entity_ids)) != len(entity_ids):
            raise ValidationFailure("duplicate ids in order", field="entity_ids")

        selected = set(self.resolve_for_farm(db, farm_id).selected_ids)
        unknown = [i for i in entity_ids if i not in selected]
        if unknown:
            raise ValidationFailure(f"not selected: {unknown}", field="entity_ids")

        for position, entity_id in enumerate(entity_ids):
            self._ensure_link(db, farm_id, entity_id).display_order = position
        db.commit()

        self.notifier.success(self.t("common.success"), self.t("preferences.reordered"))
        return self.resolve_for_farm(db, farm_id)

    def save_batch(self, db: Session, farm_id: int, entity_ids: List[int]) -> Resolution:
        """
        Makes the selected global entries equal to entity_ids (in that order):
        missing links are deleted, existing ones kept, new ones created.
        Local entries are not touched. As with select, an inactive entry can
        only stay in the selection, it cannot be added.
        """
        if len(set(entity_ids)) != len(entity_ids):
            raise ValidationFailure("duplicate ids in selection", field="entity_ids")

        model = self.model
        active_by_id = {}
        if entity_ids:
            rows = db.query(model.id, model.is_active).filter(
                model.id.in_(entity_ids),
                model.farm_id.is_(None),
                model.deleted_at.is_(None),
            )
            active_by_id = {row.id: row.is_active for row in rows}
        missing = [i for i in entity_ids if i not in active_by_id]
        if missing:
            raise NotFound(self.spec.label, missing[0])

        global_links = (
            db.query(self.link_model)
            .join(model, model.id == self.link_model.catalog_entity_id)
            .filter(self.link_model.farm_id == farm_id, model.farm_id.is_(None))
            .all()
        )
        by_entity = {link.catalog_entity_id: link for link in global_links}

        inactive = [i for i in entity_ids if not active_by_id[i] and i not in by_entity]
        if inactive:
            raise ValidationFailure(f"{self.spec.label} {inactive[0]} is inactive", field="entity_ids")

        requested = set(entity_ids)
        for entity_id, link in by_entity.items():
            if entity_id not in requested:
                db.delete(link)

        for position, entity_id in enumerate(entity_ids):
            link = by_entity.get(entity_id)
            if link is None:
                db.add(self.link_model(farm_id=farm_id, catalog_entity_id=entity_id, display_order=position))
            else:
                link.display_order = position
        db.commit()

        logger.info("[PREFERENCES] Farm %s saved %s %s preferences", farm_id, len(entity_ids), self.spec.name)
        self.notifier.success(self.t("common.success"), self.t("preferences.saved"))
        return self.resolve_for_farm(db, farm_id)

    # ============ USAGE ============

    def record_usage(self, db: Session, farm_id: int, entity_id: int) -> int:
        """
        usage_count += 1 on the farm's link (created for local entries).

        Returns:
            The new usage count
        """
        scoped = self._get_entity(db, farm_id, entity_id)

        updated = (
            db.query(self.link_model)
            .filter(self.link_model.farm_id == farm_id, self.link_model.catalog_entity_id == entity_id)
            .update({self.link_model.usage_count: self.link_model.usage_count + 1}, synchronize_session=False)
        )
        if not updated:
            if not scoped.is_local:
                raise NotFound("Preference", entity_id)
            link = self._ensure_link(db, farm_id, entity_id)
            link.usage_count = 1
        db.commit()

        return self._get_link(db, farm_id, entity_id).usage_count
