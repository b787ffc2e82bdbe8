import pytest

from farm_catalog.core.errors import NotFound, ValidationFailure
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.models import Breed, BreedPreference
from farm_catalog.services.catalog_registry import CATALOGS
from farm_catalog.services.preference_service import PreferenceService


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def service(notifier):
    return PreferenceService(CATALOGS["breeds"], notifier, Translator("en"))


class TestSelect:

    def test_select_then_deselect_global(self, db, farm, breeds, service):
        """Deselecting removes the link only; the global entry stays."""
        rembi = breeds["rembi"]

        resolution = service.select(db, farm.id, rembi.id)
        assert rembi.id in resolution.selected_ids
        assert rembi.id not in resolution.available_ids

        resolution = service.deselect(db, farm.id, rembi.id)
        assert rembi.id not in resolution.selected_ids
        assert rembi.id in resolution.available_ids

        db.expire_all()
        stored = db.get(Breed, rembi.id)
        assert stored is not None
        assert not stored.is_deleted
        assert db.query(BreedPreference).count() == 0

    def test_select_is_idempotent(self, db, farm, breeds, service, notifier):
        service.select(db, farm.id, breeds["rembi"].id)
        service.select(db, farm.id, breeds["rembi"].id)

        assert db.query(BreedPreference).count() == 1
        assert [n.level for n in notifier.notices] == ["success", "warning"]
        assert notifier.notices[1].message == "Rembi is already in your list"

    def test_new_selection_goes_last(self, db, farm, breeds, service):
        service.select(db, farm.id, breeds["hamra"].id)
        resolution = service.select(db, farm.id, breeds["rembi"].id)

        assert resolution.selected_ids == [breeds["hamra"].id, breeds["rembi"].id]

    def test_inactive_entry_cannot_be_selected(self, db, farm, make_entry, ovine, service):
        retired = make_entry(Breed, "OLD", "Ancienne", species_id=ovine.id, is_active=False)

        with pytest.raises(ValidationFailure):
            service.select(db, farm.id, retired.id)

    def test_foreign_local_entry_is_not_found(self, db, farm, other_farm, make_entry, ovine, service):
        theirs = make_entry(Breed, "THEIRS", "Leur race", farm_id=other_farm.id, species_id=ovine.id)

        with pytest.raises(NotFound):
            service.select(db, farm.id, theirs.id)

    def test_preferences_are_per_farm(self, db, farm, other_farm, breeds, service):
        service.select(db, farm.id, breeds["rembi"].id)

        resolution = service.resolve_for_farm(db, other_farm.id)

        assert resolution.selected_ids == []
        assert len(resolution.available_ids) == 3

    def test_soft_deleted_global_leaves_the_selection(self, db, farm, breeds, service):
        service.select(db, farm.id, breeds["rembi"].id)
        breeds["rembi"].deleted_at = breeds["rembi"].created_at
        db.commit()

        resolution = service.resolve_for_farm(db, farm.id)

        assert resolution.selected_ids == []
        assert breeds["rembi"].id not in resolution.available_ids


class TestLocalEntries:

    def test_create_local_is_selected(self, db, farm, farmer, ovine, service, notifier):
        scoped, resolution = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        assert scoped.is_local
        assert resolution.selected_ids == [scoped.id]
        assert notifier.notices[-1].level == "success"

    def test_deselect_local_soft_deletes_it(self, db, farm, farmer, ovine, service):
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        resolution = service.deselect(db, farm.id, scoped.id)

        assert scoped.id not in resolution.selected_ids
        db.expire_all()
        assert db.get(Breed, scoped.id).is_deleted

    def test_selecting_own_local_warns(self, db, farm, farmer, ovine, service, notifier):
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        service.select(db, farm.id, scoped.id)

        assert notifier.notices[-1].level == "warning"


class TestFavoritesAndOrder:

    def test_toggle_favorite(self, db, farm, breeds, service):
        service.select(db, farm.id, breeds["rembi"].id)

        resolution = service.toggle_favorite(db, farm.id, breeds["rembi"].id)
        assert resolution.selected[0].is_favorite

        resolution = service.toggle_favorite(db, farm.id, breeds["rembi"].id)
        assert not resolution.selected[0].is_favorite

    def test_favorite_requires_selection(self, db, farm, breeds, service):
        with pytest.raises(NotFound):
            service.toggle_favorite(db, farm.id, breeds["rembi"].id)

    def test_favorites_are_capped(self, db, farm, ovine, make_entry, service):
        entries = [make_entry(Breed, f"B{i}", f"Race {i}", species_id=ovine.id) for i in range(6)]
        service.save_batch(db, farm.id, [e.id for e in entries])
        for entry in entries[:5]:
            service.toggle_favorite(db, farm.id, entry.id)

        with pytest.raises(ValidationFailure) as exc_info:
            service.toggle_favorite(db, farm.id, entries[5].id)

        assert exc_info.value.message_key == "errors.favorites_limit"
        assert service.count_favorites(db, farm.id) == 5

    def test_local_favorite_creates_the_link(self, db, farm, farmer, ovine, service):
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        resolution = service.toggle_favorite(db, farm.id, scoped.id)

        assert resolution.selected[0].is_favorite

    def test_reorder(self, db, farm, breeds, service):
        ids = [breeds["ouled_djellal"].id, breeds["rembi"].id, breeds["hamra"].id]
        service.save_batch(db, farm.id, ids)

        resolution = service.reorder(db, farm.id, list(reversed(ids)))

        assert resolution.selected_ids == list(reversed(ids))

    def test_reorder_refuses_unselected_ids(self, db, farm, breeds, service):
        service.select(db, farm.id, breeds["rembi"].id)

        with pytest.raises(ValidationFailure):
            service.reorder(db, farm.id, [breeds["rembi"].id, breeds["hamra"].id])


class TestBatchAndUsage:

    def test_save_batch_replaces_the_selection(self, db, farm, breeds, service):
        service.select(db, farm.id, breeds["rembi"].id)
        service.toggle_favorite(db, farm.id, breeds["rembi"].id)

        resolution = service.save_batch(db, farm.id, [breeds["hamra"].id, breeds["rembi"].id])

        assert resolution.selected_ids == [breeds["hamra"].id, breeds["rembi"].id]
        kept = [i for i in resolution.selected if i.id == breeds["rembi"].id][0]
        assert kept.is_favorite

    def test_save_batch_empty_list_clears_globals_only(self, db, farm, farmer, breeds, ovine, service):
        service.select(db, farm.id, breeds["rembi"].id)
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        resolution = service.save_batch(db, farm.id, [])

        assert resolution.selected_ids == [scoped.id]

    def test_save_batch_unknown_id(self, db, farm, service):
        with pytest.raises(NotFound):
            service.save_batch(db, farm.id, [999])

    def test_record_usage(self, db, farm, other_farm, breeds, service):
        rembi = breeds["rembi"]
        service.select(db, farm.id, rembi.id)
        service.select(db, other_farm.id, rembi.id)

        assert service.record_usage(db, farm.id, rembi.id) == 1
        assert service.record_usage(db, farm.id, rembi.id) == 2
        assert service.record_usage(db, other_farm.id, rembi.id) == 1

    def test_record_usage_on_local_creates_the_link(self, db, farm, farmer, ovine, service):
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        assert service.record_usage(db, farm.id, scoped.id) == 1

    def test_record_usage_requires_selection(self, db, farm, breeds, service):
        with pytest.raises(NotFound):
            service.record_usage(db, farm.id, breeds["rembi"].id)

    def test_save_batch_refuses_new_inactive_entry(self, db, farm, make_entry, ovine, breeds, service):
        retired = make_entry(Breed, "OLD", "Ancienne", species_id=ovine.id, is_active=False)

        with pytest.raises(ValidationFailure):
            service.save_batch(db, farm.id, [breeds["rembi"].id, retired.id])

        assert db.query(BreedPreference).count() == 0

    def test_save_batch_keeps_an_entry_deactivated_after_selection(self, db, farm, breeds, service):
        rembi = breeds["rembi"]
        service.select(db, farm.id, rembi.id)
        rembi.is_active = False
        db.commit()

        resolution = service.save_batch(db, farm.id, [breeds["hamra"].id, rembi.id])

        assert resolution.selected_ids == [breeds["hamra"].id, rembi.id]


class TestActivation:
    """A preference can be switched off without losing its link."""

    def test_deactivated_preference_leaves_the_active_view(self, db, farm, breeds, service, notifier):
        rembi = breeds["rembi"]
        service.select(db, farm.id, rembi.id)
        service.toggle_favorite(db, farm.id, rembi.id)

        resolution = service.set_active(db, farm.id, rembi.id, False)

        assert rembi.id in resolution.selected_ids
        assert notifier.notices[-1].message == "Rembi deactivated"

        active = service.resolve_for_farm(db, farm.id, active_only=True)
        assert rembi.id not in active.selected_ids
        assert rembi.id not in active.available_ids

        resolution = service.set_active(db, farm.id, rembi.id, True)
        restored = [i for i in resolution.selected if i.id == rembi.id][0]
        assert restored.is_favorite
        assert rembi.id in service.resolve_for_farm(db, farm.id, active_only=True).selected_ids

    def test_unselected_global_is_not_found(self, db, farm, breeds, service):
        with pytest.raises(NotFound):
            service.set_active(db, farm.id, breeds["rembi"].id, False)

    def test_local_entry_gets_its_link(self, db, farm, farmer, ovine, service):
        scoped, _ = service.create_local(db, farmer, {"name_fr": "Race du douar", "species_id": ovine.id})

        service.set_active(db, farm.id, scoped.id, False)

        link = db.query(BreedPreference).filter_by(farm_id=farm.id, catalog_entity_id=scoped.id).one()
        assert link.is_active is False
        assert service.resolve_for_farm(db, farm.id, active_only=True).selected_ids == []
