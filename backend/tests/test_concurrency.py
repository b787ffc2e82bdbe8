import pytest

from farm_catalog.core.errors import NotFound, ValidationFailure, VersionConflict
from farm_catalog.models import Breed, Species
from farm_catalog.services import concurrency


class TestVersionedUpdate:
    """Compare-and-swap on the version column."""

    def test_success_bumps_version_by_one(self, db, breeds):
        breed = breeds["rembi"]
        assert breed.version == 1

        concurrency.versioned_update(db, breed, {"name_en": "Rembi sheep"}, 1)

        assert breed.version == 2
        assert breed.name_en == "Rembi sheep"

    def test_two_editors_on_the_same_version(self, db, breeds):
        """
        Operator A and B both read version 1. A saves first;
        B is refused with the current version and nothing of B is written.
        """
        breed = breeds["ouled_djellal"]

        concurrency.versioned_update(db, breed, {"description": "from A"}, 1)

        with pytest.raises(VersionConflict) as exc_info:
            concurrency.versioned_update(db, breed, {"description": "from B"}, 1)

        assert exc_info.value.expected == 1
        assert exc_info.value.current == 2
        assert exc_info.value.extra() == {"currentVersion": 2}

        db.expire_all()
        stored = db.get(Breed, breed.id)
        assert stored.description == "from A"
        assert stored.version == 2

    def test_stale_version_then_retry(self, db, breeds):
        """Server holds v4, client sends v3, re-fetches and retries with v4."""
        breed = breeds["rembi"]
        for version in (1, 2, 3):
            concurrency.versioned_update(db, breed, {"display_order": version}, version)
        assert breed.version == 4

        with pytest.raises(VersionConflict) as exc_info:
            concurrency.versioned_update(db, breed, {"name_en": "Rembi"}, 3)
        assert exc_info.value.current == 4

        db.expire_all()
        fresh = db.get(Breed, breed.id)
        assert fresh.version == 4

        concurrency.versioned_update(db, fresh, {"name_en": "Rembi"}, 4)
        assert fresh.version == 5

    def test_retry_with_fresh_version(self, db, breeds):
        breed = breeds["hamra"]
        concurrency.versioned_update(db, breed, {"description": "v2"}, 1)

        concurrency.versioned_update(db, breed, {"description": "v3"}, 2)

        assert breed.version == 3
        assert breed.description == "v3"

    def test_soft_deleted_row_cannot_be_updated(self, db, breeds):
        breed = breeds["rembi"]
        concurrency.soft_delete(db, breed)

        with pytest.raises(NotFound):
            concurrency.versioned_update(db, breed, {"description": "x"}, breed.version)

    def test_scope_is_immutable(self, db, breeds, farm):
        with pytest.raises(ValidationFailure):
            concurrency.versioned_update(db, breeds["rembi"], {"farm_id": farm.id}, 1)

    def test_unknown_field_is_refused(self, db, breeds):
        with pytest.raises(ValidationFailure) as exc_info:
            concurrency.versioned_update(db, breeds["rembi"], {"colour": "red"}, 1)

        assert exc_info.value.field == "colour"

    def test_duplicate_code_rolls_back(self, db, breeds):
        breed = breeds["rembi"]

        with pytest.raises(ValidationFailure):
            concurrency.versioned_update(db, breed, {"code": "HAMRA"}, 1)

        db.expire_all()
        assert db.get(Breed, breed.id).version == 1


class TestSoftDelete:

    def test_delete_and_restore_are_idempotent(self, db, ovine):
        assert concurrency.soft_delete(db, ovine) is True
        assert ovine.is_deleted
        assert concurrency.soft_delete(db, ovine) is False

        assert concurrency.restore(db, ovine) is True
        assert not ovine.is_deleted
        assert concurrency.restore(db, ovine) is False

    def test_each_change_is_a_new_version(self, db, ovine):
        concurrency.soft_delete(db, ovine)
        concurrency.restore(db, ovine)

        assert db.get(Species, ovine.id).version == 3

    def test_soft_delete_from_a_stale_copy_keeps_versions_monotonic(self, db, second_db, ovine):
        """
        B loaded v1, A saved v2, then B deletes from its stale copy:
        the deletion becomes v3, never a second v2.
        """
        stale = second_db.get(Species, ovine.id)
        assert stale.version == 1

        concurrency.versioned_update(db, ovine, {"name_en": "Sheep (ovine)"}, 1)
        assert ovine.version == 2

        assert concurrency.soft_delete(second_db, stale) is True
        assert stale.version == 3

        db.expire_all()
        stored = db.get(Species, ovine.id)
        assert stored.version == 3
        assert stored.name_en == "Sheep (ovine)"
        assert stored.is_deleted

    def test_stale_copy_sees_the_stored_deletion_state(self, db, second_db, ovine):
        stale = second_db.get(Species, ovine.id)

        concurrency.soft_delete(db, ovine)
        assert ovine.version == 2

        # Already deleted in the database: nothing written
        assert concurrency.soft_delete(second_db, stale) is False
        assert stale.version == 2
        assert stale.is_deleted

        assert concurrency.restore(second_db, stale) is True
        db.expire_all()
        assert db.get(Species, ovine.id).version == 3
