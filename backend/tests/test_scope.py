import pytest

from farm_catalog.core.errors import NotFound, ScopeViolation
from farm_catalog.models import Species
from farm_catalog.services.scope import (
    GLOBAL, Actor, GlobalScope, LocalScope, Operation, Role, ScopeView,
    attach_scope, classify, scope_resolver,
)


class TestClassify:

    def test_null_farm_is_global(self, make_entry):
        entry = make_entry(Species, "OVI", "Ovin")

        assert classify(entry) == GLOBAL
        assert isinstance(classify(entry), GlobalScope)

    def test_farm_owned_is_local(self, make_entry, farm):
        entry = make_entry(Species, "LOC", "Dromadaire", farm_id=farm.id)

        scoped = attach_scope(entry)
        assert scoped.scope == LocalScope(farm.id)
        assert scoped.is_local


class TestPermissions:
    """Operators own global rows, farms own their local rows."""

    operator = Actor(Role.OPERATOR)
    farmer = Actor(Role.FARMER, farm_id=1)
    neighbour = Actor(Role.FARMER, farm_id=2)

    @pytest.mark.parametrize("operation", [Operation.CREATE, Operation.UPDATE, Operation.DELETE, Operation.PURGE])
    def test_global_writes_are_for_operators(self, operation):
        assert scope_resolver.can(self.operator, operation, GLOBAL)
        assert not scope_resolver.can(self.farmer, operation, GLOBAL)

    def test_everyone_reads_global(self):
        assert scope_resolver.can(self.farmer, Operation.READ, GLOBAL)
        assert scope_resolver.can(self.operator, Operation.READ, GLOBAL)

    def test_local_rows_belong_to_their_farm(self):
        scope = LocalScope(1)

        assert scope_resolver.can(self.farmer, Operation.UPDATE, scope)
        assert not scope_resolver.can(self.neighbour, Operation.READ, scope)
        assert not scope_resolver.can(self.operator, Operation.READ, scope)

    def test_require_hides_foreign_local_rows(self, make_entry, farm, other_farm):
        entry = make_entry(Species, "LOC", "Dromadaire", farm_id=farm.id)
        neighbour = Actor(Role.FARMER, farm_id=other_farm.id)

        with pytest.raises(NotFound):
            scope_resolver.require(neighbour, Operation.READ, attach_scope(entry), "Species")

    def test_require_refuses_farmer_write_on_global(self, make_entry, farmer):
        entry = make_entry(Species, "OVI", "Ovin")

        with pytest.raises(ScopeViolation):
            scope_resolver.require(farmer, Operation.UPDATE, attach_scope(entry), "Species")

    def test_scope_for_create(self):
        assert scope_resolver.scope_for_create(self.operator, True, "Species") == GLOBAL
        assert scope_resolver.scope_for_create(self.farmer, True, "Species") == LocalScope(1)

        with pytest.raises(ScopeViolation):
            scope_resolver.scope_for_create(self.farmer, False, "Country")


class TestVisibilityFilter:

    def test_views(self, db, make_entry, farm, other_farm, farmer):
        make_entry(Species, "OVI", "Ovin")
        make_entry(Species, "MINE", "Dromadaire", farm_id=farm.id)
        make_entry(Species, "THEIRS", "Autruche", farm_id=other_farm.id)

        def codes(actor, view):
            query = scope_resolver.visibility_filter(db.query(Species), Species, actor, view)
            return sorted(s.code for s in query)

        assert codes(farmer, ScopeView.ALL) == ["MINE", "OVI"]
        assert codes(farmer, ScopeView.GLOBAL_ONLY) == ["OVI"]
        assert codes(Actor(Role.OPERATOR), ScopeView.ALL) == ["OVI"]
