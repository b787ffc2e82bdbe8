"""
Scope Resolver

Decides whether a catalog row is global (platform reference data, farm_id
NULL) or local (private to one farm) and which actor may do what on it.

The scope is attached once, when a row is fetched (attach_scope), and the
rest of the code works on ScopedEntity instead of re-reading farm_id.
"""
import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Query

from farm_catalog.core.errors import NotFound, ScopeViolation


class Role(str, enum.Enum):
    OPERATOR = "operator"  # platform staff, manages global data
    FARMER = "farmer"      # farm user, manages its preferences and local data


@dataclass(frozen=True)
class Actor:
    role: Role
    farm_id: Optional[int] = None

    @property
    def is_operator(self) -> bool:
        return self.role == Role.OPERATOR


class ScopeKind(str, enum.Enum):
    GLOBAL = "global"
    LOCAL = "local"


@dataclass(frozen=True)
class GlobalScope:
    kind: ClassVar[ScopeKind] = ScopeKind.GLOBAL


@dataclass(frozen=True)
class LocalScope:
    farm_id: int
    kind: ClassVar[ScopeKind] = ScopeKind.LOCAL


Scope = Union[GlobalScope, LocalScope]

GLOBAL = GlobalScope()


def classify(entity: Any) -> Scope:
    """Scope of a catalog row, from its provenance"""
    if entity.farm_id is None:
        return GLOBAL
    return LocalScope(entity.farm_id)


@dataclass(frozen=True)
class ScopedEntity:
    entity: Any
    scope: Scope

    @property
    def id(self) -> int:
        return self.entity.id

    @property
    def is_local(self) -> bool:
        return isinstance(self.scope, LocalScope)


def attach_scope(entity: Any) -> ScopedEntity:
    return ScopedEntity(entity, classify(entity))


class Operation(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    PURGE = "purge"


class ScopeView(str, enum.Enum):
    """Which rows a listing shows"""
    ALL = "all"                   # global + the actor's own local rows
    GLOBAL_ONLY = "global_only"   # admin screens


class ScopeResolver:
    """
    Permission rules

    - global rows: readable by everyone, written by operators only
    - local rows: visible to and written by the owning farm only;
      for anybody else they do not exist (NotFound, not Forbidden)
    """

    def is_visible(self, actor: Actor, scope: Scope) -> bool:
        if isinstance(scope, GlobalScope):
            return True
        return actor.farm_id is not None and actor.farm_id == scope.farm_id

    def can(self, actor: Actor, operation: Operation, scope: Scope) -> bool:
        if not self.is_visible(actor, scope):
            return False
        if operation == Operation.READ:
            return True
        if isinstance(scope, GlobalScope):
            return actor.is_operator
        return not actor.is_operator

    def require(self, actor: Actor, operation: Operation, scoped: ScopedEntity, label: str) -> None:
        """
        Raises NotFound when the row is invisible to the actor and
        ScopeViolation when it is visible but not writable.
        """
        if not self.is_visible(actor, scoped.scope):
            raise NotFound(label, scoped.id)
        if not self.can(actor, operation, scoped.scope):
            raise ScopeViolation(f"{operation.value} not allowed on {scoped.scope.kind.value} {label}")

    def scope_for_create(self, actor: Actor, allows_local: bool, label: str) -> Scope:
        """
        Scope of a row created by the actor: operators create global rows,
        farmers create rows local to their farm.
        """
        if actor.is_operator:
            return GLOBAL
        if not allows_local:
            raise ScopeViolation(f"{label} does not accept local entries")
        if actor.farm_id is None:
            raise ScopeViolation("A farm is required to create local entries")
        return LocalScope(actor.farm_id)

    def visibility_filter(self, query: Query, model, actor: Actor, view: ScopeView = ScopeView.ALL) -> Query:
        """Restricts a catalog query to the rows the actor can see"""
        if view == ScopeView.GLOBAL_ONLY or actor.farm_id is None:
            return query.filter(model.farm_id.is_(None))
        return query.filter(or_(model.farm_id.is_(None), model.farm_id == actor.farm_id))


# Singleton instance
scope_resolver = ScopeResolver()
