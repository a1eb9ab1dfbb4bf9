"""A small entity-component store holding the state of a simulation."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass
class NewlyCreated:
    """Marks an entity that was added to the simulation this frame."""


@dataclass
class ToBeDestroyed:
    """Marks an entity for removal at the next call to ``World.maintain``."""


class World:
    """Entities, their components and the global resources of a simulation.

    Entities are integer identifiers.  Components are plain objects stored per
    type, one of each type per entity.  Structural changes requested through
    ``lazy_insert``, ``lazy_remove`` and ``delete`` take effect on ``maintain``.
    """

    def __init__(self) -> None:
        self._next_id = 0
        self._alive: set[int] = set()
        self._storages: defaultdict[type, dict[int, Any]] = defaultdict(dict)
        self._resources: dict[type, Any] = {}
        self._pending: list[tuple[str, int, Any]] = []
        self._to_delete: set[int] = set()

    # -- entities -----------------------------------------------------------

    def create_entity(self, *args: Any) -> int:
        """Create an entity carrying the given components and return its id."""
        entity = self._next_id
        self._next_id += 1
        self._alive.add(entity)
        for component in args:
            self.insert(entity, component)
        return entity

    def is_alive(self, entity: int) -> bool:
        return entity in self._alive

    def _check_alive(self, entity: int) -> None:
        if entity not in self._alive:
            raise KeyError(f"entity {entity} does not exist")

    def delete(self, entity: int) -> None:
        """Schedule an entity for deletion at the next ``maintain``."""
        self._check_alive(entity)
        self._to_delete.add(entity)

    # -- components ---------------------------------------------------------

    def insert(self, entity: int, component: Any) -> None:
        """Attach a component, replacing any of the same type."""
        self._check_alive(entity)
        self._storages[type(component)][entity] = component

    def remove(self, entity: int, component_type: type) -> Any:
        """Detach and return a component, or None if the entity had none."""
        return self._storages.get(component_type, {}).pop(entity, None)

    def get(self, entity: int, component_type: type) -> Any:
        """Return the entity's component of the given type, or None."""
        return self._storages.get(component_type, {}).get(entity)

    def has(self, entity: int, component_type: type) -> bool:
        return entity in self._storages.get(component_type, {})

    def query(
        self, *args: type, without: tuple[type, ...] | type = ()
    ) -> Iterator[tuple[Any, ...]]:
        """Yield ``(entity, *components)`` for entities having every type in
        ``args`` and none of the types in ``without``, in entity order."""
        if not args:
            raise TypeError("query needs at least one component type")
        if isinstance(without, type):
            without = (without,)
        storages = [self._storages.get(t, {}) for t in args]
        excluded = [self._storages.get(t, {}) for t in without]
        primary = min(storages, key=len)
        for entity in sorted(primary):
            if all(entity in s for s in storages) and not any(
                entity in s for s in excluded
            ):
                yield (entity, *(s[entity] for s in storages))

    # -- deferred updates ---------------------------------------------------

    def lazy_insert(self, entity: int, component: Any) -> None:
        """Insert a component at the next ``maintain``."""
        self._pending.append(("insert", entity, component))

    def lazy_remove(self, entity: int, component_type: type) -> None:
        """Remove a component at the next ``maintain``."""
        self._pending.append(("remove", entity, component_type))

    def maintain(self) -> None:
        """Apply deferred component changes, then deferred deletions."""
        pending, self._pending = self._pending, []
        for action, entity, payload in pending:
            if entity not in self._alive:
                continue
            if action == "insert":
                self.insert(entity, payload)
            else:
                self.remove(entity, payload)
        doomed, self._to_delete = self._to_delete, set()
        for entity in doomed:
            for storage in self._storages.values():
                storage.pop(entity, None)
            self._alive.discard(entity)

    # -- resources ----------------------------------------------------------

    def insert_resource(self, resource: Any) -> None:
        """Store a global resource, replacing any of the same type."""
        self._resources[type(resource)] = resource

    def resource(self, resource_type: type) -> Any:
        """Return the resource of the given type; KeyError if absent."""
        try:
            return self._resources[resource_type]
        except KeyError:
            raise KeyError(f"no resource of type {resource_type.__name__}") from None

    def has_resource(self, resource_type: type) -> bool:
        return resource_type in self._resources


def deflag_new_atoms(world: World) -> None:
    """Schedule removal of the ``NewlyCreated`` marker from every entity."""
    for entity, _ in world.query(NewlyCreated):
        world.lazy_remove(entity, NewlyCreated)


def delete_to_be_destroyed(world: World) -> None:
    """Schedule deletion of every entity marked ``ToBeDestroyed``."""
    for entity, _ in world.query(ToBeDestroyed):
        world.delete(entity)