"""Entities and the lists that hold and update them."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Any, Optional


class EntityFlags(IntFlag):
    """Behaviour flags of an entity."""

    NONE = 0
    SOLID_HITBOX = 1 << 0
    SHOULD_DELETE = 1 << 1
    DISABLE_COLLISION = 1 << 2
    ON_GROUND = 1 << 3


class Direction(IntEnum):
    """Side on which a collision happened."""

    UP = 0
    LEFT = 1
    DOWN = 2
    RIGHT = 3


UpdateCallback = Callable[["Entity"], None]
CollisionCallback = Callable[["Entity", "Entity"], None]
TextureCallback = Callable[["Entity"], Any]

_MISSING = object()


@dataclass
class EntityBuilder:
    """Template from which entities of one kind are created."""

    width: float = 0.0
    height: float = 0.0
    flags: EntityFlags = EntityFlags.NONE
    properties: dict[str, Any] = field(default_factory=dict)
    update_callbacks: list[UpdateCallback] = field(default_factory=list)
    collision_callbacks: list[CollisionCallback] = field(default_factory=list)
    texture_callback: Optional[TextureCallback] = None


class Entity:
    """A moving object with a hitbox and a bag of named properties."""

    def __init__(
        self, builder: EntityBuilder, entity_list: "EntityList", x: float, y: float
    ) -> None:
        self.builder = builder
        self.entity_list = entity_list
        self.pos_x = x
        self.pos_y = y
        self.vel_x = 0.0
        self.vel_y = 0.0
        self.width = builder.width
        self.height = builder.height
        self.flags = EntityFlags(builder.flags)
        self.properties: dict[str, Any] = dict(builder.properties)

    def __repr__(self) -> str:
        return f"Entity(x={self.pos_x!r}, y={self.pos_y!r}, flags={self.flags!r})"

    @property
    def deleted(self) -> bool:
        return bool(self.flags & EntityFlags.SHOULD_DELETE)

    @property
    def on_ground(self) -> bool:
        return bool(self.flags & EntityFlags.ON_GROUND)

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the property ``name``, or ``default`` when it is not set."""
        return self.properties.get(name, default)

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def set_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def del_property(self, name: str) -> None:
        """Remove the property ``name``; does nothing when it is not set."""
        self.properties.pop(name, None)

    def delete(self) -> None:
        """Mark the entity for removal at the end of its list's update."""
        self.flags |= EntityFlags.SHOULD_DELETE


class EntityList:
    """An ordered collection of entities updated together."""

    def __init__(self, tilemap: Any = None) -> None:
        self.tilemap = tilemap
        self._entities: list[Entity] = []

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities))

    def create_entity(self, builder: EntityBuilder, x: float, y: float) -> Entity:
        """Create an entity from ``builder`` at (x, y) and add it to this list."""
        entity = Entity(builder, self, x, y)
        self._entities.append(entity)
        return entity

    def update(self) -> None:
        """Run update callbacks, move entities by their velocity, drop deleted ones.

        Entities created during the update are kept but first updated next frame.
        """
        current = list(self._entities)
        for entity in current:
            for callback in entity.builder.update_callbacks:
                if entity.deleted:
                    break
                callback(entity)
        for entity in current:
            if not entity.deleted:
                entity.pos_x += entity.vel_x
                entity.pos_y += entity.vel_y
        self._entities = [e for e in self._entities if not e.deleted]