"""Entity behaviours: helpers shared by many entities and their update callbacks."""

from __future__ import annotations

from typing import Optional

from .engine import Direction, Entity, EntityBuilder

DUST_FRAMES = 8
DUST_FRAME_DELAY = 2
SQUASHED_LIFETIME = 60


def entity_init(entity: Entity) -> bool:
    """Return True only the first time it is called for ``entity``."""
    if entity.has_property("init"):
        return False
    entity.set_property("init", True)
    return True


def apply_squish(entity: Entity, w: float, h: float) -> tuple[float, float]:
    """Return the sprite size stretched by the entity's squish factor."""
    squish = entity.get_property("squish", 1.0)
    return w - w * (squish - 1), h + h * (squish - 1)


def update_squish(entity: Entity, modifier: float) -> None:
    """Ease the squish factor back toward 1."""
    squish = entity.get_property("squish", 1.0)
    squish += (1 - squish) / modifier
    entity.set_property("squish", squish)


def fall_squish(
    entity: Entity, max_distance: float, max_squish: float, offset: float
) -> None:
    """Track the jump peak and squash the entity when it lands."""
    peak_height = entity.get_property("peak_height", entity.pos_y)
    prev_in_air = entity.get_property("prev_in_air", False)
    if entity.on_ground:
        if prev_in_air:
            prev_in_air = False
            diff = entity.pos_y - peak_height
            squish = 1 - ((diff / max_distance) * max_squish + offset)
            entity.set_property("squish", squish)
        peak_height = entity.pos_y
    else:
        if peak_height > entity.pos_y:
            peak_height = entity.pos_y
        prev_in_air = True
    entity.set_property("peak_height", peak_height)
    entity.set_property("prev_in_air", prev_in_air)


def can_jump(entity: Entity) -> bool:
    """True while on the ground or within a few frames of leaving it."""
    coyote = entity.get_property("coyote", 999)
    coyote = 0 if entity.on_ground else coyote + 1
    entity.set_property("coyote", coyote)
    return coyote < 3


def jump_requested(entity: Entity, jump_pressed: bool) -> bool:
    """True when jump was pressed within the last few frames."""
    jump_timer = entity.get_property("jump_timer", 999)
    jump_timer = 0 if jump_pressed else jump_timer + 1
    entity.set_property("jump_timer", jump_timer)
    return jump_timer < 5


def flip_texture(entity: Entity) -> bool:
    """Return whether the entity faces left, following its horizontal velocity."""
    facing_left = entity.get_property("facing_left", False)
    if entity.vel_x < 0:
        facing_left = True
    if entity.vel_x > 0:
        facing_left = False
    entity.set_property("facing_left", facing_left)
    return facing_left


def animate(
    width: int, height: int, delay: int, frames: int, loop: bool, curr_frame: int
) -> tuple[int, int, int, int]:
    """Return the source rectangle ``(x, y, w, h)`` of a horizontal sprite strip."""
    tick = curr_frame if loop else min(delay * frames - 1, curr_frame)
    frame = (tick // delay) % frames
    return width * frame, 0, width, height


def get_anim_frame(entity: Entity) -> int:
    """Advance and return the entity's animation timer, starting at 0."""
    anim_timer = entity.get_property("anim_timer", -1) + 1
    entity.set_property("anim_timer", anim_timer)
    return anim_timer


def collided(entity: Entity) -> Optional[Direction]:
    """Consume a pending collision and return its direction, or None."""
    if not entity.has_property("collision"):
        return None
    direction = Direction(entity.get_property("collision"))
    entity.del_property("collision")
    return direction


def spawn_dust(
    entity: Entity, builder: EntityBuilder, left: bool, right: bool, speed: float
) -> list[Entity]:
    """Spawn dust puffs at the entity's position moving left and/or right."""
    spawned = []
    for wanted, direction in ((left, -1), (right, 1)):
        if wanted:
            dust = entity.entity_list.create_entity(builder, entity.pos_x, entity.pos_y)
            dust.vel_x = direction * speed
            spawned.append(dust)
    return spawned


def dust_update(entity: Entity) -> None:
    """Slow the puff down and remove it once its animation has played."""
    if entity_init(entity):
        entity.set_property("initial_speed", entity.vel_x)
    # The slowdown is an eighth of the current speed, so the puff decays smoothly.
    entity.vel_x -= entity.vel_x / 8
    if entity.get_property("anim_timer", 0) == DUST_FRAMES * DUST_FRAME_DELAY:
        entity.delete()


def walk_update(entity: Entity) -> None:
    """Walk at ``walk_speed``, turning around when hitting a wall."""
    walk_speed = entity.get_property("walk_speed", 0.0)
    if entity.vel_x == 0:
        entity.vel_x = -walk_speed
    direction = collided(entity)
    if direction is Direction.LEFT:
        entity.vel_x = -walk_speed
    elif direction is Direction.RIGHT:
        entity.vel_x = walk_speed


def gravity_update(entity: Entity) -> None:
    """Accelerate downward by the ``gravity`` property."""
    entity.vel_y += entity.get_property("gravity", 0.0)


def squashed_mouse_update(entity: Entity) -> None:
    """Stay flattened for a while, spring back, then disappear."""
    if entity_init(entity):
        entity.set_property("squish", 0.5)
    timer = entity.get_property("timer", SQUASHED_LIFETIME) - 1
    if timer == 0:
        entity.delete()
    entity.set_property("timer", timer)
    update_squish(entity, 5)


def squash_collision(entity: Entity, collider: Entity) -> None:
    """Let a player landing on top squash ``entity`` into its ``squashed`` form."""
    if collider.get_property("tag", "") != "player":
        return
    if not collider.pos_y < entity.pos_y - entity.height / 2:
        return
    collider.vel_y = -0.2
    squashed = entity.get_property("squashed")
    if squashed is not None:
        entity.entity_list.create_entity(squashed, entity.pos_x, entity.pos_y)
    entity.delete()