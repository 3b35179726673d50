# bupcat

This is the core of a small side-scrolling platformer, packaged as a plain Python library. It has no runtime dependencies.

## Modules

- `bupcat.serial` is a schema-driven binary serializer.
  - You describe an object type with `Kind`, `Struct` and `Array`.
  - You register the type with a `Registry`.
  - `Registry.serialize(name, value)` turns a value into bytes, and `Registry.deserialize(data)` returns `(name, value)`.
  - `Registry.encoded_size` gives the encoded length.
  - Encoded data starts with a little-endian `uint32` type id. Strings are NUL-terminated and limited to 1023 bytes. Arrays carry a `uint32` element count.
  - Bad values or bad data raise `SerialError`, which is a `ValueError`.
- `bupcat.packets` holds the game's network messages: `Connect`, `Disconnect`, `PlayerID`, `Input` and `RenderedScreen`.
  - Each message is a `Packet(kind, value)`.
  - Build messages with `packet_connect`, `packet_disconnect`, `packet_player_id`, `packet_input` and `packet_rendered_screen`.
  - Convert them with `encode_packet` and `decode_packet`.
  - `build_registry()` returns the registry of all packet types.
- `bupcat.drawlist` provides `DrawList`, which collects `DrawCommand` quads.
  - Each quad is tinted with the current RGBA colour, set through `set_color`.
  - `render(renderer)` replays the quads, in order, through a callback.
- `bupcat.font` handles inline text markup.
  - `$$` writes a literal `$`.
  - `${^N}` sets the scale and `${%N}` sets the opacity.
  - `${#RRGGBB}` sets the colour and `${_N}` sets the spacing.
  - `${&...}` turns on rainbow colours and `${~...}` turns on wavy text.
  - `${!...}` resets styles.
  - `parse_text_graph` splits text into `TextSegment`s.
  - `render_text(drawlist, x, y, text, timer, texture)` appends one glyph quad per character. Glyphs are 10×10 cells, 12 per row, taken from the font texture.
  - `hsv_to_rgb` converts colours.
- `bupcat.camera` provides `Camera`, which eases a tenth of the way toward its focus point on each `update()`.
  - It has up to 8 concurrent screenshakes.
  - `snap()` jumps straight to the focus point.
  - `CameraBounds` is a node of a bounds graph.
- `bupcat.input` provides `InputState`, which holds per-player button bit masks.
  - `is_down`, `is_up`, `is_pressed` and `is_released` query the buttons.
  - `set_buttons` and `apply_packet` record a new frame.
- `bupcat.engine` provides `Entity`, `EntityList`, `EntityBuilder`, `EntityFlags` and `Direction`.
  - Entities carry named properties.
  - `EntityList.update()` runs update callbacks, then moves entities by their velocity, then drops deleted ones.
- `bupcat.entities` holds reusable behaviours:
  - squish (`apply_squish`, `update_squish`, `fall_squish`)
  - coyote time (`can_jump`)
  - jump buffering (`jump_requested`)
  - sprite facing and animation (`flip_texture`, `animate`, `get_anim_frame`)
  - collision consumption (`collided`)
  - dust puffs (`spawn_dust`, `dust_update`)
  - walking, gravity and squashing (`walk_update`, `gravity_update`, `squashed_mouse_update`, `squash_collision`)
- `bupcat.network` handles the network side.
  - `frame` and `read_frame` do length-prefixed TCP framing.
  - `PacketQueue` is thread-safe. It drops packets of unknown type and hands decoded packets to a handler in `process()`.
  - `Server` is threaded and accepts up to 16 connections. Its default port is 42069.
  - `Client` is threaded. It connects to an IPv4 address or `localhost`, and a disconnect packet from the server ends its reader.

## Example

```python
from bupcat.packets import packet_input, encode_packet, decode_packet

data = encode_packet(packet_input(1, 0b101))
packet = decode_packet(data)
print(packet.kind, packet.value)   # Input {'player': 1, 'input': 5}
```

## What it does not do

This package is a library only. It has none of the following:

- a game executable or command
- a window, graphics or audio output
- asset loading
- tilemaps or tilesets
- level files
- the player character's own behaviour

Rendering stops at a `DrawList`, and you supply the callback that actually draws. Textures are opaque objects that the caller passes in.

## Running the tests

```
pip install -e .[test]
pytest
```