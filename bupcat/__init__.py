"""Core game systems for a side-scrolling platformer: serialization, packets,
draw lists, text markup, camera, input, entities and TCP networking."""

__version__ = "0.1.0"
__all__ = [
    "camera",
    "drawlist",
    "engine",
    "entities",
    "font",
    "input",
    "network",
    "packets",
    "serial",
]