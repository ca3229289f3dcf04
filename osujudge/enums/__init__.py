from .hit_object import CurveType, HitObjectKind, HitObjectType
from .mode import GameMode
from .mods import Mods
