from __future__ import annotations

from enum import IntFlag


class Keys(IntFlag):
    """Button state bitmask of a single cursor sample.

    Keyboard presses also set the matching mouse bit (K1 is recorded as M1 | K1), so judging code should look at the
    keyboard bits when it needs to tell the two apart."""

    SMOKE = 2**4
    K2 = 2**3
    K1 = 2**2
    M2 = 2**1
    M1 = 2**0
    NONE = 0

    def pressed(self) -> list[Keys]:
        """Returns a list of all keys being pressed."""
        pressed = []
        for key in (Keys.M1, Keys.M2, Keys.K1, Keys.K2, Keys.SMOKE):
            if self & key:
                pressed.append(key)
        return pressed

    def just_pressed(self, previous: Keys | int, keys: Keys | None = None) -> bool:
        """Takes the previous sample's keys, returns True if any of `keys` went from unpressed -> pressed.

        Defaults to the two hit keys (K1, K2)."""
        if keys is None:
            keys = HIT_KEYS
        return bool(int(self) & int(keys) & ~int(previous))


HIT_KEYS = Keys.K1 | Keys.K2
