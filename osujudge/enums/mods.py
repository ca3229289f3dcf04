from enum import IntFlag


class Mods(IntFlag):
    MIRROR = 2**30
    SCORE_V2 = 2**29
    KEY_2 = 2**28
    KEY_3 = 2**27
    KEY_1 = 2**26
    KEY_COOP = 2**25
    KEY_9 = 2**24
    TARGET_PRACTICE = 2**23
    CINEMA = 2**22
    RANDOM = 2**21
    FADE_IN = 2**20
    KEY_8 = 2**19
    KEY_7 = 2**18
    KEY_6 = 2**17
    KEY_5 = 2**16
    KEY_4 = 2**15
    PERFECT = 2**14
    AUTOPILOT = 2**13
    SPUN_OUT = 2**12
    AUTOPLAY = 2**11
    FLASHLIGHT = 2**10
    NIGHTCORE = 2**9
    HALF_TIME = 2**8
    RELAX = 2**7
    DOUBLE_TIME = 2**6
    SUDDEN_DEATH = 2**5
    HARD_ROCK = 2**4
    HIDDEN = 2**3
    TOUCH_DEVICE = 2**2
    EASY = 2**1
    NO_FAIL = 2**0
    NONE = 0

    def enabled(self) -> list["Mods"]:
        """Returns a list of all mods that are turned on."""
        enabled = []
        for mod in self.__class__:
            if mod and self & mod == mod:
                enabled.append(mod)
        return enabled
