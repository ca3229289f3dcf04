from .engine import (
    EARLY_GUARD_MULTIPLIER,
    MISS_DISPLAY_SECONDS,
    JudgementConfig,
    JudgementState,
    advance,
    load,
    recent_misses,
    seek,
    set_pause_on_miss,
)
from .judgement_types import JudgementEvent, JudgementKind, Judgements, MissRecord, MissRecords
