"""Measure layout shared by the notation encoders.

Both the ABC and MusicXML encoders walk each voice measure by measure with
the same greedy rule:
- Notes starting exactly at the cursor form one simultaneity (a chord when
  more than one) lasting as long as its longest note.
- Otherwise a rest fills the gap to the next onset inside the measure, or to
  the measure end.

Keeping the walk here guarantees both formats agree on measure count and rest
placement.
"""

import bisect
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..core import Note
from ..core.constants import BEATS_PER_MEASURE, GRID


@dataclass
class MeasureEvent:
    """One simultaneity or rest, positioned in grid units from the piece start."""

    start: int
    length: int
    notes: List[Note] = field(default_factory=list)

    @property
    def is_rest(self) -> bool:
        return not self.notes

    @property
    def is_chord(self) -> bool:
        return len(self.notes) > 1


@dataclass
class VoiceTimeline:
    """Notes of one voice indexed by onset (grid units)."""

    by_time: Dict[int, List[Note]]
    onsets: List[int]
    end: int  # last note end, grid units


class MeasureLayout:
    """Greedy measure filler over a fixed grid."""

    def __init__(
        self,
        beats_per_measure: int = BEATS_PER_MEASURE,
        grid: float = GRID,
        min_measures: int = 1,
    ):
        """
        Initialize MeasureLayout.

        Args:
            beats_per_measure: Beats in one measure (4 for 4/4)
            grid: Grid unit in beats
            min_measures: Lower bound on the reported measure count
        """
        self.beats_per_measure = beats_per_measure
        self.grid = grid
        self.min_measures = min_measures

    @property
    def units_per_measure(self) -> int:
        return int(round(self.beats_per_measure / self.grid))

    def time_units(self, beats: float) -> int:
        return max(0, math.floor(beats / self.grid + 0.5))

    def duration_units(self, beats: float) -> int:
        return max(1, math.floor(beats / self.grid + 0.5))

    def timeline(self, notes: Sequence[Note]) -> VoiceTimeline:
        by_time: Dict[int, List[Note]] = {}
        end = 0
        for note in sorted(notes, key=lambda n: (n.time, n.pitch)):
            start = self.time_units(note.time)
            by_time.setdefault(start, []).append(note)
            end = max(end, start + self.duration_units(note.duration))
        return VoiceTimeline(by_time=by_time, onsets=sorted(by_time), end=end)

    def measure_count(self, *voices: VoiceTimeline) -> int:
        """Measures needed to hold every voice, never below ``min_measures``."""
        max_unit = max([v.end for v in voices] + [self.units_per_measure])
        return max(self.min_measures, math.ceil(max_unit / self.units_per_measure))

    def fill_measure(self, voice: VoiceTimeline, index: int) -> List[MeasureEvent]:
        """Split one measure of a voice into simultaneities and rests."""
        events: List[MeasureEvent] = []
        cursor = index * self.units_per_measure
        measure_end = cursor + self.units_per_measure

        while cursor < measure_end:
            notes = voice.by_time.get(cursor)
            if notes:
                length = max(self.duration_units(n.duration) for n in notes)
                events.append(MeasureEvent(start=cursor, length=length, notes=list(notes)))
                cursor += length
                continue

            i = bisect.bisect_right(voice.onsets, cursor)
            next_onset = voice.onsets[i] if i < len(voice.onsets) else measure_end
            gap = min(next_onset, measure_end) - cursor
            events.append(MeasureEvent(start=cursor, length=gap))
            cursor += gap

        return events
