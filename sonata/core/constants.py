"""Global constants for Sonata."""

# Pitch names (sharps only)
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Musical defaults
DEFAULT_TEMPO = 120.0
DEFAULT_QUANTIZE_RESOLUTION = 16  # 16th notes
BEATS_PER_MEASURE = 4

# One grid unit in beats (a 16th note when the beat is a quarter)
GRID = 4 / DEFAULT_QUANTIZE_RESOLUTION

# Grand staff
PITCH_SPLIT = 60  # Middle C
TREBLE_RANGE = (60, 84)  # C4 to C6
BASS_RANGE = (36, 60)  # C2 to C4

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127

# Velocity (0-1 scale)
DEFAULT_VELOCITY = 0.7
MIN_VELOCITY = 0.05
MAX_VELOCITY = 1.0
DEFAULT_VOLUME = 0.8

# Audio transcription defaults
DEFAULT_FRAME_SIZE = 2048
DEFAULT_HOP_LENGTH = 512
DEFAULT_ENERGY_THRESHOLD = 0.01
DEFAULT_MIN_FREQ = 60.0
DEFAULT_MAX_FREQ = 2000.0
DEFAULT_MIN_NOTE_SECONDS = 0.12
DEFAULT_TRANSCRIPTION_TEMPO = 100

# Score XML
DIVISIONS_PER_QUARTER = 8

# Page images are rasterized at screen resolution
PIXELS_PER_INCH = 96
POINTS_PER_INCH = 72
