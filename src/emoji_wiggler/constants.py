"""Global constants for the application."""

# Animation defaults
DEFAULT_FRAME_COUNT = 20  # Frames per loop
DEFAULT_FRAME_INTERVAL_MS = 50  # Milliseconds each frame is shown (20 fps)
DEFAULT_WIGGLE_INTENSITY = 1.0  # Multiplier on the base wiggle amplitude
DEFAULT_IMAGE_SCALE = 0.8  # Image size relative to the canvas, leaves room to move
DEFAULT_MAX_DIMENSION = 128  # Largest canvas side in pixels
DEFAULT_SIZE_BUDGET_BYTES = 128 * 1024  # Hard ceiling on the encoded GIF

# Motion settings
BASE_AMPLITUDE_RATIO = 0.06  # Base offset amplitude as a fraction of the canvas side
TERM_WEIGHTS = (1.0, 0.5, 0.25)  # Weights of the three wiggle terms
# Disjoint bands of whole cycles per loop for the three wiggle terms
FREQUENCY_BANDS = ((1.0, 2.0), (3.0, 4.0), (5.0, 7.0))

# Encoding settings
PALETTE_LADDER = (256, 128, 64, 32, 16, 8, 4)  # Palette sizes tried, largest first
DITHER_MIN_COLORS = 16  # Below this palette size dithering is switched off
MAX_ENCODE_ATTEMPTS = len(PALETTE_LADDER)
ALPHA_THRESHOLD = 128  # Pixels with lower alpha become the transparent index

# Controller settings
DEBOUNCE_MS = 500  # Quiet period before a parameter change starts a new run

# Output settings
DEFAULT_OUTPUT_NAME = "wiggling-emoji.gif"
DATAURL_MARKER = "<!-- emoji-wiggler -->"
