import math

GRID_COLS = 12
MAX_ROWS = 14
# Any occupied cell at or below this row index ends the current life.
FAILURE_ROW = 12

BUBBLE_RADIUS = 18
ROW_HEIGHT = BUBBLE_RADIUS * math.sqrt(3)
TOP_MARGIN = 24
# Horizontal gap between the playfield walls and the outermost bubble edge.
SIDE_MARGIN = 24

# Playfield is exactly wide enough for an offset row of GRID_COLS bubbles.
PLAYFIELD_WIDTH = 2 * SIDE_MARGIN + (2 * GRID_COLS + 1) * BUBBLE_RADIUS
PLAYFIELD_HEIGHT = 640
SHOOTER_Y = 590

# Overlap allowed before two bubbles count as touching.
CONTACT_TOLERANCE = 2

MIN_CLUSTER = 3
BOMB_RADIUS = 1
SHOOTER_LOOKAHEAD = 2

BASE_SHOT_SPEED = 520
SHOT_SPEED_PER_LEVEL = 16
MAX_SHOT_SPEED_BONUS = 220
AIM_ANGLE_MIN = -4 * math.pi / 5
AIM_ANGLE_MAX = -math.pi / 8

# Session tuning (caller-side runtime counters).
STARTING_LIVES = 3
MAX_COMBO_MULTIPLIER = 8
FREEZE_DURATION_MS = 5000
AIM_BOOST_DURATION_MS = 7000
FREEZE_DESCENT_MULTIPLIER = 1.65

# Canonical bubble palette; names are the colors stored on cells.
BUBBLE_COLORS = {
    'red': (239, 83, 80),
    'blue': (66, 165, 245),
    'green': (102, 187, 106),
    'yellow': (255, 202, 40),
    'purple': (171, 71, 188),
    'orange': (255, 112, 67),
    'cyan': (38, 198, 218),
    'pink': (236, 64, 122),
}
