# shared/constants.py

APP_TITLE = "Cake Tower"
WIDTH, HEIGHT = 360, 522      # play field
FPS = 60

WINDOW_W, WINDOW_H = 680, 600
FIELD_X, FIELD_Y = 20, 40

WHITE = (245, 245, 245)
BLACK = (20, 20, 20)
GRAY = (120, 120, 120)
DARK = (30, 30, 30)
BLUE = (37, 99, 235)
GREEN = (60, 200, 120)
ORANGE = (255, 170, 70)
RED = (240, 80, 80)
SKY = (52, 40, 72)

# local store keys (kept compatible with the browser build)
LOCAL_LEADERBOARD_KEY = "cake_tower_leaderboard_v1"
LOCAL_HIGHSCORE_KEY = "cake_tower_highscore_v1"
LOCAL_NAME_KEY = "cake_tower_playername_v1"
