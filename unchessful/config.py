import os


WINDOW_WIDTH = 1180
WINDOW_HEIGHT = 860
FPS = 60

# Board squares never grow beyond this many pixels.
MAX_SQUARE_SIZE = 80

TOP_BAR_HEIGHT = 36
FOOTER_HEIGHT = 28
SIDE_PANEL_WIDTH = 330

API_URL = os.environ.get("UNCHESSFUL_API_URL", "https://api.unchessful.games/")
REQUEST_TIMEOUT = float(os.environ.get("UNCHESSFUL_REQUEST_TIMEOUT", "30"))
LOG_LEVEL = os.environ.get("UNCHESSFUL_LOG_LEVEL", "INFO").upper()
