"""
configuration for the sensor board
"""

import chess

# GENERAL CONFIGURATION
START_FEN = chess.STARTING_FEN # position loaded when a new game starts
SHOW_BOARD = True # print the diagnostic board after every change if True
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# SENSOR CONNECTION
SERIAL_PORT = "/dev/ttyACM0" # port for the serial cable to the sensor controller
BAUD_RATE = 115200 # must match the controller firmware
SERIAL_TIMEOUT = 1 # seconds a readline waits before giving up
POLL_DELAY = 0.05 # pause between readings when the line is quiet

# RECONCILIATION
DEFAULT_PROMOTION = "q" # piece used for a promotion nobody chose, None to always wait
WAIT_FOR_PROMOTION_CHOICE = False # hold promotions until a piece is supplied if True
PENDING_TIMEOUT = None # seconds before a half finished move is abandoned, None disables it
