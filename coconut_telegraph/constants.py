"""Shared constant values for the CoconutTelegraph runtime."""

# Dense grammar symbols
MOVE_SYMBOLS = {
    ">": "Forward",
    "^": "Forward",
    "<": "Backward",
    "v": "Backward",
    "/": "Left",
    "\\": "Right",
}
TURN_SYMBOL = "@"
SENSE_SYMBOL = "?"
ACTUATE_SYMBOL = "!"
LOOP_BRACKETS = ("[", "]")
COND_BRACKETS = ("{", "}")
COND_SEPARATOR = ":"
QUOTE = '"'
LONG_WAIT_SYMBOL = "."
SHORT_WAIT_SYMBOL = ","
SEQUENCE_SYMBOL = ";"
HALT_SYMBOL = "#"
PARALLEL_SYMBOL = "|"

# Ultra-dense grammar symbols
ULTRA_ACTUATE = "&"
ULTRA_TURN = "$"
ULTRA_SENSE = "~"
ULTRA_SEQUENCE = ":"
ULTRA_HALT = ";"
ULTRA_LOOP = "*"

LONG_WAIT_MS = 100
SHORT_WAIT_MS = 50
WAIT_CEILING_MS = 100

WHILE_MAX_ITERATIONS = 1000

# Deepest bracket nesting the compiler builds; deeper brackets are dropped
MAX_NESTING_DEPTH = 100

DEFAULT_THRESHOLD = 50
CONDITION_KEY = "s0"

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

SENSOR_KINDS = ["proximity", "temperature", "light", "encoder", "gyro"]
ACTUATOR_KINDS = ["motor", "servo", "led"]

# (low, high) for the simulated sensor source
SENSOR_RANGES = {
    "proximity": (0.0, 100.0),
    "temperature": (20.0, 30.0),
    "light": (0.0, 1000.0),
    "encoder": (0.0, 360.0),
    "gyro": (0.0, 360.0),
}

MOTOR_LIMITS = (-100.0, 100.0)
LED_LIMITS = (0.0, 100.0)
SERVO_MODULUS = 360.0

# Motor powers applied by a Move: (motor 0, motor 1)
MOVE_POWERS = {
    "Forward": (50.0, 50.0),
    "Backward": (-50.0, -50.0),
    "Left": (-30.0, 30.0),
    "Right": (30.0, -30.0),
}

DEFAULT_ACTUATORS = {"motor": 2, "servo": 2, "led": 3}

STATE_TRANSITIONS = [
    ("Idle", "Moving"),
    ("Idle", "Sensing"),
    ("Moving", "Idle"),
    ("Moving", "Turning"),
    ("Moving", "Error"),
    ("Turning", "Moving"),
    ("Turning", "Idle"),
    ("Sensing", "Acting"),
    ("Sensing", "Idle"),
    ("Acting", "Idle"),
    ("Acting", "Sensing"),
    ("Error", "Idle"),
]

REPL_HISTORY_LIMIT = 10

__all__ = [
    "ACTUATE_SYMBOL",
    "ACTUATOR_KINDS",
    "COND_BRACKETS",
    "COND_SEPARATOR",
    "CONDITION_KEY",
    "DEFAULT_ACTUATORS",
    "DEFAULT_THRESHOLD",
    "HALT_SYMBOL",
    "INT32_MAX",
    "INT32_MIN",
    "LED_LIMITS",
    "LONG_WAIT_MS",
    "LONG_WAIT_SYMBOL",
    "LOOP_BRACKETS",
    "MOTOR_LIMITS",
    "MAX_NESTING_DEPTH",
    "MOVE_POWERS",
    "MOVE_SYMBOLS",
    "PARALLEL_SYMBOL",
    "QUOTE",
    "REPL_HISTORY_LIMIT",
    "SENSE_SYMBOL",
    "SENSOR_KINDS",
    "SENSOR_RANGES",
    "SEQUENCE_SYMBOL",
    "SERVO_MODULUS",
    "SHORT_WAIT_MS",
    "SHORT_WAIT_SYMBOL",
    "STATE_TRANSITIONS",
    "TURN_SYMBOL",
    "ULTRA_ACTUATE",
    "ULTRA_HALT",
    "ULTRA_LOOP",
    "ULTRA_SENSE",
    "ULTRA_SEQUENCE",
    "ULTRA_TURN",
    "WAIT_CEILING_MS",
    "WHILE_MAX_ITERATIONS",
]
