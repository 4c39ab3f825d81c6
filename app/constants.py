"""Game constants."""

# Game limits
MIN_PLAYERS = 2
DEFAULT_TARGET_SCORE = 75

# Room codes and player ids
ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
PLAYER_ID_LENGTH = 8

# Scoring (actual table in models/card.py)
FIVE_POINTS = 5
TEN_POINTS = 10
ACE_POINTS = 15
QUEEN_OF_SPADES_POINTS = 30
