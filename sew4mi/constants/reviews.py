MAX_LINKS_IN_REVIEW = 2
CAPS_RATIO_THRESHOLD = 0.7
CAPS_MIN_LETTERS = 10

RESPONSE_MIN_LENGTH = 10
RESPONSE_MAX_LENGTH = 1000
