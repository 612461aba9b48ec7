"""Generate readable identifiers for accepted stories.

IDs are picture-book themed adjective-noun pairs with a date prefix and a
short random suffix, e.g. '2026-10-18-fuzzy-otter-3fa9'.
"""

import random
from datetime import date

ADJECTIVES = [
    "bouncy", "brave", "bright", "bubbly", "busy", "calm", "cheeky", "chirpy",
    "cosy", "crunchy", "curly", "dizzy", "dotty", "dozy", "fizzy", "fluffy",
    "frosty", "funny", "fuzzy", "giddy", "glittery", "gentle", "grumpy",
    "happy", "hoppy", "jolly", "jumpy", "lucky", "merry", "misty", "muddy",
    "noisy", "perky", "plucky", "puffy", "quiet", "rosy", "rusty", "sandy",
    "silly", "sleepy", "snappy", "snowy", "speedy", "spotty", "sunny",
    "swishy", "tiny", "twinkly", "wiggly", "windy", "wobbly", "woolly", "zippy",
]

NOUNS = [
    "ant", "badger", "bee", "boat", "bug", "cat", "crab", "cub", "duck",
    "fish", "fox", "frog", "goat", "hen", "hill", "jam", "kite", "lamb",
    "moon", "moth", "mouse", "nest", "otter", "owl", "panda", "pig", "pond",
    "pup", "rabbit", "robin", "rocket", "seal", "shell", "ship", "snail",
    "star", "sun", "tent", "tiger", "toad", "train", "tree", "van", "whale",
    "wolf", "yak", "zebra",
]


def generate_name(seed: int | None = None) -> str:
    """Generate an adjective-noun name like 'fuzzy-otter'.

    If seed is provided, the name is deterministic.
    """
    rng = random.Random(seed)
    return f"{rng.choice(ADJECTIVES)}-{rng.choice(NOUNS)}"


def generate_story_id(seed: int | None = None) -> str:
    """Generate a story ID like '2026-10-18-fuzzy-otter-3fa9'."""
    rng = random.Random(seed)
    name = generate_name(rng.randrange(2**32))
    suffix = f"{rng.getrandbits(16):04x}"
    return f"{date.today().isoformat()}-{name}-{suffix}"
