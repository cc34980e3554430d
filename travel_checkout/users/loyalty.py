"""
Niveaux de fidélité calculés à partir du cumul des dépenses (montants en VND).
"""
from typing import Dict

BRONZE = "bronze"
SILVER = "silver"
GOLD = "gold"
DEFAULT = "default"

SILVER_THRESHOLD = 1_000_000
GOLD_THRESHOLD = 3_000_000

LEVEL_NUMBERS: Dict[int, str] = {1: BRONZE, 2: SILVER, 3: GOLD}


def calculate_level(total_spent: float) -> str:
    if total_spent >= GOLD_THRESHOLD:
        return GOLD
    if total_spent >= SILVER_THRESHOLD:
        return SILVER
    if total_spent > 0:
        return BRONZE
    return DEFAULT

def level_from_number(level: int) -> str:
    """Niveau stocké en base (0..3) -> nom."""
    return LEVEL_NUMBERS.get(int(level or 0), DEFAULT)

def calculate_progress(total_spent: float, level: str) -> float:
    """
    Progression (0-100) vers le niveau suivant.
    - gold: toujours 100; default: 0
    """
    if level == GOLD:
        return 100.0
    if level == BRONZE:
        progress = total_spent / SILVER_THRESHOLD * 100
    elif level == SILVER:
        progress = (total_spent - SILVER_THRESHOLD) / (GOLD_THRESHOLD - SILVER_THRESHOLD) * 100
    else:
        return 0.0
    return max(0.0, min(100.0, progress))
