"""
Hand activity metrics.

Each side uses the first hand of that handedness in the current list and
the first hand of the same handedness in the previous list. Landmark motion
is measured in (x, y) only. Both sides feed one accumulator that is scaled
separately into gesture intensity (x10) and hand movement (x5).
"""

import logging
from typing import List, Optional

import numpy as np

from behavior_core import HandActivityMetrics, HandDetection, Handedness
from utils.geometry import mean_point_distance, round_half_up

logger = logging.getLogger(__name__)

ACTIVE_SCORE_THRESHOLD = 0.5


def _first_hand(hands: List[HandDetection], handedness: Handedness) -> Optional[HandDetection]:
    return next((hand for hand in hands if hand.handedness == handedness), None)


def hand_landmark_movement(current: HandDetection, previous: HandDetection) -> float:
    """
    Mean per-landmark (x, y) displacement between two detections of a hand.

    Returns 0.0 if the landmark counts differ.
    """
    if len(current.landmarks) != len(previous.landmarks):
        logger.debug(
            f"Landmark count mismatch ({len(current.landmarks)} vs "
            f"{len(previous.landmarks)}), skipping movement"
        )
        return 0.0

    current_xy = np.array([[lm.x, lm.y] for lm in current.landmarks], dtype=float)
    previous_xy = np.array([[lm.x, lm.y] for lm in previous.landmarks], dtype=float)
    return mean_point_distance(current_xy, previous_xy)


def compute_hand_activity_metrics(
    hands: List[HandDetection],
    previous_hands: Optional[List[HandDetection]] = None
) -> HandActivityMetrics:
    """
    Compute hand activity metrics for one frame.

    Args:
        hands: Current hands
        previous_hands: Hands from the previous frame

    Returns:
        HandActivityMetrics
    """
    active = {}
    total_movement = 0.0

    for handedness in (Handedness.LEFT, Handedness.RIGHT):
        hand = _first_hand(hands, handedness)
        active[handedness] = hand is not None and hand.score > ACTIVE_SCORE_THRESHOLD

        if hand is None or not previous_hands:
            continue
        previous_hand = _first_hand(previous_hands, handedness)
        if previous_hand is not None:
            total_movement += hand_landmark_movement(hand, previous_hand)

    return HandActivityMetrics(
        left_hand_active=active[Handedness.LEFT],
        right_hand_active=active[Handedness.RIGHT],
        gesture_intensity=round_half_up(min(100.0, total_movement * 10)),
        hand_movement=round_half_up(min(100.0, total_movement * 5)),
    )
