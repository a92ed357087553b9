"""
Reason Codes
============

Fixed set of machine-readable reason codes for engine decisions.

Each decision has exactly ONE reason code naming the policy branch
that produced it.

Rules:
    - No free-text explanations
    - One clear cause per code
"""

from enum import Enum


class ReasonCode(str, Enum):
    """
    Machine-readable decision explanation codes.

    Attributes:
        BELOW_THRESHOLD: No rule matched; event kept for review
        FIRE_SINGLE_FRAME: Confident fire, not yet persistent
        FIRE_PERSISTENT: Persistent fire below the auto-dispatch bar
        FIRE_PERSISTENT_HIGH_CONFIDENCE: Persistent fire with very high score
        FIRE_PERSISTENT_IN_AOI: Persistent fire inside an area of interest
        PERSON_IN_AOI: Confident person in an AOI, not yet persistent
        PERSON_PERSISTENT_IN_AOI: Person re-detected in the same cell in an AOI
        PERSON_CLUSTER_IN_AOI: Several nearby person detections in an AOI
        CHEMICAL_DETECTED: Confident chemical away from AOIs and assets
        CHEMICAL_IN_AOI: Confident chemical inside an AOI
        CHEMICAL_NEAR_ASSET: Confident chemical near a critical asset
        NEAR_CRITICAL_ASSET: Fire or person close to a critical asset
        EXCLUDED_LABEL: Label configured as never relevant
        INVALID_INPUT: Event rejected by validation, state untouched
    """

    BELOW_THRESHOLD = "BELOW_THRESHOLD"

    # Fire
    FIRE_SINGLE_FRAME = "FIRE_SINGLE_FRAME"
    FIRE_PERSISTENT = "FIRE_PERSISTENT"
    FIRE_PERSISTENT_HIGH_CONFIDENCE = "FIRE_PERSISTENT_HIGH_CONFIDENCE"
    FIRE_PERSISTENT_IN_AOI = "FIRE_PERSISTENT_IN_AOI"

    # Person / people
    PERSON_IN_AOI = "PERSON_IN_AOI"
    PERSON_PERSISTENT_IN_AOI = "PERSON_PERSISTENT_IN_AOI"
    PERSON_CLUSTER_IN_AOI = "PERSON_CLUSTER_IN_AOI"

    # Chemical
    CHEMICAL_DETECTED = "CHEMICAL_DETECTED"
    CHEMICAL_IN_AOI = "CHEMICAL_IN_AOI"
    CHEMICAL_NEAR_ASSET = "CHEMICAL_NEAR_ASSET"

    # Asset proximity
    NEAR_CRITICAL_ASSET = "NEAR_CRITICAL_ASSET"

    # Rejection
    EXCLUDED_LABEL = "EXCLUDED_LABEL"
    INVALID_INPUT = "INVALID_INPUT"
