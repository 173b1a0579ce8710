from enum import Enum
from typing import Optional

"""Planning errors shared by every stage."""


class PlanErrorKind(Enum):
    """Structured error kinds reported to the caller."""

    EMPTY_REGION = "empty_region"
    NO_VALID_PLACEMENT = "no_valid_placement"
    INCOMPATIBLE_CONFIGURATION = "incompatible_configuration"
    COLLISION_OVERFLOW = "collision_overflow"


class PlanningError(Exception):
    """Base class for every planning failure.

    ``empty_outcome`` marks the two kinds for which "nothing to place" is a
    legitimate answer rather than a broken request.
    """

    kind: PlanErrorKind = PlanErrorKind.INCOMPATIBLE_CONFIGURATION
    empty_outcome = False

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        self.message = message
        self.stage = stage
        where = f" [{stage}]" if stage else ""
        super().__init__(f"{message}{where}")


class EmptyRegion(PlanningError):
    """The selected region contains no extraction points."""

    kind = PlanErrorKind.EMPTY_REGION
    empty_outcome = True


class NoValidPlacement(PlanningError):
    """The unit footprint never fits without material overlap."""

    kind = PlanErrorKind.NO_VALID_PLACEMENT
    empty_outcome = True


class IncompatibleConfiguration(PlanningError):
    """The configuration cannot be planned as given."""

    kind = PlanErrorKind.INCOMPATIBLE_CONFIGURATION


class CollisionOverflow(PlanningError):
    """The collision pass dropped too many placeholders for a useful plan."""

    kind = PlanErrorKind.COLLISION_OVERFLOW

    def __init__(self, dropped: int, threshold: int) -> None:
        self.dropped = dropped
        self.threshold = threshold
        super().__init__(
            f"Collision pass dropped {dropped} placeholder(s), limit is {threshold}",
            stage="emission",
        )


class InternalPlannerError(RuntimeError):
    """Raised when a stage receives inconsistent input from another stage."""
