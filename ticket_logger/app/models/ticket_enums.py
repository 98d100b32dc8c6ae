"""
Ticket reason enumeration.

The closed set of categories an agent can log a ticket under.
"""

import enum


class TicketReason(str, enum.Enum):
    """
    Ticket reason enumeration.

    Values are stored verbatim in the `reason` column and matched
    exactly by the list and export filters.
    """
    DRIVER_LATE = "Driver Late"
    DRIVER_NO_SHOW = "Driver No Show"
    DRIVER_BEHAVIOR = "Driver Behavior"
    VEHICLE_CONDITION = "Vehicle Condition"
    WRONG_ROUTE = "Wrong Route"
    OVERCHARGE = "Overcharge"
    LOST_ITEM = "Lost Item"
    SAFETY_CONCERN = "Safety Concern"
    APP_ISSUE = "App Issue"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
