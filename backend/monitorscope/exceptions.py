"""Domain errors raised by the monitoring engine."""


class TargetNotFoundError(Exception):
    """The requested target does not exist or is not active."""

    def __init__(self, target_id: int):
        self.target_id = target_id
        super().__init__(f"API {target_id} not found or inactive")


class DuplicateActiveAlertError(Exception):
    """A second active alert was inserted for a target that already has one."""

    def __init__(self, target_id: int):
        self.target_id = target_id
        super().__init__(f"API {target_id} already has an active alert")
