class ConflictError(ValueError):
    """A unique field (username, e-mail) is already taken."""


class InvalidTransitionError(ValueError):
    def __init__(self, entity: str, current, requested):
        self.entity = entity
        self.current = getattr(current, "value", current)
        self.requested = getattr(requested, "value", requested)
        super().__init__(f"{entity} cannot move from {self.current} to {self.requested}")


class InvalidRefundError(ValueError):
    pass
