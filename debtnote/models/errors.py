"""Domain exceptions shared by the engine, services and API layer."""


class InvalidInput(ValueError):
    """Out-of-range or nonsensical input to a calculation or a write."""


class RecordNotFound(LookupError):
    def __init__(self, kind: str, record_id: object):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")
