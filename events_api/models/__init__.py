from events_api.models.event import EventRecord

__all__ = ["EventRecord"]
