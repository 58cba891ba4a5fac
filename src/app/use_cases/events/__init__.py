"""Domain event delivery use cases"""
from .dispatch_outbox import DispatchOutboxEvents, DispatchResultDTO

__all__ = ["DispatchOutboxEvents", "DispatchResultDTO"]
