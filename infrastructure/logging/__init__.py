from infrastructure.logging.event_logger import PlantEventLogger

__all__ = ["PlantEventLogger"]
