from enum import Enum


class ProductionOrderStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS = {
    ProductionOrderStatus.PLANNED: {ProductionOrderStatus.IN_PROGRESS, ProductionOrderStatus.CANCELLED},
    ProductionOrderStatus.IN_PROGRESS: {ProductionOrderStatus.COMPLETED, ProductionOrderStatus.CANCELLED},
    ProductionOrderStatus.COMPLETED: set(),
    ProductionOrderStatus.CANCELLED: set(),
}
