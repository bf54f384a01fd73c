from consulting_core.repositories.base import (
    BookingRepository,
    CatalogRepository,
    ConsultantRepository,
    NotificationPublisher,
    TicketRepository,
)
from consulting_core.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryCatalogRepository,
    InMemoryConsultantRepository,
    InMemoryNotificationPublisher,
    InMemoryTicketRepository,
)
from consulting_core.repositories.sql import (
    Database,
    SqlBookingRepository,
    SqlCatalogRepository,
    SqlConsultantRepository,
    SqlNotificationPublisher,
    SqlTicketRepository,
)

__all__ = [
    "BookingRepository",
    "CatalogRepository",
    "ConsultantRepository",
    "NotificationPublisher",
    "TicketRepository",
    "InMemoryBookingRepository",
    "InMemoryCatalogRepository",
    "InMemoryConsultantRepository",
    "InMemoryNotificationPublisher",
    "InMemoryTicketRepository",
    "Database",
    "SqlBookingRepository",
    "SqlCatalogRepository",
    "SqlConsultantRepository",
    "SqlNotificationPublisher",
    "SqlTicketRepository",
]
