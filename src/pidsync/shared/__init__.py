"""
Shared components for P&ID Sync.

Contains common models, utilities, and infrastructure used across all services.
This package provides the foundation for all services with:

- Diagram and persisted-graph data models
- Rotation-aware canvas geometry
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (database, logging) and user notifications
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *
from .notifications import (
    Notification,
    NotificationLevel,
    NotificationInbox,
    Notifier,
    log_notifier,
)

__all__ = [
    # From models
    "BaseModel", "TimestampMixin", "Point", "Size", "Rect",
    "LabelPosition", "SignalSubtype", "NodeAttributes", "NodeAttributesBase",
    "EquipmentAttributes", "PumpAttributes", "VesselAttributes", "ExchangerAttributes",
    "ValveAttributes", "InstrumentAttributes", "ConnectorAttributes",
    "TappingPointAttributes", "FrameAttributes", "EdgeAttributes",
    "PipeAttributes", "SignalAttributes", "attributes_class_for", "build_node_attributes",
    "ACTUATOR_PORT_ID", "PortDirection", "EdgeKind", "Port", "DiagramNode", "EdgeEnd",
    "EdgeStyle", "RoutingPolicy", "DiagramEdge", "DiagramDocument",
    "RelationshipKind", "Layout", "PersistedAssetNode", "PersistedRelationship",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "PidSyncError", "ConfigurationError", "DatabaseError", "PersistenceError",
    "GeometryError", "ValidationError", "CatalogError", "ServiceError",

    # From infrastructure
    "DatabaseManager", "get_database", "close_database_connections", "BaseRepository",
    "get_logger", "setup_logging",

    # Notifications
    "Notification", "NotificationLevel", "NotificationInbox", "Notifier", "log_notifier",
]
