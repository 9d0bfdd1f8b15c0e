from .catalog_schema import (
    DiscoveryLog,
    Entity,
    EntityKind,
    FoodItem,
    RawResult,
)

__all__ = ["DiscoveryLog", "Entity", "EntityKind", "FoodItem", "RawResult"]
