"""
Open position storage re-exports.
"""
from core.db.positions.position_store import (
    cold_delete_open_position,
    create_open_position,
    delete_open_position,
    get_all_open_positions,
    get_cold_deleted_positions,
    get_open_position_by_id,
    get_open_position_by_link,
    get_open_positions_created_in_last_hours,
    update_open_position,
)

__all__ = [
    "create_open_position",
    "get_open_position_by_link",
    "get_open_position_by_id",
    "get_open_positions_created_in_last_hours",
    "get_all_open_positions",
    "update_open_position",
    "delete_open_position",
    "cold_delete_open_position",
    "get_cold_deleted_positions",
]
