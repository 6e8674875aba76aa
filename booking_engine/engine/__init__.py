from booking_engine.engine.availability import (
    first_unavailable_date,
    is_selectable,
    resolve_day_status,
    resolve_range,
    summarize_day,
)
from booking_engine.engine.fees import calculate_rental_fees, compute_fees, to_cents
from booking_engine.engine.hourly import (
    duration_options,
    end_hour,
    max_duration,
    start_time_options,
    windows_for_date,
)
from booking_engine.engine.pricing import (
    build_quote,
    price_for_duration,
    price_for_hours,
    rental_days,
)
from booking_engine.engine.slots import (
    available_slots,
    find_conflicts,
    free_slot_count,
    is_slot_free,
)

__all__ = [
    "available_slots",
    "build_quote",
    "calculate_rental_fees",
    "compute_fees",
    "duration_options",
    "end_hour",
    "find_conflicts",
    "first_unavailable_date",
    "free_slot_count",
    "is_selectable",
    "is_slot_free",
    "max_duration",
    "price_for_duration",
    "price_for_hours",
    "rental_days",
    "resolve_day_status",
    "resolve_range",
    "start_time_options",
    "summarize_day",
    "to_cents",
    "windows_for_date",
]
