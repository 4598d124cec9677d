from datetime import date, datetime, timedelta

# Printed sheets never span more than a month after the start date.
MAX_PRINT_SPAN = timedelta(days=31)

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def date_range(start: date, end: date, exclude_weekends: bool = False) -> list[date]:
    """Inclusive list of days between start and end; empty when start > end."""
    days = []
    current = start
    while current <= end:
        if not exclude_weekends or current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def school_days(start: date, end: date, max_span: timedelta = MAX_PRINT_SPAN) -> list[date]:
    return date_range(start, min(end, start + max_span), exclude_weekends=True)


def period_bounds(period: str, today: date) -> tuple[date, date]:
    if period == "today":
        return today, today
    if period == "week":
        return today - timedelta(days=today.weekday()), today
    if period == "month":
        return today.replace(day=1), today
    raise ValueError(f"Unknown period: {period}")


def format_short(value: date) -> str:
    return f"{value.day}/{value.month}/{value.year}"


def format_long(value: datetime) -> str:
    return f"{DAY_NAMES[value.weekday()]}, {value.day} {MONTH_NAMES[value.month - 1]} {value.year}"
