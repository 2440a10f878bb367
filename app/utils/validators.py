# app/utils/validators.py

import re
from datetime import date, datetime, time
from typing import Optional, Tuple
from app.config.database import settings
from app.utils.exceptions import ValidationFailed

PHONE_PATTERN = re.compile(r'^\+(\d{1,3})(\d+)$')
CLEANUP_PATTERN = re.compile(r'[\s\-\(\)\.]')
DATE_PATTERN = re.compile(r'^\d{4}-\d{1,2}-\d{1,2}$')
TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')
WINDOW_PATTERN = re.compile(r'^\s*\d{1,2}:\d{2}\s*-\s*\d{1,2}:\d{2}\s*$')

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def normalize_phone(phone: str) -> Tuple[bool, str]:
    """
    Validate an international phone number.
    Returns: (is_valid, cleaned_number)
    """
    cleaned = CLEANUP_PATTERN.sub('', phone)
    match = PHONE_PATTERN.match(cleaned)
    if not match:
        return False, phone
    if not 7 <= len(match.group(2)) <= 15:
        return False, phone
    return True, cleaned


def parse_date(date_str: str) -> date:
    """Parse YYYY-MM-DD into a date, raising ValueError on anything else"""
    if not isinstance(date_str, str) or not DATE_PATTERN.match(date_str.strip()):
        raise ValueError("Invalid date format. Use YYYY-MM-DD (e.g., 2030-03-01)")
    return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()


def parse_time(time_str: str) -> time:
    """Parse HH:MM (24h) into a time, raising ValueError on anything else"""
    if not isinstance(time_str, str):
        raise ValueError("Invalid time format. Use HH:MM format (e.g., 09:30)")
    match = TIME_PATTERN.match(time_str.strip())
    if not match:
        raise ValueError("Invalid time format. Use HH:MM format (e.g., 09:30)")
    return time(int(match.group(1)), int(match.group(2)))


def normalize_date(date_str: str) -> str:
    return parse_date(date_str).strftime("%Y-%m-%d")


def normalize_time(time_str: str) -> str:
    return parse_time(time_str).strftime("%H:%M")


def parse_window(window: str) -> Tuple[time, time]:
    """Parse an availability window like "09:00-12:00" """
    if not WINDOW_PATTERN.match(window):
        raise ValueError(f"Invalid availability window: {window!r}. Use HH:MM-HH:MM")
    start_str, end_str = window.split("-")
    start, end = parse_time(start_str), parse_time(end_str)
    if start >= end:
        raise ValueError(f"Availability window {window!r} must end after it starts")
    return start, end


def on_interval(value: time, interval: Optional[int] = None) -> bool:
    """Whether a time of day falls on the booking grid counted from midnight"""
    interval = interval or settings.appointment_interval_minutes
    return (value.hour * 60 + value.minute) % interval == 0


def validate_availability(availability: Optional[dict]) -> dict:
    """Normalize a {weekday: [windows]} mapping"""
    if not availability:
        return {}
    normalized = {}
    for day, windows in availability.items():
        day_name = str(day).strip().lower()
        if day_name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        normalized_windows = []
        for window in windows:
            start, end = parse_window(window)
            if not on_interval(start):
                raise ValueError(
                    f"Availability window {window!r} must start on a "
                    f"{settings.appointment_interval_minutes}-minute boundary"
                )
            normalized_windows.append(f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')}")
        normalized[day_name] = normalized_windows
    return normalized


def validate_opening_hours(hours: dict) -> dict:
    """Normalize {weekday: {"open": HH:MM, "close": HH:MM} or None}; None marks a closed day"""
    normalized = {}
    for day, entry in hours.items():
        day_name = str(day).strip().lower()
        if day_name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        if entry is None:
            normalized[day_name] = None
            continue
        if not isinstance(entry, dict) or set(entry) != {"open", "close"}:
            raise ValueError(f"Opening hours for {day_name} need exactly 'open' and 'close'")
        opens, closes = parse_time(entry["open"]), parse_time(entry["close"])
        if opens >= closes:
            raise ValueError(f"Opening hours for {day_name} must close after they open")
        normalized[day_name] = {"open": opens.strftime("%H:%M"), "close": closes.strftime("%H:%M")}
    return normalized


def sanitize_text(text: str, max_length: int = 500) -> str:
    """Sanitize user input text"""
    cleaned = re.sub(r'[^\w\s\.,!?\-\'°]', '', text)
    return cleaned[:max_length].strip()


def checked_date(date_str: Optional[str]) -> Optional[str]:
    """Normalize a date taken from a query string, reporting bad input as a 400"""
    if date_str is None:
        return None
    try:
        return normalize_date(date_str)
    except ValueError as e:
        raise ValidationFailed(str(e), details=[{"field": "date", "message": str(e)}])


def require_text(value: Optional[str], field: str) -> str:
    """Strip a required text field, rejecting null and blank values"""
    if value is None:
        raise ValueError(f"{field} cannot be null")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field} cannot be blank")
    return cleaned


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None
