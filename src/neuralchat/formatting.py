from datetime import date, datetime, timedelta


def format_time(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime("%H:%M")


def format_date(value: datetime | None, today: date | None = None) -> str:
    if value is None:
        return ""
    day = value.astimezone().date()
    today = today or date.today()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.strftime('%b')} {day.day}"
