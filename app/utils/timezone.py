"""
Conversión entre la zona horaria de referencia y UTC.

Los usuarios capturan horas civiles en la zona de referencia (por defecto
Asia/Kathmandu, UTC+5:45); el store guarda siempre instantes en UTC.
"""

from datetime import datetime

import pytz

from app.config import get_settings

settings = get_settings()

DISPLAY_FORMAT = "%d/%m/%Y %H:%M"


def get_timezone(tz_name: str | None = None) -> pytz.BaseTzInfo:
    """Obtiene la zona horaria, por defecto la de referencia."""
    return pytz.timezone(tz_name or settings.tz)


def now_utc() -> datetime:
    """Instante actual en UTC (aware)."""
    return datetime.now(pytz.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normaliza un datetime a UTC; los naive se asumen ya en UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def local_to_utc(value: datetime, tz_name: str | None = None) -> datetime:
    """
    Convierte una hora civil de la zona de referencia a UTC.

    Un datetime naive se interpreta en la zona indicada; uno aware
    sólo se normaliza a UTC.
    """
    if value.tzinfo is None:
        value = get_timezone(tz_name).localize(value)
    return value.astimezone(pytz.utc)


def utc_to_local(value: datetime, tz_name: str | None = None) -> datetime:
    """Convierte un instante a la hora civil de la zona de referencia."""
    return ensure_utc(value).astimezone(get_timezone(tz_name))


def format_local(
    value: datetime,
    tz_name: str | None = None,
    fmt: str = DISPLAY_FORMAT,
) -> str:
    """Formatea un instante en la zona de referencia para humanos."""
    tz = get_timezone(tz_name)
    return f"{utc_to_local(value, tz.zone).strftime(fmt)} ({tz.zone})"


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parsea un ISO-8601 (acepta sufijo Z) y lo devuelve en UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return ensure_utc(parsed)


def to_iso(value: datetime) -> str:
    """Serializa un instante en ISO-8601 UTC con sufijo Z."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
