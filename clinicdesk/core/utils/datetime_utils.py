"""
Utilitaires de dates (UTC).

SQLite ne conserve pas le fuseau horaire des colonnes DateTime : toutes les
comparaisons passent par ensure_utc() pour manipuler des datetimes "aware".
"""

import calendar
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Horodatage courant en UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Rattache UTC à un datetime naïf, convertit les autres en UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_month(moment: datetime) -> datetime:
    """Premier instant du mois (UTC) contenant `moment`."""
    moment = ensure_utc(moment)
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(moment: datetime, months: int = 1) -> datetime:
    """
    Ajoute des mois calendaires, en ramenant le jour au dernier jour
    du mois cible si besoin (31 janvier + 1 mois -> 28/29 février).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
