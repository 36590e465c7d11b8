"""Open-Meteo daily forecast client, and forecast days paired with cottage occupancy."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

import httpx

from cottagebook.booking.intervals import DateInterval, classify_day
from cottagebook.config import settings

logger = logging.getLogger(__name__)

# WMO weather interpretation codes counted as sunny.
SUNNY_CODES = frozenset({0, 1, 2})

_LABELS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Fog",
}
_RAIN_CODES = frozenset({51, 53, 55, 61, 63, 65, 80, 81, 82})


@dataclass(frozen=True)
class DayForecast:
    day: date
    weather_code: int
    temp_max: float | None = None

    @property
    def sunny(self) -> bool:
        return self.weather_code in SUNNY_CODES

    @property
    def label(self) -> str:
        if self.weather_code in _LABELS:
            return _LABELS[self.weather_code]
        if self.weather_code in _RAIN_CODES:
            return "Rain"
        return "Stormy"


class WeatherClient:
    """Fetch the daily forecast for the cottage from Open-Meteo.

    Open-Meteo needs no API key. Coordinates and timezone default to the
    configured property location.
    """

    def __init__(
        self,
        api_url: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        timezone: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url or settings.weather_api_url
        self._latitude = settings.weather_latitude if latitude is None else latitude
        self._longitude = settings.weather_longitude if longitude is None else longitude
        self._timezone = timezone or settings.weather_timezone
        self._timeout = timeout or settings.weather_timeout_seconds
        self._transport = transport

    async def daily_forecast(self, days: int = 16) -> list[DayForecast]:
        """Return one entry per forecast day, in date order.

        Days the API reports without a weather code are left out.

        Raises:
            httpx.HTTPError: If the API is unreachable or answers with an error.
        """
        params = {
            "latitude": self._latitude,
            "longitude": self._longitude,
            "daily": "weathercode,temperature_2m_max",
            "timezone": self._timezone,
            "forecast_days": days,
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(self._api_url, params=params)
            response.raise_for_status()

        daily = response.json()["daily"]
        forecast = [
            DayForecast(date.fromisoformat(day), int(code), temp)
            for day, code, temp in zip(daily["time"], daily["weathercode"], daily["temperature_2m_max"])
            if code is not None
        ]
        logger.info("Fetched %d forecast day(s) from %s", len(forecast), self._api_url)
        return forecast


@dataclass(frozen=True)
class WeekDay:
    """One forecast day of the alert window and whether a guest is staying."""

    forecast: DayForecast
    booked: bool

    @property
    def day(self) -> date:
        return self.forecast.day

    @property
    def sunny_and_free(self) -> bool:
        return self.forecast.sunny and not self.booked


def build_week(
    forecast: Iterable[DayForecast],
    start: date,
    approved: Iterable[DateInterval],
    days: int = 7,
) -> list[WeekDay]:
    """Pair each forecast day in ``[start, start + days)`` with its occupancy.

    A day is booked when a guest sleeps there that night, so a departure day
    counts as free. Days missing from the forecast are left out.

    Args:
        forecast: Daily forecast, any range.
        start: First day of the window.
        approved: Approved stays only; pending requests do not block the alert.
        days: Window length.

    Returns:
        The window's days in date order.
    """
    end = start + timedelta(days=days)
    intervals = list(approved)
    return [
        WeekDay(entry, booked=not classify_day(entry.day, intervals).can_check_in)
        for entry in sorted(forecast, key=lambda f: f.day)
        if start <= entry.day < end
    ]
