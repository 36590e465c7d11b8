"""Tests for the Open-Meteo client and the forecast week builder."""

from datetime import date

import httpx
import pytest

from cottagebook.booking.intervals import DateInterval
from cottagebook.services.weather import DayForecast, WeatherClient, build_week

OPEN_METEO_BODY = {
    "latitude": 50.4,
    "longitude": -5.12,
    "daily_units": {"time": "iso8601", "weathercode": "wmo code", "temperature_2m_max": "°C"},
    "daily": {
        "time": ["2024-06-08", "2024-06-09", "2024-06-10"],
        "weathercode": [0, 61, None],
        "temperature_2m_max": [21.4, 16.0, None],
    },
}


class TestWeatherClient:
    """Tests for fetching the daily forecast."""

    async def test_requests_daily_forecast_for_cottage(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json=OPEN_METEO_BODY)

        client = WeatherClient(
            api_url="https://weather.test/v1/forecast",
            latitude=50.40,
            longitude=-5.11,
            timezone="Europe/London",
            transport=httpx.MockTransport(handler),
        )

        forecast = await client.daily_forecast()

        params = captured[0].url.params
        assert captured[0].url.host == "weather.test"
        assert params["latitude"] == "50.4"
        assert params["longitude"] == "-5.11"
        assert params["daily"] == "weathercode,temperature_2m_max"
        assert params["timezone"] == "Europe/London"
        assert params["forecast_days"] == "16"
        assert forecast == [
            DayForecast(date(2024, 6, 8), 0, 21.4),
            DayForecast(date(2024, 6, 9), 61, 16.0),
        ]

    async def test_http_error_propagates(self) -> None:
        client = WeatherClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        with pytest.raises(httpx.HTTPStatusError):
            await client.daily_forecast()


class TestDayForecast:
    """Tests for reading weather codes."""

    @pytest.mark.parametrize("code", [0, 1, 2])
    def test_sunny_codes(self, code: int) -> None:
        assert DayForecast(date(2024, 6, 8), code).sunny

    @pytest.mark.parametrize(
        ("code", "label"),
        [(0, "Clear sky"), (2, "Partly cloudy"), (3, "Overcast"), (63, "Rain"), (95, "Stormy")],
    )
    def test_labels(self, code: int, label: str) -> None:
        forecast = DayForecast(date(2024, 6, 8), code)
        assert forecast.label == label
        assert forecast.sunny is (code in (0, 1, 2))


class TestBuildWeek:
    """Tests for pairing forecast days with occupancy."""

    FORECAST = [DayForecast(date(2024, 6, d), 0) for d in range(5, 21)]

    def test_window_is_seven_days_from_start(self) -> None:
        week = build_week(self.FORECAST, date(2024, 6, 8), [])
        assert [day.day for day in week] == [date(2024, 6, d) for d in range(8, 15)]
        assert all(day.sunny_and_free for day in week)

    def test_occupied_nights_are_booked(self) -> None:
        stay = DateInterval(date(2024, 6, 6), date(2024, 6, 10))
        week = build_week(self.FORECAST, date(2024, 6, 8), [stay])
        booked = {day.day for day in week if day.booked}
        # The departure day is free for a new arrival.
        assert booked == {date(2024, 6, 8), date(2024, 6, 9)}

    def test_changeover_day_is_booked(self) -> None:
        leaving = DateInterval(date(2024, 6, 6), date(2024, 6, 10))
        arriving = DateInterval(date(2024, 6, 10), date(2024, 6, 12))
        week = build_week(self.FORECAST, date(2024, 6, 8), [leaving, arriving])
        assert [day.day for day in week if not day.booked] == [date(2024, 6, d) for d in (12, 13, 14)]

    def test_days_missing_from_forecast_are_left_out(self) -> None:
        forecast = [DayForecast(date(2024, 6, 9), 3), DayForecast(date(2024, 6, 8), 1)]
        week = build_week(forecast, date(2024, 6, 8), [])
        assert [day.day for day in week] == [date(2024, 6, 8), date(2024, 6, 9)]
        assert [day.sunny_and_free for day in week] == [True, False]
