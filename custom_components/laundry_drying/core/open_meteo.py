"""Open-Meteo current conditions client."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

import aiohttp

from ..const import OPEN_METEO_TIMEOUT, OPEN_METEO_URL
from .errors import FetchError
from .weather import KMH_PER_MS, RemoteConditions, illuminance_from_cloud_cover

_LOGGER = logging.getLogger(__name__)

CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "dew_point_2m",
    "wind_speed_10m",
    "precipitation",
    "cloud_cover",
)


def _as_float(current: dict[str, Any], key: str) -> float | None:
    """Read a numeric field from the current block, None when absent."""
    value = current.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as err:
        raise FetchError(f"Open-Meteo returned a non-numeric {key}: {value!r}") from err


class OpenMeteoClient:
    """Fetch current weather from Open-Meteo."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout: float = OPEN_METEO_TIMEOUT,
        debug_callback: Callable[..., None] | None = None,
    ) -> None:
        """Initialize the client with a shared aiohttp session."""
        self._session = session
        self._timeout = timeout
        self._debug_fn = debug_callback

    def _debug(self, message: str, *args: Any) -> None:
        """Log via the drying debug logger if available, else fallback to _LOGGER."""
        if self._debug_fn:
            self._debug_fn("weather", message, *args)
        else:
            _LOGGER.debug(message, *args)

    async def async_fetch_current(
        self, latitude: float, longitude: float
    ) -> RemoteConditions:
        """Fetch current conditions, raising FetchError on any failure."""
        params = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "current": ",".join(CURRENT_FIELDS),
            "wind_speed_unit": "kmh",
            "timezone": "auto",
        }
        self._debug("Requesting Open-Meteo for %s,%s", latitude, longitude)

        try:
            async with self._session.get(
                OPEN_METEO_URL,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    raise FetchError(f"Open-Meteo HTTP {resp.status}")
                payload = await resp.json()
        except TimeoutError as err:
            raise FetchError(
                f"Open-Meteo request timed out after {self._timeout}s"
            ) from err
        except (aiohttp.ClientError, ValueError) as err:
            raise FetchError(f"Open-Meteo request failed: {err}") from err

        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise FetchError("Open-Meteo response has no current conditions")

        wind_kmh = _as_float(current, "wind_speed_10m")
        cloud_cover = _as_float(current, "cloud_cover")

        conditions = RemoteConditions(
            temperature=_as_float(current, "temperature_2m"),
            humidity=_as_float(current, "relative_humidity_2m"),
            dew_point=_as_float(current, "dew_point_2m"),
            wind_speed=wind_kmh / KMH_PER_MS if wind_kmh is not None else None,
            rain_rate=_as_float(current, "precipitation"),
            illuminance=(
                illuminance_from_cloud_cover(cloud_cover)
                if cloud_cover is not None
                else None
            ),
        )
        self._debug("Open-Meteo current: %s", conditions)
        return conditions
