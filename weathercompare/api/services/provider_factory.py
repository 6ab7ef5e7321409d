"""
Factory for forecast provider clients.

One client per enabled source is built at startup, all sharing the same
ForecastSeriesBuilder (and therefore the same UnitNormalizer). Clients
own their httpx connection pools; `close_all` releases them.
"""

import asyncio
from collections.abc import Iterable

from loguru import logger

from ...core.data_processing.series_builder import ForecastSeriesBuilder
from ...core.models import SourceKind
from .azure_maps.azure_maps_client import AzureMapsClient, AzureMapsConfig
from .base_client import BaseProviderClient
from .foreca.foreca_client import ForecaClient, ForecaConfig
from .google_weather.google_weather_client import (
    GoogleWeatherClient,
    GoogleWeatherConfig,
)
from .open_meteo.open_meteo_client import OpenMeteoClient, OpenMeteoConfig


class ProviderClientFactory:
    """
    Builds provider clients from their configs.

    Usage:
        factory = ProviderClientFactory(builder, google_weather=cfg, ...)
        clients = factory.create_all(settings.enabled_sources)
    """

    def __init__(
        self,
        builder: ForecastSeriesBuilder,
        google_weather: GoogleWeatherConfig | None = None,
        azure_maps: AzureMapsConfig | None = None,
        foreca: ForecaConfig | None = None,
        open_meteo: OpenMeteoConfig | None = None,
    ):
        self.builder = builder
        self.google_weather_config = google_weather or GoogleWeatherConfig()
        self.azure_maps_config = azure_maps or AzureMapsConfig()
        self.foreca_config = foreca or ForecaConfig()
        self.open_meteo_config = open_meteo or OpenMeteoConfig()

    def create_google_weather(self) -> GoogleWeatherClient:
        return GoogleWeatherClient(self.google_weather_config, self.builder)

    def create_azure_maps(self) -> AzureMapsClient:
        return AzureMapsClient(self.azure_maps_config, self.builder)

    def create_foreca(self) -> ForecaClient:
        return ForecaClient(self.foreca_config, self.builder)

    def create_open_meteo(self) -> OpenMeteoClient:
        return OpenMeteoClient(self.open_meteo_config, self.builder)

    def create(self, source: SourceKind) -> BaseProviderClient:
        creators = {
            SourceKind.GOOGLE_WEATHER: self.create_google_weather,
            SourceKind.AZURE_MAPS: self.create_azure_maps,
            SourceKind.FORECA: self.create_foreca,
            SourceKind.OPEN_METEO: self.create_open_meteo,
        }
        return creators[source]()

    def create_all(
        self, sources: Iterable[SourceKind]
    ) -> dict[SourceKind, BaseProviderClient]:
        clients = {source: self.create(source) for source in sources}
        logger.info(
            f"Provider clients created: {', '.join(s.value for s in clients)}"
        )
        return clients

    @staticmethod
    async def close_all(clients: Iterable[BaseProviderClient]) -> None:
        results = await asyncio.gather(
            *(client.close() for client in clients), return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Error closing provider client: {result}")
