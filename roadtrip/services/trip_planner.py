"""
Trip Planner - Orchestrates the planning pipeline.
Geocode both places, route, render the map, fetch weather, then recommend music.
"""
from typing import Optional, Tuple
import asyncio
import logging

import httpx

from .geocoding import GeocodeResolver
from .routing import RouteClient, build_directions_url
from .static_map import MapRenderer
from .weather import WeatherClient
from .music import MusicTokenProvider, MusicSearchClient, build_music_query
from ..config import Settings, settings as default_settings
from ..exceptions import (
    AuthFailed,
    InvalidTripRequest,
    LocationNotFound,
    RenderFailed,
    RouteNotFound,
    SearchFailed,
    WeatherUnavailable,
)
from ..models.session import PlannerSession
from ..models.trip import MusicCredential, TripPlan

logger = logging.getLogger(__name__)


class TripPlanner:
    """
    Builds trip plans and extends their music list.

    Load-bearing stages (geocoding, routing) abort a build. Supplementary
    stages (map, weather, music) degrade: their section is left empty and
    named in ``TripPlan.degraded``.

    All mutable state lives in the ``PlannerSession`` passed to each call.
    Every operation takes a sequence number from the session and commits only
    while that number is still the latest, so a slow build or extension never
    overwrites the result of a newer one.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or default_settings
        self.settings.require_credentials()

        self.geocoder = GeocodeResolver(client, self.settings)
        self.routing = RouteClient(client, self.settings)
        self.map_renderer = MapRenderer(client, self.settings)
        self.weather = WeatherClient(client, self.settings)
        self.music_auth = MusicTokenProvider(client, self.settings)
        self.music_search = MusicSearchClient(client, self.settings)

    @property
    def page_size(self) -> int:
        return self.settings.music_page_size

    async def build_plan(
        self,
        session: PlannerSession,
        origin: str,
        destination: str
    ) -> Optional[TripPlan]:
        """
        Build a complete plan from two place names.

        Args:
            session: Planner session to update
            origin: Starting place, "City, Country" recommended
            destination: Destination place

        Returns:
            The committed plan, or None if a newer build superseded this one

        Raises:
            InvalidTripRequest: empty origin or destination (session untouched)
            LocationNotFound: either place could not be resolved
            RouteNotFound: no driving route between the places
        """
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        if not origin or not destination:
            raise InvalidTripRequest("Both origin and destination are required.")

        ticket = session.start_planning()
        logger.info(f"Planning trip {origin} -> {destination} (operation {ticket})")

        try:
            plan, credential = await self._assemble(origin, destination)
        except (LocationNotFound, RouteNotFound) as e:
            if session.is_current(ticket):
                logger.error(f"Trip planning aborted: {e}")
                session.fail(str(e))
            raise
        except Exception:
            if session.is_current(ticket):
                session.fail("Unexpected error while planning the trip.")
            raise

        if not session.is_current(ticket):
            logger.warning(f"Discarding superseded plan (operation {ticket})")
            return None

        session.complete(plan, credential)
        return plan

    async def extend_music(self, session: PlannerSession) -> Optional[TripPlan]:
        """
        Append the next page of tracks to the current plan.

        No-op unless the session holds a ready plan and a music credential.
        Failures are absorbed: the track list simply does not grow.
        """
        if not session.can_extend_music():
            return session.plan

        async with session.music_lock:
            # Re-check: a build may have started while waiting for the lock
            if not session.can_extend_music():
                return session.plan

            ticket = session.next_sequence()
            plan = session.plan
            offset = session.music_offset + self.page_size
            query = build_music_query(plan.origin, plan.destination)

            session.extending_music = True
            try:
                page = await self.music_search.search(query, offset, session.credential)
            except SearchFailed as e:
                logger.warning(f"Error loading more music: {e}")
                return session.plan
            finally:
                session.extending_music = False

            if not session.is_current(ticket):
                logger.warning(f"Discarding superseded music page at offset {offset}")
                return session.plan

            plan.append_page(page, self.page_size)
            session.music_offset = offset
            return plan

    async def _assemble(
        self,
        origin: str,
        destination: str
    ) -> Tuple[TripPlan, Optional[MusicCredential]]:
        """Run every pipeline stage and return the plan with its music credential."""
        # Neither lookup depends on the other; one failing cancels the other
        lookups = [
            asyncio.ensure_future(self.geocoder.resolve(origin)),
            asyncio.ensure_future(self.geocoder.resolve(destination)),
        ]
        try:
            origin_point, destination_point = await asyncio.gather(*lookups)
        except BaseException:
            for lookup in lookups:
                lookup.cancel()
            raise

        route = await self.routing.compute_route(origin_point, destination_point)
        logger.info(
            f"Route found: {route.distance_meters / 1000:.1f} km, "
            f"{route.duration_seconds / 60:.0f} min"
        )

        plan = TripPlan(
            origin=origin,
            destination=destination,
            origin_coordinate=origin_point,
            destination_coordinate=destination_point,
            route=route,
            directions_url=build_directions_url(origin, destination),
        )

        try:
            plan.map_image = await self.map_renderer.render(
                route.geometry,
                [origin_point, destination_point]
            )
        except RenderFailed as e:
            logger.warning(f"Map preview unavailable: {e}")
            plan.degraded.append("map")

        try:
            plan.weather = await self.weather.fetch_weather(destination_point)
        except WeatherUnavailable as e:
            logger.warning(f"Weather unavailable: {e}")
            plan.degraded.append("weather")

        credential = None
        try:
            credential = await self.music_auth.get_token()
            page = await self.music_search.search(
                build_music_query(origin, destination),
                0,
                credential
            )
            plan.append_page(page, self.page_size)
        except (AuthFailed, SearchFailed) as e:
            logger.warning(f"Music recommendations unavailable: {e}")
            credential = None
            plan.degraded.append("music")

        return plan, credential


# Global trip planner
trip_planner: Optional[TripPlanner] = None


def get_trip_planner() -> TripPlanner:
    """Get or create the global trip planner."""
    global trip_planner
    if trip_planner is None:
        trip_planner = TripPlanner()
    return trip_planner
