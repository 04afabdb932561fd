"""
Board graph: cities joined by routes.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sugoroku.exceptions import ContentError
from sugoroku.rng import RandomSource

MAX_SEARCH_DEPTH = 10
UNREACHABLE = 99


class RouteKind(Enum):
    """Ways of travelling between two cities."""

    SHINKANSEN = "shinkansen"
    LOCAL = "local"
    FERRY = "ferry"


class SquareKind(Enum):
    """Markers placed along a route."""

    PROPERTY = "property"
    CARD = "card"
    SHOP = "shop"
    DESTINATION = "destination"
    EVENT = "event"
    NORMAL = "normal"


@dataclass(frozen=True)
class City:
    """A stop on the map."""

    id: str
    name: str
    region: str = ""
    has_shop: bool = False
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class Route:
    """An undirected connection between two cities."""

    id: str
    from_city_id: str
    to_city_id: str
    kind: RouteKind = RouteKind.LOCAL
    squares: Tuple[SquareKind, ...] = ()

    @property
    def has_card_square(self) -> bool:
        return SquareKind.CARD in self.squares

    def connects(self, city_id: str) -> bool:
        return city_id in (self.from_city_id, self.to_city_id)


class Board:
    """
    Immutable city/route topology.

    Routes are undirected; the order they are given in is kept and used as
    the order of choices at a junction.
    """

    def __init__(self, cities: Iterable[City], routes: Iterable[Route]):
        self._cities: Dict[str, City] = {}
        for city in cities:
            if city.id in self._cities:
                raise ContentError(f"Duplicate city id: {city.id}")
            self._cities[city.id] = city

        self._routes: Tuple[Route, ...] = tuple(routes)
        self._by_city: Dict[str, List[Route]] = {city_id: [] for city_id in self._cities}
        seen = set()
        for route in self._routes:
            if route.id in seen:
                raise ContentError(f"Duplicate route id: {route.id}")
            seen.add(route.id)
            for endpoint in (route.from_city_id, route.to_city_id):
                if endpoint not in self._cities:
                    raise ContentError(
                        f"Route {route.id} references unknown city: {endpoint}"
                    )
            self._by_city[route.from_city_id].append(route)
            if route.to_city_id != route.from_city_id:
                self._by_city[route.to_city_id].append(route)

    @property
    def cities(self) -> Tuple[City, ...]:
        return tuple(self._cities.values())

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def get_city(self, city_id: Optional[str]) -> Optional[City]:
        if city_id is None:
            return None
        return self._cities.get(city_id)

    def has_city(self, city_id: Optional[str]) -> bool:
        return city_id in self._cities

    def get_route(self, route_id: str) -> Optional[Route]:
        for route in self._routes:
            if route.id == route_id:
                return route
        return None

    def routes_from(self, city_id: str) -> List[Route]:
        """Routes touching a city, in catalog order."""
        return list(self._by_city.get(city_id, ()))

    @staticmethod
    def other_city_id(route: Route, city_id: str) -> str:
        """The endpoint of a route that is not ``city_id``."""
        return route.to_city_id if route.from_city_id == city_id else route.from_city_id

    def route_choices(self, city_id: str) -> List[Tuple[Route, str]]:
        """Pairs of (route, neighbouring city) available from a city."""
        return [(route, self.other_city_id(route, city_id)) for route in self.routes_from(city_id)]

    def adjacent_city_ids(self, city_id: str) -> List[str]:
        return [neighbour for _, neighbour in self.route_choices(city_id)]

    def is_junction(self, city_id: str) -> bool:
        return len(self.routes_from(city_id)) > 1

    def is_shop_city(self, city_id: str) -> bool:
        city = self.get_city(city_id)
        return city is not None and city.has_shop

    def route_between(self, a: str, b: str) -> Optional[Route]:
        for route in self.routes_from(a):
            if self.other_city_id(route, a) == b:
                return route
        return None

    def distance(self, from_city_id: str, to_city_id: str) -> int:
        """
        Breadth-first hop count between two cities.

        Returns 0 for the same city and ``UNREACHABLE`` when no path exists
        within ``MAX_SEARCH_DEPTH`` hops.
        """
        if from_city_id == to_city_id:
            return 0
        visited = {from_city_id}
        queue = deque([(from_city_id, 0)])
        while queue:
            city_id, depth = queue.popleft()
            if depth >= MAX_SEARCH_DEPTH:
                continue
            for neighbour in self.adjacent_city_ids(city_id):
                if neighbour == to_city_id:
                    return depth + 1
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append((neighbour, depth + 1))
        return UNREACHABLE

    def random_destination(
        self, rng: RandomSource, exclude: Sequence[str] = ()
    ) -> Optional[str]:
        """Uniformly pick a city id not in ``exclude``."""
        candidates = [city_id for city_id in self._cities if city_id not in exclude]
        if not candidates:
            return None
        return rng.pick(candidates)
