"""
Content catalogs: cities, routes, properties, cards and calendar events.

Catalogs are validated with pydantic and checked for referential
integrity when they are loaded. Anything wrong raises ContentError
immediately rather than surfacing mid-game. Keys may be given in
snake_case or camelCase.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from sugoroku.board import Board, City, Route, RouteKind, SquareKind
from sugoroku.cards import Card, CardCatalog, CardEffect, CardType, Rarity
from sugoroku.config import MAX_HAND_SIZE
from sugoroku.events import EVENT_TARGETS, EventCategory, EventEffect, EventKind, GameEvent
from sugoroku.exceptions import ContentError
from sugoroku.state import Property

logger = logging.getLogger(__name__)

CATALOG_FILES = ("cities", "routes", "properties", "cards", "events")


# ---- Schemas ----

class ContentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class CityModel(ContentModel):
    id: str = Field(min_length=1)
    name: str
    region: str = ""
    has_shop: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None

    def to_city(self, shop: bool = False) -> City:
        return City(self.id, self.name, self.region, self.has_shop or shop, x=self.lng, y=self.lat)


class RouteModel(ContentModel):
    id: str = Field(min_length=1)
    from_city_id: str
    to_city_id: str
    route_type: RouteKind = RouteKind.LOCAL
    squares: List[SquareKind] = Field(default_factory=list)

    def to_route(self) -> Route:
        return Route(self.id, self.from_city_id, self.to_city_id, self.route_type, tuple(self.squares))


class PropertyModel(ContentModel):
    id: str = Field(min_length=1)
    city_id: str
    name: str
    theme: Optional[str] = None
    price: int = Field(ge=0)
    income: int
    upgrade_prices: List[int] = Field(default_factory=list)
    upgrade_incomes: List[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_upgrade_tables(self) -> "PropertyModel":
        if len(self.upgrade_prices) != len(self.upgrade_incomes):
            raise ValueError(
                f"property {self.id}: {len(self.upgrade_prices)} upgrade prices "
                f"but {len(self.upgrade_incomes)} upgrade incomes"
            )
        return self

    def to_property(self) -> Property:
        return Property(
            id=self.id,
            city_id=self.city_id,
            name=self.name,
            price=self.price,
            income=self.income,
            upgrade_prices=tuple(self.upgrade_prices),
            upgrade_incomes=tuple(self.upgrade_incomes),
        )


class CardEffectModel(ContentModel):
    kind: str = Field(alias="type")
    value: Optional[float] = None
    target_type: Optional[str] = None


class CardModel(ContentModel):
    id: str = Field(min_length=1)
    type: CardType
    name: str
    description: str = ""
    effect: CardEffectModel
    rarity: Rarity = Rarity.COMMON

    def to_card(self) -> Card:
        effect = CardEffect(self.effect.kind, self.effect.value, self.effect.target_type)
        return Card(self.id, self.type, self.name, self.description, effect, self.rarity)


class EventTriggerModel(ContentModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    probability: float = Field(default=0.0, ge=0.0, le=1.0)


class EventEffectModel(ContentModel):
    kind: EventKind = Field(alias="type")
    value: Optional[float] = None
    target_type: Optional[str] = None

    @field_validator("target_type")
    @classmethod
    def known_target(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in EVENT_TARGETS:
            raise ValueError(f"unknown event target: {value}")
        return value


class EventModel(ContentModel):
    id: str = Field(min_length=1)
    category: EventCategory = Field(alias="type")
    trigger: EventTriggerModel = Field(default_factory=EventTriggerModel)
    name: str
    description: str = ""
    effect: EventEffectModel

    def to_event(self) -> GameEvent:
        effect = EventEffect(self.effect.kind, self.effect.value, self.effect.target_type)
        return GameEvent(
            id=self.id,
            category=self.category,
            name=self.name,
            description=self.description,
            effect=effect,
            month=self.trigger.month,
            probability=self.trigger.probability,
        )


class CatalogModel(ContentModel):
    cities: List[CityModel]
    routes: List[RouteModel]
    properties: List[PropertyModel] = Field(default_factory=list)
    cards: List[CardModel] = Field(default_factory=list)
    events: List[EventModel] = Field(default_factory=list)
    shop_city_ids: List[str] = Field(default_factory=list)


# ---- Catalog ----

@dataclass(frozen=True)
class Catalog:
    """Everything immutable a game is played with."""

    board: Board
    properties: Tuple[Property, ...]
    cards: CardCatalog
    events: Tuple[GameEvent, ...] = ()


def _ensure_unique(kind: str, ids: Iterable[str]) -> None:
    duplicates = sorted(i for i, n in Counter(ids).items() if n > 1)
    if duplicates:
        raise ContentError(f"Duplicate {kind} ids: {', '.join(duplicates)}")


def check_catalog(catalog: Catalog) -> Catalog:
    """
    Cross-check references between the parts of a catalog.

    Raises:
        ContentError: On duplicate ids, properties in unknown cities,
            mismatched upgrade tables or move_to_city cards aimed at an
            unknown city.
    """
    board = catalog.board
    _ensure_unique("property", (p.id for p in catalog.properties))
    _ensure_unique("event", (e.id for e in catalog.events))

    for prop in catalog.properties:
        if not board.has_city(prop.city_id):
            raise ContentError(f"Property {prop.id} references unknown city: {prop.city_id}")
        if len(prop.upgrade_prices) != len(prop.upgrade_incomes):
            raise ContentError(f"Property {prop.id} has mismatched upgrade tables")
        if prop.upgrade_level > prop.max_level:
            raise ContentError(f"Property {prop.id} is above its max upgrade level")

    for card in catalog.cards.all():
        if card.type == CardType.MOVE_TO_CITY and not board.has_city(card.effect.target_type):
            raise ContentError(f"Card {card.id} moves to unknown city: {card.effect.target_type}")

    return catalog


def build_catalog(model: CatalogModel, max_hand_size: int = MAX_HAND_SIZE) -> Catalog:
    """Turn a validated CatalogModel into engine objects."""
    _ensure_unique("city", (c.id for c in model.cities))
    _ensure_unique("route", (r.id for r in model.routes))
    _ensure_unique("card", (c.id for c in model.cards))

    known = {c.id for c in model.cities}
    unknown_shops = [cid for cid in model.shop_city_ids if cid not in known]
    if unknown_shops:
        raise ContentError(f"Unknown shop cities: {', '.join(unknown_shops)}")
    shops = set(model.shop_city_ids)

    board = Board(
        [c.to_city(shop=c.id in shops) for c in model.cities],
        [r.to_route() for r in model.routes],
    )
    catalog = Catalog(
        board=board,
        properties=tuple(p.to_property() for p in model.properties),
        cards=CardCatalog([c.to_card() for c in model.cards], max_hand_size),
        events=tuple(e.to_event() for e in model.events),
    )
    return check_catalog(catalog)


def parse_catalog(data: Dict[str, Any], max_hand_size: int = MAX_HAND_SIZE) -> Catalog:
    """
    Validate a catalog held in memory.

    Args:
        data: Mapping with ``cities``, ``routes`` and optionally
            ``properties``, ``cards``, ``events`` and ``shop_city_ids``.
        max_hand_size: Hand limit for the resulting card catalog.

    Returns:
        A checked Catalog.

    Raises:
        ContentError: If the data does not validate.
    """
    try:
        model = CatalogModel.model_validate(data)
    except ValidationError as e:
        raise ContentError(f"Invalid catalog: {e}") from e
    return build_catalog(model, max_hand_size)


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ContentError(f"Cannot read catalog file {path}: {e}") from e


def load_catalog(path: Union[str, Path], max_hand_size: int = MAX_HAND_SIZE) -> Catalog:
    """
    Load a catalog from disk.

    ``path`` is either one JSON file holding the whole catalog or a
    directory with ``cities.json``, ``routes.json``, ``properties.json``,
    ``cards.json`` and ``events.json`` (only the first two are required).
    """
    path = Path(path)
    if path.is_dir():
        data: Dict[str, Any] = {}
        for name in CATALOG_FILES:
            part = path / f"{name}.json"
            if part.exists():
                data[name] = _read_json(part)
        shops = path / "shops.json"
        if shops.exists():
            data["shop_city_ids"] = _read_json(shops)
    else:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ContentError(f"Catalog file {path} must hold a JSON object")

    catalog = parse_catalog(data, max_hand_size)
    logger.info(
        f"Loaded catalog from {path}: {len(catalog.board.cities)} cities, "
        f"{len(catalog.properties)} properties, {len(catalog.cards)} cards, "
        f"{len(catalog.events)} events"
    )
    return catalog
