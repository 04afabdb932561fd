"""
Built-in standard catalog: a condensed map of Japan.

Prices and incomes are in units of 10,000 yen.
"""

from functools import lru_cache
from typing import List, Sequence, Tuple

from sugoroku.board import Board, City, Route, RouteKind, SquareKind
from sugoroku.cards import Card, CardCatalog, CardEffect, CardType, Rarity
from sugoroku.config import MAX_HAND_SIZE
from sugoroku.content import Catalog, check_catalog
from sugoroku.events import EventCategory, EventEffect, EventKind, GameEvent
from sugoroku.state import Property

SHOP_CITY_IDS = (
    "sapporo", "sendai", "tokyo", "nagoya", "osaka",
    "hiroshima", "fukuoka", "naha", "kanazawa", "niigata",
)

N = SquareKind.NORMAL
C = SquareKind.CARD
P = SquareKind.PROPERTY
E = SquareKind.EVENT

SHINKANSEN = RouteKind.SHINKANSEN
LOCAL = RouteKind.LOCAL
FERRY = RouteKind.FERRY


def _cities() -> List[City]:
    rows = [
        # id, name, region, lat, lng
        ("sapporo", "Sapporo", "hokkaido", 43.06, 141.35),
        ("hakodate", "Hakodate", "hokkaido", 41.77, 140.73),
        ("aomori", "Aomori", "tohoku", 40.82, 140.74),
        ("sendai", "Sendai", "tohoku", 38.27, 140.87),
        ("niigata", "Niigata", "chubu", 37.92, 139.04),
        ("utsunomiya", "Utsunomiya", "kanto", 36.56, 139.88),
        ("tokyo", "Tokyo", "kanto", 35.68, 139.69),
        ("yokohama", "Yokohama", "kanto", 35.44, 139.64),
        ("nagano", "Nagano", "chubu", 36.65, 138.18),
        ("kanazawa", "Kanazawa", "chubu", 36.56, 136.66),
        ("shizuoka", "Shizuoka", "chubu", 34.98, 138.38),
        ("nagoya", "Nagoya", "chubu", 35.18, 136.91),
        ("kyoto", "Kyoto", "kinki", 35.01, 135.77),
        ("osaka", "Osaka", "kinki", 34.69, 135.50),
        ("kobe", "Kobe", "kinki", 34.69, 135.20),
        ("okayama", "Okayama", "chugoku", 34.66, 133.93),
        ("hiroshima", "Hiroshima", "chugoku", 34.39, 132.46),
        ("takamatsu", "Takamatsu", "shikoku", 34.34, 134.05),
        ("matsuyama", "Matsuyama", "shikoku", 33.84, 132.77),
        ("fukuoka", "Fukuoka", "kyushu_okinawa", 33.59, 130.40),
        ("kumamoto", "Kumamoto", "kyushu_okinawa", 32.80, 130.71),
        ("kagoshima", "Kagoshima", "kyushu_okinawa", 31.60, 130.56),
        ("naha", "Naha", "kyushu_okinawa", 26.21, 127.68),
    ]
    return [
        City(cid, name, region, cid in SHOP_CITY_IDS, x=lng, y=lat)
        for cid, name, region, lat, lng in rows
    ]


def _routes() -> List[Route]:
    return [
        Route("r01", "sapporo", "hakodate", LOCAL, (N, C, N)),
        Route("r02", "hakodate", "aomori", FERRY, (N,)),
        Route("r03", "aomori", "sendai", SHINKANSEN, (C, N)),
        Route("r04", "sendai", "utsunomiya", LOCAL, (N, P)),
        Route("r05", "sendai", "niigata", LOCAL, (C,)),
        Route("r06", "utsunomiya", "tokyo", SHINKANSEN, (N,)),
        Route("r07", "tokyo", "yokohama", LOCAL, (C,)),
        Route("r08", "tokyo", "nagano", SHINKANSEN, (N, C)),
        Route("r09", "nagano", "niigata", LOCAL, (N, E)),
        Route("r10", "nagano", "kanazawa", SHINKANSEN, (C,)),
        Route("r11", "yokohama", "shizuoka", SHINKANSEN, (N, C)),
        Route("r12", "shizuoka", "nagoya", SHINKANSEN, (P,)),
        Route("r13", "kanazawa", "kyoto", LOCAL, (N, C)),
        Route("r14", "nagoya", "kyoto", SHINKANSEN, (C,)),
        Route("r15", "kyoto", "osaka", LOCAL, (N,)),
        Route("r16", "osaka", "kobe", LOCAL, (C,)),
        Route("r17", "kobe", "okayama", SHINKANSEN, (N, E)),
        Route("r18", "okayama", "hiroshima", SHINKANSEN, (C, N)),
        Route("r19", "okayama", "takamatsu", FERRY, (N,)),
        Route("r20", "takamatsu", "matsuyama", LOCAL, (C,)),
        Route("r21", "matsuyama", "hiroshima", FERRY, (N,)),
        Route("r22", "hiroshima", "fukuoka", SHINKANSEN, (N, C)),
        Route("r23", "fukuoka", "kumamoto", SHINKANSEN, (N,)),
        Route("r24", "kumamoto", "kagoshima", SHINKANSEN, (C,)),
        Route("r25", "kagoshima", "naha", FERRY, (N, N)),
    ]


def _property(
    city_id: str,
    n: int,
    name: str,
    price: int,
    income: int,
    upgrades: Sequence[Tuple[int, int]] = (),
) -> Property:
    return Property(
        id=f"{city_id}_{n}",
        city_id=city_id,
        name=name,
        price=price,
        income=income,
        upgrade_prices=tuple(cost for cost, _ in upgrades),
        upgrade_incomes=tuple(gain for _, gain in upgrades),
    )


def _properties() -> List[Property]:
    return [
        _property("sapporo", 1, "Ramen Alley", 1000, 100, [(800, 150), (1500, 250)]),
        _property("sapporo", 2, "Beer Brewery", 5000, 400),
        _property("sapporo", 3, "Snow Festival Hall", 12000, 900, [(6000, 1400)]),
        _property("hakodate", 1, "Morning Market", 800, 80),
        _property("hakodate", 2, "Squid Fishery", 2000, 240),
        _property("aomori", 1, "Apple Orchard", 1500, 180, [(1000, 260)]),
        _property("aomori", 2, "Nebuta Workshop", 3000, 240),
        _property("sendai", 1, "Beef Tongue Grill", 1200, 120),
        _property("sendai", 2, "Zunda Sweets", 800, 96),
        _property("sendai", 3, "Electronics Plant", 9000, 720, [(5000, 1100), (8000, 1600)]),
        _property("niigata", 1, "Rice Paddies", 2000, 200),
        _property("niigata", 2, "Sake Brewery", 4000, 440),
        _property("utsunomiya", 1, "Gyoza Stand", 600, 90),
        _property("utsunomiya", 2, "Strawberry Farm", 1500, 150),
        _property("tokyo", 1, "Ginza Department Store", 30000, 1500, [(15000, 2400), (25000, 3600)]),
        _property("tokyo", 2, "Tsukiji Sushi Bar", 5000, 400),
        _property("tokyo", 3, "Akihabara Arcade", 10000, 800, [(5000, 1200)]),
        _property("yokohama", 1, "Chinatown Diner", 3000, 270),
        _property("yokohama", 2, "Harbor Warehouse", 8000, 560),
        _property("nagano", 1, "Soba Mill", 900, 108),
        _property("nagano", 2, "Ski Resort", 6000, 600, [(4000, 900)]),
        _property("kanazawa", 1, "Gold Leaf Studio", 2500, 250),
        _property("kanazawa", 2, "Seafood Market", 3500, 315),
        _property("shizuoka", 1, "Tea Plantation", 1800, 216),
        _property("shizuoka", 2, "Eel Restaurant", 2500, 200),
        _property("nagoya", 1, "Miso Katsu Chain", 2000, 200),
        _property("nagoya", 2, "Car Factory", 25000, 1500, [(12000, 2200), (20000, 3200)]),
        _property("kyoto", 1, "Tea House", 3000, 270),
        _property("kyoto", 2, "Temple Inn", 10000, 700, [(6000, 1100)]),
        _property("kyoto", 3, "Kimono Weaver", 4000, 320),
        _property("osaka", 1, "Takoyaki Stand", 500, 75, [(500, 120), (1000, 200)]),
        _property("osaka", 2, "Okonomiyaki Shop", 1200, 144),
        _property("osaka", 3, "Theme Park", 20000, 1400, [(10000, 2100)]),
        _property("kobe", 1, "Kobe Beef Grill", 6000, 540),
        _property("kobe", 2, "Port Terminal", 9000, 630),
        _property("okayama", 1, "Peach Orchard", 1500, 165),
        _property("okayama", 2, "Denim Mill", 3000, 270),
        _property("hiroshima", 1, "Oyster Beds", 2000, 220),
        _property("hiroshima", 2, "Shipyard", 15000, 1050, [(8000, 1600)]),
        _property("takamatsu", 1, "Udon Noodle Shop", 500, 70, [(400, 110)]),
        _property("takamatsu", 2, "Olive Grove", 1800, 162),
        _property("matsuyama", 1, "Hot Spring Inn", 5000, 450),
        _property("matsuyama", 2, "Citrus Farm", 1200, 132),
        _property("fukuoka", 1, "Yatai Ramen", 800, 104),
        _property("fukuoka", 2, "Mentaiko Factory", 4000, 360),
        _property("fukuoka", 3, "Shopping Mall", 15000, 1050, [(7000, 1500)]),
        _property("kumamoto", 1, "Castle Souvenirs", 1500, 150),
        _property("kumamoto", 2, "Horse Ranch", 3000, 300),
        _property("kagoshima", 1, "Sweet Potato Farm", 1000, 120),
        _property("kagoshima", 2, "Shochu Distillery", 3500, 350),
        _property("naha", 1, "Beach Resort", 12000, 1080, [(6000, 1600)]),
        _property("naha", 2, "Pineapple Park", 2000, 240),
    ]


def _card(
    card_id: str,
    card_type: CardType,
    name: str,
    description: str,
    value=None,
    target_type=None,
    rarity: Rarity = Rarity.COMMON,
) -> Card:
    return Card(card_id, card_type, name, description, CardEffect(card_type.value, value, target_type), rarity)


def _cards() -> List[Card]:
    return [
        _card("express", CardType.MOVE_TO_DESTINATION, "Express Card",
              "Jump straight to the destination.", rarity=Rarity.RARE),
        _card("super_express", CardType.MOVE_TO_DESTINATION, "Super Express Card",
              "Your next roll is doubled.", 2, "double_move_next_turn", Rarity.UNCOMMON),
        _card("step_3", CardType.MOVE_STEPS, "Three Steps Card", "Move forward 3 steps.", 3),
        _card("step_6", CardType.MOVE_STEPS, "Six Steps Card", "Move forward 6 steps.", 6,
              rarity=Rarity.UNCOMMON),
        _card("back_2", CardType.MOVE_STEPS, "Reverse Card", "Move back 2 steps.", -2),
        _card("any_station", CardType.MOVE_STEPS, "Anywhere Card", "Teleport to any station.",
              target_type="any_station", rarity=Rarity.RARE),
        _card("go_tokyo", CardType.MOVE_TO_CITY, "Tokyo Ticket", "Go to Tokyo.", target_type="tokyo"),
        _card("go_osaka", CardType.MOVE_TO_CITY, "Osaka Ticket", "Go to Osaka.", target_type="osaka"),
        _card("free_property", CardType.BUY_PROPERTY, "Gift Deed Card",
              "Receive an unowned property in this city for free.",
              target_type="current_city_free_one", rarity=Rarity.RARE),
        _card("remote_purchase", CardType.BUY_PROPERTY, "Remote Purchase Card",
              "Buy the cheapest unowned property anywhere.", target_type="any_location",
              rarity=Rarity.UNCOMMON),
        _card("bargain", CardType.BUY_PROPERTY, "Bargain Card",
              "Buy the cheapest property here at 30% off.", 30),
        _card("takeover", CardType.STEAL_PROPERTY, "Takeover Card",
              "Take the richest rival's cheapest property.", rarity=Rarity.RARE),
        _card("hostile_bid", CardType.STEAL_PROPERTY, "Hostile Bid Card",
              "Take every rival property in this city.", target_type="current_city_all",
              rarity=Rarity.RARE),
        _card("sell_here", CardType.SELL_PROPERTY, "Clearance Card",
              "Sell all your properties in this city at full price.", 100, "current_city_all"),
        _card("forced_sale", CardType.SELL_PROPERTY, "Forced Sale Card",
              "A rival sells their cheapest property at half price.", 50, "opponent_forced",
              Rarity.UNCOMMON),
        _card("quick_sale", CardType.SELL_PROPERTY, "Quick Sale Card",
              "Sell one of your properties at 80%.", 80, "self_choice"),
        _card("bonus", CardType.GET_MONEY, "Bonus Card", "Receive 1000.", 1000),
        _card("dividend", CardType.GET_MONEY, "Dividend Card",
              "Receive 10% of the value of your properties.", 10, "property_value_percent",
              Rarity.UNCOMMON),
        _card("collection", CardType.GET_MONEY, "Collection Card",
              "Every rival pays you 500.", 500, "all_players_each", Rarity.UNCOMMON),
        _card("tax_bill", CardType.PAY_MONEY, "Tax Bill", "Pay 800.", 800),
        _card("treat_everyone", CardType.PAY_MONEY, "Treat Card", "Pay every rival 300.", 300,
              "all_players_each"),
        _card("exorcism", CardType.BOMBEE_AWAY, "Exorcism Card", "Drive the Bombee away."),
        _card("charm", CardType.BOMBEE_AWAY, "Holy Charm Card",
              "Drive the Bombee away and stay safe for 2 years.", 2, "self_permanent", Rarity.RARE),
        _card("pass_bombee", CardType.BOMBEE_TRANSFER, "Pass-the-Bombee Card",
              "Hand your Bombee to a rival.", rarity=Rarity.UNCOMMON),
        _card("bombee_shuffle", CardType.BOMBEE_TRANSFER, "Bombee Shuffle Card",
              "Last place's Bombee moves to second-to-last.", target_type="last_to_second"),
        _card("antitrust", CardType.MONOPOLY_BREAK, "Antitrust Card",
              "Break up a rival's monopoly.", rarity=Rarity.RARE),
        _card("pickpocket", CardType.CARD_STEAL, "Pickpocket Card", "Steal a card from a rival.",
              rarity=Rarity.UNCOMMON),
        _card("plus_one", CardType.PLUS_DICE, "Plus One Card", "Add 1 to your next roll.", 1),
        _card("plus_three", CardType.PLUS_DICE, "Plus Three Card", "Add 3 to your next roll.", 3,
              rarity=Rarity.UNCOMMON),
        _card("payday", CardType.DOUBLE_INCOME, "Payday Card",
              "Receive double one month of income now.", 2, "one_month"),
        _card("boom", CardType.DOUBLE_INCOME, "Boom Card",
              "Double your income at the next settlement.", 2, "until_settlement", Rarity.RARE),
    ]


def _event(
    event_id: str,
    category: EventCategory,
    name: str,
    description: str,
    kind: EventKind,
    value=None,
    target_type=None,
    month=None,
    probability: float = 0.0,
) -> GameEvent:
    return GameEvent(
        event_id, category, name, description, EventEffect(kind, value, target_type), month, probability
    )


def _events() -> List[GameEvent]:
    return [
        _event("new_year_gift", EventCategory.MONTHLY, "New Year Gift",
               "Everyone receives 500.", EventKind.MONEY_FIXED, 500, "all", month=1),
        _event("cherry_blossoms", EventCategory.MONTHLY, "Cherry Blossom Season",
               "Tourism boom: property income +10%.", EventKind.PROPERTY_INCOME_BONUS, 10, "all",
               month=4),
        _event("typhoon", EventCategory.MONTHLY, "Typhoon",
               "The leader loses 5% of total assets.", EventKind.MONEY_PERCENT, -5, "first_place",
               month=9),
        _event("year_end_party", EventCategory.MONTHLY, "Year-End Party",
               "Everyone pays 300.", EventKind.MONEY_FIXED, -300, "all", month=12),
        _event("relief_fund", EventCategory.YEARLY, "Relief Fund",
               "Last place receives 2000.", EventKind.MONEY_FIXED, 2000, "last_place",
               probability=0.1),
        _event("windfall", EventCategory.RANDOM, "Windfall",
               "Everyone receives 200.", EventKind.ALL_MONEY_EQUALIZER, 200, "all",
               probability=0.05),
        _event("lost_wallet", EventCategory.RANDOM, "Lost Wallet",
               "The mover loses 3% of total assets.", EventKind.MONEY_PERCENT, -3, "self",
               probability=0.05),
        _event("whirlwind", EventCategory.RANDOM, "Whirlwind",
               "The mover is blown to a random city.", EventKind.RANDOM_TELEPORT, None, "self",
               probability=0.03),
        _event("quiet_month", EventCategory.RANDOM, "Quiet Month",
               "Nothing happens.", EventKind.NONE, probability=0.1),
    ]


@lru_cache(maxsize=None)
def _standard(max_hand_size: int) -> Catalog:
    catalog = Catalog(
        board=Board(_cities(), _routes()),
        properties=tuple(_properties()),
        cards=CardCatalog(_cards(), max_hand_size),
        events=tuple(_events()),
    )
    return check_catalog(catalog)


def standard_catalog(max_hand_size: int = MAX_HAND_SIZE) -> Catalog:
    """The built-in catalog. Built once per hand size and shared."""
    return _standard(max_hand_size)
