"""
Search keyword derivation for the explore page.

Two pure functions turn visitor preferences and current weather into
photo-search keywords:

- ``derive_style_keywords`` prefixes each chosen style with the gender.
- ``derive_accessory_keywords`` looks the weather description up in a fixed
  table and falls back to generic keywords for unknown descriptions.

The weather tables are read-only mappings so they can be swapped or
localized without touching the derivation code.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple, List


@dataclass(frozen=True)
class WeatherKeywordTable:
    """
    Weather description to keyword mapping.

    Attributes:
        name: Table identifier used in settings
        entries: Exact OpenWeatherMap description -> keywords
        fallback: Keywords appended after the raw description when it is
            missing from ``entries``
        tag: Optional literal placed before the gender on table hits
    """
    name: str
    entries: Mapping[str, Tuple[str, ...]]
    fallback: Tuple[str, ...]
    tag: Optional[str] = None

    def __contains__(self, description: object) -> bool:
        return description in self.entries


ACCESSORY_KEYWORDS = WeatherKeywordTable(
    name="accessory",
    entries=MappingProxyType({
        "clear sky": ("sunglasses", "hat"),
        "few clouds": ("light jacket", "cap"),
        "scattered clouds": ("light jacket", "cap"),
        "broken clouds": ("jacket", "cap"),
        "moderate rain": ("umbrella", "raincoat"),
        "light rain": ("umbrella", "raincoat"),
        "shower rain": ("umbrella", "raincoat"),
        "rain": ("umbrella", "raincoat"),
        "thunderstorm": ("umbrella", "raincoat"),
        "snow": ("gloves", "scarf", "boots"),
        "mist": ("scarf", "hat"),
        "smoke": ("mask", "beanie"),
        "haze": ("mask", "beanie"),
        "dust": ("mask", "hat"),
        "fog": ("scarf", "hat"),
        "sand": ("mask", "hat"),
        "ash": ("mask", "hat"),
        "squall": ("windbreaker", "hat"),
        "tornado": ("windbreaker", "hat"),
        "overcast clouds": ("jacket", "scarf"),
    }),
    fallback=("accessory", "clothing"),
)

OUTFIT_KEYWORDS = WeatherKeywordTable(
    name="outfit",
    entries=MappingProxyType({
        "clear sky": ("tshirt", "shorts", "casual"),
        "few clouds": ("cloudy", "casual"),
        "scattered clouds": ("casual", "shirt", "pants"),
        "broken clouds": ("layered", "stylish"),
        "moderate rain": ("sweater", "raincoat"),
        "light rain": ("waterproof", "sweater"),
        "shower rain": ("waterproof", "rainy"),
        "rain": ("turtleneck", "coat", "umbrella"),
        "thunderstorm": ("pullover", "jacket"),
        "snow": ("beanie", "coat", "sweater"),
        "mist": ("turtleneck", "coat"),
        "smoke": ("turtleneck", "jacket"),
        "haze": ("sweater", "beanie"),
        "dust": ("coat", "jacket"),
        "fog": ("sweater", "coat"),
        "sand": ("shirt", "shorts"),
        "ash": ("warm shirt", "stylish"),
        "squall": ("cardigan", "shirt"),
        "tornado": ("wind", "jacket"),
        "overcast clouds": ("casual", "fashion"),
    }),
    fallback=("outfit", "fashion"),
)

KEYWORD_TABLES: Mapping[str, WeatherKeywordTable] = MappingProxyType({
    ACCESSORY_KEYWORDS.name: ACCESSORY_KEYWORDS,
    OUTFIT_KEYWORDS.name: OUTFIT_KEYWORDS,
})


def get_keyword_table(name: str) -> WeatherKeywordTable:
    """
    Look up a weather keyword table by name.

    Raises:
        KeyError: If no table has that name
    """
    return KEYWORD_TABLES[name]


def derive_style_keywords(gender: Optional[str], styles: Sequence[str]) -> List[str]:
    """
    Build one photo query per chosen style.

    Each query is the gender and the style joined by a single space, in the
    order the styles were given. A string gender is used verbatim, so an
    empty gender leaves a leading space. ``None`` yields the bare style names.

    Args:
        gender: Gender prefix
        styles: Chosen style names

    Returns:
        Query strings, one per style
    """
    if gender is None:
        return [str(style) for style in styles]
    return [f"{gender} {style}" for style in styles]


def derive_accessory_keywords(
    weather_desc: str,
    gender: Optional[str],
    table: WeatherKeywordTable = ACCESSORY_KEYWORDS,
) -> List[str]:
    """
    Map a weather description to accessory keywords.

    Known descriptions (exact, case-sensitive match) give the table's
    keywords after the optional tag and the gender. Unknown ones give the
    description itself followed by the table's generic fallback keywords.
    A falsy gender is left out.

    Args:
        weather_desc: Weather description from the weather service
        gender: Gender keyword
        table: Keyword table to consult

    Returns:
        Ordered keyword list
    """
    prefix = [gender] if gender else []

    if weather_desc in table.entries:
        tag = [table.tag] if table.tag else []
        return tag + prefix + list(table.entries[weather_desc])

    return prefix + [weather_desc] + list(table.fallback)
