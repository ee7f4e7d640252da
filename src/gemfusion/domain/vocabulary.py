"""Attribute aliases and controlled vocabularies for categorical attributes.

Lookup keys are folded (lowercase, single spaces, ``-``/``_`` treated as
spaces) before matching. Canonical spellings are lowercase for shapes,
color families and origins and uppercase for grades and laboratory codes.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from gemfusion.domain.model import Attribute

if TYPE_CHECKING:
    from collections.abc import Mapping

_SEPARATORS = re.compile(r"[\s_\-]+")


def fold(value: str) -> str:
    """Case- and whitespace-normalize a lookup key."""

    return _SEPARATORS.sub(" ", value.strip().casefold()).strip()


def _table(entries: Mapping[str, tuple[str, ...]]) -> MappingProxyType[str, str]:
    lookup: dict[str, str] = {}
    for canonical, synonyms in entries.items():
        lookup[fold(canonical)] = canonical
        for synonym in synonyms:
            lookup[fold(synonym)] = canonical
    return MappingProxyType(lookup)


# Attribute names -------------------------------------------------------------

# cut_style and color_grade_est are separate readings; they never vote on cut or color.

ATTRIBUTE_ALIASES: Final = _table(
    {
        Attribute.WEIGHT: ("weight_ct", "carat", "carats", "ct", "mass", "вес"),
        Attribute.LENGTH: ("dimension_mm_max", "length_mm", "max_dimension", "длина"),
        Attribute.WIDTH: ("dimension_mm_min", "width_mm", "min_dimension", "ширина"),
        Attribute.DEPTH: (
            "dimension_mm_height",
            "depth_mm",
            "height",
            "height_mm",
            "высота",
            "глубина",
        ),
        Attribute.CUT: ("cut_shape", "shape", "огранка", "форма"),
        Attribute.COLOR: ("color_family", "colour", "цвет"),
        Attribute.CLARITY: ("clarity_est", "clarity_grade", "чистота"),
        Attribute.ORIGIN: ("origin_hint", "country_of_origin", "происхождение"),
        Attribute.GEMSTONE_CODE: ("label_code", "stone_code", "serial_number", "code", "код"),
        Attribute.CERTIFICATION_LAB: ("lab", "laboratory", "certificate_lab", "лаборатория"),
        Attribute.CERTIFICATION_NUMBER: (
            "report_number",
            "certificate_number",
            "cert_number",
            "report_no",
        ),
    }
)


def resolve_attribute(name: str) -> Attribute | None:
    canonical = ATTRIBUTE_ALIASES.get(fold(name))
    return Attribute(canonical) if canonical is not None else None


# Categorical vocabularies ----------------------------------------------------

CUT_SHAPES: Final = _table(
    {
        "round": ("round brilliant", "brilliant", "круг", "круглая"),
        "oval": ("овал", "овальная"),
        "marquise": ("navette", "маркиз", "маркиза"),
        "pear": ("pear shape", "teardrop", "груша", "капля"),
        "emerald": ("emerald cut", "octagon", "изумрудная", "октагон"),
        "princess": ("square brilliant", "принцесса"),
        "cushion": ("antique cushion", "кушон", "подушка"),
        "radiant": ("радиант",),
        "fantasy": ("fancy", "freeform", "фантазийная", "фантазия"),
        "baguette": ("багет",),
        "asscher": ("ашер", "ашер кат"),
        "rhombus": ("rhomb", "diamond shape", "ромб"),
        "trapezoid": ("trapeze", "трапеция"),
        "triangle": ("trillion", "trilliant", "треугольник"),
        "heart": ("сердце",),
        "cabochon": ("cab", "кабошон"),
        "pentagon": ("пятиугольник",),
        "hexagon": ("шестиугольник",),
    }
)

_COLOR_GRADES: Final = {grade: () for grade in "DEFGHIJKLMNOPQRSTUVWXYZ"}

COLORS: Final = _table(
    {
        "white": ("colorless", "colourless", "белый", "бесцветный"),
        "red": ("красный",),
        "blue": ("синий", "голубой"),
        "green": ("зеленый", "зелёный"),
        "yellow": ("желтый", "жёлтый"),
        "pink": ("розовый",),
        "purple": ("violet", "фиолетовый"),
        "orange": ("оранжевый",),
        "black": ("черный", "чёрный"),
        "brown": ("коричневый",),
        "gray": ("grey", "серый"),
        "multicolor": ("multi", "bicolor", "многоцветный"),
        "fancy-yellow": ("fancy yellow",),
        "fancy-blue": ("fancy blue",),
        "fancy-pink": ("fancy pink",),
        "fancy-green": ("fancy green",),
        **_COLOR_GRADES,
    }
)

CLARITIES: Final = _table(
    {
        "FL": ("flawless",),
        "IF": ("internally flawless",),
        "VVS1": (),
        "VVS2": (),
        "VS1": (),
        "VS2": (),
        "SI1": (),
        "SI2": (),
        "I1": ("p1",),
        "I2": ("p2",),
        "I3": ("p3",),
        "eye_clean": ("eye clean", "чистый"),
        "lightly_included": ("slightly included", "небольшие включения"),
        "included": ("heavily included", "с включениями"),
    }
)

ORIGINS: Final = _table(
    {
        "sri lanka": ("ceylon", "шри ланка", "цейлон"),
        "myanmar": ("burma", "бирма", "мьянма"),
        "thailand": ("siam", "таиланд"),
        "madagascar": ("мадагаскар",),
        "colombia": ("колумбия",),
        "zambia": ("замбия",),
        "brazil": ("бразилия",),
        "mozambique": ("мозамбик",),
        "tanzania": ("танзания",),
        "kenya": ("кения",),
        "afghanistan": ("афганистан",),
        "pakistan": ("пакистан",),
        "russia": ("ural", "урал", "россия"),
        "australia": ("австралия",),
        "vietnam": ("вьетнам",),
        "cambodia": ("камбоджа",),
        "nigeria": ("нигерия",),
        "ethiopia": ("эфиопия",),
        "india": ("kashmir", "индия", "кашмир"),
    }
)

CERTIFICATION_LABS: Final = _table(
    {
        "GIA": ("gemological institute of america",),
        "IGI": ("international gemological institute",),
        "AGL": ("american gemological laboratories",),
        "GRS": ("gemresearch swisslab",),
        "SSEF": ("swiss gemmological institute",),
        "GUBELIN": ("gübelin", "gubelin gem lab"),
        "HRD": ("hrd antwerp",),
        "AGS": ("american gem society",),
        "LOTUS": ("lotus gemology",),
        "GIT": ("gem and jewelry institute of thailand",),
        "EGL": ("european gemological laboratory",),
    }
)

VOCABULARIES: Final[Mapping[Attribute, Mapping[str, str]]] = MappingProxyType(
    {
        Attribute.CUT: CUT_SHAPES,
        Attribute.COLOR: COLORS,
        Attribute.CLARITY: CLARITIES,
        Attribute.ORIGIN: ORIGINS,
        Attribute.CERTIFICATION_LAB: CERTIFICATION_LABS,
    }
)


def lookup(attribute: Attribute, value: str) -> str | None:
    """Return the canonical spelling of ``value`` or ``None`` when unknown."""

    vocabulary = VOCABULARIES.get(attribute)
    if vocabulary is None:
        return None
    return vocabulary.get(fold(value))


def is_known_lab(value: str) -> bool:
    return fold(value) in CERTIFICATION_LABS
