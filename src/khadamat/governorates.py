"""Static governorate reference tables used by the listing filters and registration."""

from __future__ import annotations

from dataclasses import dataclass

ALL_GOVERNORATES = "all"


@dataclass(frozen=True)
class Governorate:
    """A governorate option keyed by the region id used on provider profiles."""

    id: str
    name: str


GOVERNORATES: tuple[Governorate, ...] = (
    Governorate(ALL_GOVERNORATES, "جميع المحافظات"),
    Governorate("1", "دمشق"),
    Governorate("2", "حلب"),
    Governorate("3", "حمص"),
    Governorate("4", "حماة"),
    Governorate("5", "اللاذقية"),
    Governorate("6", "طرطوس"),
    Governorate("7", "دير الزور"),
    Governorate("8", "الرقة"),
    Governorate("9", "الحسكة"),
    Governorate("10", "درعا"),
    Governorate("11", "إدلب"),
    Governorate("12", "السويداء"),
    Governorate("13", "القنيطرة"),
    Governorate("14", "ريف دمشق"),
)

# Address step options: slug values, not region ids.
REGISTRATION_GOVERNORATES: tuple[tuple[str, str], ...] = (
    ("damascus", "دمشق"),
    ("aleppo", "حلب"),
    ("homs", "حمص"),
    ("latakia", "اللاذقية"),
    ("hama", "حماة"),
    ("tartus", "طرطوس"),
    ("daraa", "درعا"),
    ("idlib", "إدلب"),
    ("alhasakah", "الحسكة"),
    ("deirezzor", "دير الزور"),
    ("raqqa", "الرقة"),
    ("suwayda", "السويداء"),
    ("quneitra", "القنيطرة"),
    ("damascusCountryside", "ريف دمشق"),
)

_NAMES_BY_ID = {governorate.id: governorate.name for governorate in GOVERNORATES}


def governorate_name(governorate_id: str) -> str | None:
    """Return the display name for a governorate id, or ``None`` if unknown."""

    return _NAMES_BY_ID.get(str(governorate_id))
