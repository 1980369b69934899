"""
Record types for timber storage.

Defines the profile, inventory, hunt log and hunt plan records plus the
snapshot value types embedded in them (weather, location, gear refs).

All records serialize to the camelCase JSON layout shared by the local
blobs and the remote documents. ``from_dict`` tolerates missing keys by
falling back to defaults, so blobs written by older versions still load.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, TypeVar

from .exceptions import ValidationError

R = TypeVar("R", bound="_Record")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def new_id() -> str:
    """Generate a client-side record id."""
    return str(uuid.uuid4())


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO string (or datetime from a remote SDK) into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _parse_enum(enum_cls: type[Enum], value: Any, default: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


# =============================================================================
# Enums
# =============================================================================


class HunterExperience(Enum):
    """Self-reported hunter experience level."""

    FIRST = "first"
    INTERMEDIATE = "intermediate"
    VETERAN = "veteran"


class TemperatureUnit(Enum):
    F = "F"
    C = "C"


class WindSpeedUnit(Enum):
    MPH = "mph"
    KPH = "kph"


class InventoryCategory(Enum):
    """Closed set of gear categories.

    Adding a category means adding a value here and an entry in
    CATEGORY_ICONS.
    """

    FIREARM = "Firearm"
    AMMO = "Ammo"
    DECOY = "Decoy"
    CALL = "Call"
    CLOTHING = "Clothing"
    BLIND = "Blind"
    SAFETY = "Safety"
    DOG = "Dog"
    VEHICLE = "Vehicle"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> InventoryCategory:
        """Parse a category leniently (case-insensitive, legacy aliases)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for category in cls:
            if category.value.lower() == text:
                return category
        return _CATEGORY_ALIASES.get(text, cls.OTHER)


_CATEGORY_ALIASES = {
    "waders": InventoryCategory.CLOTHING,
}

# Lucide icon names used by the UI for each category
CATEGORY_ICONS: dict[InventoryCategory, str] = {
    InventoryCategory.FIREARM: "crosshair",
    InventoryCategory.AMMO: "flame",
    InventoryCategory.DECOY: "bird",
    InventoryCategory.CALL: "volume-2",
    InventoryCategory.CLOTHING: "shirt",
    InventoryCategory.BLIND: "eye-off",
    InventoryCategory.SAFETY: "life-buoy",
    InventoryCategory.DOG: "dog",
    InventoryCategory.VEHICLE: "truck",
    InventoryCategory.OTHER: "box",
}
DEFAULT_CATEGORY_ICON = "package"


def category_icon(category: InventoryCategory | str) -> str:
    return CATEGORY_ICONS.get(InventoryCategory.parse(category), DEFAULT_CATEGORY_ICON)


class ItemStatus(Enum):
    READY = "READY"
    PACKED = "PACKED"
    MISSING = "MISSING"


class PlanStatus(Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    ARCHIVED = "ARCHIVED"


WATERFOWL_SPECIES = (
    "Mallard",
    "Wood Duck",
    "Teal (Green-winged)",
    "Teal (Blue-winged)",
    "Pintail",
    "Wigeon",
    "Gadwall",
    "Canvasback",
    "Redhead",
    "Ring-necked Duck",
    "Scaup",
    "Canada Goose",
    "Snow Goose",
    "Specklebelly (White-fronted)",
    "Other",
)


# =============================================================================
# Base record helpers
# =============================================================================


class _Record:
    """Mixin for records that support partial field updates.

    ``_FIELD_KEYS`` maps attribute names to their wire keys.
    """

    _FIELD_KEYS: ClassVar[dict[str, str]] = {}
    _IMMUTABLE: ClassVar[frozenset[str]] = frozenset({"id", "created_at"})

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def from_dict(cls: type[R], data: dict[str, Any]) -> R:
        raise NotImplementedError

    def with_updates(self: R, fields: dict[str, Any]) -> R:
        """Return a copy with ``fields`` applied and values normalized.

        Raises:
            ValidationError: If a field is unknown or immutable
        """
        for name in fields:
            if name not in self._FIELD_KEYS:
                raise ValidationError(name, "unknown field")
            if name in self._IMMUTABLE:
                raise ValidationError(name, "field is immutable")
        updated = replace(self, **fields)
        # Round-trip normalizes enum strings, dicts for nested values, etc.
        return type(self).from_dict(updated.to_dict())

    def wire_fields(self, names: Iterable[str]) -> dict[str, Any]:
        """Serialized values for the given attribute names, keyed by wire key."""
        data = self.to_dict()
        return {self._FIELD_KEYS[name]: data[self._FIELD_KEYS[name]] for name in names}


def document_body(data: dict[str, Any]) -> dict[str, Any]:
    """Strip backend-owned keys before a remote create."""
    return {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}


# =============================================================================
# Snapshots
# =============================================================================


@dataclass(frozen=True)
class WeatherSnapshot:
    """Weather frozen into a log or plan at creation time.

    Units are fixed at the storage layer: Fahrenheit and mph.
    """

    temperature: float
    wind_speed: float
    wind_direction: str
    sky_condition: str
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "temperature": self.temperature,
            "windSpeed": self.wind_speed,
            "windDirection": self.wind_direction,
            "skyCondition": self.sky_condition,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WeatherSnapshot:
        return cls(
            temperature=data.get("temperature", 0),
            wind_speed=data.get("windSpeed", 0),
            wind_direction=data.get("windDirection", ""),
            sky_condition=data.get("skyCondition", ""),
            notes=data.get("notes"),
        )

    @classmethod
    def from_fetch_result(cls, result: dict[str, Any]) -> WeatherSnapshot | None:
        """Freeze a weather fetch result (``{success, data | error}``).

        Returns None for failed fetches; nothing is retried here.
        """
        if not result.get("success") or not result.get("data"):
            return None
        return cls.from_dict(result["data"])


@dataclass(frozen=True)
class LocationRef:
    name: str
    latitude: float | None = None
    longitude: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.latitude is not None:
            data["latitude"] = self.latitude
        if self.longitude is not None:
            data["longitude"] = self.longitude
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str | None) -> LocationRef:
        if isinstance(data, str):
            return cls(name=data)
        data = data or {}
        return cls(
            name=data.get("name", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )


@dataclass(frozen=True)
class Harvest:
    species: str
    count: int
    sex: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"species": self.species, "count": self.count}
        if self.sex is not None:
            data["sex"] = self.sex
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Harvest:
        return cls(species=data["species"], count=int(data.get("count", 0)), sex=data.get("sex"))


def adjust_harvest(harvests: Iterable[Harvest], species: str, delta: int) -> list[Harvest]:
    """Add ``delta`` birds of ``species`` to a harvest list.

    Species stay unique. An entry whose count would drop below 1 is
    removed rather than stored as zero or negative.
    """
    result: list[Harvest] = []
    found = False
    for entry in harvests:
        if entry.species != species:
            result.append(entry)
            continue
        found = True
        count = entry.count + delta
        if count >= 1:
            result.append(replace(entry, count=count))
    if not found and delta >= 1:
        result.append(Harvest(species=species, count=delta))
    return result


@dataclass(frozen=True)
class GearRef:
    """Snapshot of an inventory item's identity, not a live reference."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GearRef:
        return cls(id=data.get("id", ""), name=data.get("name", ""))

    @classmethod
    def from_item(cls, item: InventoryItem) -> GearRef:
        return cls(id=item.id, name=item.name)


@dataclass(frozen=True)
class PlanGearItem:
    """Gear line in a plan. ``checked`` is toggled independently of inventory."""

    id: str
    name: str
    category: InventoryCategory
    quantity: int = 1
    checked: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "quantity": self.quantity,
            "checked": self.checked,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlanGearItem:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            category=InventoryCategory.parse(data.get("category")),
            quantity=int(data.get("quantity", 1)),
            checked=bool(data.get("checked", False)),
        )

    @classmethod
    def from_item(cls, item: InventoryItem, quantity: int | None = None) -> PlanGearItem:
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            quantity=item.quantity if quantity is None else quantity,
        )


# =============================================================================
# Profile
# =============================================================================

CHECKLIST_ITEMS = ("profile", "gear", "firstHunt", "firstCheck")


@dataclass(frozen=True)
class SetupChecklist:
    """Getting-started progress. Items only ever go from False to True."""

    profile: bool = False
    gear: bool = False
    first_hunt: bool = False
    first_check: bool = False

    _ATTRS: ClassVar[dict[str, str]] = {
        "profile": "profile",
        "gear": "gear",
        "firstHunt": "first_hunt",
        "firstCheck": "first_check",
    }

    def is_marked(self, item: str) -> bool:
        return getattr(self, self._attr(item))

    def marked(self, *items: str) -> SetupChecklist:
        return replace(self, **{self._attr(item): True for item in items})

    def merged(self, other: SetupChecklist) -> SetupChecklist:
        """Union of two checklists; never unmarks an item."""
        return SetupChecklist(
            profile=self.profile or other.profile,
            gear=self.gear or other.gear,
            first_hunt=self.first_hunt or other.first_hunt,
            first_check=self.first_check or other.first_check,
        )

    def progress(self) -> tuple[int, int, int]:
        """Return (completed, total, percentage)."""
        done = sum(1 for item in CHECKLIST_ITEMS if self.is_marked(item))
        total = len(CHECKLIST_ITEMS)
        return done, total, round(done * 100 / total)

    @classmethod
    def _attr(cls, item: str) -> str:
        if item not in cls._ATTRS:
            raise ValidationError("setupChecklist", f"unknown checklist item: {item}")
        return cls._ATTRS[item]

    def to_dict(self) -> dict[str, bool]:
        return {item: self.is_marked(item) for item in CHECKLIST_ITEMS}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SetupChecklist:
        data = data or {}
        return cls(
            profile=bool(data.get("profile", False)),
            gear=bool(data.get("gear", False)),
            first_hunt=bool(data.get("firstHunt", False)),
            first_check=bool(data.get("firstCheck", False)),
        )


@dataclass(frozen=True)
class ProfileRecord(_Record):
    """The one-per-user preference and onboarding record."""

    hunter_name: str = "Hunter"
    hunter_experience: HunterExperience | None = None
    hunter_style: str = ""
    brand_affinities: dict[str, list[str]] = field(default_factory=dict)
    home_location: str = ""
    temperature_unit: TemperatureUnit = TemperatureUnit.F
    wind_speed_unit: WindSpeedUnit = WindSpeedUnit.MPH
    notifications_enabled: bool = True
    saved_locations: list[str] = field(default_factory=list)
    onboarding_completed: bool = False
    onboarding_completed_at: datetime | None = None
    setup_checklist: SetupChecklist = field(default_factory=SetupChecklist)
    tooltips_shown: list[str] = field(default_factory=list)

    _FIELD_KEYS: ClassVar[dict[str, str]] = {
        "hunter_name": "hunterName",
        "hunter_experience": "hunterExperience",
        "hunter_style": "hunterStyle",
        "brand_affinities": "brandAffinities",
        "home_location": "homeLocation",
        "temperature_unit": "temperatureUnit",
        "wind_speed_unit": "windSpeedUnit",
        "notifications_enabled": "notificationsEnabled",
        "saved_locations": "savedLocations",
        "onboarding_completed": "onboardingCompleted",
        "onboarding_completed_at": "onboardingCompletedAt",
        "setup_checklist": "setupChecklist",
        "tooltips_shown": "tooltipsShown",
    }
    _IMMUTABLE: ClassVar[frozenset[str]] = frozenset()

    # Wire keys persisted under the onboarding local key; the rest go
    # under the preferences key.
    ONBOARDING_KEYS: ClassVar[tuple[str, ...]] = (
        "onboardingCompleted",
        "onboardingCompletedAt",
        "setupChecklist",
        "tooltipsShown",
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hunterName": self.hunter_name,
            "hunterExperience": _enum_value(self.hunter_experience),
            "hunterStyle": self.hunter_style,
            "brandAffinities": {k: list(v) for k, v in self.brand_affinities.items()},
            "homeLocation": self.home_location,
            "temperatureUnit": _enum_value(self.temperature_unit),
            "windSpeedUnit": _enum_value(self.wind_speed_unit),
            "notificationsEnabled": self.notifications_enabled,
            "savedLocations": list(self.saved_locations),
            "onboardingCompleted": self.onboarding_completed,
            "onboardingCompletedAt": format_datetime(self.onboarding_completed_at),
            "setupChecklist": (
                self.setup_checklist.to_dict()
                if isinstance(self.setup_checklist, SetupChecklist)
                else dict(self.setup_checklist)
            ),
            "tooltipsShown": list(self.tooltips_shown),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProfileRecord:
        data = data or {}
        default = cls()
        experience = data.get("hunterExperience", data.get("experience"))
        return cls(
            hunter_name=data.get("hunterName") or default.hunter_name,
            hunter_experience=_parse_enum(HunterExperience, experience, None),
            hunter_style=data.get("hunterStyle") or "",
            brand_affinities=dict(data.get("brandAffinities") or {}),
            home_location=data.get("homeLocation") or "",
            temperature_unit=_parse_enum(
                TemperatureUnit, data.get("temperatureUnit"), default.temperature_unit
            ),
            wind_speed_unit=_parse_enum(
                WindSpeedUnit, data.get("windSpeedUnit"), default.wind_speed_unit
            ),
            notifications_enabled=bool(data.get("notificationsEnabled", True)),
            saved_locations=list(data.get("savedLocations") or []),
            onboarding_completed=bool(
                data.get("onboardingCompleted", data.get("completed", False))
            ),
            onboarding_completed_at=parse_datetime(
                data.get("onboardingCompletedAt", data.get("completedAt"))
            ),
            setup_checklist=SetupChecklist.from_dict(data.get("setupChecklist")),
            tooltips_shown=list(data.get("tooltipsShown") or []),
        )

    def split_local(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Split into (preferences blob, onboarding blob) for local storage."""
        data = self.to_dict()
        onboarding = {k: data.pop(k) for k in self.ONBOARDING_KEYS}
        return data, onboarding


# =============================================================================
# Inventory
# =============================================================================


@dataclass(frozen=True)
class InventoryItem(_Record):
    id: str
    name: str
    category: InventoryCategory
    quantity: int = 1
    status: ItemStatus = ItemStatus.READY
    specs: dict[str, str] = field(default_factory=dict)
    notes: str | None = None
    brand: str | None = None
    model: str | None = None
    is_checked: bool = False
    archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    _FIELD_KEYS: ClassVar[dict[str, str]] = {
        "id": "id",
        "name": "name",
        "category": "category",
        "quantity": "quantity",
        "status": "status",
        "specs": "specs",
        "notes": "notes",
        "brand": "brand",
        "model": "model",
        "is_checked": "isChecked",
        "archived": "archived",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    @classmethod
    def new(
        cls,
        name: str,
        category: InventoryCategory | str,
        quantity: int = 1,
        **fields: Any,
    ) -> InventoryItem:
        """Create a new item with a fresh id and timestamps."""
        now = utc_now()
        item = cls(
            id=new_id(),
            name=name,
            category=InventoryCategory.parse(category),
            quantity=quantity,
            created_at=now,
            updated_at=now,
            **fields,
        )
        return item.with_updates({})

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("name", "must not be empty")
        if not isinstance(self.quantity, int) or self.quantity < 0:
            raise ValidationError("quantity", "must be a non-negative integer", str(self.quantity))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": _enum_value(self.category),
            "quantity": self.quantity,
            "status": _enum_value(self.status),
            "specs": {k: str(v) for k, v in self.specs.items()},
            "notes": self.notes,
            "brand": self.brand,
            "model": self.model,
            "isChecked": self.is_checked,
            "archived": self.archived,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InventoryItem:
        quantity = data.get("quantity", data.get("quantityOwned", 1))
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            category=InventoryCategory.parse(data.get("category")),
            quantity=int(quantity) if quantity is not None else 1,
            status=_parse_enum(ItemStatus, data.get("status"), ItemStatus.READY),
            specs={k: str(v) for k, v in (data.get("specs") or {}).items()},
            notes=data.get("notes"),
            brand=data.get("brand"),
            model=data.get("model"),
            is_checked=bool(data.get("isChecked", False)),
            archived=bool(data.get("archived", False)),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


# =============================================================================
# Hunts
# =============================================================================


@dataclass(frozen=True)
class HuntLog(_Record):
    """A recorded hunt. Immutable once saved; only deleted as a whole."""

    id: str
    date: str
    location: LocationRef
    weather: WeatherSnapshot | None = None
    harvests: list[Harvest] = field(default_factory=list)
    gear: list[GearRef] = field(default_factory=list)
    notes: str = ""
    plan_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    _FIELD_KEYS: ClassVar[dict[str, str]] = {
        "id": "id",
        "date": "date",
        "location": "location",
        "weather": "weather",
        "harvests": "harvests",
        "gear": "gear",
        "notes": "notes",
        "plan_id": "planId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    @classmethod
    def new(
        cls,
        date: str,
        location: LocationRef | str,
        weather: WeatherSnapshot | None = None,
        harvests: Iterable[Harvest] = (),
        gear: Iterable[GearRef] = (),
        notes: str = "",
        plan_id: str | None = None,
    ) -> HuntLog:
        now = utc_now()
        if isinstance(location, str):
            location = LocationRef(name=location)
        return cls(
            id=new_id(),
            date=date,
            location=location,
            weather=weather,
            harvests=list(harvests),
            gear=list(gear),
            notes=notes,
            plan_id=plan_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def total_birds(self) -> int:
        return sum(h.count for h in self.harvests)

    def species_breakdown(self) -> dict[str, int]:
        return {h.species: h.count for h in self.harvests}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "location": self.location.to_dict(),
            "weather": self.weather.to_dict() if self.weather else None,
            "harvests": [h.to_dict() for h in self.harvests],
            "gear": [g.to_dict() for g in self.gear],
            "notes": self.notes,
            "planId": self.plan_id,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HuntLog:
        weather = data.get("weather")
        return cls(
            id=data["id"],
            date=data.get("date", ""),
            location=LocationRef.from_dict(data.get("location")),
            weather=WeatherSnapshot.from_dict(weather) if weather else None,
            harvests=[Harvest.from_dict(h) for h in data.get("harvests") or []],
            gear=[GearRef.from_dict(g) for g in data.get("gear") or []],
            notes=data.get("notes") or "",
            plan_id=data.get("planId"),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class HuntPlan(_Record):
    """A planned hunt.

    ``result_log_id`` links to the log that completed the plan. It is set
    once, together with ``status = COMPLETED``.
    """

    id: str
    title: str
    date: str
    location: LocationRef
    weather: WeatherSnapshot | None = None
    gear: list[PlanGearItem] = field(default_factory=list)
    status: PlanStatus = PlanStatus.ACTIVE
    result_log_id: str | None = None
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    _FIELD_KEYS: ClassVar[dict[str, str]] = {
        "id": "id",
        "title": "title",
        "date": "date",
        "location": "location",
        "weather": "weather",
        "gear": "gear",
        "status": "status",
        "result_log_id": "resultLogId",
        "notes": "notes",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    @classmethod
    def new(
        cls,
        title: str,
        date: str,
        location: LocationRef | str,
        weather: WeatherSnapshot | None = None,
        gear: Iterable[PlanGearItem] = (),
        notes: str = "",
        status: PlanStatus = PlanStatus.ACTIVE,
    ) -> HuntPlan:
        now = utc_now()
        if isinstance(location, str):
            location = LocationRef(name=location)
        return cls(
            id=new_id(),
            title=title,
            date=date,
            location=location,
            weather=weather,
            gear=list(gear),
            status=status,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_completed(self) -> bool:
        return self.result_log_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "location": self.location.to_dict(),
            "weather": self.weather.to_dict() if self.weather else None,
            "gear": [g.to_dict() for g in self.gear],
            "status": _enum_value(self.status),
            "resultLogId": self.result_log_id,
            "notes": self.notes,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HuntPlan:
        weather = data.get("weather")
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            date=data.get("date", ""),
            location=LocationRef.from_dict(data.get("location")),
            weather=WeatherSnapshot.from_dict(weather) if weather else None,
            gear=[PlanGearItem.from_dict(g) for g in data.get("gear") or []],
            status=_parse_enum(PlanStatus, data.get("status"), PlanStatus.ACTIVE),
            result_log_id=data.get("resultLogId"),
            notes=data.get("notes") or "",
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )
