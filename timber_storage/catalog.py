"""
Master gear catalog.

The fixed starter list used to seed a hunter's inventory.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import InventoryCategory, InventoryItem, ItemStatus


@dataclass(frozen=True)
class GearTemplate:
    name: str
    category: InventoryCategory
    quantity: int = 1
    specs: dict[str, str] = field(default_factory=dict)

    def to_item(self) -> InventoryItem:
        """Create a fresh inventory item (new id, new timestamps)."""
        return InventoryItem.new(
            self.name,
            self.category,
            quantity=self.quantity,
            status=ItemStatus.READY,
            specs=dict(self.specs),
        )


def _gear(name: str, category: str, quantity: int = 1, **specs: str) -> GearTemplate:
    return GearTemplate(name, InventoryCategory.parse(category), quantity, specs)


MASTER_GEAR_LIST: tuple[GearTemplate, ...] = (
    # Firearms & ammo
    _gear("Shotgun", "Firearm", action="Semi-Auto", gauge="12ga"),
    _gear("Non-Toxic Shells", "Ammo", shotSize="#2", shotMaterial="Steel", shellLength="3in"),
    _gear("Floating Gun Case", "Firearm"),
    _gear("Choke Wrench", "Firearm"),
    _gear("Spare Gun Parts", "Firearm", notes="Firing pin, O-rings, bolt handle"),
    _gear("Bore Snake/Cleaning Kit", "Firearm"),
    _gear("Gun Oil/CLP", "Firearm", size="Small Bottle"),
    # Clothing & waders
    _gear("Chest Waders", "Waders", material="Neoprene/Breathable"),
    _gear("Wading Belt", "Safety", notes="Safety requirement"),
    _gear("Waterproof Jacket", "Clothing", notes="Shell + Liner"),
    _gear("Base Layers", "Clothing", material="Merino/Synthetic"),
    _gear("Gloves (Setter)", "Clothing", notes="Thick/Waterproof"),
    _gear("Gloves (Shooter)", "Clothing", notes="Thin/Tactile"),
    _gear("Face Mask/Paint", "Clothing"),
    _gear("Wader Repair Kit", "Other", notes="UV cure (Aquaseal)"),
    _gear("Change of Clothes", "Clothing", notes="Hypothermia kit (in dry bag)"),
    # Decoys & calling
    _gear("Mallard Decoys", "Decoy", 12, species="Mallard", decoyType="Floater"),
    _gear("Local Species Decoys", "Decoy", 6, species="Teal/Wood Duck/Pintail"),
    _gear("Jerk Rig", "Decoy", notes="Anchor, bungee, line"),
    _gear("Motion Decoys", "Decoy", motionType="Spinner", notes="Mojo/Lucky Duck"),
    _gear("Duck Calls", "Call", 2, notes="Primary and backup"),
    _gear("Whistle", "Call", notes="6-in-1 (Pintail/Wigeon/Teal)"),
    _gear("Spare Batteries", "Other", notes="For motion decoys"),
    # Blinds & concealment
    _gear("Marsh Seat", "Blind", notes="Bucket or pole seat"),
    _gear("Camo Netting", "Blind", notes="Bulk burlap or die-cut"),
    _gear("Face Concealment (Dog)", "Dog", notes="Mut Hut"),
    _gear("Saw/Pruners", "Blind", notes="For cutting natural brush"),
    _gear("Layout Blind", "Blind", notes="For field hunts"),
    # Field gear (blind bag)
    _gear("Headlamp", "Safety", notes="Red light mode"),
    _gear("License & Stamps", "Other", notes="Digital & Physical backup"),
    _gear("Game Strap", "Other"),
    _gear("Multi-tool", "Other", notes="Pliers/Knife"),
    _gear("Ear Protection", "Safety", notes="Electronic muffs or plugs"),
    _gear("Toilet Paper", "Other", notes="In waterproof bag"),
    _gear("Thermos", "Other", notes="Coffee/Broth"),
    # Logistics, dog & survival
    _gear("Neoprene Dog Vest", "Dog", notes="Warmth/Flotation"),
    _gear("Dog Stand", "Dog", notes="Platform for water"),
    _gear("Dog First Aid", "Dog", notes="EMT Gel, Stapler, Eyewash"),
    _gear("Boat Plug", "Vehicle", 2, notes="Primary + Spare"),
    _gear("Life Jacket (PFD)", "Safety", notes="Worn over waders"),
    _gear("Tourniquet", "Safety", notes="Trauma safety"),
    _gear("Spotlight", "Other", notes="Handheld Q-Beam"),
)
