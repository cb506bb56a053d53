"""
SC2 Build Order Simulator - I/O
================================
Load and save build orders from YAML files.
"""

import json
import yaml
from pathlib import Path
from typing import List, Union

from sc2_sim.data import RACES, infer_item_type
from sc2_sim.models import BuildOrder, BuildOrderError, BuildOrderItem, SimResult, SimSettings


def load_build_order(filepath: Union[str, Path]) -> BuildOrder:
    with open(filepath, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise BuildOrderError(f"{filepath}: expected a mapping at the top level")
    return build_order_from_dict(data, default_name=Path(filepath).stem)


def build_order_from_dict(data: dict, default_name: str = "untitled") -> BuildOrder:
    race = data.get("race", "terran")
    if race not in RACES:
        raise BuildOrderError(f"Unknown race: {race}. Choose from: {sorted(RACES)}")

    try:
        settings = SimSettings.from_dict(data.get("settings"))
    except (TypeError, ValueError) as e:
        raise BuildOrderError(f"Invalid settings: {e}") from e

    return BuildOrder(
        name=data.get("name", default_name),
        race=race,
        description=data.get("description", ""),
        items=parse_items(data.get("build_order", [])),
        settings=settings,
    )


def parse_items(entries) -> List[BuildOrderItem]:
    """Parse YAML build order entries; bare strings get their type inferred."""
    items = []
    for entry in entries or []:
        if isinstance(entry, str):
            item_type = infer_item_type(entry)
            if item_type is None:
                raise BuildOrderError(f"Unknown build order entry: {entry}")
            items.append(BuildOrderItem(entry, item_type))
        elif isinstance(entry, dict):
            if "name" not in entry:
                raise BuildOrderError(f"Build order entry is missing 'name': {entry}")
            name = str(entry["name"])
            item_type = entry.get("type") or infer_item_type(name)
            if item_type is None:
                raise BuildOrderError(f"Unknown build order entry: {name}")
            items.append(BuildOrderItem(name, str(item_type)))
        else:
            raise BuildOrderError(f"Unsupported build order entry: {entry!r}")
    return items


def build_order_to_dict(bo: BuildOrder) -> dict:
    data = {
        "name": bo.name,
        "race": bo.race,
        "description": bo.description,
    }
    settings = bo.settings.to_dict()
    defaults = SimSettings().to_dict()
    overrides = {k: v for k, v in settings.items() if v != defaults[k]}
    if overrides:
        data["settings"] = overrides
    # Shorthand where the type can be inferred back
    data["build_order"] = [
        item.name if infer_item_type(item.name) == item.type
        else {"name": item.name, "type": item.type}
        for item in bo.items
    ]
    return data


def save_build_order(bo: BuildOrder, filepath: Union[str, Path]):
    with open(filepath, "w") as f:
        yaml.dump(build_order_to_dict(bo), f, default_flow_style=False, sort_keys=False)


def events_to_list(result: SimResult) -> list:
    return [
        {
            "name": e.name,
            "icon_key": e.icon_key,
            "category": e.category,
            "start_frame": e.start_frame,
            "end_frame": e.end_frame,
        }
        for e in result.events
    ]


def export_events_json(result: SimResult, filepath: Union[str, Path]):
    """Export the event timeline as JSON for external timeline viewers."""
    data = {
        "name": result.build_order_name,
        "race": result.race,
        "status": result.status.value,
        "frames": result.frame,
        "events": events_to_list(result),
    }
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)
