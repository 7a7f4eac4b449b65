from typing import Iterable, List
from models.inventory_models import Part, PartDiff


def compute_diff(remote_parts: Iterable, target_parts: List[Part]) -> PartDiff:
    """
    Compute the operations that move a product's remote parts to target_parts

    Parts are matched by id only:
    - remote id missing from target  -> delete
    - target id present remotely     -> update (always, no field comparison)
    - target id unknown remotely     -> insert

    remote_parts may hold Part objects or flat store records.
    Uniqueness of part numbers is not checked here.
    """
    remote_ids = [_part_id(p) for p in remote_parts]
    remote_set = set(remote_ids)
    target_ids = {p.id for p in target_parts}

    diff = PartDiff()
    diff.to_delete = {pid for pid in remote_ids if pid not in target_ids}

    for part in target_parts:
        if part.id in remote_set:
            diff.to_update.append(part)
        else:
            diff.to_insert.append(part)

    return diff


def _part_id(part) -> str:
    if isinstance(part, dict):
        return str(part["id"])
    return part.id
