"""GET /api/v1/map: terrain grid, re-fetched after build/sell."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from bastion.api.dependencies import get_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.schemas import MapResponse

router = APIRouter()


def rle_encode(values: list[int]) -> list[int]:
    """Run-length encode as [value, count, value, count, ...]."""
    rle: list[int] = []
    if not values:
        return rle
    cur_val = values[0]
    cur_count = 1
    for v in values[1:]:
        if v == cur_val:
            cur_count += 1
        else:
            rle.append(cur_val)
            rle.append(cur_count)
            cur_val = v
            cur_count = 1
    rle.append(cur_val)
    rle.append(cur_count)
    return rle


@router.get("/map", response_model=MapResponse)
def get_map(
    include_flow: bool = Query(False, description="Include the flow-field distances (debug overlay)"),
    manager: EngineManager = Depends(get_engine_manager),
) -> MapResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Game not initialized yet.")

    grid = snapshot.grid
    return MapResponse(
        width=grid.width,
        height=grid.height,
        cell_size=manager.config.cell_size,
        grid=rle_encode(grid.terrain_codes()),
        variants=rle_encode(grid.variant_codes()),
        flow_field=snapshot.flow_field.to_rows() if include_flow else None,
    )
