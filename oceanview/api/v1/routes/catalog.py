from fastapi import APIRouter, Depends, HTTPException

from oceanview.api.deps import get_storage
from oceanview.schemas.catalog import Amenity, CabinType, Cruise, CruiseSearch, Destination
from oceanview.storage.base import Storage

router = APIRouter(tags=["catalog"])


@router.get("/destinations", response_model=list[Destination])
def list_destinations(storage: Storage = Depends(get_storage)):
    return storage.get_destinations()


@router.get("/destinations/{destination_id}", response_model=Destination)
def get_destination(destination_id: int, storage: Storage = Depends(get_storage)):
    destination = storage.get_destination(destination_id)
    if not destination:
        raise HTTPException(status_code=404, detail="Destination not found")
    return destination


@router.get("/cruises", response_model=list[Cruise])
def list_cruises(storage: Storage = Depends(get_storage)):
    return storage.get_cruises()


@router.get("/cruises/destination/{destination_id}", response_model=list[Cruise])
def cruises_by_destination(destination_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_cruises_by_destination(destination_id)


@router.post("/cruises/search", response_model=list[Cruise])
def search_cruises(body: CruiseSearch, storage: Storage = Depends(get_storage)):
    return storage.search_cruises(body)


@router.get("/cruises/{cruise_id}", response_model=Cruise)
def get_cruise(cruise_id: int, storage: Storage = Depends(get_storage)):
    cruise = storage.get_cruise(cruise_id)
    if not cruise:
        raise HTTPException(status_code=404, detail="Cruise not found")
    return cruise


@router.get("/cruises/{cruise_id}/cabin-types", response_model=list[CabinType])
def cabin_types(cruise_id: int, storage: Storage = Depends(get_storage)):
    if not storage.get_cruise(cruise_id):
        raise HTTPException(status_code=404, detail="Cruise not found")
    return storage.get_cabin_types(cruise_id)


@router.get("/amenities", response_model=list[Amenity])
def list_amenities(storage: Storage = Depends(get_storage)):
    return storage.get_amenities()
