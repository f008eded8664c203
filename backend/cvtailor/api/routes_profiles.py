from typing import List

from fastapi import APIRouter, Depends

from ..models import Profile
from ..schemas import ProfileCreate, ProfileUpdate, ProfileOut
from ..services import profile_out
from ..store import CvStore
from .deps import get_store

router = APIRouter(prefix="/profiles", tags=["profiles"])

REQUIRED_COLUMNS = {"profile_name", "email"}

@router.get("", response_model=List[ProfileOut])
def list_profiles(store: CvStore = Depends(get_store)):
    return [profile_out(p) for p in store.list_profiles()]

@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(profile_id: str, store: CvStore = Depends(get_store)):
    return profile_out(store.get_profile(profile_id))

@router.post("", response_model=ProfileOut, status_code=201)
def create_profile(body: ProfileCreate, store: CvStore = Depends(get_store)):
    p = Profile(**body.to_columns())
    return profile_out(store.save_profile(p))

@router.patch("/{profile_id}", response_model=ProfileOut)
def update_profile(profile_id: str, body: ProfileUpdate, store: CvStore = Depends(get_store)):
    p = store.get_profile(profile_id)
    for k, v in body.to_columns().items():
        # profileName/email can be changed but not cleared
        if k in REQUIRED_COLUMNS and v is None:
            continue
        setattr(p, k, v)
    return profile_out(store.save_profile(p))

@router.delete("/{profile_id}", response_model=ProfileOut)
def delete_profile(profile_id: str, store: CvStore = Depends(get_store)):
    out = profile_out(store.get_profile(profile_id))
    store.delete_profile(profile_id)
    return out
