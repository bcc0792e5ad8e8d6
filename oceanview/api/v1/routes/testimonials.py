from fastapi import APIRouter, Depends, HTTPException

from oceanview.api.deps import get_optional_user, get_storage, require_staff
from oceanview.schemas.feedback import Testimonial, TestimonialCreate, TestimonialReceipt
from oceanview.schemas.user import User
from oceanview.storage.base import Storage

router = APIRouter(tags=["testimonials"])


@router.get("/testimonials", response_model=list[Testimonial])
def list_testimonials(storage: Storage = Depends(get_storage)):
    return storage.get_testimonials()


@router.get("/cruises/{cruise_id}/testimonials", response_model=list[Testimonial])
def cruise_testimonials(cruise_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_testimonials_by_cruise(cruise_id)


@router.post("/testimonials", response_model=TestimonialReceipt, status_code=201)
def create_testimonial(body: TestimonialCreate, me: User | None = Depends(get_optional_user),
                       storage: Storage = Depends(get_storage)):
    if me is not None:
        body = body.model_copy(update={"user_id": me.id})
    testimonial = storage.create_testimonial(body)
    return TestimonialReceipt(
        message="Thank you for your testimonial! It will be reviewed shortly.", testimonial=testimonial
    )


@router.patch("/testimonials/{testimonial_id}/verify", response_model=TestimonialReceipt,
              dependencies=[Depends(require_staff)])
def verify_testimonial(testimonial_id: int, storage: Storage = Depends(get_storage)):
    testimonial = storage.verify_testimonial(testimonial_id)
    if not testimonial:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return TestimonialReceipt(message="Testimonial verified successfully", testimonial=testimonial)
