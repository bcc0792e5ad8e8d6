from fastapi import APIRouter, Depends, HTTPException

from oceanview.api.deps import get_current_user, get_optional_user, get_storage, http_error, require_staff
from oceanview.schemas.feedback import (
    ContactIn, ContactReceipt, Enquiry, EnquiryAssign, EnquiryCreate, EnquiryResponse, EnquiryResponseCreate,
    EnquiryResponseIn, EnquiryResponseReceipt, EnquiryStatusUpdate, EnquiryUpdated,
)
from oceanview.schemas.user import User
from oceanview.storage.base import Storage

router = APIRouter(tags=["enquiries"])


@router.post("/contact", response_model=ContactReceipt, status_code=201)
def contact(body: ContactIn, me: User | None = Depends(get_optional_user), storage: Storage = Depends(get_storage)):
    enquiry = storage.create_enquiry(EnquiryCreate(**body.model_dump(), user_id=me.id if me else None))
    return ContactReceipt(message="Thank you for your message. We will get back to you soon.", enquiry_id=enquiry.id)


@router.get("/user/enquiries", response_model=list[Enquiry])
def my_enquiries(me: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return storage.get_enquiries_by_user(me.id)


@router.get("/enquiries", response_model=list[Enquiry], dependencies=[Depends(require_staff)])
def list_enquiries(storage: Storage = Depends(get_storage)):
    return storage.get_enquiries()


def _enquiry_or_404(storage: Storage, enquiry_id: int) -> Enquiry:
    enquiry = storage.get_enquiry(enquiry_id)
    if not enquiry:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return enquiry


@router.get("/enquiries/{enquiry_id}", response_model=Enquiry, dependencies=[Depends(require_staff)])
def get_enquiry(enquiry_id: int, storage: Storage = Depends(get_storage)):
    return _enquiry_or_404(storage, enquiry_id)


@router.patch("/enquiries/{enquiry_id}/status", response_model=EnquiryUpdated, dependencies=[Depends(require_staff)])
def update_enquiry_status(enquiry_id: int, body: EnquiryStatusUpdate, storage: Storage = Depends(get_storage)):
    try:
        enquiry = storage.update_enquiry_status(enquiry_id, body.status)
    except ValueError as e:
        raise http_error(e)
    if not enquiry:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return EnquiryUpdated(message="Enquiry status updated", enquiry=enquiry)


@router.post("/enquiries/{enquiry_id}/assign", response_model=EnquiryUpdated, dependencies=[Depends(require_staff)])
def assign_enquiry(enquiry_id: int, body: EnquiryAssign, storage: Storage = Depends(get_storage)):
    assignee = storage.get_user(body.user_id)
    if not assignee or not assignee.is_staff:
        raise HTTPException(status_code=400, detail="Enquiries can only be assigned to staff")
    enquiry = storage.assign_enquiry(enquiry_id, body.user_id)
    if not enquiry:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return EnquiryUpdated(message="Enquiry assigned", enquiry=enquiry)


@router.get("/enquiries/{enquiry_id}/responses", response_model=list[EnquiryResponse],
            dependencies=[Depends(require_staff)])
def list_responses(enquiry_id: int, storage: Storage = Depends(get_storage)):
    _enquiry_or_404(storage, enquiry_id)
    return storage.get_enquiry_responses(enquiry_id)


@router.post("/enquiries/{enquiry_id}/responses", response_model=EnquiryResponseReceipt, status_code=201)
def respond(enquiry_id: int, body: EnquiryResponseIn, staff: User = Depends(require_staff),
            storage: Storage = Depends(get_storage)):
    _enquiry_or_404(storage, enquiry_id)
    response = storage.create_enquiry_response(EnquiryResponseCreate(
        enquiry_id=enquiry_id, response_text=body.response_text, responded_by_user_id=staff.id,
    ))
    return EnquiryResponseReceipt(message="Response added successfully", response=response)
