from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from oceanview.schemas.common import ApiModel, Entity
from oceanview.schemas.enums import EnquiryStatus


class TestimonialCreate(ApiModel):
    name: str = Field(min_length=1)
    cruise_name: str = Field(min_length=1)
    comment: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    avatar_url: Optional[str] = None
    cruise_id: Optional[int] = None
    user_id: Optional[int] = None


class Testimonial(Entity, TestimonialCreate):
    id: int
    created_at: datetime
    is_verified: bool = False


class ContactIn(ApiModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    subject: str = Field(min_length=1)
    message: str = Field(min_length=10)


class EnquiryCreate(ContactIn):
    user_id: Optional[int] = None


class Enquiry(Entity):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    status: EnquiryStatus = EnquiryStatus.submitted
    created_at: datetime
    updated_at: datetime
    assigned_to_user_id: Optional[int] = None
    user_id: Optional[int] = None


class EnquiryStatusUpdate(ApiModel):
    status: EnquiryStatus


class EnquiryAssign(ApiModel):
    user_id: int


class EnquiryResponseIn(ApiModel):
    response_text: str = Field(min_length=1)


class EnquiryResponseCreate(EnquiryResponseIn):
    enquiry_id: int
    responded_by_user_id: Optional[int] = None


class EnquiryResponse(Entity, EnquiryResponseCreate):
    id: int
    responded_at: datetime


class ContactReceipt(ApiModel):
    message: str
    enquiry_id: int


class TestimonialReceipt(ApiModel):
    message: str
    testimonial: Testimonial


class EnquiryUpdated(ApiModel):
    message: str
    enquiry: Enquiry


class EnquiryResponseReceipt(ApiModel):
    message: str
    response: EnquiryResponse
