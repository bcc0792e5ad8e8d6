"""Testimonials and contact enquiries against both store backends."""

import pytest

from oceanview.schemas import feedback
from oceanview.schemas.enums import EnquiryStatus
from oceanview.storage.errors import InvalidTransitionError

from factories import enquiry_create, review_create


# ---------------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------------


def test_new_testimonial_is_unverified(storage, clock):
    review = storage.create_testimonial(review_create())

    assert review.is_verified is False
    assert review.created_at == clock.now
    assert storage.get_testimonial(review.id) == review
    assert storage.get_testimonials() == [review]


def test_verify_is_idempotent(storage):
    review = storage.create_testimonial(review_create())

    first = storage.verify_testimonial(review.id)
    second = storage.verify_testimonial(review.id)

    assert first.is_verified is True
    assert second.is_verified is True
    assert storage.get_testimonial(review.id).is_verified is True


def test_verify_unknown_testimonial(storage):
    assert storage.verify_testimonial(999) is None
    assert storage.get_testimonial(999) is None


def test_testimonials_by_cruise(storage, cruise):
    linked = storage.create_testimonial(review_create(cruise_id=cruise.id))
    storage.create_testimonial(review_create())

    assert [t.id for t in storage.get_testimonials_by_cruise(cruise.id)] == [linked.id]


def test_rating_must_be_one_to_five():
    with pytest.raises(ValueError):
        review_create(rating=6)


# ---------------------------------------------------------------------------
# Enquiries
# ---------------------------------------------------------------------------


def test_new_enquiry_is_submitted(storage, guest, clock):
    enquiry = storage.create_enquiry(enquiry_create(user_id=guest.id))

    assert enquiry.status == EnquiryStatus.submitted
    assert enquiry.created_at == clock.now
    assert enquiry.assigned_to_user_id is None
    assert storage.get_enquiries() == [enquiry]
    assert storage.get_enquiries_by_user(guest.id) == [enquiry]


def test_anonymous_enquiry_has_no_owner(storage, guest):
    storage.create_enquiry(enquiry_create())

    assert storage.get_enquiries_by_user(guest.id) == []
    assert storage.get_enquiries()[0].user_id is None


def test_short_message_is_rejected():
    with pytest.raises(ValueError):
        enquiry_create(message="hi")


def test_enquiry_review_flow(storage, clock):
    enquiry = storage.create_enquiry(enquiry_create())
    clock.advance(hours=1)

    in_review = storage.update_enquiry_status(enquiry.id, EnquiryStatus.in_review)
    responded = storage.update_enquiry_status(enquiry.id, EnquiryStatus.responded)
    reopened = storage.update_enquiry_status(enquiry.id, EnquiryStatus.in_review)
    closed = storage.update_enquiry_status(enquiry.id, EnquiryStatus.closed)

    assert in_review.status == EnquiryStatus.in_review
    assert in_review.updated_at == clock.now
    assert responded.status == EnquiryStatus.responded
    assert reopened.status == EnquiryStatus.in_review
    assert closed.status == EnquiryStatus.closed


def test_same_enquiry_status_is_a_noop(storage, clock):
    enquiry = storage.create_enquiry(enquiry_create())
    clock.advance(hours=1)

    again = storage.update_enquiry_status(enquiry.id, EnquiryStatus.submitted)

    assert again.updated_at == enquiry.updated_at


@pytest.mark.parametrize("target", [EnquiryStatus.submitted, EnquiryStatus.in_review, EnquiryStatus.responded])
def test_closed_enquiry_stays_closed(storage, target):
    enquiry = storage.create_enquiry(enquiry_create())
    storage.update_enquiry_status(enquiry.id, EnquiryStatus.closed)

    with pytest.raises(InvalidTransitionError) as exc:
        storage.update_enquiry_status(enquiry.id, target)

    assert exc.value.entity == "enquiry"
    assert storage.get_enquiry(enquiry.id).status == EnquiryStatus.closed


def test_in_review_cannot_go_back_to_submitted(storage):
    enquiry = storage.create_enquiry(enquiry_create())
    storage.update_enquiry_status(enquiry.id, EnquiryStatus.in_review)

    with pytest.raises(InvalidTransitionError):
        storage.update_enquiry_status(enquiry.id, EnquiryStatus.submitted)


def test_assign_promotes_submitted_enquiry(storage, guest):
    enquiry = storage.create_enquiry(enquiry_create())

    assigned = storage.assign_enquiry(enquiry.id, guest.id)

    assert assigned.assigned_to_user_id == guest.id
    assert assigned.status == EnquiryStatus.in_review


def test_assign_keeps_later_status(storage, guest):
    enquiry = storage.create_enquiry(enquiry_create())
    storage.update_enquiry_status(enquiry.id, EnquiryStatus.responded)

    assigned = storage.assign_enquiry(enquiry.id, guest.id)

    assert assigned.status == EnquiryStatus.responded


def test_unknown_enquiry(storage):
    assert storage.get_enquiry(999) is None
    assert storage.update_enquiry_status(999, EnquiryStatus.closed) is None
    assert storage.assign_enquiry(999, 1) is None
    assert storage.get_enquiry_responses(999) == []


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def test_response_marks_enquiry_responded(storage, guest, clock):
    enquiry = storage.create_enquiry(enquiry_create())
    clock.advance(hours=2)

    response = storage.create_enquiry_response(
        feedback.EnquiryResponseCreate(enquiry_id=enquiry.id, response_text="Yes they do.", responded_by_user_id=guest.id)
    )

    assert response.responded_at == clock.now
    assert response.responded_by_user_id == guest.id
    assert storage.get_enquiry_responses(enquiry.id) == [response]
    updated = storage.get_enquiry(enquiry.id)
    assert updated.status == EnquiryStatus.responded
    assert updated.updated_at == clock.now


def test_responses_are_kept_in_order(storage):
    enquiry = storage.create_enquiry(enquiry_create())
    texts = ["First answer.", "Follow-up."]
    for text in texts:
        storage.create_enquiry_response(feedback.EnquiryResponseCreate(enquiry_id=enquiry.id, response_text=text))

    assert [r.response_text for r in storage.get_enquiry_responses(enquiry.id)] == texts
