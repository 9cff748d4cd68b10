import pytest

from driver_onboarding.errors import DocumentNotFound, IncompleteRegistration, InvalidState, UnsupportedType
from driver_onboarding.models import DriverStatus
from driver_onboarding.services import profiles, registration, verification, vehicles

from conftest import APPLICATION, DOCUMENT_TYPES, PDF, VEHICLE


@pytest.fixture
def submitted(db, store):
    p = registration.apply(db, "user-1", dict(APPLICATION))
    for t in DOCUMENT_TYPES:
        registration.upload_document(db, store, p.id, t, PDF, content_type="application/pdf")
    registration.add_vehicle(db, p.id, dict(VEHICLE))
    registration.submit(db, store, p.id)
    return p


@pytest.mark.parametrize("status", [
    DriverStatus.PROFILE_CREATED,
    DriverStatus.DOCUMENTS_SUBMITTED,
    DriverStatus.VEHICLE_ADDED,
])
def test_verify_requires_pending_verification(db, status):
    p = registration.apply(db, "user-1", dict(APPLICATION))
    if status != DriverStatus.PROFILE_CREATED:
        profiles.advance_status(db, p.id, status)
        db.commit()
    with pytest.raises(InvalidState):
        verification.verify_driver(db, p.id)
    assert profiles.get_profile(db, p.id).status == status


def test_verify_completes_pipeline(db, store, submitted):
    p = verification.verify_driver(db, submitted.id, notes="all good")
    assert p.status == DriverStatus.VERIFIED
    assert p.verification_notes == "all good"
    assert p.verified_at is not None
    assert all(d.verified for d in store.list(db, p.id))
    assert vehicles.get_vehicle(db, p.id).verified is True

    view = registration.get_registration_status(db, store, p.id)
    assert view.is_complete is True

    with pytest.raises(InvalidState):
        verification.verify_driver(db, p.id)


def test_verified_vehicle_is_frozen(db, submitted):
    verification.verify_driver(db, submitted.id)
    with pytest.raises(InvalidState):
        vehicles.upsert_vehicle(db, submitted.id, dict(VEHICLE))
    db.rollback()


def test_verify_does_not_overwrite_a_rejection_landing_mid_review(db, submitted, monkeypatch):
    original = verification._require_pending

    def pending_then_rejected(session, driver_id):
        p = original(session, driver_id)
        # rejection written after the profile was read for the open-rejection check
        profiles.update_fields(
            session, driver_id, [DriverStatus.PENDING_VERIFICATION],
            rejection_reason="plate unreadable", rejected_at=profiles.utcnow(),
        )
        return p

    monkeypatch.setattr(verification, "_require_pending", pending_then_rejected)
    with pytest.raises(InvalidState):
        verification.verify_driver(db, submitted.id)

    p = profiles.get_profile(db, submitted.id)
    assert p.status == DriverStatus.PENDING_VERIFICATION
    assert p.verified_at is None


def test_soft_reject_keeps_pending_and_allows_resubmit(db, store, submitted):
    p = verification.reject_driver(db, store, submitted.id, "licence photo unreadable", document_types=["license"])
    assert p.status == DriverStatus.PENDING_VERIFICATION
    assert p.rejection_reason == "licence photo unreadable"

    view = registration.get_registration_status(db, store, p.id)
    assert view.missing_items == ["license"]
    assert view.next_step == "submit"
    assert view.rejection_reason == "licence photo unreadable"

    # the gate waits for the driver to fix and re-submit
    with pytest.raises(InvalidState):
        verification.verify_driver(db, p.id)
    with pytest.raises(IncompleteRegistration):
        registration.submit(db, store, p.id)

    registration.upload_document(db, store, p.id, "license", PDF, content_type="application/pdf")
    res = registration.submit(db, store, p.id)
    assert res.status == DriverStatus.PENDING_VERIFICATION

    view = registration.get_registration_status(db, store, p.id)
    assert view.next_step == "verification"
    assert view.rejection_reason is None
    assert verification.verify_driver(db, p.id).status == DriverStatus.VERIFIED


def test_soft_reject_rejects_unknown_document_type(db, store, submitted):
    with pytest.raises(UnsupportedType):
        verification.reject_driver(db, store, submitted.id, "bad", document_types=["passport"])


def test_hard_reject_deactivates(db, store, submitted):
    p = verification.reject_driver(db, store, submitted.id, "forged documents", hard=True)
    assert p.status == DriverStatus.DEACTIVATED
    assert p.deactivation_reason == "forged documents"
    with pytest.raises(InvalidState):
        registration.upload_document(db, store, p.id, "license", PDF, content_type="application/pdf")


def test_reject_requires_pending_verification(db, store):
    p = registration.apply(db, "user-1", dict(APPLICATION))
    with pytest.raises(InvalidState):
        verification.reject_driver(db, store, p.id, "nope")


def test_deactivate_from_any_open_status_only(db, store, submitted):
    verification.verify_driver(db, submitted.id)
    with pytest.raises(InvalidState):
        verification.deactivate_driver(db, submitted.id, "left the platform")

    other = registration.apply(db, "user-2", dict(APPLICATION))
    p = verification.deactivate_driver(db, other.id, "duplicate account")
    assert p.status == DriverStatus.DEACTIVATED
    with pytest.raises(InvalidState):
        verification.deactivate_driver(db, other.id)


def test_verify_single_document(db, store):
    p = registration.apply(db, "user-1", dict(APPLICATION))
    ref = registration.upload_document(db, store, p.id, "identity", PDF, content_type="application/pdf")

    doc = verification.verify_document(db, store, p.id, ref.document_id)
    assert doc.verified is True
    assert profiles.get_profile(db, p.id).status == DriverStatus.DOCUMENTS_SUBMITTED

    newer = registration.upload_document(db, store, p.id, "identity", PDF, content_type="application/pdf")
    with pytest.raises(InvalidState):
        verification.verify_document(db, store, p.id, ref.document_id)
    assert store.get(db, p.id, newer.document_id).verified is False

    with pytest.raises(DocumentNotFound):
        verification.verify_document(db, store, p.id, 9999)


def test_list_pending(db, store, submitted):
    registration.apply(db, "user-2", dict(APPLICATION))
    pending = verification.list_pending(db)
    assert [p.id for p in pending] == [submitted.id]
