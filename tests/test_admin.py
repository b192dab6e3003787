"""Admin review queue integration tests."""
import pytest

from app.core.constants import RequestType
from app.models.audit import AdminActivityLog
from app.models.notification import Notification
from app.models.profile import ProfilePhoto
from app.models.verification import IdentityVerification, VerificationRequest
from app.services import storage_service
from app.services.submission_store import SubmissionStore
from helpers import PNG_BYTES


def _submit_identity(db_session, user, doc_type="passport"):
    path = f"{user.id}/front.png"
    storage_service.upload("identity_documents", path, PNG_BYTES, "image/png")
    return SubmissionStore.create_identity_verification(
        db_session, user.id, doc_type, user.country_code, path
    )


def _notifications(db_session, user_id):
    db_session.expire_all()
    return db_session.query(Notification).filter(Notification.user_id == user_id).all()


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(async_client, make_user, auth_headers):
    _, token = make_user()
    r = await async_client.get("/admin/verifications", headers=auth_headers(token, "ja"))
    assert r.status_code == 403
    assert r.json()["detail"] == "管理者権限が必要です。"


@pytest.mark.asyncio
async def test_pending_identity_list_has_signed_document_url(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user(country_code="KR", nickname="지수")
    verification_id = _submit_identity(db_session, applicant)

    r = await async_client.get("/admin/verifications?type=identity", headers=auth_headers(admin_token))
    assert r.status_code == 200, r.text
    items = {item["id"]: item for item in r.json()["data"]}
    assert verification_id in items

    item = items[verification_id]
    assert item["nickname"] == "지수"
    assert item["doc_type"] == "passport"
    assert "/storage/identity_documents/" in item["document_url"]
    assert "token=" in item["document_url"]


@pytest.mark.asyncio
async def test_approve_identity_verifies_user_and_notifies(async_client, db_session, make_user, auth_headers):
    admin, admin_token = make_user(admin=True)
    applicant, _ = make_user(country_code="KR")
    verification_id = _submit_identity(db_session, applicant)

    r = await async_client.post(
        f"/admin/verifications/identity/{verification_id}/approve",
        headers=auth_headers(admin_token),
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["status"] == "approved"
    assert r.json()["data"]["notified"] is True

    db_session.expire_all()
    record = db_session.get(IdentityVerification, verification_id)
    assert record.status == "approved"
    assert record.reviewed_by == admin.id
    assert record.user.is_verified is True

    notes = _notifications(db_session, applicant.id)
    assert [n.type for n in notes] == ["verify_passed"]
    assert notes[0].title == "신분증 인증 완료"
    assert notes[0].related_id == verification_id

    logs = db_session.query(AdminActivityLog).filter(AdminActivityLog.admin_id == str(admin.id)).all()
    assert any(log.activity == f"identity:{verification_id}:approved" for log in logs)


@pytest.mark.asyncio
async def test_decided_request_cannot_be_decided_again(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user()
    verification_id = _submit_identity(db_session, applicant)
    url = f"/admin/verifications/identity/{verification_id}"

    assert (await async_client.post(f"{url}/approve", headers=auth_headers(admin_token))).status_code == 200
    r = await async_client.post(f"{url}/reject", json={"reason": "late"}, headers=auth_headers(admin_token))
    assert r.status_code == 409

    assert len(_notifications(db_session, applicant.id)) == 1


@pytest.mark.asyncio
async def test_reject_requires_reason(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user()
    verification_id = _submit_identity(db_session, applicant)

    for body in ({}, {"reason": ""}, {"reason": "   "}):
        r = await async_client.post(
            f"/admin/verifications/identity/{verification_id}/reject",
            json=body,
            headers=auth_headers(admin_token),
        )
        assert r.status_code == 422
        assert r.json()["detail"] == "거부 사유를 입력해주세요."

    db_session.expire_all()
    assert db_session.get(IdentityVerification, verification_id).status == "submitted"
    assert _notifications(db_session, applicant.id) == []


@pytest.mark.asyncio
async def test_reject_identity_notifies_in_recipient_language(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user(country_code="JP")
    verification_id = _submit_identity(db_session, applicant, doc_type="my_number_card")

    r = await async_client.post(
        f"/admin/verifications/identity/{verification_id}/reject",
        json={"reason": "写真がぼやけています"},
        headers=auth_headers(admin_token, "ko"),
    )
    assert r.status_code == 200, r.text

    db_session.expire_all()
    record = db_session.get(IdentityVerification, verification_id)
    assert record.status == "rejected"
    assert record.rejection_reason == "写真がぼやけています"
    assert record.user.is_verified is False

    notes = _notifications(db_session, applicant.id)
    assert notes[0].type == "verify_rejected"
    assert notes[0].title == "本人確認拒否"
    assert notes[0].body == "理由: 写真がぼやけています"


@pytest.mark.asyncio
async def test_unknown_submission_is_not_found(async_client, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    r = await async_client.post("/admin/verifications/identity/999999/approve", headers=auth_headers(admin_token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_kind_mismatch_is_not_found(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user()
    request_id = SubmissionStore.create_verification_request(
        db_session, applicant.id, RequestType.BIO_UPDATE, {"proposed_bio": "new"}
    )
    r = await async_client.post(
        f"/admin/verifications/profile_photo/{request_id}/approve",
        headers=auth_headers(admin_token),
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_bio_update_applied_only_on_approval(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, token = make_user(bio="old bio")

    r = await async_client.put("/users/me/bio", json={"bio": "new bio"}, headers=auth_headers(token))
    assert r.status_code == 200, r.text
    request_id = r.json()["data"]["request_id"]

    r = await async_client.get("/admin/verifications?type=bio_update", headers=auth_headers(admin_token))
    item = next(i for i in r.json()["data"] if i["id"] == request_id)
    assert item["proposed_bio"] == "new bio"
    assert item["current_bio"] == "old bio"

    r = await async_client.post(
        f"/admin/verifications/bio_update/{request_id}/approve",
        headers=auth_headers(admin_token),
    )
    assert r.status_code == 200, r.text

    db_session.refresh(applicant)
    assert applicant.bio == "new bio"
    assert [n.type for n in _notifications(db_session, applicant.id)] == ["bio_approved"]


@pytest.mark.asyncio
async def test_rejected_photo_is_not_applied(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user()
    request_id = SubmissionStore.create_verification_request(
        db_session,
        applicant.id,
        RequestType.PROFILE_PHOTO,
        {"photo_url": "/static/profile_photos/x.png", "photo_path": "x.png"},
    )

    r = await async_client.post(
        f"/admin/verifications/profile_photo/{request_id}/reject",
        json={"reason": "얼굴이 보이지 않습니다"},
        headers=auth_headers(admin_token),
    )
    assert r.status_code == 200, r.text

    db_session.expire_all()
    assert db_session.query(ProfilePhoto).filter(ProfilePhoto.user_id == applicant.id).count() == 0
    notes = _notifications(db_session, applicant.id)
    assert notes[0].type == "profile_photo_rejected"
    assert notes[0].body == "사유: 얼굴이 보이지 않습니다"


@pytest.mark.asyncio
async def test_approved_photo_becomes_primary(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user()
    db_session.add(ProfilePhoto(user_id=applicant.id, url="/static/profile_photos/old.png", sort_order=0))
    db_session.commit()
    request_id = SubmissionStore.create_verification_request(
        db_session,
        applicant.id,
        RequestType.PROFILE_PHOTO,
        {"photo_url": "/static/profile_photos/new.png", "photo_path": "new.png"},
    )

    r = await async_client.post(
        f"/admin/verifications/profile_photo/{request_id}/approve",
        headers=auth_headers(admin_token),
    )
    assert r.status_code == 200, r.text

    db_session.expire_all()
    photos = (
        db_session.query(ProfilePhoto)
        .filter(ProfilePhoto.user_id == applicant.id)
        .order_by(ProfilePhoto.sort_order)
        .all()
    )
    assert [p.url for p in photos] == ["/static/profile_photos/new.png", "/static/profile_photos/old.png"]


@pytest.mark.asyncio
async def test_grouped_photo_requests(async_client, db_session, make_user, auth_headers):
    _, admin_token = make_user(admin=True)
    applicant, _ = make_user(nickname="Mina")
    for name in ("a.png", "b.png"):
        SubmissionStore.create_verification_request(
            db_session,
            applicant.id,
            RequestType.PROFILE_PHOTO,
            {"photo_url": f"/static/profile_photos/{name}", "display_name": "Mina"},
        )

    r = await async_client.get("/admin/verifications/grouped?type=profile_photo", headers=auth_headers(admin_token))
    assert r.status_code == 200, r.text
    group = next(g for g in r.json()["data"] if g["user_id"] == applicant.id)
    assert group["nickname"] == "Mina"
    assert len(group["requests"]) == 2

    pending = db_session.query(VerificationRequest).filter(VerificationRequest.user_id == applicant.id).all()
    assert all(req.status == "pending" for req in pending)
